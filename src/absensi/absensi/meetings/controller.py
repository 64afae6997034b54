from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import json_api, split_ids
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _viewer():
        return container.viewer_service.resolve(session.get("user_id"))

    def _payload() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Body harus berupa JSON object")
        return data

    def _limit_arg():
        raw = request.args.get("limit")
        if raw is None or raw == "":
            return None
        try:
            return int(raw)
        except ValueError:
            raise ValidationError(f"limit tidak valid: {raw!r}")

    @app.route("/api/meetings", methods=["GET"], endpoint="api_meetings_list")
    @json_api
    def list_meetings():
        page = container.meeting_service.get_meetings_with_stats(
            _viewer(),
            class_filter=split_ids(request.args.get("class_id")),
            limit=_limit_arg(),
            cursor=request.args.get("cursor") or None,
        )
        return jsonify({"success": True, **page.to_dict()})

    @app.route("/api/meetings", methods=["POST"], endpoint="api_meetings_create")
    @json_api
    def create_meeting():
        data = _payload()
        meeting = container.meeting_service.create_meeting(
            _viewer(),
            class_ids=data.get("class_ids") or [],
            date=data.get("date") or "",
            title=data.get("title") or "",
            meeting_type=data.get("meeting_type") or "PEMBINAAN",
            kelompok_ids=data.get("kelompok_ids"),
            student_ids=data.get("student_ids"),
            topic=data.get("topic"),
            description=data.get("description"),
        )
        return jsonify({"success": True, "message": "Pertemuan berhasil dibuat", "meeting": meeting.to_dict()}), 201

    @app.route("/api/meetings/<meeting_id>", methods=["GET"], endpoint="api_meetings_detail")
    @json_api
    def get_meeting(meeting_id: str):
        item = container.meeting_service.get_meeting(_viewer(), meeting_id)
        return jsonify({"success": True, "meeting": item.to_dict()})

    @app.route("/api/meetings/<meeting_id>", methods=["PATCH"], endpoint="api_meetings_update")
    @json_api
    def update_meeting(meeting_id: str):
        data = _payload()
        meeting = container.meeting_service.update_meeting(
            _viewer(),
            meeting_id,
            title=data.get("title"),
            date=data.get("date"),
            topic=data.get("topic"),
            description=data.get("description"),
            student_ids=data.get("student_ids"),
        )
        return jsonify({"success": True, "message": "Pertemuan berhasil diperbarui", "meeting": meeting.to_dict()})

    @app.route("/api/meetings/<meeting_id>", methods=["DELETE"], endpoint="api_meetings_delete")
    @json_api
    def delete_meeting(meeting_id: str):
        container.meeting_service.delete_meeting(_viewer(), meeting_id)
        return jsonify({"success": True, "message": "Pertemuan berhasil dihapus"})

    @app.route("/api/meeting-types", methods=["GET"], endpoint="api_meeting_types")
    @json_api
    def meeting_types():
        _viewer()
        types = container.meeting_service.available_meeting_types(split_ids(request.args.get("class_id")))
        return jsonify({"success": True, "types": [{"value": t.value, "label": t.label} for t in types]})
