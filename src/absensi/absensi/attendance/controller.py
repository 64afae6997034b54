from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import json_api
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/meetings/<meeting_id>/attendance", methods=["GET"], endpoint="api_attendance_list")
    @json_api
    def list_attendance(meeting_id: str):
        viewer = container.viewer_service.resolve(session.get("user_id"))
        logs = container.attendance_service.get_attendance_for_meeting(viewer, meeting_id)
        return jsonify({"success": True, "attendance": [log.to_dict() for log in logs]})

    @app.route("/api/meetings/<meeting_id>/attendance", methods=["POST"], endpoint="api_attendance_save")
    @json_api
    def save_attendance(meeting_id: str):
        viewer = container.viewer_service.resolve(session.get("user_id"))
        data = request.get_json(silent=True)
        entries = data.get("entries") if isinstance(data, dict) else data
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise ValidationError("entries harus berupa daftar {student_id, status, reason}")

        result = container.attendance_service.save_attendance_for_meeting(viewer, meeting_id, entries)
        return jsonify(
            {
                "success": True,
                "message": f"Absensi tersimpan ({result.saved} siswa)",
                "meeting_id": result.meeting_id,
                "saved": result.saved,
            }
        )
