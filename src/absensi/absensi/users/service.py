from __future__ import annotations

from typing import Optional

from ..core.exceptions import AuthenticationError, wrap_errors
from .model import ViewerProfile
from .repository import ProfileRepository


class ViewerService:
    """Use case: resolve the viewer behind a request."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def resolve(self, user_id: Optional[str]) -> ViewerProfile:
        if not user_id:
            raise AuthenticationError("Pengguna belum login")

        with wrap_errors("get_viewer_profile"):
            profile = self._profiles.get_viewer_profile(str(user_id))
        if not profile:
            raise AuthenticationError("Profil pengguna tidak ditemukan")
        return profile
