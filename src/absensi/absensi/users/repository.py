from __future__ import annotations

from typing import Optional, Protocol

from .model import ViewerProfile


class ProfileRepository(Protocol):
    """Profile/identity lookup.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_viewer_profile(self, user_id: str) -> Optional[ViewerProfile]:
        raise NotImplementedError
