"""
Music Service Protocol

The contract every catalog adapter satisfies, plus the single error type
adapters raise for transport and API failures.
"""

from typing import List, Optional, Protocol, runtime_checkable

from ..models.track_models import Track


class MusicServiceError(Exception):
    """A catalog request failed (transport, HTTP status or API error body)."""

    def __init__(self, service: str, message: str, status: Optional[int] = None):
        self.service = service
        self.status = status
        super().__init__(f"{service}: {message}")


@runtime_checkable
class MusicService(Protocol):
    """Catalog that can search tracks and suggest tracks for a mood."""

    service_name: str

    async def search_tracks(self, query: str, limit: int = 10) -> List[Track]:
        ...

    async def get_recommendations_by_mood(
        self,
        mood: str,
        limit: int = 10,
        genre: Optional[str] = None
    ) -> List[Track]:
        ...

    def is_authenticated(self) -> bool:
        ...
