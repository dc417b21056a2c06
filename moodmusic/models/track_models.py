"""
Track Models

Catalog-neutral track record returned by the music service adapters.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Track:
    """A playable track as seen by the host, regardless of catalog."""
    id: str
    title: str
    artist: str
    uri: str
    album: Optional[str] = None
    album_art: Optional[str] = None
    preview_url: Optional[str] = None
    artist_ids: List[str] = field(default_factory=list)
    source: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return asdict(self)
