"""Playlist model."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_COLOR = "#ff7800"


@dataclass(frozen=True)
class Playlist:
    """Playlist owned by the station; the calendar only reads it."""

    id: int
    name: str
    color: str = DEFAULT_COLOR
    is_active: bool = True
    type: Optional[str] = None

    def __repr__(self):
        return f"<Playlist(name='{self.name}', active={self.is_active})>"

    def matches_keyword(self, keywords) -> bool:
        """Case-insensitive substring match against any keyword."""
        name = self.name.lower()
        return any(keyword.lower() in name for keyword in keywords)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Playlist":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            color=data.get("color") or DEFAULT_COLOR,
            is_active=bool(data.get("is_active", True)),
            type=data.get("type"),
        )
