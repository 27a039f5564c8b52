"""Data models for TinyLink."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Link:
    """A short code mapped to its destination, with usage counters."""
    
    code: str
    destination_url: str
    owner_email: str
    created_at: datetime
    total_clicks: int = 0
    last_clicked_at: Optional[datetime] = None
    
    def to_dict(self) -> dict:
        """Convert to the field names exposed at the HTTP boundary."""
        return {
            "code": self.code,
            "url": self.destination_url,
            "email": self.owner_email,
            "totalClicks": self.total_clicks,
            "lastClicked": self.last_clicked_at.isoformat() if self.last_clicked_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
    
    @classmethod
    def from_record(cls, record) -> "Link":
        """Create from a row/mapping using the persisted column names."""
        return cls(
            code=record["code"],
            destination_url=record["target_url"],
            owner_email=record["email"],
            created_at=_as_datetime(record["created_at"]),
            total_clicks=int(record["total_clicks"] or 0),
            last_clicked_at=_as_datetime(record["last_clicked"]),
        )


def _as_datetime(value):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
