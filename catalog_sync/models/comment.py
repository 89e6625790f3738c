# catalog_sync/models/comment.py

"""Comment data model, stored as its own remote resource."""

from dataclasses import dataclass
from typing import Any

from catalog_sync.models import ids


@dataclass
class CommentDraft:
    """What the view layer submits; id and date are minted later."""

    description: str


@dataclass
class Comment:
    """A comment attached to one product via ``product_id``."""

    id: str
    product_id: str
    description: str
    date: str  # ISO-8601, fixed at creation

    @classmethod
    def new(cls, product_id: str, description: str) -> "Comment":
        """Mint a comment with a fresh id and the current timestamp."""
        return cls(
            id=ids.new_id(),
            product_id=product_id,
            description=description,
            date=ids.utc_now_iso(),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "description": self.description,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            id=str(data["id"]),
            product_id=str(data["productId"]),
            description=str(data["description"]),
            date=str(data["date"]),
        )
