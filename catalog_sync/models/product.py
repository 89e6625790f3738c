# catalog_sync/models/product.py

"""Product data model and its JSON wire shape."""

from dataclasses import dataclass, field, replace
from typing import Any

from catalog_sync.models import ids


@dataclass
class Size:
    """Physical dimensions of a product."""

    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Size":
        return cls(
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass
class Product:
    """A catalog product with references to its comments by id."""

    id: str
    name: str
    count: int
    image_url: str
    weight: str
    size: Size
    comments: list[str] = field(
        default_factory=lambda: list[str]()
    )

    @classmethod
    def new(
        cls,
        name: str,
        count: int,
        image_url: str,
        weight: str,
        size: Size,
    ) -> "Product":
        """Mint a product with a fresh id and no comments."""
        return cls(
            id=ids.new_id(),
            name=name,
            count=count,
            image_url=image_url,
            weight=weight,
            size=size,
        )

    def copy(self, **changes: Any) -> "Product":
        """Return a deep-enough copy, optionally with fields changed."""
        copied = replace(
            self,
            size=Size(self.size.width, self.size.height),
            comments=list(self.comments),
        )
        return replace(copied, **changes) if changes else copied

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the backend's camelCase JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "count": self.count,
            "imageUrl": self.image_url,
            "weight": self.weight,
            "size": self.size.to_dict(),
            "comments": list(self.comments),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        """Decode a backend JSON object.

        Raises ``KeyError``/``TypeError``/``ValueError`` on a
        malformed payload; the client maps those to ``NetworkError``.
        """
        raw_comments: list[Any] = data.get("comments") or []
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            count=int(data["count"]),
            image_url=str(data.get("imageUrl", "")),
            weight=str(data.get("weight", "")),
            size=Size.from_dict(data["size"]),
            comments=[str(c) for c in raw_comments],
        )
