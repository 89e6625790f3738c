# catalog_sync/forms/product_form.py

"""Form-boundary validation for product and comment input.

Raw form values arrive as strings (TUI inputs, CLI flags). They are
checked for presence and type here and turned into domain objects;
``ValidationError`` never travels further than this module's callers.
"""

import logging
import math
from dataclasses import dataclass

from catalog_sync.models.errors import ValidationError
from catalog_sync.models.product import Product, Size

logger = logging.getLogger("catalog_sync.forms")

# Form field name -> label used in messages
PRODUCT_FIELDS: dict[str, str] = {
    "name": "Product Name",
    "count": "Amount",
    "imageUrl": "Image URL",
    "weight": "Weight",
    "width": "Width",
    "height": "Height",
}


@dataclass
class ProductFields:
    """Validated, typed product form values."""

    name: str
    count: int
    image_url: str
    weight: str
    width: float
    height: float

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def _parse_number(raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_product_form(fields: dict[str, str]) -> ProductFields:
    """Validate raw form values, collecting every problem.

    Raises ``ValidationError`` mapping field name -> message.
    """
    errors: dict[str, str] = {}
    cleaned = {
        name: str(fields.get(name, "") or "").strip()
        for name in PRODUCT_FIELDS
    }

    for name, label in PRODUCT_FIELDS.items():
        if not cleaned[name]:
            errors[name] = f"{label} is required"

    count = 0
    if "count" not in errors:
        number = _parse_number(cleaned["count"])
        if number is None or not number.is_integer():
            errors["count"] = "Amount must be a whole number"
        elif number < 0:
            errors["count"] = "Amount cannot be negative"
        else:
            count = int(number)

    dims: dict[str, float] = {}
    for name in ("width", "height"):
        if name in errors:
            continue
        label = PRODUCT_FIELDS[name]
        number = _parse_number(cleaned[name])
        if number is None:
            errors[name] = f"{label} must be a number"
        elif number <= 0:
            errors[name] = f"{label} must be greater than zero"
        else:
            dims[name] = number

    if errors:
        logger.debug("Product form rejected: %s", errors)
        raise ValidationError(errors)

    return ProductFields(
        name=cleaned["name"],
        count=count,
        image_url=cleaned["imageUrl"],
        weight=cleaned["weight"],
        width=dims["width"],
        height=dims["height"],
    )


def build_product(fields: dict[str, str]) -> Product:
    """Validate a new-product form and mint the product."""
    parsed = parse_product_form(fields)
    return Product.new(
        name=parsed.name,
        count=parsed.count,
        image_url=parsed.image_url,
        weight=parsed.weight,
        size=parsed.size,
    )


def apply_product_edit(
    product: Product, fields: dict[str, str],
) -> Product:
    """Validate an edit form; keep the product's id and comments."""
    parsed = parse_product_form(fields)
    return product.copy(
        name=parsed.name,
        count=parsed.count,
        image_url=parsed.image_url,
        weight=parsed.weight,
        size=parsed.size,
    )


def product_form_values(product: Product) -> dict[str, str]:
    """Pre-fill values for editing ``product``."""
    return {
        "name": product.name,
        "count": str(product.count),
        "imageUrl": product.image_url,
        "weight": product.weight,
        "width": _format_number(product.size.width),
        "height": _format_number(product.size.height),
    }


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def parse_comment_text(text: str) -> str:
    """Return the trimmed comment text or raise ``ValidationError``."""
    description = (text or "").strip()
    if not description:
        raise ValidationError({"description": "Comment is required"})
    return description
