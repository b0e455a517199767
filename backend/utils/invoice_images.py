import json
from typing import List, Optional, Union


def parse_invoice_images(value: Optional[str]) -> List[str]:
    """
    Read the supplier order `invoice_image` column.

    The column holds either a single opaque image reference or a JSON-encoded
    array of references. Anything that does not parse as a JSON array is a
    single reference.
    """
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return [value]
    if isinstance(parsed, list):
        return [str(ref) for ref in parsed if ref]
    return [value]


def serialize_invoice_images(images: Union[None, str, List[str]]) -> Optional[str]:
    """Inverse of parse_invoice_images: lists are stored as JSON arrays."""
    if images is None:
        return None
    if isinstance(images, str):
        return images or None
    images = [ref for ref in images if ref]
    if not images:
        return None
    return json.dumps(images)


def append_invoice_image(value: Optional[str], reference: str) -> str:
    images = parse_invoice_images(value)
    images.append(reference)
    return json.dumps(images)
