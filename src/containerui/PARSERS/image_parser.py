"""
Parsers for `images list` output.
"""
from typing import List

from ..MODELS.catalog import Image
from ..MODELS.descriptors import ImageDescriptor
from .strategy import StrategyParser, decode_json_array, split_fields, text_lines, validate_items


def parse_image_json(raw: bytes) -> List[Image]:
    """
    Decodes a JSON array of `{reference, size}` objects.
    """
    items = decode_json_array(raw)
    return [
        Image(id=d.reference if d.reference is not None else "", size=d.size)
        for d in validate_items(items, ImageDescriptor, "image")
    ]


def parse_image_lines(raw: bytes) -> List[Image]:
    """
    Parses `REFERENCE [SIZE]` lines; blank lines are ignored.
    """
    images = []
    for line in text_lines(raw):
        parts = split_fields(line)
        if not parts:
            continue
        images.append(Image(id=parts[0], size=parts[1] if len(parts) > 1 else None))
    return images


class ImageListParser(StrategyParser[Image]):
    def __init__(self):
        super().__init__("images", [parse_image_json, parse_image_lines])
