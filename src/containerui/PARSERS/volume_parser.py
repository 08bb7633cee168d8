"""
Parsers for `volume list` output.
"""
from typing import List

from ..MODELS.catalog import Volume
from ..MODELS.descriptors import VolumeDescriptor
from .strategy import StrategyParser, decode_json_array, split_fields, text_lines, validate_items


def parse_volume_json(raw: bytes) -> List[Volume]:
    """
    Decodes a JSON array of volume descriptors.
    """
    items = decode_json_array(raw)
    volumes = []
    for d in validate_items(items, VolumeDescriptor, "volume"):
        volumes.append(Volume(
            id=d.name if d.name is not None else "",
            mountpoint=d.mountpoint,
            source=d.source,
            driver=d.driver,
            labels=d.labels,
            options=d.options,
            created_at=d.createdAt,
            format=d.format,
        ))
    return volumes


def parse_volume_lines(raw: bytes) -> List[Volume]:
    """
    Parses `NAME [MOUNTPOINT]` lines. Everything else stays unset.
    """
    volumes = []
    for line in text_lines(raw):
        parts = split_fields(line)
        if not parts:
            continue
        volumes.append(Volume(id=parts[0], mountpoint=parts[1] if len(parts) > 1 else None))
    return volumes


class VolumeListParser(StrategyParser[Volume]):
    def __init__(self):
        super().__init__("volumes", [parse_volume_json, parse_volume_lines])
