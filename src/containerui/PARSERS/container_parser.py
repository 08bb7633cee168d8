"""
Parsers for `list --all` output: JSON descriptors or the legacy table.
"""
import re
from typing import List, Optional

from ..MODELS.catalog import Container, Mount
from ..MODELS.descriptors import ContainerDescriptor, NetworkDescriptor
from .strategy import (
    StrategyParser,
    decode_json_array,
    split_fields,
    text_lines,
    validate_items,
)

# ID IMAGE OS ARCH STATE [ADDR]
ROW_PATTERN = re.compile(r"^(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(\S+)(?:\s+(\S+))?$")


def parse_container_json(raw: bytes) -> List[Container]:
    """
    Decodes a JSON array of container descriptors.

    :param raw: Output of `list --all --format json`.
    :return: One container per valid array element, in order.
    """
    items = decode_json_array(raw)
    return [_from_descriptor(d) for d in validate_items(items, ContainerDescriptor, "container")]


def _from_descriptor(item: ContainerDescriptor) -> Container:
    cfg = item.configuration
    platform = cfg.platform if cfg else None
    image = cfg.image if cfg else None
    state = item.status if item.status is not None else "unknown"

    mounts = []
    for m in (cfg.mounts if cfg and cfg.mounts else []):
        volume = m.type.volume if m.type else None
        mounts.append(Mount(
            source=m.source,
            destination=m.destination,
            volume_name=volume.name if volume else None,
            format=volume.format if volume else None,
        ))

    return Container(
        id=(cfg.id if cfg and cfg.id is not None else ""),
        image=(image.reference if image and image.reference is not None else ""),
        os=platform.os if platform else None,
        arch=platform.architecture if platform else None,
        state=state,
        running=state == "running",
        addr=_first_address(item.networks) or _first_address(cfg.networks if cfg else None),
        mounts=mounts,
    )


def _first_address(networks: Optional[List[NetworkDescriptor]]) -> Optional[str]:
    if networks and networks[0].address:
        return networks[0].address
    return None


def parse_container_table(raw: bytes) -> List[Container]:
    """
    Parses the whitespace-delimited `ID IMAGE OS ARCH STATE [ADDR]` table.
    Rows that cannot be parsed are skipped; mounts are never available here.

    :param raw: Tabular CLI output.
    :return: One container per parsable row.
    """
    lines = [line.strip() for line in text_lines(raw)]
    lines = [line for line in lines if line]
    if not lines:
        return []

    header = lines[0].lower()
    if "id" in header and "image" in header:
        lines = lines[1:]

    containers = []
    for line in lines:
        match = ROW_PATTERN.match(line)
        if match:
            fields = list(match.groups())
        else:
            fields = split_fields(line)[:6]
            if len(fields) < 5:
                continue
        container_id, image, os_name, arch, state = fields[:5]
        addr = fields[5] if len(fields) > 5 else None
        containers.append(Container(
            id=container_id,
            image=image,
            os=os_name,
            arch=arch,
            state=state,
            running=state == "running",
            addr=addr,
            mounts=[],
        ))
    return containers


class ContainerListParser(StrategyParser[Container]):
    """
    Container list parser: JSON first, table second.
    """
    def __init__(self):
        super().__init__("containers", [parse_container_json, parse_container_table])
