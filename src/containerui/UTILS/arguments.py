"""
Builders for the argument vectors of runtime write commands.
"""
from typing import Iterable, List, Mapping, Optional


def volume_mapping_args(volume_mappings: Mapping[str, str]) -> List[str]:
    """
    Builds `--volume name:target` pairs in ascending volume-name order.
    Names and targets are trimmed; a pair with either side empty is dropped.

    Args:
        volume_mappings (Mapping[str, str]): Volume name to in-container path.

    Returns:
        List[str]: Flattened `--volume` arguments.
    """
    args = []
    for volume, target in sorted(volume_mappings.items(), key=lambda item: item[0]):
        volume = volume.strip()
        target = target.strip()
        if not volume or not target:
            continue
        args.extend(["--volume", f"{volume}:{target}"])
    return args


def create_container_args(name: str, image: str, volume_mappings: Mapping[str, str]) -> List[str]:
    """
    Arguments for `create --name <name> [--volume vol:target]* <image>`.
    """
    return ["create", "--name", name, *volume_mapping_args(volume_mappings), image]


def create_volume_args(name: str,
                       size: Optional[str] = None,
                       options: Iterable[str] = (),
                       labels: Iterable[str] = ()) -> List[str]:
    """
    Arguments for `volume create <name> [-s size] [--opt K=V]* [--label K=V]*`.
    Blank size, options and labels are left out.

    Args:
        name (str): Volume name.
        size (Optional[str]): Size understood by the runtime, e.g. "10G".
        options (Iterable[str]): Driver options as `KEY=VALUE`.
        labels (Iterable[str]): Labels as `KEY=VALUE`.

    Returns:
        List[str]: The argument vector.
    """
    args = ["volume", "create", name]
    if size and size.strip():
        args.extend(["-s", size.strip()])
    for opt in options:
        if opt.strip():
            args.extend(["--opt", opt.strip()])
    for label in labels:
        if label.strip():
            args.extend(["--label", label.strip()])
    return args
