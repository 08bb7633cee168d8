"""
Wire models for the runtime's `--format json` output.
Every field is optional so that partial descriptors still decode.
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict


class _Descriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PlatformDescriptor(_Descriptor):
    os: Optional[str] = None
    architecture: Optional[str] = None


class ImageRefDescriptor(_Descriptor):
    reference: Optional[str] = None


class NetworkDescriptor(_Descriptor):
    address: Optional[str] = None


class MountVolumeDescriptor(_Descriptor):
    name: Optional[str] = None
    format: Optional[str] = None


class MountTypeDescriptor(_Descriptor):
    volume: Optional[MountVolumeDescriptor] = None


class MountDescriptor(_Descriptor):
    source: Optional[str] = None
    destination: Optional[str] = None
    options: Optional[List[str]] = None
    type: Optional[MountTypeDescriptor] = None


class ConfigurationDescriptor(_Descriptor):
    id: Optional[str] = None
    image: Optional[ImageRefDescriptor] = None
    platform: Optional[PlatformDescriptor] = None
    networks: Optional[List[NetworkDescriptor]] = None
    mounts: Optional[List[MountDescriptor]] = None


class ContainerDescriptor(_Descriptor):
    """
    One element of `list --all --format json`.
    Top-level networks carry the live address; configuration networks are a fallback.
    """
    status: Optional[str] = None
    networks: Optional[List[NetworkDescriptor]] = None
    configuration: Optional[ConfigurationDescriptor] = None


class ImageDescriptor(_Descriptor):
    """One element of `images list --format json`."""
    reference: Optional[str] = None
    size: Optional[str] = None


class VolumeDescriptor(_Descriptor):
    """One element of `volume list --format json`."""
    name: Optional[str] = None
    mountpoint: Optional[str] = None
    source: Optional[str] = None
    driver: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    options: Optional[Dict[str, str]] = None
    createdAt: Optional[float] = None
    format: Optional[str] = None
