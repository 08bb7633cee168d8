"""
Domain records for the runtime catalog: containers, images, volumes and the
snapshot that groups them.
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict


class Mount(BaseModel):
    """
    A filesystem mount attached to a container.
    Either a named volume or a host path, sometimes neither when the
    runtime reports an incomplete descriptor.
    """
    model_config = ConfigDict(frozen=True)

    source: Optional[str] = None
    destination: Optional[str] = None
    volume_name: Optional[str] = None
    format: Optional[str] = None

    @property
    def is_volume(self) -> bool:
        return bool(self.volume_name)


class Container(BaseModel):
    """
    A container as reported by the runtime. The id is the runtime-assigned name.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    image: str
    os: Optional[str] = None
    arch: Optional[str] = None
    state: str
    running: bool
    addr: Optional[str] = None
    mounts: List[Mount] = []


class Image(BaseModel):
    """
    A locally available image, identified by its reference.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    size: Optional[str] = None


class Volume(BaseModel):
    """
    A named volume known to the runtime.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    mountpoint: Optional[str] = None
    source: Optional[str] = None
    driver: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    options: Optional[Dict[str, str]] = None
    created_at: Optional[float] = None
    format: Optional[str] = None


class Snapshot(BaseModel):
    """
    One complete, internally consistent reading of the catalog plus system status.
    Replaced as a whole on every refresh cycle.
    """
    model_config = ConfigDict(frozen=True)

    system_status: str = "Unknown"
    is_system_running: bool = False
    containers: List[Container] = []
    images: List[Image] = []
    volumes: List[Volume] = []
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "Snapshot":
        """
        The collapsed snapshot published when any read of a cycle fails.

        :param error: Message of the error that triggered the collapse.
        :return: Snapshot with empty lists and an "Error" status.
        """
        return cls(system_status="Error", is_system_running=False, error=error)

    @property
    def running_container_count(self) -> int:
        return sum(1 for c in self.containers if c.running or c.state.lower() == "running")

    def find_container(self, container_id: str) -> Optional[Container]:
        """
        Looks up a container by id.

        :param container_id: Runtime-assigned container name.
        :return: The container, or None when it is not in this snapshot.
        """
        for container in self.containers:
            if container.id == container_id:
                return container
        return None
