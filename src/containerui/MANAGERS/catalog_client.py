# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Stateless facade over the runtime CLI: one method per runtime action,
each pairing a fixed argument template with the matching parser.
"""
from typing import Iterable, List, Mapping, Optional

from loguru import logger

from ..MODELS.catalog import Container, Image, Volume
from ..PARSERS.container_parser import ContainerListParser
from ..PARSERS.image_parser import ImageListParser
from ..PARSERS.volume_parser import VolumeListParser
from ..PARSERS.status_parser import parse_system_status, is_system_running
from ..RUNNERS.command_executor import CommandExecutor
from ..UTILS.arguments import create_container_args, create_volume_args

LIST_CONTAINERS = ["list", "--all", "--format", "json"]
LIST_IMAGES = ["images", "list", "--format", "json"]
LIST_VOLUMES = ["volume", "list", "--format", "json"]
SYSTEM_STATUS = ["system", "status"]


class CatalogClient:
    """
    Runs runtime commands and turns their output into domain records.

    Holds no entity state between calls, so concurrent calls are safe; any
    serialization of conflicting writes is left to the runtime itself.
    """
    def __init__(self, executor: CommandExecutor):
        """
        Initializes the client.

        Args:
            executor: Command executor bound to the runtime binary.
        """
        self.executor = executor
        self.container_parser = ContainerListParser()
        self.image_parser = ImageListParser()
        self.volume_parser = VolumeListParser()

    # Reads

    def list_containers(self) -> List[Container]:
        """Lists all containers, running or not."""
        result = self.executor.run(LIST_CONTAINERS)
        return self.container_parser.parse(result.stdout)

    def list_images(self) -> List[Image]:
        """Lists local images."""
        result = self.executor.run(LIST_IMAGES)
        return self.image_parser.parse(result.stdout)

    def list_volumes(self) -> List[Volume]:
        """Lists named volumes."""
        result = self.executor.run(LIST_VOLUMES)
        return self.volume_parser.parse(result.stdout)

    def system_status(self) -> str:
        """
        Returns the apiserver status line, or "unknown" when none is reported.
        """
        result = self.executor.run(SYSTEM_STATUS)
        return parse_system_status(result.stdout.decode("utf-8", errors="replace"))

    @staticmethod
    def is_system_running(status: str) -> bool:
        return is_system_running(status)

    # Writes. Each returns True on exit code 0 and raises ExecutionFailed otherwise.

    def start_container(self, container_id: str) -> bool:
        return self._execute(["start", container_id])

    def stop_container(self, container_id: str) -> bool:
        return self._execute(["stop", container_id])

    def delete_container(self, container_id: str) -> bool:
        return self._execute(["delete", container_id])

    def restart_container(self, container_id: str) -> bool:
        """Stops then starts a container; the start is skipped if the stop fails."""
        self.stop_container(container_id)
        return self.start_container(container_id)

    def start_system(self) -> bool:
        return self._execute(["system", "start"])

    def stop_system(self) -> bool:
        return self._execute(["system", "stop"])

    def create_volume(self,
                      name: str,
                      size: Optional[str] = None,
                      options: Iterable[str] = (),
                      labels: Iterable[str] = ()) -> bool:
        """
        Creates a named volume.

        Args:
            name: Volume name.
            size: Optional size, e.g. "10G".
            options: Driver options as KEY=VALUE strings.
            labels: Labels as KEY=VALUE strings.
        """
        return self._execute(create_volume_args(name, size, options, labels))

    def delete_volume(self, name: str) -> bool:
        return self._execute(["volume", "delete", name])

    def create_container(self, name: str, image: str, volume_mappings: Mapping[str, str]) -> bool:
        """
        Creates (without starting) a container.

        Args:
            name: Container name.
            image: Image reference.
            volume_mappings: Volume name to in-container target path.
        """
        return self._execute(create_container_args(name, image, volume_mappings))

    def _execute(self, args: List[str]) -> bool:
        logger.info("container {}", " ".join(args))
        self.executor.run(args)
        return True
