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
Exception hierarchy for the catalog client.
"""
from typing import List, Optional


class ContainerUIError(Exception):
    """Base exception for all catalog client errors."""


class ExecutionFailed(ContainerUIError):
    """
    The runtime CLI exited non-zero, timed out, or could not be started.

    Args:
        exit_code: Exit status of the process, -1 when it never ran to completion.
        output: Combined stdout and stderr text.
        args: Argument vector that was executed.
    """

    def __init__(self, exit_code: int, output: str, args: Optional[List[str]] = None):
        self.exit_code = exit_code
        self.output = output
        self.command = list(args or [])
        detail = output.strip()
        message = f"command failed with exit code {exit_code}"
        if self.command:
            message = f"'{' '.join(self.command)}' failed with exit code {exit_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DecodeFailed(ContainerUIError):
    """A parsing strategy could not decode the command output."""


class NotFound(ContainerUIError):
    """A caller referenced a container that is not in the current snapshot."""

    def __init__(self, container_id: str):
        self.container_id = container_id
        super().__init__(f"Container not found: {container_id}")


class ConfigurationError(ContainerUIError):
    """Settings could not be loaded or failed validation."""
