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
Execution of the runtime CLI: one process per call, output fully captured.
"""
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from ..exceptions import ExecutionFailed


@dataclass(frozen=True)
class CommandResult:
    """Raw result of a successful invocation."""

    stdout: bytes
    exit_code: int


def run(path: str, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
    """
    Runs an external program and captures its output.

    Both pipes are drained by ``subprocess.run`` before the exit status is read,
    so large outputs cannot deadlock the child.

    Args:
        path (str): Executable to run.
        args (Sequence[str]): Arguments passed verbatim, never through a shell.
        timeout (Optional[float]): Seconds before the process is killed.

    Returns:
        CommandResult: Captured stdout and the exit status.

    Raises:
        ExecutionFailed: On a non-zero exit, a timeout, or when the process cannot start.
    """
    argv: List[str] = [path, *args]
    logger.debug("Running {}", " ".join(argv))
    try:
        completed = subprocess.run(
            argv,
            capture_output=True,
            timeout=timeout,
            shell=False,
        )
    except subprocess.TimeoutExpired as e:
        output = _combine(e.stdout, e.stderr) or f"timed out after {timeout}s"
        logger.warning("{} timed out after {}s", path, timeout)
        raise ExecutionFailed(-1, output, list(args)) from e
    except OSError as e:
        logger.warning("Failed to start {}: {}", path, e)
        raise ExecutionFailed(-1, str(e), list(args)) from e

    if completed.returncode != 0:
        output = _combine(completed.stdout, completed.stderr)
        logger.warning("{} exited with {}", " ".join(argv), completed.returncode)
        raise ExecutionFailed(completed.returncode, output, list(args))

    return CommandResult(stdout=completed.stdout, exit_code=completed.returncode)


def _combine(stdout: Optional[bytes], stderr: Optional[bytes]) -> str:
    out = (stdout or b"").decode("utf-8", errors="replace")
    err = (stderr or b"").decode("utf-8", errors="replace")
    if not out and not err:
        return ""
    return out + "\n" + err


class CommandExecutor:
    """
    Runs the runtime binary with an argument vector.
    Holds configuration only, so one instance can be shared between threads.
    """
    def __init__(self, binary: str, timeout: Optional[float] = None):
        """
        Initializes the executor.

        Args:
            binary (str): Path to the runtime CLI.
            timeout (Optional[float]): Per-command timeout in seconds, None for no limit.
        """
        self.binary = binary
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> CommandResult:
        """
        Runs the runtime binary with the given arguments.

        Args:
            args (Sequence[str]): Subcommand and its arguments.

        Returns:
            CommandResult: Captured stdout and the exit status.
        """
        return run(self.binary, args, timeout=self.timeout)
