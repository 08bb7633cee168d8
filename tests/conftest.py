"""
Shared fixtures: an in-memory stand-in for the runtime CLI.
"""
import json
import sys
import threading
import time
from typing import Dict, List, Tuple, Union

import pytest
from loguru import logger

from containerui.exceptions import ExecutionFailed
from containerui.MANAGERS.catalog_client import (
    CatalogClient,
    LIST_CONTAINERS,
    LIST_IMAGES,
    LIST_VOLUMES,
    SYSTEM_STATUS,
)
from containerui.RUNNERS.command_executor import CommandResult

Response = Union[bytes, Exception]

READS = {tuple(LIST_CONTAINERS), tuple(LIST_IMAGES), tuple(LIST_VOLUMES), tuple(SYSTEM_STATUS)}


class FakeExecutor:
    """
    Answers runtime commands from a table of canned responses and records
    every call. Unknown commands succeed with empty output.
    """

    def __init__(self, responses: Dict[Tuple[str, ...], Response] = None, delay: float = 0.0):
        self.responses = dict(responses or {})
        self.delay = delay
        self.calls: List[List[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def run(self, args):
        key = tuple(args)
        with self._lock:
            self.calls.append(list(args))
            if key in READS:
                self.in_flight += 1
                self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            response = self.responses.get(key, b"")
            if isinstance(response, Exception):
                raise response
            return CommandResult(stdout=response, exit_code=0)
        finally:
            if key in READS:
                with self._lock:
                    self.in_flight -= 1

    def count(self, args) -> int:
        with self._lock:
            return sum(1 for call in self.calls if call == list(args))


DB_CONTAINER = {
    "status": "running",
    "configuration": {
        "id": "db",
        "image": {"reference": "pg:17"},
        "platform": {"os": "linux", "architecture": "arm64"},
    },
}


def healthy_responses() -> Dict[Tuple[str, ...], Response]:
    return {
        tuple(SYSTEM_STATUS): b"apiserver is running\napplication data root: /data\n",
        tuple(LIST_CONTAINERS): json.dumps([DB_CONTAINER]).encode(),
        tuple(LIST_IMAGES): json.dumps([{"reference": "pg:17", "size": "150 MB"}]).encode(),
        tuple(LIST_VOLUMES): json.dumps([{"name": "pgdata", "driver": "local"}]).encode(),
    }


@pytest.fixture
def fake_executor():
    return FakeExecutor(healthy_responses())


@pytest.fixture
def client(fake_executor):
    return CatalogClient(fake_executor)


@pytest.fixture
def failing_listing():
    return ExecutionFailed(1, "\nimages: service unavailable", ["images", "list", "--format", "json"])


@pytest.fixture
def make_executor():
    """Factory for FakeExecutor instances with custom responses."""
    def factory(responses=None, delay=0.0, healthy=False):
        table = healthy_responses() if healthy else {}
        table.update(responses or {})
        return FakeExecutor(table, delay=delay)
    return factory


@pytest.fixture(autouse=True)
def _restore_logging():
    """The CLI reconfigures loguru onto streams that close after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
