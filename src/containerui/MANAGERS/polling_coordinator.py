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
Periodic refresh of the catalog snapshot, with a single cancellable polling
loop and Future-returning write operations.
"""
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar

from loguru import logger

from ..exceptions import ContainerUIError, NotFound
from ..MODELS.catalog import Snapshot
from .catalog_client import CatalogClient

R = TypeVar("R")
Observer = Callable[[Snapshot], None]


class _PollingLoop:
    """State of one polling loop; cancelled once and never restarted."""

    def __init__(self, interval: float):
        self.interval = interval
        self.cancelled = threading.Event()
        self.thread: Optional[threading.Thread] = None


class PollingCoordinator:
    """
    Owns the refresh loop and the latest Snapshot.

    Every refresh cycle issues the four catalog reads concurrently and
    publishes one complete Snapshot. If any read fails, the whole cycle
    collapses to an error Snapshot; the next tick retries from scratch.
    Cycles never overlap, and at most one polling loop is active.
    """

    READ_WORKERS = 4

    def __init__(
        self,
        client: CatalogClient,
        interval: float = 1.0,
        max_workers: int = 4,
        join_timeout: Optional[float] = 5.0,
    ):
        """
        Initializes the coordinator.

        :param client: Catalog client used for reads and writes.
        :param interval: Default seconds between polling cycles.
        :param max_workers: Threads available for refreshes and write operations.
        :param join_timeout: Seconds close waits for each cancelled loop thread to exit.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.client = client
        self.interval = interval
        self.join_timeout = join_timeout

        self._snapshot = Snapshot()
        self._observers: List[Observer] = []
        self._loop: Optional[_PollingLoop] = None
        self._retired: List[_PollingLoop] = []
        self._closed = False

        # _lock is only held briefly and never while calling out.
        # Lock order: _notify_lock, then _control_lock, then _lock.
        self._lock = threading.RLock()
        self._notify_lock = threading.RLock()
        self._control_lock = threading.RLock()
        self._cycle_lock = threading.Lock()

        self._read_pool = ThreadPoolExecutor(
            max_workers=self.READ_WORKERS, thread_name_prefix="containerui-read"
        )
        self._task_pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="containerui-task"
        )

    # Observation

    @property
    def snapshot(self) -> Snapshot:
        """The latest published Snapshot."""
        return self._snapshot

    @property
    def last_error(self) -> Optional[str]:
        return self._snapshot.error

    @property
    def is_polling(self) -> bool:
        loop = self._loop
        return loop is not None and not loop.cancelled.is_set()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Registers a callback invoked with every published Snapshot.

        Observers run on the publishing thread, one publication at a time.
        They may call back into the coordinator, but must not block on the
        Futures it returns.

        :param observer: Callable receiving the new Snapshot.
        :return: A callable that removes the observer.
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe():
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    # Polling

    def start_polling(self, interval: Optional[float] = None) -> None:
        """
        Starts the polling loop, replacing any loop already running.

        :param interval: Seconds between cycles; defaults to the coordinator's interval.
        """
        interval = self.interval if interval is None else interval
        if interval <= 0:
            raise ValueError("interval must be positive")

        with self._control_lock:
            if self._closed:
                raise RuntimeError("coordinator is closed")
            self._cancel_loop()

            loop = _PollingLoop(interval)
            loop.thread = threading.Thread(
                target=self._run_loop, args=(loop,), name="containerui-poll", daemon=True
            )
            with self._lock:
                self._loop = loop
            logger.debug("Polling every {}s", interval)
            loop.thread.start()

    def stop_polling(self) -> None:
        """
        Cancels the polling loop. A no-op when no loop is active.

        Returns without waiting for reads in flight: the cancelled loop's
        thread finishes them in the background and discards the result, so
        once this returns the loop publishes nothing further. Write
        operations are not tied to the loop and still publish their error
        and follow-up refresh after polling has stopped.
        """
        with self._control_lock:
            if self._cancel_loop():
                logger.debug("Polling stopped")

    def _cancel_loop(self) -> bool:
        with self._lock:
            loop, self._loop = self._loop, None
            if loop is None:
                return False
            loop.cancelled.set()

        self._retired = [r for r in self._retired if r.thread.is_alive()]
        if loop.thread is not threading.current_thread():
            self._retired.append(loop)
        return True

    def _run_loop(self, loop: _PollingLoop) -> None:
        while not loop.cancelled.is_set():
            self._refresh_cycle(loop)
            if loop.cancelled.wait(loop.interval):
                break

    # Refresh

    def refresh(self) -> "Future[Optional[Snapshot]]":
        """
        Triggers one refresh cycle outside the polling timer.

        :return: Future resolving to the published Snapshot.
        """
        return self._task_pool.submit(self._refresh_cycle)

    def _refresh_cycle(self, loop: Optional[_PollingLoop] = None) -> Optional[Snapshot]:
        with self._cycle_lock:
            if loop is not None and loop.cancelled.is_set():
                return None
            snapshot = self._collect()
            if self._publish(snapshot, loop):
                return snapshot
            return None

    def _collect(self) -> Snapshot:
        futures = [
            self._read_pool.submit(self.client.system_status),
            self._read_pool.submit(self.client.list_containers),
            self._read_pool.submit(self.client.list_images),
            self._read_pool.submit(self.client.list_volumes),
        ]
        # Wait for every read so a failed cycle leaves nothing running behind it.
        wait(futures)
        try:
            status, containers, images, volumes = [f.result() for f in futures]
        except ContainerUIError as e:
            logger.warning("Refresh failed: {}", e)
            return Snapshot.failed(str(e))
        except Exception as e:
            logger.exception("Refresh failed unexpectedly")
            return Snapshot.failed(str(e))

        return Snapshot(
            system_status=status,
            is_system_running=self.client.is_system_running(status),
            containers=_unique(containers, "container"),
            images=_unique(images, "image"),
            volumes=_unique(volumes, "volume"),
            error=None,
        )

    def _publish(self,
                 snapshot: Optional[Snapshot] = None,
                 loop: Optional[_PollingLoop] = None,
                 error: Optional[str] = None) -> bool:
        """
        Replaces the current Snapshot and notifies observers outside _lock.
        With ``error`` the current Snapshot is republished with that error.
        """
        with self._notify_lock:
            with self._lock:
                if loop is not None and (loop.cancelled.is_set() or self._loop is not loop):
                    logger.debug("Discarding result of a cancelled polling loop")
                    return False
                if error is not None:
                    snapshot = self._snapshot.model_copy(update={"error": error})
                self._snapshot = snapshot
                observers = list(self._observers)

            logger.debug(
                "Published snapshot: {} containers, {} images, {} volumes, error={}",
                len(snapshot.containers), len(snapshot.images), len(snapshot.volumes), snapshot.error,
            )
            for observer in observers:
                try:
                    observer(snapshot)
                except Exception:
                    logger.exception("Snapshot observer raised")
            return True

    def _record_error(self, message: str) -> None:
        self._publish(error=message)

    # Writes. Each runs on the task pool, records failures as the snapshot
    # error without touching its lists, then triggers a refresh.

    def start_container(self, container_id: str) -> "Future[bool]":
        return self._submit_write("start container", self._start_if_stopped, container_id)

    def stop_container(self, container_id: str) -> "Future[bool]":
        return self._submit_write("stop container", self.client.stop_container, container_id)

    def delete_container(self, container_id: str) -> "Future[bool]":
        return self._submit_write("delete container", self.client.delete_container, container_id)

    def restart_container(self, container_id: str) -> "Future[bool]":
        return self._submit_write("restart container", self.client.restart_container, container_id)

    def start_system(self) -> "Future[bool]":
        return self._submit_write("start system", self.client.start_system)

    def stop_system(self) -> "Future[bool]":
        return self._submit_write("stop system", self.client.stop_system)

    def create_volume(self,
                      name: str,
                      size: Optional[str] = None,
                      options: Iterable[str] = (),
                      labels: Iterable[str] = ()) -> "Future[bool]":
        return self._submit_write(
            "create volume", self.client.create_volume, name, size, list(options), list(labels)
        )

    def delete_volume(self, name: str) -> "Future[bool]":
        return self._submit_write("delete volume", self.client.delete_volume, name)

    def create_container(self, name: str, image: str, volume_mappings: Mapping[str, str]) -> "Future[bool]":
        return self._submit_write(
            "create container", self.client.create_container, name, image, dict(volume_mappings)
        )

    def _start_if_stopped(self, container_id: str) -> bool:
        container = self._snapshot.find_container(container_id)
        if container is None:
            raise NotFound(container_id)
        if container.running:
            return True
        return self.client.start_container(container_id)

    def _submit_write(self, action: str, operation: Callable[..., R], *args: Any) -> "Future[R]":
        return self._task_pool.submit(self._run_write, action, operation, args)

    def _run_write(self, action: str, operation: Callable[..., R], args: tuple) -> R:
        try:
            return operation(*args)
        except ContainerUIError as e:
            message = f"Failed to {action}: {e}"
            logger.warning("{}", message)
            self._record_error(message)
            raise
        finally:
            if not self._closed:
                try:
                    self.refresh()
                except RuntimeError:
                    logger.debug("Coordinator closed; skipping refresh after {}", action)

    # Lifecycle

    def close(self) -> None:
        """
        Stops polling, waits for cancelled loop threads to finish their
        reads, and shuts down the worker threads.
        """
        with self._control_lock:
            self._cancel_loop()
            self._closed = True
            retired, self._retired = self._retired, []
        for loop in retired:
            loop.thread.join(timeout=self.join_timeout)
            if loop.thread.is_alive():
                logger.warning("Polling thread still busy after {}s", self.join_timeout)
        self._task_pool.shutdown(wait=True, cancel_futures=True)
        self._read_pool.shutdown(wait=True)

    def __enter__(self) -> "PollingCoordinator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _unique(records: List[R], label: str) -> List[R]:
    seen = set()
    unique = []
    for record in records:
        if record.id in seen:
            logger.warning("Dropping duplicate {} id {!r}", label, record.id)
            continue
        seen.add(record.id)
        unique.append(record)
    return unique
