"""
Unit tests for the catalog client against a fake runtime.
"""
import pytest

from containerui.exceptions import ExecutionFailed
from containerui.MANAGERS.catalog_client import CatalogClient


class TestReads:

    def test_list_containers(self, client, fake_executor):
        [c] = client.list_containers()
        assert (c.id, c.image, c.os, c.arch, c.state, c.running) == ("db", "pg:17", "linux", "arm64", "running", True)
        assert fake_executor.calls == [["list", "--all", "--format", "json"]]

    def test_list_images(self, client, fake_executor):
        [image] = client.list_images()
        assert image.id == "pg:17"
        assert fake_executor.calls == [["images", "list", "--format", "json"]]

    def test_list_volumes(self, client, fake_executor):
        [volume] = client.list_volumes()
        assert volume.id == "pgdata"
        assert fake_executor.calls == [["volume", "list", "--format", "json"]]

    def test_system_status(self, client, fake_executor):
        status = client.system_status()
        assert status == "apiserver is running"
        assert client.is_system_running(status)
        assert fake_executor.calls == [["system", "status"]]

    def test_legacy_table_output(self, make_executor):
        executor = make_executor({
            ("list", "--all", "--format", "json"):
                b"ID IMAGE OS ARCH STATE ADDR\nweb nginx linux amd64 stopped\n",
        })
        [c] = CatalogClient(executor).list_containers()
        assert c.id == "web"
        assert c.running is False

    def test_failure_propagates(self, make_executor, failing_listing):
        executor = make_executor({("images", "list", "--format", "json"): failing_listing})
        with pytest.raises(ExecutionFailed):
            CatalogClient(executor).list_images()


class TestWrites:

    @pytest.mark.parametrize("method, expected", [
        ("start_container", ["start", "db"]),
        ("stop_container", ["stop", "db"]),
        ("delete_container", ["delete", "db"]),
    ])
    def test_container_actions(self, client, fake_executor, method, expected):
        assert getattr(client, method)("db") is True
        assert fake_executor.calls == [expected]

    def test_restart(self, client, fake_executor):
        assert client.restart_container("db") is True
        assert fake_executor.calls == [["stop", "db"], ["start", "db"]]

    def test_restart_skips_start_when_stop_fails(self, make_executor):
        executor = make_executor({("stop", "db"): ExecutionFailed(1, "boom")})
        with pytest.raises(ExecutionFailed):
            CatalogClient(executor).restart_container("db")
        assert executor.calls == [["stop", "db"]]

    def test_system_actions(self, client, fake_executor):
        assert client.start_system() is True
        assert client.stop_system() is True
        assert fake_executor.calls == [["system", "start"], ["system", "stop"]]

    def test_create_volume(self, client, fake_executor):
        client.create_volume("data", size="1G", options=["a=b", ""], labels=["x=y"])
        assert fake_executor.calls == [
            ["volume", "create", "data", "-s", "1G", "--opt", "a=b", "--label", "x=y"]
        ]

    def test_delete_volume(self, client, fake_executor):
        client.delete_volume("data")
        assert fake_executor.calls == [["volume", "delete", "data"]]

    def test_create_container(self, client, fake_executor):
        client.create_container("web", "nginx", {"b": "/b", "a": "/a", "": "/skip"})
        assert fake_executor.calls == [
            ["create", "--name", "web", "--volume", "a:/a", "--volume", "b:/b", "nginx"]
        ]

    def test_write_failure_raises(self, make_executor):
        executor = make_executor({("delete", "db"): ExecutionFailed(1, "no such container")})
        with pytest.raises(ExecutionFailed) as info:
            CatalogClient(executor).delete_container("db")
        assert info.value.exit_code == 1
