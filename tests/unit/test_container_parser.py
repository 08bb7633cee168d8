"""
Unit tests for container list parsing.
"""
import json

from containerui.PARSERS.container_parser import (
    ContainerListParser,
    parse_container_json,
    parse_container_table,
)


class TestContainerJson:
    """Tests for the structured path."""

    def test_single_container(self):
        raw = json.dumps([{
            "status": "running",
            "configuration": {
                "id": "db",
                "image": {"reference": "pg:17"},
                "platform": {"os": "linux", "architecture": "arm64"},
            },
        }]).encode()
        [c] = ContainerListParser().parse(raw)
        assert c.id == "db"
        assert c.image == "pg:17"
        assert c.os == "linux"
        assert c.arch == "arm64"
        assert c.state == "running"
        assert c.running is True
        assert c.addr is None
        assert c.mounts == []

    def test_order_preserved(self):
        raw = json.dumps([
            {"status": "stopped", "configuration": {"id": name}} for name in ["c", "a", "b"]
        ]).encode()
        assert [c.id for c in parse_container_json(raw)] == ["c", "a", "b"]

    def test_defaults_for_missing_fields(self):
        [c] = parse_container_json(b"[{}]")
        assert c.id == ""
        assert c.image == ""
        assert c.state == "unknown"
        assert c.running is False
        assert c.os is None and c.arch is None

    def test_running_is_case_sensitive(self):
        raw = json.dumps([{"status": "Running", "configuration": {"id": "x"}}]).encode()
        [c] = parse_container_json(raw)
        assert c.state == "Running"
        assert c.running is False

    def test_top_level_network_wins(self):
        raw = json.dumps([{
            "status": "running",
            "networks": [{"address": "192.168.64.2/24"}],
            "configuration": {"id": "web", "networks": [{"address": "10.0.0.5"}]},
        }]).encode()
        [c] = parse_container_json(raw)
        assert c.addr == "192.168.64.2/24"

    def test_configuration_network_fallback(self):
        raw = json.dumps([{
            "networks": [{"address": ""}],
            "configuration": {"id": "web", "networks": [{"address": "10.0.0.5"}]},
        }]).encode()
        [c] = parse_container_json(raw)
        assert c.addr == "10.0.0.5"

    def test_mounts(self):
        raw = json.dumps([{
            "status": "running",
            "configuration": {
                "id": "db",
                "mounts": [
                    {
                        "source": "/var/lib/volumes/pgdata",
                        "destination": "/var/lib/postgresql/data",
                        "type": {"volume": {"name": "pgdata", "format": "ext4"}},
                        "options": [],
                    },
                    {"source": "/Users/me/src", "destination": "/src", "type": {"virtiofs": {}}},
                    {},
                ],
            },
        }]).encode()
        [c] = parse_container_json(raw)
        assert len(c.mounts) == 3
        assert c.mounts[0].volume_name == "pgdata"
        assert c.mounts[0].format == "ext4"
        assert c.mounts[0].is_volume
        assert c.mounts[1].source == "/Users/me/src"
        assert c.mounts[1].volume_name is None
        assert not c.mounts[1].is_volume
        assert c.mounts[2].source is None and c.mounts[2].volume_name is None

    def test_malformed_element_skipped(self):
        raw = json.dumps([
            {"status": "running", "configuration": {"id": "good"}},
            "not an object",
            {"status": 42, "configuration": {"id": "bad"}},
            {"status": "stopped", "configuration": {"id": "also-good"}},
        ]).encode()
        assert [c.id for c in ContainerListParser().parse(raw)] == ["good", "also-good"]

    def test_invalid_utf8_in_mount_source(self):
        raw = (b'[{"status":"running","configuration":{"id":"db","image":{"reference":"pg:17"},'
               b'"platform":{"os":"linux","architecture":"arm64"},'
               b'"mounts":[{"source":"/data/\xff","destination":"/var/lib/postgresql"}]}}]')
        [c] = ContainerListParser().parse(raw)
        assert c.id == "db"
        assert c.image == "pg:17"
        assert c.running is True
        assert c.mounts[0].source == "/data/�"
        assert c.mounts[0].destination == "/var/lib/postgresql"

    def test_empty_array(self):
        assert ContainerListParser().parse(b"[]") == []


class TestContainerTable:
    """Tests for the tabular fallback."""

    TABLE = (
        "ID           IMAGE                             OS     ARCH   STATE    ADDR\n"
        "pgvector-db  docker.io/pgvector/pgvector:pg17  linux  arm64  running  192.168.64.2\n"
        "redis        docker.io/library/redis:7         linux  arm64  stopped\n"
    )

    def test_header_and_rows(self):
        containers = ContainerListParser().parse(self.TABLE.encode())
        assert [c.id for c in containers] == ["pgvector-db", "redis"]
        db = containers[0]
        assert db.image == "docker.io/pgvector/pgvector:pg17"
        assert db.os == "linux"
        assert db.arch == "arm64"
        assert db.running is True
        assert db.addr == "192.168.64.2"
        assert db.mounts == []
        assert containers[1].addr is None
        assert containers[1].running is False

    def test_n_rows_returns_n_records(self):
        rows = [f"c{i} img:{i} linux amd64 running 10.0.0.{i}" for i in range(25)]
        raw = ("ID IMAGE OS ARCH STATE ADDR\n" + "\n".join(rows)).encode()
        assert len(parse_container_table(raw)) == 25

    def test_short_rows_skipped(self):
        raw = (
            "ID IMAGE OS ARCH STATE ADDR\n"
            "a img linux arm64 running\n"
            "broken row here\n"
            "\n"
            "b img linux arm64 stopped\n"
        ).encode()
        assert [c.id for c in parse_container_table(raw)] == ["a", "b"]

    def test_no_header(self):
        raw = b"web nginx:1 linux amd64 running 10.0.0.2\n"
        [c] = parse_container_table(raw)
        assert c.id == "web"

    def test_extra_columns_use_split_fallback(self):
        raw = b"web nginx:1 linux amd64 running 10.0.0.2 extra trailing\n"
        [c] = parse_container_table(raw)
        assert c.id == "web"
        assert c.state == "running"
        assert c.addr == "10.0.0.2"

    def test_blank_output(self):
        assert parse_container_table(b"\n   \n") == []

    def test_invalid_json_falls_back(self):
        raw = b"[not json\nweb nginx linux amd64 running\n"
        [c] = ContainerListParser().parse(raw)
        assert c.id == "web"

    def test_json_object_falls_back_to_table(self):
        assert ContainerListParser().parse(b'{"id": "x"}') == []
