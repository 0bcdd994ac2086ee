"""Tests for node inventories."""

import json

import pytest

from agent_selector.config import InventoryConfig
from agent_selector.inventory.base import InventoryError, InventoryKind, Node, get_inventory
from agent_selector.inventory.file import FileInventory
from agent_selector.inventory.local import LocalInventory
from agent_selector.inventory.static import StaticInventory
from agent_selector.system.detector import NodeDetector, NodeInfo


class FakeDetector(NodeDetector):
    def detect(self) -> NodeInfo:
        return NodeInfo(
            hostname="buildhost",
            platform="linux",
            cpu_count=8,
            total_memory_gb=16.0,
            available_memory_gb=8.0,
        )


class TestNode:
    """Tests for the Node dataclass."""

    def test_from_dict(self):
        node = Node.from_dict({"name": "nodeA", "num_executors": 4, "labels": ["linux"]})
        assert node == Node("nodeA", 4, ["linux"])

    def test_from_dict_label_string(self):
        node = Node.from_dict({"name": "nodeA", "labels": "linux, docker"})
        assert node.labels == ["linux", "docker"]
        assert node.num_executors == 1


class TestStaticInventory:
    """Tests for StaticInventory."""

    def test_kind(self):
        assert StaticInventory().kind == InventoryKind.STATIC

    def test_list_computers_keeps_order(self):
        inventory = StaticInventory.from_names(["nodeB", "nodeA"])
        assert inventory.list_computers() == ["nodeB", "nodeA"]


class TestFileInventory:
    """Tests for FileInventory."""

    def test_reads_names_and_objects(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text(json.dumps(["nodeA", {"name": "nodeB", "labels": ["windows"]}, {"labels": []}, 3]))

        inventory = FileInventory(path)

        assert inventory.kind == InventoryKind.FILE
        assert inventory.list_computers() == ["nodeA", "nodeB"]
        assert inventory.nodes()[1].labels == ["windows"]

    def test_reads_on_every_query(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text(json.dumps(["nodeA"]))
        inventory = FileInventory(path)
        assert inventory.list_computers() == ["nodeA"]

        path.write_text(json.dumps(["nodeA", "nodeC"]))
        assert inventory.list_computers() == ["nodeA", "nodeC"]

    def test_missing_file(self, tmp_path):
        assert FileInventory(tmp_path / "missing.json").nodes() == []

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text("{oops")
        assert FileInventory(path).nodes() == []

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "nodes.json"
        path.write_text(json.dumps({"name": "nodeA"}))
        assert FileInventory(path).nodes() == []


class TestLocalInventory:
    """Tests for LocalInventory."""

    def test_single_local_node(self):
        inventory = LocalInventory(FakeDetector())
        assert inventory.kind == InventoryKind.LOCAL
        assert inventory.nodes() == [Node("buildhost", 8, ["linux"])]


class TestGetInventory:
    """Tests for the get_inventory factory."""

    def test_static(self):
        inventory = get_inventory(InventoryConfig(kind="static", nodes=["nodeA", {"name": "nodeB"}]))
        assert isinstance(inventory, StaticInventory)
        assert inventory.list_computers() == ["nodeA", "nodeB"]

    def test_file(self, tmp_path):
        inventory = get_inventory(InventoryConfig(kind="file", path=tmp_path / "nodes.json"))
        assert isinstance(inventory, FileInventory)

    def test_file_without_path(self):
        with pytest.raises(InventoryError):
            get_inventory(InventoryConfig(kind="file"))

    def test_local(self):
        assert isinstance(get_inventory(InventoryConfig(kind="local")), LocalInventory)

    def test_unknown_kind(self):
        with pytest.raises(InventoryError):
            get_inventory(InventoryConfig(kind="cloud"))
