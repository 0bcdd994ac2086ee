"""Inventory read from a JSON node file."""

import json
import logging
from pathlib import Path

from agent_selector.inventory.base import InventoryKind, Node, NodeInventory

logger = logging.getLogger(__name__)


class FileInventory(NodeInventory):
    """
    Inventory read from a JSON file on every query.

    The file holds a list of node names or node objects:
    [
        "linux-01",
        {"name": "windows-01", "num_executors": 2, "labels": ["windows", "msvc"]}
    ]

    A missing or malformed file yields an empty inventory.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @property
    def kind(self) -> str:
        return InventoryKind.FILE

    def nodes(self) -> list[Node]:
        if not self.path.exists():
            logger.warning(f"Node file not found: {self.path}")
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read node file {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Node file {self.path} must contain a list")
            return []

        nodes: list[Node] = []
        for entry in data:
            if isinstance(entry, str):
                nodes.append(Node(entry))
            elif isinstance(entry, dict) and entry.get("name"):
                nodes.append(Node.from_dict(entry))
            else:
                logger.debug(f"Skipping invalid node entry: {entry!r}")

        return nodes
