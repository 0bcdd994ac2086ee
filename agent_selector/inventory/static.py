"""Inventory with a fixed list of nodes."""

from agent_selector.inventory.base import InventoryKind, Node, NodeInventory


class StaticInventory(NodeInventory):
    """
    Inventory backed by a fixed list of nodes.

    Configuration example (~/.config/agent-selector/config.json):
    {
        "inventory": {"kind": "static", "nodes": ["linux-01", "windows-01"]}
    }
    """

    def __init__(self, nodes: list[Node] | None = None) -> None:
        self._nodes = list(nodes or [])

    @classmethod
    def from_names(cls, names: list[str]) -> "StaticInventory":
        return cls([Node(name) for name in names])

    @property
    def kind(self) -> str:
        return InventoryKind.STATIC

    def nodes(self) -> list[Node]:
        return list(self._nodes)
