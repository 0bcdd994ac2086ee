"""Base interface for node inventories."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agent_selector.config import InventoryConfig


class InventoryError(Exception):
    """Error while reading a node inventory."""


class InventoryKind:
    """Supported inventory sources."""

    STATIC = "static"
    FILE = "file"
    LOCAL = "local"


@dataclass
class Node:
    """A build executor known to the inventory."""

    name: str
    num_executors: int = 1
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        labels = data.get("labels", [])
        if isinstance(labels, str):
            labels = [label for label in labels.replace(",", " ").split() if label]
        return cls(
            name=data["name"],
            num_executors=data.get("num_executors", 1),
            labels=labels,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "num_executors": self.num_executors,
            "labels": self.labels,
        }


class NodeInventory(ABC):
    """
    Abstract base class for node inventories.

    An inventory answers which agents exist right now. It is queried on
    every listing and never cached.
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """The inventory kind this class implements."""
        ...

    @abstractmethod
    def nodes(self) -> list[Node]:
        """Return the currently known nodes, in inventory order."""
        ...

    def list_computers(self) -> list[str]:
        """Display names of the known nodes, in inventory order."""
        return [node.name for node in self.nodes()]


def get_inventory(config: "InventoryConfig") -> NodeInventory:
    """Get the inventory described by the configuration."""
    from agent_selector.inventory.file import FileInventory
    from agent_selector.inventory.local import LocalInventory
    from agent_selector.inventory.static import StaticInventory

    if config.kind == InventoryKind.STATIC:
        return StaticInventory([Node.from_dict(n) if isinstance(n, dict) else Node(n) for n in config.nodes])

    if config.kind == InventoryKind.FILE:
        if config.path is None:
            raise InventoryError("File inventory requires a path")
        return FileInventory(config.path)

    if config.kind == InventoryKind.LOCAL:
        return LocalInventory()

    raise InventoryError(f"No inventory for kind: {config.kind}")
