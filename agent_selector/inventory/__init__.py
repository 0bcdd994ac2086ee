"""Node inventories the agent list is built from."""

from agent_selector.inventory.base import InventoryError, Node, NodeInventory, get_inventory
from agent_selector.inventory.file import FileInventory
from agent_selector.inventory.local import LocalInventory
from agent_selector.inventory.static import StaticInventory

__all__ = [
    "InventoryError",
    "Node",
    "NodeInventory",
    "get_inventory",
    "FileInventory",
    "LocalInventory",
    "StaticInventory",
]
