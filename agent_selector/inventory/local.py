"""Inventory containing only the local machine."""

from agent_selector.inventory.base import InventoryKind, Node, NodeInventory
from agent_selector.system.detector import NodeDetector, NodeInfo


class LocalInventory(NodeInventory):
    """Inventory with a single node describing this machine."""

    def __init__(self, detector: NodeDetector | None = None) -> None:
        self.detector = detector or NodeDetector()

    @property
    def kind(self) -> str:
        return InventoryKind.LOCAL

    def node_info(self) -> NodeInfo:
        """Resources of this machine, including memory."""
        return self.detector.detect()

    def nodes(self) -> list[Node]:
        info = self.detector.detect()
        return [
            Node(
                name=info.hostname,
                num_executors=info.cpu_count,
                labels=[info.platform],
            )
        ]
