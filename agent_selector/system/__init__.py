"""Local system detection."""

from agent_selector.system.detector import NodeDetector, NodeInfo

__all__ = ["NodeDetector", "NodeInfo"]
