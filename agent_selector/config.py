"""Configuration management for agent-selector."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agent_selector.inventory.base import InventoryKind

logger = logging.getLogger(__name__)

# Default config locations
CONFIG_PATHS = [
    Path.home() / ".config" / "agent-selector" / "config.json",
    Path.home() / ".agent-selector.json",
]

DEFAULT_JOBS_DIR = Path.home() / ".local" / "share" / "agent-selector" / "jobs"


@dataclass
class InventoryConfig:
    """Where the list of known agents comes from."""

    kind: str = InventoryKind.LOCAL
    nodes: list[Any] = field(default_factory=list)  # names or node objects, for "static"
    path: Path | None = None  # node file, for "file"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InventoryConfig":
        return cls(
            kind=data.get("kind", InventoryKind.LOCAL),
            nodes=list(data.get("nodes", [])),
            path=Path(data["path"]) if data.get("path") else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "nodes": self.nodes,
            "path": str(self.path) if self.path else None,
        }


@dataclass
class Config:
    """Main configuration for agent-selector."""

    inventory: InventoryConfig = field(default_factory=InventoryConfig)
    jobs_dir: Path = field(default_factory=lambda: DEFAULT_JOBS_DIR)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create config from a dictionary."""
        inventory = InventoryConfig.from_dict(data.get("inventory", {}))
        jobs_dir = Path(data["jobs_dir"]) if data.get("jobs_dir") else None

        return cls(
            inventory=inventory,
            jobs_dir=jobs_dir or DEFAULT_JOBS_DIR,
        )

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration from file or return defaults."""
        if path:
            paths_to_try = [path]
        else:
            paths_to_try = CONFIG_PATHS

        for config_path in paths_to_try:
            if config_path.exists():
                try:
                    with open(config_path) as f:
                        data = json.load(f)
                    logger.info(f"Loaded config from {config_path}")
                    return cls.from_dict(data)
                except (json.JSONDecodeError, OSError) as e:
                    logger.warning(f"Failed to load config from {config_path}: {e}")

        logger.info("Using default configuration")
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "inventory": self.inventory.to_dict(),
            "jobs_dir": str(self.jobs_dir),
        }

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        save_path = path or CONFIG_PATHS[0]
        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved config to {save_path}")

    def validate(self) -> list[str]:
        """Validate the configuration and return any issues."""
        issues: list[str] = []

        kinds = (InventoryKind.STATIC, InventoryKind.FILE, InventoryKind.LOCAL)
        if self.inventory.kind not in kinds:
            issues.append(f"Unknown inventory kind: {self.inventory.kind}")

        if self.inventory.kind == InventoryKind.FILE and self.inventory.path is None:
            issues.append("File inventory requires a path")

        if self.inventory.kind == InventoryKind.STATIC and not self.inventory.nodes:
            issues.append("Static inventory has no nodes")

        for node in self.inventory.nodes:
            if isinstance(node, dict):
                if not node.get("name"):
                    issues.append(f"Node entry without a name: {node}")
            elif not isinstance(node, str) or not node:
                issues.append(f"Invalid node entry: {node!r}")

        return issues
