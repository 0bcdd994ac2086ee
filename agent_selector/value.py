"""Resolved agent selection attached to a build."""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class Label:
    """
    A node-assignment label expression.

    The expression is handed to the scheduler as-is. ``matches`` only
    understands a bare node name or label, which is enough to warn about
    selections that no known node can satisfy.
    """

    expression: str

    def matches(self, node_name: str, labels: list[str] | None = None) -> bool:
        """Check whether a node with this name and labels satisfies the expression."""
        if self.expression == node_name:
            return True
        return self.expression in (labels or [])

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class ParameterValue:
    """A resolved build parameter, as a (name, value) pair."""

    name: str
    value: str

    def build_environment(self, env: dict[str, str]) -> None:
        """Export the selection into the build environment."""
        env[self.name] = self.value

    def create_variable_resolver(self) -> Callable[[str], str | None]:
        """Return a resolver for variable substitution in build steps."""

        def resolve(name: str) -> str | None:
            return self.value if name == self.name else None

        return resolve

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParameterValue":
        return cls(name=data["name"], value=data.get("value", ""))


@dataclass(frozen=True)
class AgentParameterValue(ParameterValue):
    """The agent chosen for one build."""

    def assigned_label(self) -> Label:
        """Label controlling where the build runs."""
        return Label(self.value)
