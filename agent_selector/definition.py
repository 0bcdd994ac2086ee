"""Agent parameter definition and agent list ordering."""

import re
import uuid
from abc import ABC, abstractmethod
from typing import Any

from agent_selector.inventory.base import NodeInventory
from agent_selector.value import AgentParameterValue, ParameterValue

# Fallback agent when no default has been chosen
MASTER_DEFAULT = "master"

DESCRIPTION = "Agent Server Parameter."

# Separator used when a multi-select submission is flattened to one value.
# Names containing it cannot be told apart afterwards.
MULTI_VALUE_SEPARATOR = ","


def normalize_default(value: str | None) -> str:
    """Return the value verbatim, or the master sentinel if it is blank."""
    if value is None or not value.strip():
        return MASTER_DEFAULT
    return value


def order_agent_names(names: list[str], default_value: str) -> list[str]:
    """
    Order agent names for display.

    The master sentinel is prepended if missing, then the default agent is
    moved to the top. Always returns a new list.
    """
    ordered = list(names)

    if MASTER_DEFAULT not in ordered:
        ordered.insert(0, MASTER_DEFAULT)

    if default_value in ordered:
        ordered = [name for name in ordered if name != default_value]
        ordered.insert(0, default_value)

    return ordered


class ParameterDefinition(ABC):
    """
    Abstract base class for job parameter definitions.

    Each definition resolves its value from a form submission, raw request
    parameters or the command line, falling back to its default.
    """

    symbol: str = ""
    description: str = ""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def create_value_from_form(self, form_data: dict[str, Any]) -> ParameterValue:
        ...

    @abstractmethod
    def create_value_from_request(self, parameters: dict[str, list[str]]) -> ParameterValue:
        ...

    @abstractmethod
    def create_value_from_cli(self, value: str | None) -> ParameterValue:
        ...

    @abstractmethod
    def default_parameter_value(self) -> ParameterValue:
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Stored form of the definition, without its type symbol."""
        ...


class AgentParameterDefinition(ParameterDefinition):
    """
    A job parameter that selects the agent a build runs on.

    The default value follows the user's last selection, so the most
    recently used agent is preselected next time.
    """

    symbol = "agentParameter"
    description = DESCRIPTION

    def __init__(self, name: str, default_value: str | None = None) -> None:
        super().__init__(name)
        self.instance_id = uuid.uuid4()
        self._default_value = normalize_default(default_value)

    @property
    def default_value(self) -> str:
        return self._default_value

    @default_value.setter
    def default_value(self, value: str | None) -> None:
        self._default_value = normalize_default(value)

    @property
    def div_id(self) -> str:
        """Unique id separating several agent parameters on the same job."""
        safe_name = re.sub(r"\W", "_", self.name)
        return f"{safe_name}-{self.instance_id}"

    def create_value_from_form(self, form_data: dict[str, Any]) -> AgentParameterValue:
        """
        Resolve the value from a submitted form.

        Args:
            form_data: Form fields with a ``name`` and a ``value`` that is
                either a string or a list of strings (multi-select)

        Returns:
            The resolved value; the default when nothing was selected
        """
        raw = form_data.get("value")

        if isinstance(raw, str):
            value = raw
        elif isinstance(raw, list):
            value = MULTI_VALUE_SEPARATOR.join(str(item) for item in raw)
        else:
            value = ""

        if not value:
            value = self.default_value

        return AgentParameterValue(form_data.get("name", self.name), value)

    def create_value_from_request(self, parameters: dict[str, list[str]]) -> AgentParameterValue:
        """Resolve the value from raw request parameters keyed by parameter name."""
        values = parameters.get(self.name)
        if not values or not values[0].strip():
            return self.default_parameter_value()
        return AgentParameterValue(self.name, values[0])

    def create_value_from_cli(self, value: str | None) -> AgentParameterValue:
        """Resolve the value given on the command line."""
        if value:
            return AgentParameterValue(self.name, value)
        return self.default_parameter_value()

    def default_parameter_value(self) -> AgentParameterValue:
        return AgentParameterValue(self.name, self.default_value)

    def computer_names(self, inventory: NodeInventory) -> list[str]:
        """Names of all known agents, with the current default first."""
        return order_agent_names(inventory.list_computers(), self.default_value)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "defaultValue": self.default_value}

    def __repr__(self) -> str:
        return f"AgentParameterDefinition(name={self.name!r}, default_value={self.default_value!r})"
