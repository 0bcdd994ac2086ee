"""Parameter providers and the agent parameter descriptor."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from agent_selector import messages
from agent_selector.definition import AgentParameterDefinition, ParameterDefinition
from agent_selector.inventory.base import NodeInventory
from agent_selector.jobs import Job, JobStore

logger = logging.getLogger(__name__)


class ValidationKind:
    """Outcome of a form field check."""

    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class FormValidation:
    """Result of validating a form field."""

    kind: str
    message: str = ""

    @classmethod
    def ok(cls) -> "FormValidation":
        return cls(ValidationKind.OK)

    @classmethod
    def error(cls, message: str) -> "FormValidation":
        return cls(ValidationKind.ERROR, message)

    @property
    def is_ok(self) -> bool:
        return self.kind == ValidationKind.OK


@dataclass(frozen=True)
class ListBoxOption:
    """One entry of a selection list."""

    display_name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"displayName": self.display_name, "value": self.value}


class ParameterProvider(ABC):
    """
    Abstract base class for parameter providers.

    A provider knows how to build one type of parameter definition from
    form or stored data. Providers are registered by symbol.
    """

    symbol: str = ""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Name shown when choosing a parameter type."""
        ...

    @abstractmethod
    def new_instance(self, form_data: dict[str, Any]) -> ParameterDefinition:
        """Create a parameter definition from form data."""
        ...


_PROVIDERS: dict[str, ParameterProvider] = {}


def register_provider(provider: ParameterProvider) -> None:
    """Register a provider under its symbol, replacing any previous one."""
    if not provider.symbol:
        raise ValueError(f"Provider {type(provider).__name__} has no symbol")
    _PROVIDERS[provider.symbol] = provider


def get_provider(symbol: str) -> ParameterProvider | None:
    """Get the provider registered for a symbol."""
    return _PROVIDERS.get(symbol)


class AgentParameterDescriptor(ParameterProvider):
    """Describes the agent parameter and handles its UI actions."""

    symbol = AgentParameterDefinition.symbol

    @property
    def display_name(self) -> str:
        return messages.DISPLAY_NAME

    def check_name(self, name: str | None) -> FormValidation:
        """Check that a parameter name was entered."""
        if not name:
            return FormValidation.error(messages.ERROR_MISSING_NAME)
        return FormValidation.ok()

    def new_instance(self, form_data: dict[str, Any]) -> AgentParameterDefinition:
        return AgentParameterDefinition(form_data["name"], form_data.get("defaultValue"))

    def set_default_value(
        self,
        job: Job,
        name: str,
        value: str | None,
        store: JobStore | None = None,
    ) -> str:
        """
        Remember the agent the user selected as the parameter's new default.

        Args:
            job: The job owning the parameter
            name: Name of the agent parameter
            value: The selected agent name
            store: Where to persist the job (optional)

        Returns:
            A status message for the user
        """
        definition = job.get_parameter_definition(name)
        if isinstance(definition, AgentParameterDefinition):
            definition.default_value = value
            if store is not None:
                store.save(job)
            logger.debug(f"{job.display_name}: default of {name} set to {definition.default_value}")
            return messages.SUCCESS_UPDATE_DEFAULT

        logger.error(
            f"{job.display_name} When executing the set_default_value method, "
            f"no build parameter named {name} was found."
        )
        return messages.ERROR_UPDATE_DEFAULT

    def fill_value_items(self, job: Job, name: str, inventory: NodeInventory) -> list[ListBoxOption]:
        """
        List the agents to choose from, with the current default first.

        Returns:
            Selection entries, or an empty list if the parameter does not exist
        """
        definition = job.get_parameter_definition(name)
        if isinstance(definition, AgentParameterDefinition):
            return [ListBoxOption(n, n) for n in definition.computer_names(inventory)]

        logger.error(
            f"{job.display_name} When executing the fill_value_items method, "
            f"no build parameter named {name} was found."
        )
        return []


register_provider(AgentParameterDescriptor())
