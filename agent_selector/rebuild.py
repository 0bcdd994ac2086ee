"""Rebuild support: rerunning a recorded build with its parameter values."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from agent_selector.jobs import BuildRecord
from agent_selector.value import AgentParameterValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebuildPage:
    """The page used to re-enter a value when rebuilding."""

    value_type: type
    page: str


class RebuildParameterProvider(ABC):
    """Decides whether a recorded value can be changed on rebuild."""

    @abstractmethod
    def get_rebuild_page(self, value: object) -> RebuildPage | None:
        """Return the rebuild page for a value, or None if this provider does not handle it."""
        ...


class AgentParameterRebuild(RebuildParameterProvider):
    def get_rebuild_page(self, value: object) -> RebuildPage | None:
        if isinstance(value, AgentParameterValue):
            return RebuildPage(type(value), "value.html")
        return None


def rebuild_values(
    build: BuildRecord,
    overrides: dict[str, str] | None = None,
    provider: RebuildParameterProvider | None = None,
) -> list[AgentParameterValue]:
    """
    Values for rerunning a build.

    Values that have a rebuild page may be replaced by an override of the
    same name; all others are reused as recorded.
    """
    provider = provider or AgentParameterRebuild()
    overrides = overrides or {}

    values: list[AgentParameterValue] = []
    for value in build.parameters:
        page = provider.get_rebuild_page(value)
        if page is not None and overrides.get(value.name):
            logger.debug(f"Rebuild of #{build.number}: {value.name} changed to {overrides[value.name]}")
            values.append(AgentParameterValue(value.name, overrides[value.name]))
        else:
            values.append(value)

    return values
