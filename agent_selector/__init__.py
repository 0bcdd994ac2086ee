"""Agent-selector: pick the agent a build runs on and remember the choice."""

__version__ = "0.1.0"

from agent_selector.definition import MASTER_DEFAULT, AgentParameterDefinition, order_agent_names
from agent_selector.value import AgentParameterValue, Label
from agent_selector.config import Config

__all__ = [
    "__version__",
    "MASTER_DEFAULT",
    "AgentParameterDefinition",
    "AgentParameterValue",
    "Label",
    "order_agent_names",
    "Config",
]
