"""User-facing messages for the agent parameter."""

DISPLAY_NAME = "Agent Server Parameter"

ERROR_MISSING_NAME = "The parameter name must not be empty."

SUCCESS_UPDATE_DEFAULT = "The default agent was updated."

ERROR_UPDATE_DEFAULT = "The default agent could not be updated: no such parameter."
