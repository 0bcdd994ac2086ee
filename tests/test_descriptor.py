"""Tests for the agent parameter descriptor."""

import logging

import pytest

from agent_selector import messages
from agent_selector.definition import AgentParameterDefinition, ParameterDefinition
from agent_selector.descriptor import (
    AgentParameterDescriptor,
    FormValidation,
    ListBoxOption,
    ParameterProvider,
    get_provider,
    register_provider,
)
from agent_selector.inventory.static import StaticInventory
from agent_selector.jobs import Job, JobStore
from agent_selector.value import ParameterValue


class BranchParameterDefinition(ParameterDefinition):
    symbol = "branchParameter"

    def __init__(self, name, default_value="main"):
        super().__init__(name)
        self.default_value = default_value

    def create_value_from_form(self, form_data):
        return ParameterValue(self.name, form_data.get("value") or self.default_value)

    def create_value_from_request(self, parameters):
        values = parameters.get(self.name) or [self.default_value]
        return ParameterValue(self.name, values[0])

    def create_value_from_cli(self, value):
        return ParameterValue(self.name, value or self.default_value)

    def default_parameter_value(self):
        return ParameterValue(self.name, self.default_value)

    def to_dict(self):
        return {"name": self.name, "defaultValue": self.default_value}


class BranchParameterProvider(ParameterProvider):
    symbol = BranchParameterDefinition.symbol

    @property
    def display_name(self):
        return "Branch Parameter"

    def new_instance(self, form_data):
        return BranchParameterDefinition(form_data["name"], form_data.get("defaultValue", "main"))


@pytest.fixture
def descriptor():
    return AgentParameterDescriptor()


@pytest.fixture
def job():
    return Job(
        name="deploy",
        parameters=[
            AgentParameterDefinition("agent", ""),
            AgentParameterDefinition("fallback", "nodeB"),
        ],
    )


class TestRegistry:
    """Tests for the provider registry."""

    def test_agent_parameter_registered(self):
        provider = get_provider("agentParameter")
        assert isinstance(provider, AgentParameterDescriptor)

    def test_unknown_symbol(self):
        assert get_provider("choiceParameter") is None

    def test_provider_without_symbol_rejected(self):
        class Anonymous(AgentParameterDescriptor):
            symbol = ""

        with pytest.raises(ValueError):
            register_provider(Anonymous())

    def test_other_parameter_types_share_the_registry(self, caplog):
        register_provider(BranchParameterProvider())
        job = Job.from_dict({
            "name": "deploy",
            "parameters": [
                {"type": "branchParameter", "name": "branch", "defaultValue": "release"},
                {"type": "agentParameter", "name": "agent", "defaultValue": "nodeA"},
            ],
        })

        assert isinstance(job.get_parameter_definition("branch"), BranchParameterDefinition)
        assert job.to_dict()["parameters"][0] == {"type": "branchParameter", "name": "branch", "defaultValue": "release"}

        descriptor = AgentParameterDescriptor()
        with caplog.at_level(logging.ERROR):
            assert descriptor.set_default_value(job, "branch", "nodeB") == messages.ERROR_UPDATE_DEFAULT
        assert job.get_parameter_definition("branch").default_value == "release"


class TestAgentParameterDescriptor:
    """Tests for AgentParameterDescriptor."""

    def test_display_name(self, descriptor):
        assert descriptor.display_name == "Agent Server Parameter"

    def test_check_name_empty(self, descriptor):
        result = descriptor.check_name("")
        assert not result.is_ok
        assert result.message == messages.ERROR_MISSING_NAME

    def test_check_name_ok(self, descriptor):
        assert descriptor.check_name("agent") == FormValidation.ok()

    def test_new_instance(self, descriptor):
        definition = descriptor.new_instance({"name": "agent", "defaultValue": "nodeA"})
        assert definition.name == "agent"
        assert definition.default_value == "nodeA"

    def test_new_instance_blank_default(self, descriptor):
        definition = descriptor.new_instance({"name": "agent", "defaultValue": " "})
        assert definition.default_value == "master"

    def test_set_default_value(self, descriptor, job):
        message = descriptor.set_default_value(job, "agent", "nodeA")
        assert message == messages.SUCCESS_UPDATE_DEFAULT
        assert job.get_parameter_definition("agent").default_value == "nodeA"

    def test_set_default_value_blank(self, descriptor, job):
        descriptor.set_default_value(job, "fallback", "")
        assert job.get_parameter_definition("fallback").default_value == "master"

    def test_set_default_value_persists(self, descriptor, job, tmp_path):
        store = JobStore(tmp_path)
        descriptor.set_default_value(job, "agent", "nodeA", store)

        loaded = store.load("deploy")
        assert loaded.get_parameter_definition("agent").default_value == "nodeA"

    def test_set_default_value_missing_parameter(self, descriptor, job, tmp_path, caplog):
        store = JobStore(tmp_path)

        with caplog.at_level(logging.ERROR):
            message = descriptor.set_default_value(job, "missing", "nodeA", store)

        assert message == messages.ERROR_UPDATE_DEFAULT
        assert "no build parameter named missing was found" in caplog.text
        assert job.get_parameter_definition("agent").default_value == "master"
        assert job.get_parameter_definition("fallback").default_value == "nodeB"
        assert not store.exists("deploy")

    def test_fill_value_items(self, descriptor, job):
        inventory = StaticInventory.from_names(["nodeA", "nodeB"])
        descriptor.set_default_value(job, "agent", "nodeB")

        items = descriptor.fill_value_items(job, "agent", inventory)

        assert items == [
            ListBoxOption("nodeB", "nodeB"),
            ListBoxOption("master", "master"),
            ListBoxOption("nodeA", "nodeA"),
        ]

    def test_fill_value_items_missing_parameter(self, descriptor, job, caplog):
        inventory = StaticInventory.from_names(["nodeA"])

        with caplog.at_level(logging.ERROR):
            items = descriptor.fill_value_items(job, "missing", inventory)

        assert items == []
        assert "fill_value_items" in caplog.text

    def test_list_box_option_to_dict(self):
        assert ListBoxOption("nodeA", "nodeA").to_dict() == {"displayName": "nodeA", "value": "nodeA"}
