"""Command-line interface for agent-selector."""

import argparse
import json
import logging
import os
import re
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable

from agent_selector import messages
from agent_selector.config import CONFIG_PATHS, Config
from agent_selector.definition import MASTER_DEFAULT
from agent_selector.descriptor import AgentParameterDescriptor, get_provider
from agent_selector.inventory.base import InventoryError, NodeInventory, get_inventory
from agent_selector.jobs import Job, JobStore, JobStoreError
from agent_selector.rebuild import rebuild_values
from agent_selector.value import AgentParameterValue, ParameterValue

logger = logging.getLogger(__name__)

# $NAME or ${NAME} in command arguments
VARIABLE_PATTERN = re.compile(r"\$\{(\w+)\}|\$(\w+)")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _descriptor() -> AgentParameterDescriptor:
    provider = get_provider(AgentParameterDescriptor.symbol)
    assert isinstance(provider, AgentParameterDescriptor)
    return provider


def _load_job(store: JobStore, name: str) -> Job | None:
    try:
        return store.load(name)
    except JobStoreError as e:
        logger.error(str(e))
        return None


def _load_inventory(config: Config) -> NodeInventory | None:
    try:
        return get_inventory(config.inventory)
    except InventoryError as e:
        logger.error(f"Invalid inventory configuration: {e}")
        return None


def _parse_assignments(assignments: list[str] | None) -> dict[str, list[str]]:
    """Parse NAME=VALUE pairs into request-style parameters."""
    parameters: dict[str, list[str]] = {}
    for assignment in assignments or []:
        name, sep, value = assignment.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got: {assignment}")
        parameters.setdefault(name, []).append(value)
    return parameters


def _substitute(arg: str, resolvers: list[Callable[[str], str | None]]) -> str:
    """Replace $NAME and ${NAME} with parameter values, leaving unknown names as-is."""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        for resolve in resolvers:
            value = resolve(name)
            if value is not None:
                return value
        return match.group(0)

    return VARIABLE_PATTERN.sub(replace, arg)


def _warn_unmatched(value: ParameterValue, inventory: NodeInventory) -> None:
    """Warn when no known node satisfies the selected label. Never rejects the value."""
    if not isinstance(value, AgentParameterValue):
        return
    label = value.assigned_label()
    if label.expression == MASTER_DEFAULT:
        return
    nodes = inventory.nodes()
    if not any(label.matches(node.name, node.labels) for node in nodes):
        logger.warning(f"No known node matches '{label}' for parameter {value.name}")


def cmd_add(args: argparse.Namespace, config: Config) -> int:
    """Handle the add command."""
    descriptor = _descriptor()

    validation = descriptor.check_name(args.name)
    if not validation.is_ok:
        print(validation.message, file=sys.stderr)
        return 1

    store = JobStore(config.jobs_dir)
    try:
        job = store.get_or_create(args.job)
        definition = descriptor.new_instance({"name": args.name, "defaultValue": args.default})
        job.add_parameter(definition)
        store.save(job)
    except JobStoreError as e:
        logger.error(str(e))
        return 1

    print(f"Added {descriptor.display_name} '{definition.name}' to {job.display_name} (default: {definition.default_value})")
    return 0


def cmd_items(args: argparse.Namespace, config: Config) -> int:
    """Handle the items command."""
    job = _load_job(JobStore(config.jobs_dir), args.job)
    inventory = _load_inventory(config)
    if job is None or inventory is None:
        return 1

    items = _descriptor().fill_value_items(job, args.name, inventory)

    if args.json:
        print(json.dumps([item.to_dict() for item in items], indent=2))
    else:
        for item in items:
            print(item.value)

    return 0 if items else 1


def cmd_set_default(args: argparse.Namespace, config: Config) -> int:
    """Handle the set-default command."""
    store = JobStore(config.jobs_dir)
    job = _load_job(store, args.job)
    if job is None:
        return 1

    try:
        message = _descriptor().set_default_value(job, args.name, args.value, store)
    except JobStoreError as e:
        logger.error(str(e))
        return 1

    print(message)
    return 0 if message == messages.SUCCESS_UPDATE_DEFAULT else 1


def cmd_resolve(args: argparse.Namespace, config: Config) -> int:
    """Handle the resolve command."""
    job = _load_job(JobStore(config.jobs_dir), args.job)
    if job is None:
        return 1

    definition = job.get_parameter_definition(args.name)
    if definition is None:
        logger.error(f"{job.display_name}: no build parameter named {args.name}")
        return 1

    value = definition.create_value_from_cli(args.value)

    inventory = _load_inventory(config)
    if inventory is not None:
        _warn_unmatched(value, inventory)

    if args.json:
        data = value.to_dict()
        if isinstance(value, AgentParameterValue):
            data["label"] = str(value.assigned_label())
        print(json.dumps(data, indent=2))
    else:
        print(f"{value.name}={value.value}")

    return 0


def _read_form(stdin_data: str) -> list[dict[str, Any]]:
    """
    Parse a submitted form.

    Accepts a single {"name", "value"} object or {"parameter": [...]}
    holding several of them.
    """
    form = json.loads(stdin_data)

    if isinstance(form, dict) and "parameter" in form:
        entries = form["parameter"]
        if not isinstance(entries, list):
            entries = [entries]
        return [entry for entry in entries if isinstance(entry, dict)]

    if isinstance(form, dict):
        return [form]

    raise ValueError("Form data must be a JSON object")


def cmd_submit(args: argparse.Namespace, config: Config) -> int:
    """Handle the submit command."""
    store = JobStore(config.jobs_dir)
    job = _load_job(store, args.job)
    if job is None:
        return 1

    try:
        entries = _read_form(sys.stdin.read())
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Failed to parse form data: {e}")
        return 1

    descriptor = _descriptor()
    values: list[ParameterValue] = []

    for entry in entries:
        definition = job.get_parameter_definition(entry.get("name", ""))
        if definition is None:
            logger.warning(f"{job.display_name}: ignoring unknown parameter {entry.get('name')!r}")
            continue
        value = definition.create_value_from_form(entry)
        values.append(value)

        if args.remember:
            try:
                descriptor.set_default_value(job, definition.name, value.value, store)
            except JobStoreError as e:
                logger.error(str(e))
                return 1

    print(json.dumps([value.to_dict() for value in values], indent=2))
    return 0


def _execute(
    job: Job,
    values: list[ParameterValue],
    command: list[str],
    store: JobStore,
    inventory: NodeInventory | None,
) -> int:
    """Export the values, remember the selections, record the build and run the command."""
    descriptor = _descriptor()

    env = dict(os.environ)
    for value in values:
        value.build_environment(env)
        if inventory is not None:
            _warn_unmatched(value, inventory)
        if job.get_parameter_definition(value.name) is not None:
            descriptor.set_default_value(job, value.name, value.value)

    build = job.record_build(values, command)

    try:
        store.save(job)
    except JobStoreError as e:
        logger.error(str(e))
        return 1

    if not command:
        for value in values:
            print(f"export {value.name}={shlex.quote(value.value)}")
        return 0

    resolvers = [value.create_variable_resolver() for value in values]
    command = [_substitute(arg, resolvers) for arg in command]

    logger.info(f"{job.display_name} #{build.number}: running {shlex.join(command)}")
    try:
        result = subprocess.run(command, env=env)
    except OSError as e:
        logger.error(f"Failed to run {command[0]}: {e}")
        return 1

    return result.returncode


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Handle the run command."""
    store = JobStore(config.jobs_dir)
    job = _load_job(store, args.job)
    if job is None:
        return 1

    try:
        parameters = _parse_assignments(args.param)
    except ValueError as e:
        logger.error(str(e))
        return 1

    for name in parameters:
        if job.get_parameter_definition(name) is None:
            logger.warning(f"{job.display_name}: ignoring unknown parameter {name!r}")

    values = [definition.create_value_from_request(parameters) for definition in job.parameters]

    return _execute(job, values, args.command, store, _load_inventory(config))


def cmd_rebuild(args: argparse.Namespace, config: Config) -> int:
    """Handle the rebuild command."""
    store = JobStore(config.jobs_dir)
    job = _load_job(store, args.job)
    if job is None:
        return 1

    build = job.get_build(args.build)
    if build is None:
        logger.error(f"{job.display_name}: no build #{args.build}")
        return 1

    try:
        parameters = _parse_assignments(args.param)
    except ValueError as e:
        logger.error(str(e))
        return 1

    overrides = {name: values[-1] for name, values in parameters.items()}
    values = rebuild_values(build, overrides)
    command = args.command or build.command

    return _execute(job, values, command, store, _load_inventory(config))


def cmd_nodes(args: argparse.Namespace, config: Config) -> int:
    """Handle the nodes command."""
    from agent_selector.inventory.local import LocalInventory

    inventory = _load_inventory(config)
    if inventory is None:
        return 1

    nodes = inventory.nodes()

    if args.json:
        print(json.dumps([node.to_dict() for node in nodes], indent=2))
        return 0

    print(f"Inventory: {inventory.kind}")
    if isinstance(inventory, LocalInventory):
        print(f"Local node: {inventory.node_info()}")
    for node in nodes:
        labels = " ".join(node.labels) or "-"
        print(f"  {node.name:<24} executors: {node.num_executors:<4} labels: {labels}")

    if not nodes:
        print("  (no nodes)")

    return 0


def cmd_jobs(args: argparse.Namespace, config: Config) -> int:
    """Handle the jobs command."""
    for name in JobStore(config.jobs_dir).list_jobs():
        print(name)
    return 0


def cmd_config(args: argparse.Namespace, config: Config) -> int:
    """Handle the config command."""
    if args.validate:
        issues = config.validate()
        if issues:
            print("Configuration issues:")
            for issue in issues:
                print(f"  - {issue}")
            return 1
        print("Configuration is valid")
        return 0

    if args.show:
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    if args.init:
        config_path = args.config or CONFIG_PATHS[0]
        if config_path.exists() and not args.force:
            print(f"Config already exists at {config_path}")
            print("Use --force to overwrite")
            return 1
        config.save(config_path)
        print(f"Config initialized at {config_path}")
        return 0

    for path in CONFIG_PATHS:
        if path.exists():
            print(f"Config loaded from: {path}")
            return 0

    print("No config file found, using defaults")
    print(f"Create one at: {CONFIG_PATHS[0]}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="agent-selector",
        description="Choose the agent a build runs on and remember the choice",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a config file",
    )

    subparsers = parser.add_subparsers(dest="command_name", help="Commands")

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add an agent parameter to a job",
    )
    add_parser.add_argument("--job", required=True, help="Job name")
    add_parser.add_argument("--name", default="", help="Parameter name")
    add_parser.add_argument("--default", help="Default agent (master if empty)")

    # items command
    items_parser = subparsers.add_parser(
        "items",
        help="List selectable agents, current default first",
    )
    items_parser.add_argument("--job", required=True, help="Job name")
    items_parser.add_argument("--name", required=True, help="Parameter name")
    items_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # set-default command
    default_parser = subparsers.add_parser(
        "set-default",
        help="Remember an agent as the parameter's default",
    )
    default_parser.add_argument("--job", required=True, help="Job name")
    default_parser.add_argument("--name", required=True, help="Parameter name")
    default_parser.add_argument("value", nargs="?", default="", help="Agent name")

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve a parameter value given on the command line",
    )
    resolve_parser.add_argument("--job", required=True, help="Job name")
    resolve_parser.add_argument("--name", required=True, help="Parameter name")
    resolve_parser.add_argument("value", nargs="?", help="Agent name (default if empty)")
    resolve_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # submit command
    submit_parser = subparsers.add_parser(
        "submit",
        help="Resolve values from form data on stdin",
    )
    submit_parser.add_argument("--job", required=True, help="Job name")
    submit_parser.add_argument(
        "--no-remember",
        dest="remember",
        action="store_false",
        help="Do not store the selections as new defaults",
    )

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run a command with the selected agents in its environment",
    )
    run_parser.add_argument("--job", required=True, help="Job name")
    run_parser.add_argument(
        "-p", "--param",
        action="append",
        metavar="NAME=VALUE",
        help="Parameter value (repeatable)",
    )

    # rebuild command
    rebuild_parser = subparsers.add_parser(
        "rebuild",
        help="Rerun a recorded build",
    )
    rebuild_parser.add_argument("--job", required=True, help="Job name")
    rebuild_parser.add_argument("--build", type=int, required=True, help="Build number")
    rebuild_parser.add_argument(
        "-p", "--param",
        action="append",
        metavar="NAME=VALUE",
        help="Changed parameter value (repeatable)",
    )

    # nodes command
    nodes_parser = subparsers.add_parser(
        "nodes",
        help="List the nodes in the inventory",
    )
    nodes_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # jobs command
    subparsers.add_parser(
        "jobs",
        help="List stored jobs",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
    )
    config_parser.add_argument("--validate", action="store_true", help="Validate the configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current configuration")
    config_parser.add_argument("--init", action="store_true", help="Initialize default configuration file")
    config_parser.add_argument("--force", action="store_true", help="Force overwrite existing config")

    # Anything after the first -- is the command for run and rebuild
    argv = sys.argv[1:] if argv is None else list(argv)
    command: list[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, command = argv[:split], argv[split + 1:]

    args = parser.parse_args(argv)
    args.command = command

    setup_logging(args.verbose)

    if args.command_name is None:
        parser.print_help()
        return 0

    commands = {
        "add": cmd_add,
        "items": cmd_items,
        "set-default": cmd_set_default,
        "resolve": cmd_resolve,
        "submit": cmd_submit,
        "run": cmd_run,
        "rebuild": cmd_rebuild,
        "nodes": cmd_nodes,
        "jobs": cmd_jobs,
        "config": cmd_config,
    }

    cmd_func = commands.get(args.command_name)
    if cmd_func is None:
        parser.print_help()
        return 1

    if command and args.command_name not in ("run", "rebuild"):
        parser.error(f"unrecognized arguments: -- {shlex.join(command)}")

    config = Config.load(args.config)
    return cmd_func(args, config)


if __name__ == "__main__":
    sys.exit(main())
