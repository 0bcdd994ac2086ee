"""Jobs, their parameter definitions and recorded builds."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote

from agent_selector.definition import ParameterDefinition
from agent_selector.value import AgentParameterValue, ParameterValue

logger = logging.getLogger(__name__)


class JobStoreError(Exception):
    """Error while loading or saving a job."""


@dataclass
class BuildRecord:
    """A build that was run with resolved parameter values."""

    number: int
    parameters: list[ParameterValue] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildRecord":
        timestamp = data.get("timestamp")
        return cls(
            number=data["number"],
            parameters=[AgentParameterValue.from_dict(p) for p in data.get("parameters", [])],
            command=list(data.get("command", [])),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "parameters": [p.to_dict() for p in self.parameters],
            "command": self.command,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Job:
    """
    A job configuration.

    Parameter types this package does not provide are kept as raw
    dictionaries, with their position in the stored parameter list, so
    that saving a job neither drops nor reorders them.
    """

    name: str
    parameters: list[ParameterDefinition] = field(default_factory=list)
    builds: list[BuildRecord] = field(default_factory=list)
    other_parameters: list[tuple[int, dict[str, Any]]] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name

    def get_parameter_definition(self, name: str) -> ParameterDefinition | None:
        """Find a parameter by name."""
        for definition in self.parameters:
            if definition.name == name:
                return definition
        return None

    def add_parameter(self, definition: ParameterDefinition) -> None:
        """Add a parameter, replacing any existing one with the same name."""
        self.parameters = [p for p in self.parameters if p.name != definition.name]
        self.parameters.append(definition)

    def get_build(self, number: int) -> BuildRecord | None:
        for build in self.builds:
            if build.number == number:
                return build
        return None

    @property
    def next_build_number(self) -> int:
        return max((b.number for b in self.builds), default=0) + 1

    def record_build(
        self,
        parameters: list[ParameterValue],
        command: list[str] | None = None,
    ) -> BuildRecord:
        """Record a new build with the given parameter values."""
        build = BuildRecord(
            number=self.next_build_number,
            parameters=list(parameters),
            command=list(command or []),
        )
        self.builds.append(build)
        return build

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        from agent_selector.descriptor import get_provider

        parameters: list[ParameterDefinition] = []
        other_parameters: list[tuple[int, dict[str, Any]]] = []

        for index, param_data in enumerate(data.get("parameters", [])):
            provider = get_provider(param_data.get("type", ""))
            if provider is None:
                logger.warning(f"Unknown parameter type in job {data.get('name')}: {param_data.get('type')}")
                other_parameters.append((index, param_data))
                continue
            parameters.append(provider.new_instance(param_data))

        return cls(
            name=data["name"],
            parameters=parameters,
            builds=[BuildRecord.from_dict(b) for b in data.get("builds", [])],
            other_parameters=other_parameters,
        )

    def to_dict(self) -> dict[str, Any]:
        parameters: list[dict[str, Any]] = [
            {"type": definition.symbol, **definition.to_dict()}
            for definition in self.parameters
        ]
        for index, param_data in sorted(self.other_parameters, key=lambda p: p[0]):
            parameters.insert(min(index, len(parameters)), param_data)
        return {
            "name": self.name,
            "parameters": parameters,
            "builds": [b.to_dict() for b in self.builds],
        }


class JobStore:
    """
    Stores jobs as JSON files, one per job.

    Stored at ~/.local/share/agent-selector/jobs/ unless configured otherwise.
    """

    def __init__(self, jobs_dir: Path) -> None:
        self.jobs_dir = Path(jobs_dir)

    def _job_path(self, name: str) -> Path:
        """Get the file path for a job name."""
        safe_name = quote(name, safe="")
        return self.jobs_dir / f"{safe_name}.json"

    def exists(self, name: str) -> bool:
        return self._job_path(name).exists()

    def load(self, name: str) -> Job:
        """
        Load a job.

        Raises:
            JobStoreError: If the job does not exist or cannot be read
        """
        path = self._job_path(name)
        if not path.exists():
            raise JobStoreError(f"No such job: {name}")

        try:
            with open(path) as f:
                data = json.load(f)
            job = Job.from_dict(data)
        except (json.JSONDecodeError, OSError, KeyError) as e:
            raise JobStoreError(f"Failed to load job {name} from {path}: {e}") from e

        if job.name != name:
            raise JobStoreError(f"Job file {path} belongs to {job.name!r}, not {name!r}")
        return job

    def get_or_create(self, name: str) -> Job:
        if self.exists(name):
            return self.load(name)
        logger.info(f"Creating job {name}")
        return Job(name=name)

    def save(self, job: Job) -> None:
        """
        Persist a job.

        Concurrent saves of the same job overwrite each other; the last one wins.

        Raises:
            JobStoreError: If the job cannot be written
        """
        path = self._job_path(job.name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(job.to_dict(), f, indent=2)
        except OSError as e:
            raise JobStoreError(f"Failed to save job {job.name} to {path}: {e}") from e
        logger.debug(f"Saved job {job.name} to {path}")

    def list_jobs(self) -> list[str]:
        """Names of all stored jobs."""
        if not self.jobs_dir.exists():
            return []

        names: list[str] = []
        for path in sorted(self.jobs_dir.glob("*.json")):
            try:
                with open(path) as f:
                    names.append(json.load(f)["name"])
            except (json.JSONDecodeError, OSError, KeyError) as e:
                logger.warning(f"Skipping unreadable job file {path}: {e}")
        return names
