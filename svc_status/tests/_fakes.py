"""In-memory collaborators for resolution tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from svc_status._status_errors import IdentifierNotFoundError, ProbeError
from svc_status._status_models import ProbeOutcome, StatusTarget
from svc_status._status_describer import ServiceStatus


@dataclass
class FakeCatalog:
    """Catalog holding ``{project: (services, environments)}``; records calls."""

    projects: dict[str, tuple[list[str], list[str]]] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def list_projects(self) -> list[str]:
        self.calls.append(("list_projects",))
        return list(self.projects)

    def list_services(self, project: str) -> list[str]:
        self.calls.append(("list_services", project))
        return list(self.projects[project][0])

    def list_environments(self, project: str) -> list[str]:
        self.calls.append(("list_environments", project))
        return list(self.projects[project][1])

    def get_project(self, name: str) -> str:
        self.calls.append(("get_project", name))
        if name not in self.projects:
            raise IdentifierNotFoundError("project", name)
        return name

    def get_service(self, project: str, name: str) -> str:
        self.calls.append(("get_service", project, name))
        if name not in self.projects[project][0]:
            raise IdentifierNotFoundError("service", name, project=project)
        return name

    def get_environment(self, project: str, name: str) -> str:
        self.calls.append(("get_environment", project, name))
        if name not in self.projects[project][1]:
            raise IdentifierNotFoundError("environment", name, project=project)
        return name

    @property
    def listing_calls(self) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0].startswith("list_")]


@dataclass
class FakeProber:
    """Prober reporting deployed pairs; ``failures`` maps pairs to errors."""

    deployed: set[tuple[str, str]] = field(default_factory=set)
    failures: Mapping[tuple[str, str], Exception] = field(default_factory=dict)
    calls: list[tuple[str, str, str]] = field(default_factory=list)

    def probe(self, project: str, environment: str, service: str) -> ProbeOutcome:
        self.calls.append((project, environment, service))
        failure = self.failures.get((service, environment))
        if failure is not None:
            raise failure
        if (service, environment) in self.deployed:
            return ProbeOutcome.DEPLOYED
        return ProbeOutcome.NOT_DEPLOYED


@dataclass
class FakeChooser:
    """Chooser returning a fixed answer (default: the last choice) or raising."""

    answer: str | None = None
    error: Exception | None = None
    calls: list[tuple[str, str, list[str]]] = field(default_factory=list)

    def select_one(self, prompt: str, help_text: str, choices: Sequence[str]) -> str:
        self.calls.append((prompt, help_text, list(choices)))
        if self.error is not None:
            raise self.error
        if self.answer is not None:
            return self.answer
        return choices[-1]


@dataclass
class FakeDescriber:
    """Describer returning a canned status for whatever target it receives."""

    targets: list[StatusTarget] = field(default_factory=list)

    def describe(self, target: StatusTarget) -> ServiceStatus:
        self.targets.append(target)
        return ServiceStatus(
            project=target.project,
            environment=target.environment,
            service=target.service,
            service_id=f"svc-{target.service}-{target.environment}",
            status="ACTIVE",
            desired_count=2,
            running_count=2,
        )


def coffee_catalog() -> FakeCatalog:
    return FakeCatalog(projects={"coffee": (["api", "web"], ["test", "prod"])})


def probe_error(message: str = "AccessDenied") -> ProbeError:
    return ProbeError(message)
