"""Exception hierarchy for the service status command.

Every failure the command can report derives from :class:`StatusError`, so the
CLI can catch a single base error and turn it into an exit status. Collaborator
failures (catalog, OpenTofu, prober, describer) and resolution failures share
the hierarchy; causes are chained with ``raise ... from exc``.

Exceptions
----------
StatusError
CatalogError
IdentifierNotFoundError
NoCandidatesError
NoProjectsFoundError
NoServicesFoundError
NoEnvironmentsFoundError
NoDeployedPairsFoundError
TofuCommandError
ProbeError
ProbeFailedError
SelectionError
SelectionAbortedError
SelectionFailedError
DescribeError

Examples
--------
>>> str(NoServicesFoundError("coffee"))
'no services found in project coffee'
"""

from __future__ import annotations


class StatusError(Exception):
    """Base error for the service status command."""


class CatalogError(StatusError):
    """Raised when the catalog cannot be read or has an invalid shape."""


class IdentifierNotFoundError(StatusError):
    """Raised when an explicitly supplied identifier is not in the catalog.

    Parameters
    ----------
    kind
        Identifier kind: ``"project"``, ``"service"`` or ``"environment"``.
    identifier
        The name that could not be found.
    project
        Owning project for service and environment lookups.

    Examples
    --------
    >>> str(IdentifierNotFoundError("service", "api", project="coffee"))
    'service api not found in project coffee'
    """

    def __init__(self, kind: str, identifier: str, *, project: str | None = None) -> None:
        self.kind = kind
        self.identifier = identifier
        self.project = project
        if project is None:
            msg = f"{kind} {identifier} not found"
        else:
            msg = f"{kind} {identifier} not found in project {project}"
        super().__init__(msg)


class NoCandidatesError(StatusError):
    """Raised when a candidate list that drives resolution is empty."""

    def __init__(self, message: str, *, project: str | None = None) -> None:
        self.project = project
        super().__init__(message)


class NoProjectsFoundError(NoCandidatesError):
    """Raised when the catalog holds no projects at all."""

    def __init__(self) -> None:
        super().__init__("no project found: run project setup first")


class NoServicesFoundError(NoCandidatesError):
    """Raised when a project has no services."""

    def __init__(self, project: str) -> None:
        super().__init__(f"no services found in project {project}", project=project)


class NoEnvironmentsFoundError(NoCandidatesError):
    """Raised when a project has no environments."""

    def __init__(self, project: str) -> None:
        super().__init__(
            f"no environments found in project {project}", project=project
        )


class NoDeployedPairsFoundError(NoCandidatesError):
    """Raised when no candidate (service, environment) pair is deployed."""

    def __init__(self, project: str) -> None:
        super().__init__(
            f"no deployed services found in project {project}", project=project
        )


class TofuCommandError(StatusError):
    """Raised when an OpenTofu command cannot run or fails."""


class ProbeError(StatusError):
    """Raised by a deployment prober for failures other than non-deployment."""


class ProbeFailedError(StatusError):
    """Raised when probing a candidate pair fails; aborts the resolution.

    The underlying :class:`ProbeError` is available as ``__cause__``.

    Examples
    --------
    >>> err = ProbeFailedError("coffee", "test", "api", ProbeError("boom"))
    >>> str(err)
    'check if service api is deployed in environment test of project coffee: boom'
    """

    def __init__(
        self,
        project: str,
        environment: str,
        service: str,
        cause: BaseException,
    ) -> None:
        self.project = project
        self.environment = environment
        self.service = service
        super().__init__(
            f"check if service {service} is deployed in environment "
            f"{environment} of project {project}: {cause}"
        )


class SelectionError(StatusError):
    """Base error for interactive selection failures."""


class SelectionAbortedError(SelectionError):
    """Raised when the user cancels an interactive selection."""


class SelectionFailedError(SelectionError):
    """Raised when an interactive selection fails for any other reason."""


class DescribeError(StatusError):
    """Raised when the status of a resolved service cannot be described."""


__all__ = [
    "CatalogError",
    "DescribeError",
    "IdentifierNotFoundError",
    "NoCandidatesError",
    "NoDeployedPairsFoundError",
    "NoEnvironmentsFoundError",
    "NoProjectsFoundError",
    "NoServicesFoundError",
    "ProbeError",
    "ProbeFailedError",
    "SelectionAbortedError",
    "SelectionError",
    "SelectionFailedError",
    "StatusError",
    "TofuCommandError",
]
