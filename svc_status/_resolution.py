"""Resolve which deployed service and environment to report on.

The user may omit the project, the service, the environment, or all three.
Resolution narrows those inputs to exactly one (service, environment) pair
that is actually deployed:

1. an omitted project is chosen interactively from the catalog;
2. omitted services and environments expand to every catalog entry;
3. the service-major cross product is probed, in order, one pair at a time;
4. pairs that are not deployed are dropped, any other probe failure aborts;
5. a single survivor is selected automatically, several are offered to the
   chooser in probe order.

The functions here depend only on their arguments and the collaborator
protocols. They never print; the auto-selection notice goes through the
module logger.

Examples
--------
A single candidate is returned without consulting the chooser:

>>> select_candidate(
...     ["api/test"], chooser=None, prompt="", help_text="", stage="select"
... )
'api/test'
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from svc_status._catalog import Catalog
from svc_status._chooser import Chooser
from svc_status._prober import DeploymentProber
from svc_status._status_errors import (
    NoDeployedPairsFoundError,
    NoEnvironmentsFoundError,
    NoProjectsFoundError,
    NoServicesFoundError,
    ProbeError,
    ProbeFailedError,
    SelectionAbortedError,
    SelectionError,
    SelectionFailedError,
)
from svc_status._status_models import (
    CandidatePair,
    CandidateSet,
    ProbeOutcome,
    StatusRequest,
    StatusTarget,
)
from svc_status._validation import validate_request

PROJECT_PROMPT = "Which project's service status would you like to show?"
PROJECT_HELP = "A project groups all of your services and environments together."
SERVICE_PROMPT = "Which deployed service would you like to show the status of?"
SERVICE_HELP = "Displays the service, its tasks and its alarm states."

logger = logging.getLogger(__name__)


def select_candidate(
    keys: Sequence[str],
    *,
    chooser: Chooser,
    prompt: str,
    help_text: str,
    stage: str,
    noun: str = "candidate",
    auto_select: bool = True,
) -> str:
    """Pick one of *keys*, prompting only when there is a real choice.

    Parameters
    ----------
    keys
        Ordered, non-empty candidate keys.
    chooser
        Interactive chooser consulted when a prompt is needed.
    prompt, help_text
        Text shown by the chooser.
    stage
        Short description of the selection, used as error context.
    noun
        What the keys name, used in the auto-selection notice.
    auto_select
        Return the only key without prompting when ``keys`` has one member.

    Raises
    ------
    ValueError
        If *keys* is empty; callers report empty candidates themselves.
    SelectionAbortedError
        If the user cancelled the prompt.
    SelectionFailedError
        If the chooser failed or answered with a value outside *keys*.
    """

    if not keys:
        msg = f"{stage}: no candidates to select from"
        raise ValueError(msg)

    if auto_select and len(keys) == 1:
        logger.info("Only found one %s, defaulting to: %s", noun, keys[0])
        return keys[0]

    try:
        selected = chooser.select_one(prompt, help_text, list(keys))
    except SelectionAbortedError as exc:
        raise SelectionAbortedError(f"{stage}: {exc}") from exc
    except SelectionError as exc:
        raise SelectionFailedError(f"{stage}: {exc}") from exc

    if selected not in keys:
        msg = f"{stage}: chooser returned unknown choice {selected!r}"
        raise SelectionFailedError(msg)
    return selected


def resolve_project(project: str, *, catalog: Catalog, chooser: Chooser) -> str:
    """Return *project*, or ask the user to pick one from the catalog.

    A supplied project is trusted as-is; the validation step has already
    checked that it exists. When several or only one project exists, the
    full list is always offered to the user.
    """

    if project:
        return project

    projects = catalog.list_projects()
    if not projects:
        raise NoProjectsFoundError()
    return select_candidate(
        projects,
        chooser=chooser,
        prompt=PROJECT_PROMPT,
        help_text=PROJECT_HELP,
        stage="select project",
        auto_select=False,
    )


def _service_candidates(project: str, service: str, catalog: Catalog) -> list[str]:
    if service:
        return [service]
    services = catalog.list_services(project)
    if not services:
        raise NoServicesFoundError(project)
    return services


def _environment_candidates(
    project: str, environment: str, catalog: Catalog
) -> list[str]:
    if environment:
        return [environment]
    environments = catalog.list_environments(project)
    if not environments:
        raise NoEnvironmentsFoundError(project)
    return environments


def deployed_candidates(
    project: str,
    candidates: CandidateSet,
    *,
    prober: DeploymentProber,
) -> CandidateSet:
    """Probe every candidate in order and keep the deployed ones.

    Probing is sequential and exhaustive; the first probe failure that is not
    a plain "not deployed" aborts with :class:`ProbeFailedError` and no later
    candidate is probed.
    """

    deployed = CandidateSet()
    for pair in candidates:
        try:
            outcome = prober.probe(project, pair.environment, pair.service)
        except ProbeError as exc:
            raise ProbeFailedError(
                project, pair.environment, pair.service, exc
            ) from exc
        logger.debug("Probed %s in %s: %s", pair.display_key, project, outcome.value)
        if outcome is ProbeOutcome.DEPLOYED:
            deployed.add(pair)
    return deployed


def resolve_deployed_pair(
    project: str,
    service: str,
    environment: str,
    *,
    catalog: Catalog,
    prober: DeploymentProber,
    chooser: Chooser,
) -> CandidatePair:
    """Narrow optional service and environment names to one deployed pair.

    Parameters
    ----------
    project
        Resolved, existing project name.
    service, environment
        Names supplied by the user; empty strings expand to every catalog
        entry for the project.

    Raises
    ------
    NoServicesFoundError, NoEnvironmentsFoundError
        If the project lists no services or environments to consider.
    ProbeFailedError
        If a probe fails for a reason other than non-deployment.
    NoDeployedPairsFoundError
        If no candidate pair is deployed.
    SelectionAbortedError, SelectionFailedError
        If the interactive choice between several pairs fails.
    """

    services = _service_candidates(project, service, catalog)
    environments = _environment_candidates(project, environment, catalog)
    candidates = CandidateSet.from_product(services, environments)

    deployed = deployed_candidates(project, candidates, prober=prober)
    if not deployed:
        raise NoDeployedPairsFoundError(project)

    key = select_candidate(
        deployed.keys,
        chooser=chooser,
        prompt=SERVICE_PROMPT,
        help_text=SERVICE_HELP,
        stage=f"select deployed service for project {project}",
        noun="deployed service",
    )
    return deployed.pair_for(key)


def resolve_target(
    request: StatusRequest,
    *,
    catalog: Catalog,
    prober: DeploymentProber,
    chooser: Chooser,
) -> StatusTarget:
    """Resolve a possibly-partial request into a concrete status target.

    Supplied identifiers are validated against the catalog before any
    candidate is probed. Service and environment names given alongside an
    interactively chosen project are validated once the project is known.
    """

    validate_request(request, catalog=catalog)
    project = resolve_project(request.project, catalog=catalog, chooser=chooser)
    if not request.project:
        validate_request(replace(request, project=project), catalog=catalog)
    pair = resolve_deployed_pair(
        project,
        request.service,
        request.environment,
        catalog=catalog,
        prober=prober,
        chooser=chooser,
    )
    return StatusTarget(
        project=project, service=pair.service, environment=pair.environment
    )


__all__ = [
    "PROJECT_HELP",
    "PROJECT_PROMPT",
    "SERVICE_HELP",
    "SERVICE_PROMPT",
    "deployed_candidates",
    "resolve_deployed_pair",
    "resolve_project",
    "resolve_target",
    "select_candidate",
]
