"""Existence checks for identifiers supplied on the command line."""

from __future__ import annotations

import logging

from svc_status._catalog import Catalog
from svc_status._status_models import StatusRequest

logger = logging.getLogger(__name__)


def validate_request(request: StatusRequest, *, catalog: Catalog) -> None:
    """Fail fast when an explicitly supplied identifier does not exist.

    Each supplied identifier is checked on its own, project first. Service
    and environment names are scoped to a project, so they are only checked
    once ``request.project`` is set; callers that resolve the project
    interactively validate again with the resolved project.

    Raises
    ------
    IdentifierNotFoundError
        Naming the kind and identifier that is missing.
    """

    if not request.project:
        return
    catalog.get_project(request.project)
    if request.service:
        catalog.get_service(request.project, request.service)
    if request.environment:
        catalog.get_environment(request.project, request.environment)
    logger.debug("Validated %s against the catalog", request)
