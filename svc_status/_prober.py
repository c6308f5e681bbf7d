"""Deployment probing for (project, environment, service) triples.

A service counts as deployed in an environment when its OpenTofu stack has
been applied and exports a ``service_id`` output. Stacks are laid out as
``<stacks_dir>/<project>/<environment>/<service>``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from svc_status._status_errors import ProbeError, TofuCommandError
from svc_status._status_models import ProbeOutcome
from svc_status._tofu import TofuRunner, is_missing_output, run_tofu

SERVICE_ID_OUTPUT = "service_id"
_UNSAFE_NAMES = ("", ".", "..")
_UNSAFE_CHARS = ("/", "\\", "\x00")

logger = logging.getLogger(__name__)


class DeploymentProber(Protocol):
    """Decide whether a service is deployed to an environment.

    Implementations return :attr:`ProbeOutcome.NOT_DEPLOYED` when the stack
    for the triple does not exist and raise :class:`ProbeError` for every
    other failure.
    """

    def probe(self, project: str, environment: str, service: str) -> ProbeOutcome: ...


def stack_path(stacks_dir: Path, project: str, environment: str, service: str) -> Path:
    """Return the OpenTofu stack directory for a triple.

    Raises
    ------
    ValueError
        If any name is not a single directory name, so the path would leave
        its place under *stacks_dir*.

    Examples
    --------
    >>> stack_path(Path("stacks"), "coffee", "test", "api").as_posix()
    'stacks/coffee/test/api'
    """
    for kind, name in (
        ("project", project),
        ("environment", environment),
        ("service", service),
    ):
        if name in _UNSAFE_NAMES or any(char in name for char in _UNSAFE_CHARS):
            msg = f"{kind} {name!r} is not a valid stack directory name"
            raise ValueError(msg)
    return stacks_dir / project / environment / service


class TofuDeploymentProber:
    """Probe deployments by reading the ``service_id`` stack output."""

    def __init__(
        self,
        stacks_dir: Path,
        *,
        runner: TofuRunner = run_tofu,
        timeout: float | None = None,
    ) -> None:
        self.stacks_dir = stacks_dir
        self._runner = runner
        self._timeout = timeout

    def probe(self, project: str, environment: str, service: str) -> ProbeOutcome:
        try:
            work_dir = stack_path(self.stacks_dir, project, environment, service)
        except ValueError as exc:
            raise ProbeError(str(exc)) from exc
        if not work_dir.is_dir():
            logger.debug("No stack at %s", work_dir)
            return ProbeOutcome.NOT_DEPLOYED

        try:
            result = self._runner(
                ["output", "-json", SERVICE_ID_OUTPUT],
                work_dir,
                timeout=self._timeout,
            )
        except TofuCommandError as exc:
            msg = f"read stack {work_dir}: {exc}"
            raise ProbeError(msg) from exc

        if not result.success:
            if is_missing_output(result.stderr):
                logger.debug("Stack %s has no %s output", work_dir, SERVICE_ID_OUTPUT)
                return ProbeOutcome.NOT_DEPLOYED
            msg = (
                f"read stack {work_dir}: tofu output exited with "
                f"{result.return_code}: {result.stderr.strip()}"
            )
            raise ProbeError(msg)

        # ``tofu output -json <name>`` prints the bare JSON value.
        value = result.stdout.strip()
        if value in ("", "null", '""'):
            return ProbeOutcome.NOT_DEPLOYED
        return ProbeOutcome.DEPLOYED


__all__ = [
    "SERVICE_ID_OUTPUT",
    "DeploymentProber",
    "TofuDeploymentProber",
    "stack_path",
]
