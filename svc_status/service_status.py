#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.13"
# dependencies = ["cyclopts>=2.9", "plumbum", "pyyaml", "rich"]
# ///
"""Show the status of a deployed service.

This script:
- validates any project, service and environment names against the catalog;
- asks for a project when none is given;
- finds every deployed (service, environment) pair for the remaining names,
  selecting it automatically when there is only one; and
- prints the service status as JSON or human-readable text.
"""

from __future__ import annotations

import logging
import os
import sys
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.logging import RichHandler

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from svc_status._catalog import Catalog, FileCatalog
from svc_status._chooser import Chooser, RichChooser
from svc_status._input_resolution import InputResolution, parse_bool, resolve_input
from svc_status._prober import DeploymentProber, TofuDeploymentProber
from svc_status._resolution import logger as resolution_logger
from svc_status._resolution import resolve_target
from svc_status._status_describer import (
    ServiceStatus,
    StatusDescriber,
    TofuStatusDescriber,
)
from svc_status._status_errors import StatusError
from svc_status._status_models import StatusRequest

app = App(help="Show the status of a deployed service.")
logger = logging.getLogger(__name__)

COLOR_ENV_KEY = "COLOR"


@dataclass(frozen=True, slots=True)
class RawStatusInputs:
    """Raw status inputs from CLI or defaults."""

    project: str | None = None
    service: str | None = None
    environment: str | None = None
    json_output: str | None = None
    catalog: Path | None = None
    stacks_dir: Path | None = None
    tofu_timeout: str | None = None
    log_level: str | None = None


@dataclass(frozen=True, slots=True)
class StatusConfig:
    """Resolved configuration for one status invocation."""

    request: StatusRequest
    json_output: bool
    catalog_path: Path
    stacks_dir: Path
    tofu_timeout: float | None
    log_level: str
    color: bool | None


def resolve_color(env: cabc.Mapping[str, str]) -> bool | None:
    """Return the colour preference from ``COLOR``.

    ``None`` means the variable is unset (or unrecognised) and terminal
    detection decides.

    Examples
    --------
    >>> resolve_color({"COLOR": "FALSE"})
    False
    >>> resolve_color({}) is None
    True
    """

    value = env.get(COLOR_ENV_KEY)
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered == "false":
        return False
    if lowered == "true":
        return True
    return None


def resolve_status_config(
    raw: RawStatusInputs,
    env: cabc.Mapping[str, str] | None = None,
) -> StatusConfig:
    """Resolve status inputs from CLI values, environment, and defaults."""

    env = os.environ if env is None else env

    def _text(value: str | None, env_key: str) -> str:
        resolved = resolve_input(value, InputResolution(env_key=env_key), env=env)
        return str(resolved).strip() if resolved else ""

    def _path(value: Path | None, env_key: str, default: str) -> Path:
        resolved = resolve_input(
            value,
            InputResolution(env_key=env_key, default=Path(default), as_path=True),
            env=env,
        )
        return resolved if isinstance(resolved, Path) else Path(str(resolved))

    raw_timeout = resolve_input(
        raw.tofu_timeout, InputResolution(env_key="SVC_STATUS_TOFU_TIMEOUT"), env=env
    )
    tofu_timeout: float | None = None
    if raw_timeout:
        try:
            tofu_timeout = float(raw_timeout)
        except ValueError as exc:
            msg = f"SVC_STATUS_TOFU_TIMEOUT must be a number, got: {raw_timeout!r}"
            raise SystemExit(msg) from exc
        if tofu_timeout <= 0:
            msg = f"SVC_STATUS_TOFU_TIMEOUT must be positive, got: {raw_timeout!r}"
            raise SystemExit(msg)

    json_raw = resolve_input(
        raw.json_output,
        InputResolution(env_key="SVC_STATUS_JSON", default="false"),
        env=env,
    )
    log_level = str(
        resolve_input(
            raw.log_level,
            InputResolution(env_key="SVC_STATUS_LOG_LEVEL", default="INFO"),
            env=env,
        )
    ).upper()
    if log_level not in logging.getLevelNamesMapping():
        msg = f"SVC_STATUS_LOG_LEVEL must be a logging level, got: {log_level!r}"
        raise SystemExit(msg)

    return StatusConfig(
        request=StatusRequest(
            project=_text(raw.project, "SVC_STATUS_PROJECT"),
            service=_text(raw.service, "SVC_STATUS_SERVICE"),
            environment=_text(raw.environment, "SVC_STATUS_ENVIRONMENT"),
        ),
        json_output=parse_bool(str(json_raw), default=False),
        catalog_path=_path(raw.catalog, "SVC_STATUS_CATALOG", "catalog.yaml"),
        stacks_dir=_path(raw.stacks_dir, "SVC_STATUS_STACKS_DIR", "stacks"),
        tofu_timeout=tofu_timeout,
        log_level=log_level,
        color=resolve_color(env),
    )


def build_console(color: bool | None) -> Console:
    """Create the stderr console used for prompts and log records."""

    if color is None:
        return Console(stderr=True)
    if color:
        return Console(stderr=True, force_terminal=True)
    return Console(stderr=True, no_color=True)


def configure_logging(level: str, console: Console) -> None:
    """Route log records to *console* through ``rich``.

    The resolution logger never drops below ``INFO`` so the notice about an
    automatically selected service is shown at every configured level.
    """

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=console,
                show_time=False,
                show_path=False,
                markup=False,
            )
        ],
        force=True,
    )
    resolution_logger.setLevel(min(logging.getLevelNamesMapping()[level], logging.INFO))


def run_status(
    config: StatusConfig,
    *,
    catalog: Catalog,
    prober: DeploymentProber,
    chooser: Chooser,
    describer: StatusDescriber,
) -> ServiceStatus:
    """Resolve the target, describe it once, and write the rendered status."""

    target = resolve_target(
        config.request, catalog=catalog, prober=prober, chooser=chooser
    )
    logger.debug("Describing %s", target)
    status = describer.describe(target)
    rendered = status.json_string() if config.json_output else status.human_string()
    print(rendered, end="")
    return status


@app.default
def main(
    project: Annotated[str | None, Parameter(name=["--project", "-p"])] = None,
    name: Annotated[str | None, Parameter(name=["--name", "-n"])] = None,
    env: Annotated[str | None, Parameter(name=["--env", "-e"])] = None,
    json: Annotated[bool | None, Parameter(name="--json")] = None,
    catalog: Path | None = None,
    stacks_dir: Path | None = None,
    tofu_timeout: str | None = None,
    log_level: str | None = None,
) -> int:
    """Show the status of a deployed service.

    Shows the service state, its running and desired task counts, and the
    state of its alarms.

    Parameters
    ----------
    project
        Name of the project.
    name
        Name of the service.
    env
        Name of the environment.
    json
        Output the status as JSON.
    """

    raw_inputs = RawStatusInputs(
        project=project,
        service=name,
        environment=env,
        json_output=None if json is None else str(json),
        catalog=catalog,
        stacks_dir=stacks_dir,
        tofu_timeout=tofu_timeout,
        log_level=log_level,
    )
    config = resolve_status_config(raw_inputs)

    console = build_console(config.color)
    configure_logging(config.log_level, console)

    try:
        run_status(
            config,
            catalog=FileCatalog(config.catalog_path),
            prober=TofuDeploymentProber(
                config.stacks_dir, timeout=config.tofu_timeout
            ),
            chooser=RichChooser(console),
            describer=TofuStatusDescriber(
                config.stacks_dir, timeout=config.tofu_timeout
            ),
        )
    except StatusError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
