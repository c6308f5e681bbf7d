"""Describe the status of a resolved service from its OpenTofu stack.

The stack for a service exports its current state as outputs::

    service_id      "arn:...:service/coffee-test/api"
    service_status  "ACTIVE"
    desired_count   2
    running_count   2
    alarms          [{"name": "api-cpu-high", "state": "OK"}]

Outputs may be plain values or ``{"value": ...}`` wrappers, as printed by
``tofu output -json``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from svc_status._prober import stack_path
from svc_status._status_errors import DescribeError, TofuCommandError
from svc_status._status_models import StatusTarget
from svc_status._tofu import TofuRunner, extract_output_value, run_tofu, tofu_output


@dataclass(frozen=True, slots=True)
class AlarmStatus:
    """State of one alarm attached to the service."""

    name: str
    state: str


@dataclass(frozen=True, slots=True)
class ServiceStatus:
    """Status payload for a deployed service.

    Examples
    --------
    >>> status = ServiceStatus("coffee", "test", "api", "svc-1", "ACTIVE", 1, 1)
    >>> status.to_mapping()["running_count"]
    1
    """

    project: str
    environment: str
    service: str
    service_id: str
    status: str
    desired_count: int
    running_count: int
    alarms: tuple[AlarmStatus, ...] = field(default_factory=tuple)

    def to_mapping(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping."""

        return {
            "project": self.project,
            "environment": self.environment,
            "service": self.service,
            "service_id": self.service_id,
            "status": self.status,
            "desired_count": self.desired_count,
            "running_count": self.running_count,
            "alarms": [
                {"name": alarm.name, "state": alarm.state} for alarm in self.alarms
            ],
        }

    def json_string(self) -> str:
        return json.dumps(self.to_mapping(), indent=2) + "\n"

    def human_string(self) -> str:
        """Render the status as an aligned plain-text report."""

        rows = [
            ("Project", self.project),
            ("Environment", self.environment),
            ("Service", self.service),
            ("Service ID", self.service_id),
            ("Status", self.status),
            ("Tasks", f"{self.running_count}/{self.desired_count} running"),
        ]
        width = max(len(label) for label, _ in rows)
        lines = ["Service Status", ""]
        lines.extend(f"  {label:<{width}}  {value}" for label, value in rows)
        lines.extend(["", "Alarms", ""])
        if not self.alarms:
            lines.append("  No alarms configured.")
        else:
            name_width = max(len("Name"), *(len(alarm.name) for alarm in self.alarms))
            lines.append(f"  {'Name':<{name_width}}  State")
            lines.extend(
                f"  {alarm.name:<{name_width}}  {alarm.state}" for alarm in self.alarms
            )
        return "\n".join(lines) + "\n"


class StatusDescriber(Protocol):
    """Produce the status payload for a resolved target."""

    def describe(self, target: StatusTarget) -> ServiceStatus: ...


def _as_int(value: object, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        msg = f"Stack output {key!r} must be an integer, got {value!r}"
        raise DescribeError(msg)
    try:
        return int(value)
    except ValueError as exc:
        msg = f"Stack output {key!r} must be an integer, got {value!r}"
        raise DescribeError(msg) from exc


def _parse_alarms(value: object) -> tuple[AlarmStatus, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        msg = "Stack output 'alarms' must be a list"
        raise DescribeError(msg)
    alarms: list[AlarmStatus] = []
    for item in value:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            msg = f"Invalid alarm entry in stack outputs: {item!r}"
            raise DescribeError(msg)
        alarms.append(AlarmStatus(name=item["name"], state=str(item.get("state", "UNKNOWN"))))
    return tuple(alarms)


def status_from_outputs(target: StatusTarget, outputs: dict[str, object]) -> ServiceStatus:
    """Build a :class:`ServiceStatus` from decoded ``tofu output`` data."""

    service_id = extract_output_value(outputs, "service_id")
    if not service_id:
        msg = (
            f"stack for service {target.service} in environment "
            f"{target.environment} has no service_id output"
        )
        raise DescribeError(msg)
    return ServiceStatus(
        project=target.project,
        environment=target.environment,
        service=target.service,
        service_id=str(service_id),
        status=str(extract_output_value(outputs, "service_status") or "UNKNOWN"),
        desired_count=_as_int(
            extract_output_value(outputs, "desired_count"), "desired_count"
        ),
        running_count=_as_int(
            extract_output_value(outputs, "running_count"), "running_count"
        ),
        alarms=_parse_alarms(extract_output_value(outputs, "alarms")),
    )


class TofuStatusDescriber:
    """Read service status from the outputs of its OpenTofu stack."""

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

    def describe(self, target: StatusTarget) -> ServiceStatus:
        try:
            work_dir = stack_path(
                self.stacks_dir, target.project, target.environment, target.service
            )
        except ValueError as exc:
            msg = f"describe status of service {target.service}: {exc}"
            raise DescribeError(msg) from exc
        try:
            outputs = tofu_output(work_dir, runner=self._runner, timeout=self._timeout)
        except TofuCommandError as exc:
            msg = f"describe status of service {target.service}: {exc}"
            raise DescribeError(msg) from exc
        if not isinstance(outputs, dict):
            msg = f"describe status of service {target.service}: unexpected tofu output"
            raise DescribeError(msg)
        return status_from_outputs(target, outputs)


__all__ = [
    "AlarmStatus",
    "ServiceStatus",
    "StatusDescriber",
    "TofuStatusDescriber",
    "status_from_outputs",
]
