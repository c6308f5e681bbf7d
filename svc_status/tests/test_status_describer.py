"""Unit tests for the status describer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from svc_status._status_describer import (
    AlarmStatus,
    ServiceStatus,
    TofuStatusDescriber,
    status_from_outputs,
)
from svc_status._status_errors import DescribeError, TofuCommandError
from svc_status._status_models import StatusTarget, TofuResult

TARGET = StatusTarget(project="coffee", service="api", environment="test")

OUTPUTS = {
    "service_id": {"value": "arn:svc/coffee-test/api", "type": "string"},
    "service_status": {"value": "ACTIVE"},
    "desired_count": {"value": 3},
    "running_count": 2,
    "alarms": {
        "value": [
            {"name": "api-cpu-high", "state": "OK"},
            {"name": "api-5xx", "state": "ALARM"},
        ]
    },
}


def test_status_from_outputs_reads_wrapped_and_plain_values() -> None:
    status = status_from_outputs(TARGET, OUTPUTS)

    assert status.service_id == "arn:svc/coffee-test/api"
    assert status.status == "ACTIVE"
    assert (status.desired_count, status.running_count) == (3, 2)
    assert status.alarms == (
        AlarmStatus("api-cpu-high", "OK"),
        AlarmStatus("api-5xx", "ALARM"),
    )


def test_status_requires_service_id() -> None:
    with pytest.raises(DescribeError, match="no service_id output"):
        status_from_outputs(TARGET, {"service_status": "ACTIVE"})


@pytest.mark.parametrize(
    ("outputs", "message"),
    [
        ({"service_id": "s", "desired_count": "many"}, "desired_count"),
        ({"service_id": "s", "running_count": True}, "running_count"),
        ({"service_id": "s", "alarms": "none"}, "must be a list"),
        ({"service_id": "s", "alarms": [{"state": "OK"}]}, "Invalid alarm entry"),
    ],
)
def test_status_rejects_malformed_outputs(outputs: dict[str, object], message: str) -> None:
    with pytest.raises(DescribeError, match=message):
        status_from_outputs(TARGET, outputs)


def test_json_string_is_stable() -> None:
    payload = json.loads(status_from_outputs(TARGET, OUTPUTS).json_string())

    assert payload == {
        "project": "coffee",
        "environment": "test",
        "service": "api",
        "service_id": "arn:svc/coffee-test/api",
        "status": "ACTIVE",
        "desired_count": 3,
        "running_count": 2,
        "alarms": [
            {"name": "api-cpu-high", "state": "OK"},
            {"name": "api-5xx", "state": "ALARM"},
        ],
    }


def test_human_string_lists_fields_and_alarms() -> None:
    text = status_from_outputs(TARGET, OUTPUTS).human_string()

    assert text.startswith("Service Status\n")
    assert "  Environment  test\n" in text
    assert "  Tasks        2/3 running\n" in text
    assert "  api-5xx       ALARM\n" in text


def test_human_string_without_alarms() -> None:
    status = ServiceStatus("coffee", "test", "api", "svc", "ACTIVE", 1, 1)

    assert "No alarms configured." in status.human_string()


def test_describer_reads_stack_outputs(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(args: list[str], cwd: Path, *, timeout: object = None) -> TofuResult:
        calls.append((args, cwd))
        return TofuResult(True, json.dumps(OUTPUTS), "", 0)

    status = TofuStatusDescriber(tmp_path, runner=runner).describe(TARGET)

    assert status.service == "api"
    assert calls == [(["output", "-json"], tmp_path / "coffee" / "test" / "api")]


def test_describer_wraps_tofu_failures(tmp_path: Path) -> None:
    def runner(args: list[str], cwd: Path, *, timeout: object = None) -> TofuResult:
        raise TofuCommandError("tofu executable not found on PATH")

    with pytest.raises(DescribeError, match="describe status of service api"):
        TofuStatusDescriber(tmp_path, runner=runner).describe(TARGET)


def test_describer_rejects_non_mapping_outputs(tmp_path: Path) -> None:
    def runner(args: list[str], cwd: Path, *, timeout: object = None) -> TofuResult:
        return TofuResult(True, "[]", "", 0)

    with pytest.raises(DescribeError, match="unexpected tofu output"):
        TofuStatusDescriber(tmp_path, runner=runner).describe(TARGET)


def test_describer_rejects_names_that_leave_the_stacks_dir(tmp_path: Path) -> None:
    calls: list[Path] = []

    def runner(args: list[str], cwd: Path, *, timeout: object = None) -> TofuResult:
        calls.append(cwd)
        return TofuResult(True, json.dumps(OUTPUTS), "", 0)

    target = StatusTarget(project="coffee", service="api", environment="..")

    with pytest.raises(DescribeError, match="not a valid stack directory name"):
        TofuStatusDescriber(tmp_path, runner=runner).describe(target)

    assert calls == []
