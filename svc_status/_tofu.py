"""OpenTofu helpers for reading deployed stack state."""

from __future__ import annotations

import json
import re
from collections import abc as cabc
from pathlib import Path

from plumbum import local
from plumbum.commands.processes import CommandNotFound, ProcessTimedOut

from svc_status._status_errors import TofuCommandError
from svc_status._status_models import TofuResult

TofuRunner = cabc.Callable[..., TofuResult]

# stderr emitted when the state or the requested output does not exist yet.
_MISSING_OUTPUT_PATTERNS = (
    re.compile(r"output .* not found", re.IGNORECASE),
    re.compile(r"output variable requested could not be found", re.IGNORECASE),
    re.compile(r"no outputs found", re.IGNORECASE),
    re.compile(r"no state file was found", re.IGNORECASE),
)


def _validate_command_args(args: list[str]) -> None:
    """Validate OpenTofu CLI arguments for safe execution."""
    for arg in args:
        if not isinstance(arg, str):
            msg = f"OpenTofu argument must be a string, got {type(arg).__name__}"
            raise TypeError(msg)
        if any(char in arg for char in ("\x00", "\n", "\r")):
            msg = "OpenTofu argument contains an invalid control character"
            raise ValueError(msg)


def run_tofu(
    args: list[str],
    cwd: Path,
    *,
    timeout: float | None = None,
) -> TofuResult:
    """Execute an OpenTofu command and return the result.

    Parameters
    ----------
    args
        Command arguments (without the ``tofu`` prefix).
    cwd
        Working directory for the command.
    timeout
        Seconds to wait before giving up on the command.

    Returns
    -------
    TofuResult
        Result containing success status, output, and return code.

    Raises
    ------
    TofuCommandError
        If ``tofu`` is not on the PATH, cannot start, or times out.

    Examples
    --------
    >>> from pathlib import Path
    >>> run_tofu(["version"], Path(".")).success  # doctest: +SKIP
    True
    """
    _validate_command_args(args)
    try:
        bound = local["tofu"][args]
        return_code, stdout, stderr = bound.run(
            retcode=None,
            cwd=str(cwd),
            timeout=timeout,
        )
    except CommandNotFound as exc:
        msg = "tofu executable not found on PATH"
        raise TofuCommandError(msg) from exc
    except ProcessTimedOut as exc:
        msg = f"tofu {' '.join(args)} timed out after {timeout}s (cwd={cwd})"
        raise TofuCommandError(msg) from exc
    except OSError as exc:
        msg = f"failed to run tofu in {cwd}: {exc}"
        raise TofuCommandError(msg) from exc

    return TofuResult(
        success=return_code == 0,
        stdout=stdout,
        stderr=stderr,
        return_code=return_code,
    )


def is_missing_output(stderr: str) -> bool:
    """Return whether *stderr* reports absent state rather than a failure.

    Examples
    --------
    >>> is_missing_output('Error: Output "service_id" not found')
    True
    >>> is_missing_output("Error: Failed to load state: AccessDenied")
    False
    """
    return any(pattern.search(stderr) for pattern in _MISSING_OUTPUT_PATTERNS)


def tofu_output(
    cwd: Path,
    *,
    runner: TofuRunner = run_tofu,
    timeout: float | None = None,
) -> object:
    """Retrieve all OpenTofu outputs of a stack as JSON.

    Parameters
    ----------
    cwd
        OpenTofu configuration directory.
    runner
        Callable used to execute OpenTofu.
    timeout
        Seconds to wait for the command.

    Returns
    -------
    object
        Parsed JSON mapping of every stack output.
    """
    result = runner(["output", "-json"], cwd, timeout=timeout)

    if not result.success:
        msg = (
            "tofu output failed "
            f"(cwd={cwd}, return_code={result.return_code}): {result.stderr.strip()}"
        )
        raise TofuCommandError(msg)

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        msg = f"tofu output returned invalid JSON (cwd={cwd}): {exc}"
        raise TofuCommandError(msg) from exc


def extract_output_value(outputs: cabc.Mapping[str, object], key: str) -> object:
    """Extract a value from OpenTofu outputs, handling wrapped formats.

    Examples
    --------
    >>> extract_output_value({"service_id": {"value": "svc-1"}}, "service_id")
    'svc-1'
    >>> extract_output_value({"service_id": "svc-1"}, "missing") is None
    True
    """
    output = outputs.get(key)
    if isinstance(output, dict) and "value" in output:
        return output["value"]
    return output
