"""Data models for service status resolution.

These models provide a small, typed contract shared by the catalog, prober,
resolution and describer helpers, keeping data flow explicit across module
boundaries.

Examples
--------
>>> pair = CandidatePair(service="api", environment="test")
>>> pair.display_key
'api/test'
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


def _escape_key_part(name: str) -> str:
    return name.replace("\\", "\\\\").replace("/", "\\/")


@dataclass(frozen=True, slots=True)
class CandidatePair:
    """A (service, environment) combination within a fixed project.

    Attributes
    ----------
    service
        Service name as listed in the catalog.
    environment
        Environment name as listed in the catalog.

    Examples
    --------
    >>> CandidatePair("api", "test") == CandidatePair("api", "test")
    True
    """

    service: str
    environment: str

    @property
    def display_key(self) -> str:
        """Return the canonical key shown to users when choosing a pair.

        A ``/`` or ``\\`` inside either name is backslash-escaped, so distinct
        pairs never share a key.

        Examples
        --------
        >>> CandidatePair("a/b", "c").display_key == CandidatePair("a", "b/c").display_key
        False
        """
        return f"{_escape_key_part(self.service)}/{_escape_key_part(self.environment)}"


@dataclass(slots=True)
class CandidateSet:
    """Ordered set of candidate pairs keyed by display key.

    Keys keep discovery order. Adding a pair that is already present is a
    no-op, so each key maps to exactly one pair and no pair appears twice.

    Examples
    --------
    >>> candidates = CandidateSet.from_product(["api", "web"], ["test", "prod"])
    >>> candidates.keys
    ['api/test', 'api/prod', 'web/test', 'web/prod']
    """

    _pairs: dict[str, CandidatePair] = field(default_factory=dict)
    _keys: list[str] = field(default_factory=list)

    @classmethod
    def from_product(
        cls,
        services: Iterable[str],
        environments: Iterable[str],
    ) -> CandidateSet:
        """Build the service-major, environment-minor cross product."""
        envs = list(environments)
        candidates = cls()
        for service in services:
            for environment in envs:
                candidates.add(CandidatePair(service=service, environment=environment))
        return candidates

    def add(self, pair: CandidatePair) -> None:
        key = pair.display_key
        if key in self._pairs:
            return
        self._pairs[key] = pair
        self._keys.append(key)

    @property
    def keys(self) -> list[str]:
        """Display keys in discovery order."""
        return list(self._keys)

    def pair_for(self, key: str) -> CandidatePair:
        """Return the pair registered under *key*.

        Raises
        ------
        KeyError
            If *key* is not a member of the set.
        """
        return self._pairs[key]

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[CandidatePair]:
        return (self._pairs[key] for key in self._keys)


class ProbeOutcome(enum.Enum):
    """Result of probing whether a pair is deployed.

    Probe failures are raised as :class:`~svc_status._status_errors.ProbeError`
    rather than returned.
    """

    DEPLOYED = "deployed"
    NOT_DEPLOYED = "not-deployed"


@dataclass(frozen=True, slots=True)
class StatusRequest:
    """Identifiers as supplied by the user; empty strings mean "ask"."""

    project: str = ""
    service: str = ""
    environment: str = ""


@dataclass(frozen=True, slots=True)
class StatusTarget:
    """Fully resolved project, service and environment."""

    project: str
    service: str
    environment: str


@dataclass(frozen=True, slots=True)
class TofuResult:
    """Result of an OpenTofu command execution.

    Attributes
    ----------
    success
        Whether the command exited with status code ``0``.
    stdout
        Captured standard output.
    stderr
        Captured standard error.
    return_code
        Process exit status code returned by OpenTofu.

    Examples
    --------
    >>> TofuResult(success=True, stdout="{}", stderr="", return_code=0).success
    True
    """

    success: bool
    stdout: str
    stderr: str
    return_code: int
