"""Catalog of projects, services and environments.

The catalog is the ground truth for which identifiers exist. ``FileCatalog``
reads a YAML document on every call so that each lookup observes the current
file contents::

    projects:
      - name: coffee
        services: [api, web]
        environments:
          - test
          - name: prod

Listing order is the order used in the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import yaml

from svc_status._status_errors import CatalogError, IdentifierNotFoundError

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    """Read-only lookup of projects, services and environments."""

    def list_projects(self) -> list[str]: ...

    def list_services(self, project: str) -> list[str]: ...

    def list_environments(self, project: str) -> list[str]: ...

    def get_project(self, name: str) -> str: ...

    def get_service(self, project: str, name: str) -> str: ...

    def get_environment(self, project: str, name: str) -> str: ...


@dataclass(frozen=True, slots=True)
class ProjectEntry:
    """A project and the names it owns, in catalog order."""

    name: str
    services: tuple[str, ...]
    environments: tuple[str, ...]


def _entry_name(value: Any, context: str) -> str:
    """Return the name of a catalog entry given as a string or mapping.

    Examples
    --------
    >>> _entry_name("api", "services")
    'api'
    >>> _entry_name({"name": "prod", "region": "nyc1"}, "environments")
    'prod'
    """

    if isinstance(value, dict):
        value = value.get("name")
    if not isinstance(value, str) or not value:
        msg = f"Catalog entry in {context} must be a non-empty name, got {value!r}"
        raise CatalogError(msg)
    return value


def _names(values: Any, context: str) -> tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        msg = f"Catalog field {context} must be a list"
        raise CatalogError(msg)
    return tuple(_entry_name(value, context) for value in values)


def parse_catalog(payload: Any) -> list[ProjectEntry]:
    """Validate a decoded catalog document and return its projects."""

    if payload is None:
        return []
    if not isinstance(payload, dict):
        msg = "Catalog root must be a mapping"
        raise CatalogError(msg)
    projects = payload.get("projects") or []
    if not isinstance(projects, list):
        msg = "Catalog field 'projects' must be a list"
        raise CatalogError(msg)

    entries: list[ProjectEntry] = []
    for raw in projects:
        name = _entry_name(raw, "projects")
        details = raw if isinstance(raw, dict) else {}
        entries.append(
            ProjectEntry(
                name=name,
                services=_names(details.get("services"), f"{name}.services"),
                environments=_names(
                    details.get("environments"), f"{name}.environments"
                ),
            )
        )
    return entries


class FileCatalog:
    """Catalog backed by a YAML file, re-read on every lookup."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> list[ProjectEntry]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read catalog {self.path}: {exc}"
            raise CatalogError(msg) from exc
        try:
            payload = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            msg = f"Failed to parse catalog {self.path}: {exc}"
            raise CatalogError(msg) from exc
        return parse_catalog(payload)

    def _project(self, name: str) -> ProjectEntry:
        for entry in self._load():
            if entry.name == name:
                return entry
        raise IdentifierNotFoundError("project", name)

    def list_projects(self) -> list[str]:
        names = [entry.name for entry in self._load()]
        logger.debug("Catalog %s lists %d projects", self.path, len(names))
        return names

    def list_services(self, project: str) -> list[str]:
        return list(self._project(project).services)

    def list_environments(self, project: str) -> list[str]:
        return list(self._project(project).environments)

    def get_project(self, name: str) -> str:
        return self._project(name).name

    def get_service(self, project: str, name: str) -> str:
        if name not in self._project(project).services:
            raise IdentifierNotFoundError("service", name, project=project)
        return name

    def get_environment(self, project: str, name: str) -> str:
        if name not in self._project(project).environments:
            raise IdentifierNotFoundError("environment", name, project=project)
        return name


__all__ = ["Catalog", "FileCatalog", "ProjectEntry", "parse_catalog"]
