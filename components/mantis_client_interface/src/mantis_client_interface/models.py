"""Plain result records shared by every client implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Filter:
    """A filter the user can list issues with.

    Built-in filters use a string key as id (e.g. 'assigned_to_me'), the
    name is the label key a UI would translate.
    """

    id: int | str
    name: str


@dataclass(frozen=True)
class UserInfo:
    """Account details returned by a successful login."""

    name: str
    id: int
    email: str | None
    access_level: Any
    timezone: str | None
    real_name: str = ""


@dataclass
class Project:
    """A node of the accessible project tree."""

    id: int
    name: str
    subprojects: list[Project] = field(default_factory=list)
    #full record as sent by the service (status, view_state, description, ...)
    raw: dict = field(default_factory=dict, repr=False, compare=False)
