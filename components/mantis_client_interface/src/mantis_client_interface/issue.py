"""Issue contract - Core issue representation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields as dataclass_fields
from typing import Any


@dataclass
#dataclass so that optional fields can be left out of the payload entirely
class NoteData:
    """
    A note to add to an issue. view_state defaults to None and is only sent when set,
    so the service applies its own default view state.
    """

    text: str
    view_state: dict | None = None

    def to_payload(self) -> dict:
        """Return a dict containing only the fields explicitly set to non-None values."""
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self) if getattr(self, f.name) is not None}


class Issue(ABC):
    """Abstract base class representing an issue."""

    @property
    @abstractmethod
    def id(self) -> int:
        """Return the unique identifier of the issue"""
        raise NotImplementedError

    @property
    @abstractmethod
    def summary(self) -> str:
        """Return the summary (title) of the issue."""
        raise NotImplementedError

    @property
    @abstractmethod
    def description(self) -> str:
        """Return the description of the issue."""
        raise NotImplementedError

    @property
    @abstractmethod
    def status(self) -> str:
        """Return the status name of the issue."""
        raise NotImplementedError

    @property
    @abstractmethod
    def handler(self) -> str | None:
        """Return the username of the handler, or None if unassigned."""
        raise NotImplementedError

    @property
    @abstractmethod
    def custom_fields(self) -> list[Any]:
        """Return the custom field values, possibly empty."""
        raise NotImplementedError

    @property
    @abstractmethod
    def notes(self) -> list[dict]:
        """Return the notes, possibly empty."""
        raise NotImplementedError

    @property
    @abstractmethod
    def attachments(self) -> list[dict]:
        """Return the attachment descriptors, possibly empty."""
        raise NotImplementedError

    @property
    @abstractmethod
    def raw(self) -> dict:
        """Return the full record as sent by the service."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<Issue id={self.id!r} summary={self.summary!r} status={self.status!r}>"
