"""Core client contract definitions and error taxonomy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from mantis_client_interface.issue import Issue
from mantis_client_interface.models import Filter, Project, UserInfo

__all__ = [
    "MantisClientInterface",
    "MantisClientError",
    "ConnectivityFault",
    "ProtocolFault",
    "UnsupportedOperation",
    "OperationFailed",
    "IOFault",
]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class MantisClientError(Exception):
    """Base exception for everything raised by a Mantis client."""


class ConnectivityFault(MantisClientError):
    """Raised when the service contract (WSDL) cannot be fetched or parsed."""


class ProtocolFault(MantisClientError):
    """Raised when a remote procedure answers with a SOAP fault.

    Args:
        message: The fault string reported by the service.
        code:    The fault code (e.g. 'Client', 'Server'), when known.
        detail:  The fault detail as text, when the service sent one.
    """

    def __init__(self, message: str, code: str | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.detail = detail


class UnsupportedOperation(MantisClientError):
    """Raised when an operation needs a newer MantisBT than the one connected."""


class OperationFailed(MantisClientError):
    """Raised when a remote call succeeded but reported a falsy result."""


class IOFault(MantisClientError):
    """Raised when a local file needed for a request cannot be read."""


# ---------------------------------------------------------------------------
# Client contract
# ---------------------------------------------------------------------------

class MantisClientInterface(ABC):
    """Talks to a MantisBT instance."""

    # ------------------------------------------------------------------
    # Session / identity
    # ------------------------------------------------------------------
    @abstractmethod
    def authenticate(self) -> UserInfo:
        """Log in with the configured credentials.

        Returns:
            The account information of the authenticated user.

        Raises:
            ProtocolFault: If the service rejects the credentials.
        """
        raise NotImplementedError

    @abstractmethod
    def check_anonymous_access(self) -> bool:
        """Return True if the instance accepts a login with empty credentials."""
        raise NotImplementedError

    @abstractmethod
    def is_anonymous_access(self) -> bool:
        """Return True if the effective user differs from the configured one."""
        raise NotImplementedError

    @abstractmethod
    def set_effective_username(self, username: str | None) -> None:
        """Override the effective username (for callers that log in out of band)."""
        raise NotImplementedError

    @abstractmethod
    def get_mantis_version(self) -> str:
        """Return the MantisBT version string of the remote instance."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    @abstractmethod
    def get_projects(self) -> list[Project]:
        """Return the tree of projects accessible to the user."""
        raise NotImplementedError

    @abstractmethod
    def get_project_by_id(self, project_id: int) -> Project | None:
        """Return the project (or subproject) with that id, or None."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    @abstractmethod
    def get_standard_filters_list(self) -> list[Filter]:
        """Return the built-in filters supported by the remote version."""
        raise NotImplementedError

    @abstractmethod
    def get_custom_filters_list(self, project_id: int) -> list[Any]:
        """Return the stored filters of a project, or an empty list."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Issue CRUD (create, read, update, delete)
    # ------------------------------------------------------------------
    @abstractmethod
    def get_issues(self, project_id: int, page: int = 1, filter_id: int | str = 0) -> list[Any]:
        """Return one page of issues of a project.

        Args:
            project_id: The project to list issues for (0 for all projects).
            page:       1-based page number.
            filter_id:  A stored filter id, or one of the built-in filter keys
                        returned by get_standard_filters_list().

        Returns:
            The issue headers returned by the service.
        """
        raise NotImplementedError

    @abstractmethod
    def add_issue(self, data: dict) -> int:
        """Create an issue and return its id."""
        raise NotImplementedError

    @abstractmethod
    def get_issue(self, issue_id: int) -> Issue:
        """Return a single issue.

        Raises:
            ProtocolFault: If no issue with that ID exists or access is denied.
        """
        raise NotImplementedError

    @abstractmethod
    def update_issue(self, issue_id: int, data: dict) -> None:
        """Replace an issue with the given data.

        Raises:
            OperationFailed: If the service reports the update did not happen.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_issue(self, issue_id: int) -> None:
        """Delete an issue.

        Raises:
            OperationFailed: If the service reports the issue was not deleted.
        """
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Notes and attachments
    # ------------------------------------------------------------------
    @abstractmethod
    def add_note(self, issue_id: int, text: str, view_state: dict | None = None) -> int:
        """Add a note to an issue and return the note id."""
        raise NotImplementedError

    @abstractmethod
    def get_note(self, issue_id: int, note_id: int) -> dict | None:
        """Return a note of an issue, or None if the issue has no such note."""
        raise NotImplementedError

    @abstractmethod
    def update_note(self, note_id: int, text: str) -> None:
        """Replace the text of a note.

        Raises:
            OperationFailed: If the service reports the update did not happen.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_note(self, note_id: int) -> None:
        """Delete a note.

        Raises:
            OperationFailed: If the service reports the note was not deleted.
        """
        raise NotImplementedError

    @abstractmethod
    def add_attachment(self, issue_id: int, name: str, mime_type: str, file_path: str) -> int:
        """Upload a local file as an issue attachment and return the attachment id.

        Raises:
            IOFault: If the file cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def get_issue_attachment(self, issue_id: int, file_id: int) -> dict | None:
        """Return an attachment of an issue including its ``content``, or None."""
        raise NotImplementedError
