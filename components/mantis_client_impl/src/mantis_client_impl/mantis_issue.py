"""Mantis Issue implementation."""

from __future__ import annotations

from typing import Any

from mantis_client_interface.issue import Issue

# collections the service may leave out of an IssueData record
ISSUE_COLLECTIONS = ("custom_fields", "notes", "attachments")


def as_list(value: Any) -> list:
    """Return a service array as a list.

    Absent arrays become empty lists. SOAP-encoded arrays sometimes deserialize
    as a wrapper with a single repeated element (e.g. {'item': [...]}), those
    are unwrapped.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and len(value) == 1:
        (inner,) = value.values()
        if isinstance(inner, list):
            return inner
        if inner is None:
            return []
    return [value]


def same_id(left: Any, right: Any) -> bool:
    """Compare record ids the way the service sends them (int or numeric string)."""
    try:
        return int(left) == int(right)
    except (TypeError, ValueError):
        return left == right


def find_by_id(records: list[dict], record_id: Any) -> dict | None:
    for record in records:
        if record is not None and same_id(record.get("id"), record_id):
            return record
    return None


def normalize_issue(raw_data: dict) -> dict:
    """Return a copy of an IssueData record with every collection present."""
    issue = dict(raw_data)
    for key in ISSUE_COLLECTIONS:
        issue[key] = as_list(issue.get(key))
    return issue


def _name_of(value: Any) -> str | None:
    #ObjectRef / AccountData records carry a name, plain strings pass through
    if isinstance(value, dict):
        return value.get("name")
    return value


# ------------------------------------------------------------------
# Issue implementation
# ------------------------------------------------------------------
class MantisIssue(Issue):
    """Concrete Issue backed by a MantisConnect IssueData record.

    Construct via the module-level ``get_issue()`` factory rather than
    instantiating directly, so the record is normalized first.
    """

    def __init__(self, raw_data: dict) -> None:
        self._raw = raw_data

    @property
    def id(self) -> int:
        return self._raw.get("id")

    @property
    def summary(self) -> str:
        return self._raw.get("summary") or ""

    @property
    def description(self) -> str:
        return self._raw.get("description") or ""

    @property
    def status(self) -> str:
        return _name_of(self._raw.get("status")) or ""

    @property
    def handler(self) -> str | None:
        return _name_of(self._raw.get("handler")) or None

    @property
    def project(self) -> str | None:
        return _name_of(self._raw.get("project"))

    @property
    def custom_fields(self) -> list[Any]:
        return self._raw["custom_fields"]

    @property
    def notes(self) -> list[dict]:
        return self._raw["notes"]

    @property
    def attachments(self) -> list[dict]:
        return self._raw["attachments"]

    @property
    def raw(self) -> dict:
        return self._raw

    def __getitem__(self, key: str) -> Any:
        return self._raw[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._raw.get(key, default)


# ---------------------------------------------------------------------------
# Get issue
# ---------------------------------------------------------------------------

def get_issue(raw_data: dict) -> MantisIssue:
    """Return a MantisIssue from an mc_issue_get response.

    Args:
        raw_data: The deserialized IssueData record.

    Returns:
        A MantisIssue whose custom_fields, notes and attachments are always lists.
    """
    return MantisIssue(normalize_issue(raw_data))
