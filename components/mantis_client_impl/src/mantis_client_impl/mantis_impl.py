"""
Authentication
--------------
The client logs in with a username and a password or API token (MantisBT 1.3+).
An empty username and password is accepted by instances that allow anonymous access.

1. When get_client(interactive = True)
    User is prompted for the values below at runtime if any are missing from the environment.
2. When get_client(interactive = False) - Default
        MANTIS_BASE_URL        https://mantis.example.com
        MANTIS_USERNAME        administrator
        MANTIS_PASSWORD        <password or API token>
        MANTIS_USER_AGENT      optional, defaults to MantisPhpClient
        MANTIS_ISSUES_PER_PAGE optional, defaults to 50
        MANTIS_ANONYMOUS       optional, "1" logs in anonymously (username and password not required)

Dependencies:
    zeep, requests, packaging
"""
#to avoid having to consider forward declarations, the below line must be first line in the file
from __future__ import annotations

import logging
import os
import re
from getpass import getpass
from typing import Any

from packaging.version import InvalidVersion, Version

from mantis_client_impl.endpoint import resolve_endpoint
from mantis_client_impl.mantis_issue import MantisIssue, find_by_id, get_issue as _make_issue
from mantis_client_impl.mantis_project import build_projects, find_project
from mantis_client_impl.timezone import TimezoneApplier
from mantis_client_impl.transport import DEFAULT_USER_AGENT, SoapTransport
from mantis_client_interface.client import (
    IOFault,
    MantisClientError,
    MantisClientInterface,
    OperationFailed,
    UnsupportedOperation,
)
from mantis_client_interface.issue import NoteData
from mantis_client_interface.models import Filter, Project, UserInfo

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

ALL_PROJECTS = 0

#MantisBT returns a wrong preference value for ALL_PROJECTS but the right one for
#any other project id, even one that does not exist
PREFERENCE_PROJECT_ID = 1

DEFAULT_ISSUES_PER_PAGE = 50

#first release with mc_project_get_issues_for_user
USER_FILTERS_MIN_VERSION = "1.2.16dev"

#built-in filter key -> relationship understood by mc_project_get_issues_for_user
_USER_FILTER_RELATIONSHIPS: dict[str, str] = {
    "assigned_to_me":   "assigned",
    "unassigned":       "assigned",
    "monitored_by_me":  "monitored",
    "reported_by_me":   "reported",
}


def parse_version(value: str | None) -> Version:
    """Parse a MantisBT version string.

    Strings PEP 440 rejects (e.g. '1.3.0-git') are reduced to their leading
    dotted number.
    """
    try:
        return Version(value or "0")
    except InvalidVersion:
        match = re.match(r"\d+(\.\d+)*", value or "")
        return Version(match.group(0) if match else "0")


def version_at_least(current: str | None, required: str) -> bool:
    return parse_version(current) >= parse_version(required)


def _custom_filter_id(filter_id: Any) -> int | None:
    #stored filters have positive numeric ids (5, "5", "5.0"), built-in ones are keywords
    if isinstance(filter_id, bool):
        return None
    try:
        number = float(filter_id)
    except (TypeError, ValueError):
        return None
    if not number.is_integer() or number <= 0:
        return None
    return int(number)


# ---------------------------------------------------------------------------
# Client implementation
# ---------------------------------------------------------------------------

class MantisClient(MantisClientInterface):
    """
    Args:
        base_url:         MantisBT instance URL or SOAP endpoint (e.g. 'https://mantis.example.com')
        username:         Account name, empty for anonymous access
        password:         Password or API token
        user_agent:       User-Agent header sent to the service
        issues_per_page:  Page size used by get_issues()
        lazy:             Defer fetching the WSDL until the first call
        cache_wsdl:       Cache the WSDL on disk between runs
        timezone_applier: Used by set_timezone(), defaults to changing the process time zone
        transport:        Pre-built transport, mostly for tests
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        user_agent: str | None = None,
        *,
        issues_per_page: int = DEFAULT_ISSUES_PER_PAGE,
        lazy: bool = False,
        cache_wsdl: bool = False,
        timezone_applier: TimezoneApplier | None = None,
        transport: SoapTransport | None = None,
    ) -> None:
        self._endpoint = resolve_endpoint(base_url)
        self._username = username
        self._password = password
        self._issues_per_page = issues_per_page
        self._timezone_applier = timezone_applier or TimezoneApplier()

        if transport is None:
            transport = SoapTransport(
                self._endpoint.soap_url,
                user_agent or DEFAULT_USER_AGENT,
                lazy=lazy,
                cache_wsdl=cache_wsdl,
            )
        self._transport = transport

        self._mantis_version: str | None = None
        self._projects: list[Project] | None = None
        #name returned by mc_login, differs from _username for anonymous logins
        self._effective_username: str | None = None

    # ------------------------------------------------------------------
    # Internal SOAP helpers
    # ------------------------------------------------------------------

    def _call(self, procedure: str, *args: Any) -> Any:
        return self._transport.invoke(procedure, self._username, self._password, *args)

    def _get_user_preference(self, preference: str) -> Any:
        return self._call("mc_user_pref_get_pref", PREFERENCE_PROJECT_ID, preference)

    def _supports_user_filters(self) -> bool:
        return version_at_least(self.get_mantis_version(), USER_FILTERS_MIN_VERSION)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def mantis_url(self) -> str:
        """The instance root, without the webservice suffix."""
        return self._endpoint.mantis_url

    @property
    def soap_url(self) -> str:
        return self._endpoint.soap_url

    @property
    def issues_per_page(self) -> int:
        return self._issues_per_page

    def validate(self) -> None:
        """
        Raises:
            ConnectivityFault: In case of a connectivity issue
        """
        self._transport.validate()

    def last_response(self) -> str:
        return self._transport.last_response()

    def get_response(self) -> str:
        """Last response duplicated, kept for parity with older callers. Prefer last_response()."""
        return self._transport.get_response()

    # ------------------------------------------------------------------
    # Session / identity
    # ------------------------------------------------------------------

    def get_mantis_version(self) -> str:
        if self._mantis_version is None:
            self._mantis_version = self._transport.invoke("mc_version")
        return self._mantis_version

    def authenticate(self) -> UserInfo:
        mantis_version = self.get_mantis_version()

        try:
            result = self._call("mc_login")
        except MantisClientError:
            #logged for mining failed logins later, never include the password
            logger.error(
                "mantis-client-login-failure, %s, %s, %s",
                self.mantis_url, mantis_version, self._username,
            )
            raise

        account = result["account_data"]
        self._effective_username = account["name"]
        return UserInfo(
            name=account["name"],
            id=account["id"],
            real_name=account.get("real_name") or "",
            email=account.get("email"),
            access_level=result.get("access_level"),
            timezone=result.get("timezone"),
        )

    def check_anonymous_access(self) -> bool:
        try:
            return bool(self._transport.invoke("mc_login", "", ""))
        except MantisClientError as exc:
            logger.debug("Anonymous access refused by %s: %s", self.mantis_url, exc)
            return False

    def set_effective_username(self, username: str | None) -> None:
        self._effective_username = username

    def is_anonymous_access(self) -> bool:
        return bool(self._effective_username) and self._username != self._effective_username

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_projects(self) -> list[Project]:
        if self._projects is None:
            self._projects = build_projects(self._call("mc_projects_get_user_accessible"))
        return self._projects

    def get_project_by_id(self, project_id: int) -> Project | None:
        return find_project(self.get_projects(), project_id)

    def get_project_id_by_name(self, project_name: str) -> int:
        return self._call("mc_project_get_id_from_name", project_name)

    def get_project_users(self, project_id: int, access: int) -> list[Any]:
        return self._call("mc_project_get_users", project_id, access)

    def get_categories_list(self, project_id: int) -> list[str]:
        return self._call("mc_project_get_categories", project_id)

    def get_versions_list(self, project_id: int) -> list[Any]:
        return self._call("mc_project_get_versions", project_id)

    def get_custom_field_definitions(self, project_id: int) -> list[Any]:
        return self._call("mc_project_get_custom_fields", project_id)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def get_standard_filters_list(self) -> list[Filter]:
        filters = [Filter("all", "all_issues")]

        anonymous = self.is_anonymous_access()
        if self._supports_user_filters():
            if not anonymous:
                filters.append(Filter("assigned_to_me", "assigned_to_me"))

            filters.append(Filter("unassigned", "unassigned"))

            if not anonymous:
                filters.append(Filter("reported_by_me", "reported_by_me"))
                filters.append(Filter("monitored_by_me", "monitored_by_me"))

        return filters

    def get_custom_filters_list(self, project_id: int) -> list[Any]:
        result = self._call("mc_filter_get", project_id)
        if not isinstance(result, list):
            return []
        return result

    # ------------------------------------------------------------------
    # Configuration, enumerations and preferences
    # ------------------------------------------------------------------

    def get_config_string(self, config_var: str) -> str | None:
        """Best effort lookup of a MantisBT configuration option, None when not readable."""
        try:
            return self._call("mc_config_get_string", config_var)
        except MantisClientError:
            logger.exception("Unable to read configuration option '%s'", config_var)
            return None

    def get_enum_status(self) -> list[Any]:
        return self._call("mc_enum_status")

    def get_enum_resolution(self) -> list[Any]:
        return self._call("mc_enum_resolutions")

    def get_enum_access_level(self) -> list[Any]:
        return self._call("mc_enum_access_levels")

    def get_enum_priority(self) -> list[Any]:
        return self._call("mc_enum_priorities")

    def get_enum_severity(self) -> list[Any]:
        return self._call("mc_enum_severities")

    def get_enum_eta(self) -> list[Any]:
        return self._call("mc_enum_etas")

    def get_enum_project_status(self) -> list[Any]:
        return self._call("mc_enum_project_status")

    def get_enum_project_view_state(self) -> list[Any]:
        return self._call("mc_enum_project_view_states")

    def get_enum_projection(self) -> list[Any]:
        return self._call("mc_enum_projections")

    def get_enum_reproducibility(self) -> list[Any]:
        return self._call("mc_enum_reproducibilities")

    def get_enum_view_state(self) -> list[Any]:
        return self._call("mc_enum_view_states")

    def get_default_project(self) -> Any:
        return self._get_user_preference("default_project")

    def get_user_language(self) -> str:
        return self._get_user_preference("language")

    def set_timezone(self) -> str:
        """
        Notes on usage:
            Sets the process time zone to the user's time zone, or to the instance's
            default_timezone when the user has none. Unknown zones fall back to
            America/Los_Angeles. This changes process-wide state and is not safe to
            call concurrently.

        Returns:
            The zone that was applied.
        """
        timezone = self._get_user_preference("timezone")
        if not timezone:
            timezone = self.get_config_string("default_timezone")
        return self._timezone_applier.apply(timezone)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def user_exists(self, user: dict) -> bool:
        """
        Args:
            user: An AccountData-like dict with id, name or email

        Raises:
            UnsupportedOperation: If the instance is older than 1.2.16
        """
        if not self._supports_user_filters():
            raise UnsupportedOperation(
                f"user_exists() can only be called on v{USER_FILTERS_MIN_VERSION}+ "
                f"(connected to {self.get_mantis_version()})."
            )

        try:
            self._call("mc_project_get_issues_for_user", ALL_PROJECTS, "reported", user, 1, 1)
        except MantisClientError:
            return False
        return True

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def get_issues(self, project_id: int, page: int = 1, filter_id: int | str = 0) -> list[Any]:
        """
        Notes on usage:
            filter_id selects, in order of precedence:
            1. a stored filter, when it is a positive number
            2. a built-in per-user filter (assigned_to_me, unassigned, monitored_by_me,
               reported_by_me), on MantisBT 1.2.16 and later
            3. all issues of the project otherwise
        """
        custom_filter_id = _custom_filter_id(filter_id)
        if custom_filter_id is not None:
            return self._call(
                "mc_filter_get_issues", project_id, custom_filter_id, page, self._issues_per_page,
            )

        relationship = _USER_FILTER_RELATIONSHIPS.get(str(filter_id))
        if relationship is not None and self._supports_user_filters():
            if str(filter_id) == "unassigned":
                target_user: dict[str, Any] = {"id": 0}
            else:
                target_user = {"name": self._effective_username}
            return self._call(
                "mc_project_get_issues_for_user",
                project_id, relationship, target_user, page, self._issues_per_page,
            )

        #no matching filter handler, return all issues
        return self._call("mc_project_get_issues", int(project_id), int(page), int(self._issues_per_page))

    def add_issue(self, data: dict) -> int:
        issue_id = self._call("mc_issue_add", data)
        if not issue_id:
            raise OperationFailed("Unable to add issue.")
        return issue_id

    def get_issue(self, issue_id: int) -> MantisIssue:
        return _make_issue(self._call("mc_issue_get", issue_id))

    def update_issue(self, issue_id: int, data: dict) -> None:
        if not self._call("mc_issue_update", issue_id, data):
            raise OperationFailed(f"Unable to update issue {issue_id}.")

    def delete_issue(self, issue_id: int) -> None:
        if not self._call("mc_issue_delete", issue_id):
            raise OperationFailed(f"Unable to delete issue {issue_id}.")

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def add_note(self, issue_id: int, text: str, view_state: dict | None = None) -> int:
        """
        Args:
            issue_id:   The issue to add the note to
            text:       The note text
            view_state: Public/private state as an ObjectRef dict (id and/or name),
                        see get_enum_view_state(). Left out of the request when None.
        """
        note = NoteData(text=text, view_state=view_state)
        note_id = self._call("mc_issue_note_add", issue_id, note.to_payload())
        if not note_id:
            raise OperationFailed(f"Unable to add note to issue {issue_id}.")
        return note_id

    def get_note(self, issue_id: int, note_id: int) -> dict | None:
        #the service has no note lookup, search the issue's notes
        issue = self.get_issue(issue_id)
        return find_by_id(issue.notes, note_id)

    def update_note(self, note_id: int, text: str) -> None:
        result = self._call("mc_issue_note_update", {"id": note_id, "text": text})
        if not result:
            raise OperationFailed("Unable to update issue note.")

    def delete_note(self, note_id: int) -> None:
        if not self._call("mc_issue_note_delete", note_id):
            raise OperationFailed(f"Unable to delete issue note {note_id}.")

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def add_attachment(self, issue_id: int, name: str, mime_type: str, file_path: str) -> int:
        try:
            with open(file_path, "rb") as handle:
                content = handle.read()
        except OSError as exc:
            raise IOFault(f"Unable to read attachment file '{file_path}': {exc}") from exc

        attachment_id = self._call("mc_issue_attachment_add", issue_id, name, mime_type, content)
        if not attachment_id:
            raise OperationFailed(f"Unable to add attachment '{name}' to issue {issue_id}.")
        return attachment_id

    def get_issue_attachment(self, issue_id: int, file_id: int) -> dict | None:
        issue = self.get_issue(issue_id)
        attachment = find_by_id(issue.attachments, file_id)
        if attachment is None:
            return None

        attachment = dict(attachment)
        attachment["content"] = self._call("mc_issue_attachment_get", file_id)
        return attachment


# ---------------------------------------------------------------------------
# Get client
# ---------------------------------------------------------------------------

def get_client(*, interactive: bool = False) -> MantisClient:
    """Return a configured MantisClient.

    Reads settings from environment variables. If "interactive = True" and
    any required variable is missing, the user will be prompted; empty answers
    for the username and password select anonymous access.

    The WSDL is fetched on first use, call validate() to check the connection.

    Environment variables:
        MANTIS_BASE_URL:        MantisBT instance URL.
        MANTIS_USERNAME:        Account name.
        MANTIS_PASSWORD:        Password or API token.
        MANTIS_USER_AGENT:      Optional User-Agent header.
        MANTIS_ISSUES_PER_PAGE: Optional page size for get_issues().
        MANTIS_ANONYMOUS:       Optional, "1" to connect with an empty username and password.
    """
    base_url = os.environ.get("MANTIS_BASE_URL", "")
    username = os.environ.get("MANTIS_USERNAME", "")
    password = os.environ.get("MANTIS_PASSWORD", "")
    user_agent = os.environ.get("MANTIS_USER_AGENT") or None
    per_page = os.environ.get("MANTIS_ISSUES_PER_PAGE", "")
    anonymous = os.environ.get("MANTIS_ANONYMOUS", "").strip().lower() in ("1", "true", "yes")

    if anonymous:
        username = password = ""

    if interactive:
        if not base_url:
            base_url = input("MantisBT URL (e.g. https://mantis.example.com): ").strip()
        if not username and not anonymous:
            username = input("MantisBT username (empty for anonymous): ").strip()
        if username and not password:
            password = getpass("MantisBT password or API token: ")
    else:
        #collects the missing fields and raises an error alerting to the missing values
        required = [("MANTIS_BASE_URL", base_url)]
        if not anonymous:
            required += [("MANTIS_USERNAME", username), ("MANTIS_PASSWORD", password)]
        missing = [name for name, val in required if not val]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Set them or call get_client(interactive=True)."
            )

    issues_per_page = DEFAULT_ISSUES_PER_PAGE
    if per_page:
        try:
            issues_per_page = int(per_page)
        except ValueError:
            raise EnvironmentError(f"MANTIS_ISSUES_PER_PAGE must be a number, got {per_page!r}") from None

    return MantisClient(
        base_url,
        username,
        password,
        user_agent,
        issues_per_page=issues_per_page,
        lazy=True,
    )
