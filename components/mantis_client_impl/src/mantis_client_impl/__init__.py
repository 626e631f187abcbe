"""MantisBT SOAP client implementation."""

from mantis_client_impl.endpoint import Endpoint, resolve_endpoint
from mantis_client_impl.mantis_impl import ALL_PROJECTS, MantisClient, get_client
from mantis_client_impl.mantis_issue import MantisIssue
from mantis_client_impl.timezone import TimezoneApplier
from mantis_client_impl.transport import SoapTransport

__all__ = [
    "ALL_PROJECTS",
    "Endpoint",
    "MantisClient",
    "MantisIssue",
    "SoapTransport",
    "TimezoneApplier",
    "get_client",
    "resolve_endpoint",
]
