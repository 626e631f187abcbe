"""Contract for MantisBT issue tracker clients."""

from mantis_client_interface.client import (
    ConnectivityFault,
    IOFault,
    MantisClientError,
    MantisClientInterface,
    OperationFailed,
    ProtocolFault,
    UnsupportedOperation,
)
from mantis_client_interface.issue import Issue, NoteData
from mantis_client_interface.models import Filter, Project, UserInfo

__all__ = [
    "ConnectivityFault",
    "Filter",
    "IOFault",
    "Issue",
    "MantisClientError",
    "MantisClientInterface",
    "NoteData",
    "OperationFailed",
    "Project",
    "ProtocolFault",
    "UnsupportedOperation",
    "UserInfo",
]
