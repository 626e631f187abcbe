"""Shared fixtures: a MantisClient wired to a mocked SOAP transport."""

import pytest
from unittest.mock import MagicMock

from mantis_client_impl.mantis_impl import MantisClient
from mantis_client_impl.timezone import TimezoneApplier
from mantis_client_impl.transport import SoapTransport


class RecordingTimezoneApplier(TimezoneApplier):
    """Remembers the zone instead of changing the process time zone."""

    def __init__(self):
        super().__init__()
        self.applied = []

    def _set_process_timezone(self, zone):
        self.applied.append(zone)


@pytest.fixture
def responses():
    """Canned results keyed by remote procedure name. Exceptions are raised instead of returned."""
    return {"mc_version": "2.25.0"}


@pytest.fixture
def transport(responses):
    transport = MagicMock(spec=SoapTransport)

    def invoke(procedure, *args):
        value = responses[procedure]
        if isinstance(value, Exception):
            raise value
        return value

    transport.invoke.side_effect = invoke
    return transport


@pytest.fixture
def timezone_applier():
    return RecordingTimezoneApplier()


@pytest.fixture
def mantis_client(transport, timezone_applier):
    """Returns a MantisClient whose remote calls go to the mocked transport."""
    return MantisClient(
        "https://mantis.example.com",
        "alice",
        "secret",
        issues_per_page=25,
        transport=transport,
        timezone_applier=timezone_applier,
    )
