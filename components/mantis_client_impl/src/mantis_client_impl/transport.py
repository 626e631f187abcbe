"""
SOAP transport for the MantisConnect web service.

Every remote procedure is reached through SoapTransport.invoke(name, *args); this
is the only place that knows about zeep. Results come back as plain Python values
(dicts, lists, str, int, bytes) so callers never see zeep's CompoundValue objects.

Dependencies:
    zeep (SOAP 1.1 client), requests (HTTP session used by zeep), lxml (envelopes)
"""
from __future__ import annotations

import logging
from typing import Any

import requests
import zeep
from lxml import etree
from zeep.cache import SqliteCache
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault, TransportError
from zeep.helpers import serialize_object
from zeep.plugins import HistoryPlugin
from zeep.transports import Transport

from mantis_client_interface.client import ConnectivityFault, ProtocolFault

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "MantisPhpClient"
#seconds allowed for fetching the WSDL, remote calls themselves have no timeout
CONNECTION_TIMEOUT = 15


class SoapTransport:
    """
    Args:
        soap_url:   The resolved mantisconnect.php endpoint
        user_agent: Sent as the User-Agent header of every request
        lazy:       When True the WSDL is only fetched on first use, otherwise
                    construction fails with ConnectivityFault if it cannot be loaded
        cache_wsdl: Keep the parsed WSDL in zeep's on-disk sqlite cache
    """

    def __init__(
        self,
        soap_url: str,
        user_agent: str = DEFAULT_USER_AGENT,
        *,
        lazy: bool = False,
        cache_wsdl: bool = False,
        timeout: int = CONNECTION_TIMEOUT,
    ) -> None:
        self._soap_url = soap_url
        self._user_agent = user_agent
        self._cache_wsdl = cache_wsdl
        self._timeout = timeout
        self._history = HistoryPlugin()
        self._client: zeep.Client | None = None
        self._service: Any = None
        self._binding: Any = None

        if not lazy:
            self._connect()

    @property
    def wsdl_url(self) -> str:
        return f"{self._soap_url}?wsdl"

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def _connect(self) -> None:
        transport = Transport(
            session=requests.Session(),
            timeout=self._timeout,
            cache=SqliteCache() if self._cache_wsdl else None,
        )
        #zeep sets its own User-Agent on the session it is given
        transport.session.headers["User-Agent"] = self._user_agent

        try:
            client = zeep.Client(self.wsdl_url, transport=transport, plugins=[self._history])
        except (requests.RequestException, ZeepError, etree.XMLSyntaxError) as exc:
            logger.error("Unable to load service description from %s: %s", self.wsdl_url, exc)
            raise ConnectivityFault(f"Problem connecting web service '{self._soap_url}': {exc}") from exc

        binding = None
        for service in client.wsdl.services.values():
            for port in service.ports.values():
                binding = port.binding
                break
            if binding is not None:
                break
        if binding is None:
            raise ConnectivityFault(f"Problem connecting web service '{self._soap_url}': no service port in WSDL")

        self._client = client
        self._binding = binding
        # the WSDL advertises whatever address the server thinks it has, always call the url we were given
        self._service = client.create_service(str(binding.name), self._soap_url)
        logger.debug("Connected to %s", self._soap_url)

    def _ensure_connected(self) -> None:
        if self._client is None:
            self._connect()

    def operations(self) -> list[str]:
        """Return the names of the remote procedures the service exposes."""
        self._ensure_connected()
        return sorted(self._binding.all())

    def validate(self) -> None:
        """
        Raises:
            ConnectivityFault: If the WSDL cannot be loaded or lists no procedures.
        """
        if not self.operations():
            raise ConnectivityFault(f"Problem connecting web service '{self._soap_url}'.")

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def invoke(self, procedure: str, *args: Any) -> Any:
        """Call a remote procedure with positional arguments and return its deserialized result.

        Raises:
            ProtocolFault:     The service answered with a SOAP fault, or has no such procedure,
                               or the arguments do not match its message types.
            ConnectivityFault: The service could not be reached.
        """
        self._ensure_connected()
        try:
            operation = getattr(self._service, procedure)
        except AttributeError as exc:
            raise ProtocolFault(f"Unknown remote procedure '{procedure}'") from exc

        logger.debug("Calling %s", procedure)
        try:
            result = operation(*args)
        except Fault as fault:
            logger.error("%s failed: %s (code: %s)", procedure, fault.message, fault.code)
            raise ProtocolFault(fault.message, code=fault.code, detail=_detail_text(fault.detail)) from fault
        except (requests.RequestException, TransportError) as exc:
            logger.error("%s could not reach %s: %s", procedure, self._soap_url, exc)
            raise ConnectivityFault(f"Problem calling '{procedure}' on '{self._soap_url}': {exc}") from exc
        except ZeepError as exc:
            #request did not validate against the WSDL, or the response could not be parsed
            logger.error("%s failed: %s", procedure, exc)
            raise ProtocolFault(str(exc)) from exc
        except (TypeError, ValueError) as exc:
            #zeep rejects arguments that do not fit the message types before sending
            logger.error("%s rejected its arguments: %s", procedure, exc)
            raise ProtocolFault(f"Invalid arguments for '{procedure}': {exc}") from exc

        return serialize_object(result, dict)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def last_request(self) -> str:
        return self._envelope_text("last_sent")

    def last_response(self) -> str:
        return self._envelope_text("last_received")

    def get_response(self) -> str:
        """Legacy form: the last response twice, separated by a newline."""
        response = self.last_response()
        return response + "\n" + response

    def _envelope_text(self, attribute: str) -> str:
        try:
            entry = getattr(self._history, attribute)
        except IndexError:
            #nothing sent yet
            return ""
        if not entry:
            return ""
        return etree.tostring(entry["envelope"], encoding="unicode")


def _detail_text(detail: Any) -> str | None:
    if detail is None:
        return None
    if isinstance(detail, etree._Element):
        return etree.tostring(detail, encoding="unicode")
    return str(detail)
