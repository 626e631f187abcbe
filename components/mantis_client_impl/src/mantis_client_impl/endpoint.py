"""Resolve a user supplied MantisBT address into the SOAP endpoint and instance root."""

from __future__ import annotations

from typing import NamedTuple

SOAP_SCRIPT = "mantisconnect.php"
SOAP_PATH = "/api/soap/" + SOAP_SCRIPT
DEFAULT_SCHEME = "http://"


class Endpoint(NamedTuple):
    soap_url: str
    mantis_url: str

    @property
    def wsdl_url(self) -> str:
        return f"{self.soap_url}?wsdl"


def resolve_endpoint(raw_url: str) -> Endpoint:
    """Return the SOAP endpoint and the instance root for a MantisBT address.

    Accepts anything from a bare host name ('mantis.example.com') to the full
    endpoint ('https://host/mantis/api/soap/mantisconnect.php'). Already
    resolved endpoints come back unchanged and an https scheme is kept.
    """
    soap_url = raw_url.rstrip(" /")

    #make sure the url points to the webservice and not just the instance
    if SOAP_SCRIPT not in soap_url.lower():
        soap_url += SOAP_PATH

    if "http" not in soap_url.lower():
        soap_url = DEFAULT_SCHEME + soap_url

    api_at = soap_url.lower().find("/api")
    mantis_url = soap_url[:api_at] if api_at >= 0 else soap_url

    return Endpoint(soap_url, mantis_url)
