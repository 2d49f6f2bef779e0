"""HTTP client factory for talking to the Livebox."""

import httpx

from livebox_cli import __version__
from livebox_cli.connection import Credentials

SAH_CONTENT_TYPE = "application/x-sah-ws-4-call+json"


def create_http_client(credentials: Credentials) -> httpx.Client:
    """Create the ``httpx.Client`` shared by the session and the invoker.

    The client's cookie jar carries the device session cookie set at login.
    """

    return httpx.Client(
        timeout=httpx.Timeout(credentials.timeout),
        verify=not credentials.allow_insecure_tls,
        headers={
            "User-Agent": f"livebox-cli/{__version__}",
            "Accept": SAH_CONTENT_TYPE,
        },
    )
