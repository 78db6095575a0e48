"""Data API client for fetching record collections over HTTP"""

from typing import Any, Dict, List

import httpx

from finquery.config import settings
from finquery.domain.exceptions import FetchError, SourceUnavailableError
from finquery.infrastructure.clients.base import Collection, ensure_record_list


class HttpDataSource:
    """Client for a data API serving GET /data/<collection>"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.data_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch(self, collection: Collection) -> List[Dict[str, Any]]:
        """
        Fetch one collection from the data API.

        Raises:
            SourceUnavailableError: Connection failure or timeout (transient),
                or the collection does not exist (404)
            FetchError: Other HTTP errors (transient for 5xx) or an invalid
                payload
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/data/{collection.value}")
                response.raise_for_status()
                payload = response.json()

            except httpx.TimeoutException as e:
                raise SourceUnavailableError(
                    f"Data API timeout after {self.timeout}s", transient=True
                ) from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 404:
                    raise SourceUnavailableError(f"Collection not found: {collection.value}") from e
                raise FetchError(f"Data API error: {status}", transient=status >= 500) from e
            except httpx.RequestError as e:
                raise SourceUnavailableError(f"Data API unreachable: {e}", transient=True) from e
            except ValueError as e:
                raise FetchError(f"Invalid JSON from data API: {e}") from e

        return ensure_record_list(payload, collection)
