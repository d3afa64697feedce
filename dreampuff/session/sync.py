import logging
from typing import Optional, Protocol

import httpx

from dreampuff.exceptions import RemoteSyncError
from dreampuff.session.state import SessionInfo

logger = logging.getLogger(__name__)


class SessionRecordWriter(Protocol):
    """Persists a session record in the remote store."""

    async def __call__(self, info: SessionInfo) -> dict: ...


class HttpSessionRecordWriter:
    """
    Writes session records through the stock service's ``POST /api/sessions``.

    Args:
        base_url: Root URL of the stock service
        api_key: Bearer token shared with the service
        client: Optional pre-configured AsyncClient (its base_url is used)
        timeout: Request timeout in seconds when no client is supplied
    """

    PATH = "/api/sessions"

    def __init__(
        self,
        base_url: str = "",
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.client = client
        self.timeout = timeout

    def _headers(self) -> dict:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def __call__(self, info: SessionInfo) -> dict:
        try:
            if self.client is not None:
                response = await self.client.post(
                    self.PATH, json=info.snapshot(), headers=self._headers()
                )
            else:
                async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
                    response = await client.post(
                        self.PATH, json=info.snapshot(), headers=self._headers()
                    )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RemoteSyncError(f"Session record for {info.name} was not saved: {e}") from e

        record = response.json()
        logger.info(f"Session record {record.get('id')} saved for {info.name}")
        return record
