"""Step reporter that forwards updates to the runner backend API."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..contracts import StepUpdate
from .base import BaseStepReporter

logger = logging.getLogger(__name__)


class HttpStepReporter(BaseStepReporter):
    """PUT each update to ``/api/v1/executions/{execution_id}/steps/{step_id}``.

    Between ``connect`` and ``disconnect`` updates share one client. Without a
    connection each update uses its own short-lived client, so the reporter
    can be called from any event loop.
    """

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _new_client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = self.api_key
        return httpx.AsyncClient(
            base_url=self.url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def connect(self) -> None:
        """Create the shared HTTP client."""
        if not self._client:
            self._client = self._new_client()

    async def disconnect(self) -> None:
        """Close the shared HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def report(
        self, execution_id: str, update: StepUpdate, platform: Optional[str] = None
    ) -> None:
        if self._client:
            await self._put(self._client, execution_id, update, platform)
            return
        async with self._new_client() as client:
            await self._put(client, execution_id, update, platform)

    async def _put(
        self,
        client: httpx.AsyncClient,
        execution_id: str,
        update: StepUpdate,
        platform: Optional[str],
    ) -> None:
        body = update.model_dump(
            mode="json", exclude_none=True, exclude={"execution_id", "step_id"}
        )
        body["id"] = update.step_id
        headers = {"X-Platform": platform} if platform else None

        response = await client.put(
            f"/api/v1/executions/{execution_id}/steps/{update.step_id}",
            json=body,
            headers=headers,
        )
        response.raise_for_status()
        logger.debug(
            f"Reported step {update.step_id} for execution_id={execution_id} "
            f"status={update.status.value if update.status else 'unchanged'}"
        )
