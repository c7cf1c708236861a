"""Mobgran API client for offer (link-produto) documents.

Rules:
- One GET per import, bounded by MOBGRAN_TIMEOUT_SECONDS (60s ceiling)
- Browser-like headers: the provider rejects requests without Origin/Referer
- No retries: a failing provider is reported, not hammered
- The body is decoded twice: a typed projection for the sync engine and the
  raw dict stored verbatim with the offer
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from mobgran_sync.schemas.mobgran import OfferDocument
from mobgran_sync.services.errors import (
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from mobgran_sync.settings import get_settings

logger = logging.getLogger("uvicorn.error")

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
    "Origin": "https://www.mobgran.com",
    "Referer": "https://www.mobgran.com/",
}

# Max characters of an error body kept for logs
_BODY_PREVIEW = 500


@dataclass
class FetchedDocument:
    """Upstream document plus the exact JSON it was decoded from."""

    canonical_id: str
    document: OfferDocument
    raw: dict[str, Any]


class MobgranClient:
    """Client for the Mobgran link-produto endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Endpoint prefix; the identifier is appended as a path segment.
            timeout: Request timeout in seconds.
            http_client: Pre-built client (tests inject one with a mock transport).
        """
        settings = get_settings()
        self.base_url = (base_url or settings.mobgran_api_url).rstrip("/")
        self.timeout = timeout or settings.mobgran_timeout_seconds
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, headers=DEFAULT_HEADERS)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def document_url(self, canonical_id: str) -> str:
        return f"{self.base_url}/{canonical_id}"

    async def fetch_document(self, canonical_id: str) -> FetchedDocument:
        """Fetch the current document of an offer.

        Raises:
            UpstreamUnavailableError: Network failure or timeout.
            UpstreamRejectedError: Non-200 response.
            UpstreamMalformedError: Body is not a usable offer document.
        """
        url = self.document_url(canonical_id)
        logger.info(f"Fetching Mobgran document id={canonical_id} url={url}")

        client = await self._get_client()
        try:
            response = await client.get(url, headers=DEFAULT_HEADERS, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error(f"Mobgran API timed out after {self.timeout}s for id={canonical_id}: {e!r}")
            raise UpstreamUnavailableError("Mobgran API timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Mobgran API request failed for id={canonical_id}: {e!r}")
            raise UpstreamUnavailableError("Mobgran API is unreachable") from e

        if response.status_code != 200:
            body = response.text[:_BODY_PREVIEW]
            logger.warning(
                f"Mobgran API returned {response.status_code} for id={canonical_id}: {body}"
            )
            raise UpstreamRejectedError(response.status_code, body)

        fetched = self._parse_document(canonical_id, response)
        logger.info(
            f"Mobgran document id={canonical_id} situacao={fetched.document.situacao} "
            f"empresa={fetched.document.nome_empresa} cavaletes={len(fetched.document.cavaletes)} "
            f"itens={fetched.document.item_count}"
        )
        return fetched

    def _parse_document(self, canonical_id: str, response: httpx.Response) -> FetchedDocument:
        """Decode and validate a 200 response body."""
        try:
            raw = response.json()
        except ValueError as e:
            logger.error(f"Mobgran API returned non-JSON body for id={canonical_id}: {e}")
            raise UpstreamMalformedError("Mobgran API returned a body that is not JSON") from e

        if not isinstance(raw, dict):
            raise UpstreamMalformedError("Mobgran API returned JSON that is not an object")

        try:
            document = OfferDocument.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Mobgran document failed validation for id={canonical_id}: {e}")
            raise UpstreamMalformedError("Mobgran API returned an invalid offer document") from e

        if document.is_empty():
            raise UpstreamMalformedError("Mobgran API returned an empty offer document")

        return FetchedDocument(canonical_id=canonical_id, document=document, raw=raw)


# Singleton client instance
_client: MobgranClient | None = None


def get_mobgran_client() -> MobgranClient:
    """Get Mobgran client singleton."""
    global _client
    if _client is None:
        _client = MobgranClient()
    return _client


async def close_mobgran_client() -> None:
    """Close the singleton's HTTP connections (app shutdown)."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
