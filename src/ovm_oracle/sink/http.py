"""HTTP proof sink - posts proofs to a JSON store such as json-server."""

from __future__ import annotations

import logging
import time

import httpx

from ovm_oracle.models.proofs import TransactionBatchProof
from ovm_oracle.models.records import DeliveryResult

log = logging.getLogger(__name__)


class HttpProofSink:
    """Writes each proof with a single POST to {base_url}/{path}.

    The body always carries the index (and the same value as "id") so the
    store can upsert on it. No retry happens here.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        path: str = "proofs",
        timeout: int = 10,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/{path.strip('/')}"
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    async def deliver(self, proof: TransactionBatchProof) -> DeliveryResult:
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
                resp = await client.post(self._url, json=proof.to_payload())
                resp.raise_for_status()

        except httpx.HTTPStatusError as exc:
            duration = int((time.monotonic() - start) * 1000)
            error = f"store HTTP {exc.response.status_code}"
            log.warning("Delivery of index %d failed: %s", proof.index, error)
            return DeliveryResult(
                success=False, index=proof.index, error=error, duration_ms=duration,
            )

        except httpx.HTTPError as exc:
            duration = int((time.monotonic() - start) * 1000)
            log.warning("Delivery of index %d failed: %s", proof.index, exc)
            return DeliveryResult(
                success=False, index=proof.index, error=str(exc) or type(exc).__name__,
                duration_ms=duration,
            )

        duration = int((time.monotonic() - start) * 1000)
        log.info("Put transaction proof to store (index %d)", proof.index)
        return DeliveryResult(success=True, index=proof.index, duration_ms=duration)

    async def close(self) -> None:
        """Nothing to release; a client is opened per delivery."""
