"""
Transaction Service Client

Wraps the transaction service endpoints and applies the ledger view
transformer to everything that returns transaction records, so callers
only ever see viewer-relative LedgerEntry objects.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError

from swish_client.ledger import to_view_entries, to_view_entry
from swish_client.models.ledger import TransactionStats
from swish_client.models.results import (
    ApiResponse,
    ErrorKind,
    HistoryResult,
    StatsResult,
)
from swish_client.models.transfer import TransferRequest
from swish_client.services.transport import ServiceTransport


logger = structlog.get_logger(__name__)


def _transactions_of(payload: Any) -> list:
    if isinstance(payload, dict) and isinstance(payload.get("transactions"), list):
        return payload["transactions"]
    return []


class TransactionServiceClient:
    """Endpoints under /transactions on the transaction service."""

    def __init__(self, transport: ServiceTransport):
        self._transport = transport

    @property
    def transport(self) -> ServiceTransport:
        return self._transport

    async def create_transfer(self, request: TransferRequest) -> ApiResponse:
        """
        POST /transactions/transfer

        Returns the raw response; the transfer workflow decides what a
        success means. Sent exactly once.
        """
        return await self._transport.request(
            "/transactions/transfer",
            method="POST",
            body=request.to_payload(),
        )

    async def get_user_transactions(
        self,
        user_id: str,
        limit: int = 10,
    ) -> HistoryResult:
        """Recent transactions for a user, seen from that user's side."""
        response = await self._transport.request(
            f"/transactions/user/{user_id}/recent",
            params={"limit": limit},
        )
        if not response.ok:
            return HistoryResult.from_response(response)

        entries = to_view_entries(_transactions_of(response.data), user_id)
        count = response.data.get("count") if isinstance(response.data, dict) else None
        if not isinstance(count, int):
            count = len(entries)
        return HistoryResult.ok(entries=entries, count=count)

    async def get_transaction(
        self,
        transaction_id: str,
        viewer_id: Optional[str] = None,
    ) -> HistoryResult:
        """A single transaction, as a one-entry history."""
        response = await self._transport.request(f"/transactions/{transaction_id}")
        if not response.ok:
            return HistoryResult.from_response(response)

        if not isinstance(response.data, dict):
            return HistoryResult.failure(
                error="Malformed transaction response",
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
            )

        return HistoryResult.ok(entries=[to_view_entry(response.data, viewer_id)], count=1)

    async def get_transactions_between(
        self,
        user1_id: str,
        user2_id: str,
        limit: int = 20,
    ) -> HistoryResult:
        """Transactions between two users, seen from user1's side."""
        response = await self._transport.request(
            f"/transactions/between/{user1_id}/{user2_id}",
            params={"limit": limit},
        )
        if not response.ok:
            return HistoryResult.from_response(response)

        entries = to_view_entries(_transactions_of(response.data), user1_id)
        return HistoryResult.ok(entries=entries, count=len(entries))

    async def cancel_transaction(self, transaction_id: str) -> ApiResponse:
        """PUT /transactions/{id}/cancel -> {transaction_id, status, cancelled_at}"""
        return await self._transport.request(
            f"/transactions/{transaction_id}/cancel",
            method="PUT",
        )

    async def get_user_stats(self, user_id: str, days: int = 30) -> StatsResult:
        """Sent/received totals over the last `days` days."""
        response = await self._transport.request(
            f"/transactions/stats/{user_id}",
            params={"days": days},
        )
        if not response.ok:
            return StatsResult.from_response(response)

        try:
            stats = TransactionStats.model_validate(response.data)
        except ValidationError as e:
            logger.warning("stats_response_invalid", user_id=user_id, error=str(e))
            return StatsResult.failure(
                error="Malformed statistics response",
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
            )

        return StatsResult.ok(stats=stats)
