"""
Transfer Workflow

Flow:
1. Fence   → Reject if another transfer from this workflow is unresolved
2. Validate → Sender (current identity) and receiver phone present
3. Parse    → Amount text must be a finite number greater than zero
4. Normalize → Round to 2 decimals, half away from zero
5. Submit   → Exactly one POST /transactions/transfer, never retried
6. Reconcile → Refresh balance and notify history listeners, concurrently

CRITICAL: The client never adjusts the balance or history itself.
Both live on the remote side; after a successful transfer we re-fetch.
A failure while re-fetching is reported separately and never turns a
successful transfer into a failed one.
"""

import asyncio
import inspect
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
from pydantic import ValidationError

from swish_client.audit import AuditLogger, create_correlation_id
from swish_client.models.results import (
    ErrorKind,
    OperationResult,
    ReconciliationReport,
    TransferOutcome,
)
from swish_client.models.transfer import TransferRequest, TransferResult
from swish_client.services.transactions import TransactionServiceClient
from swish_client.session import SessionManager


logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")

HistoryReloadHook = Callable[[TransferResult], Union[Awaitable[None], None]]


class AmountError(ValueError):
    """Amount text is not a usable transfer amount."""
    pass


def normalize_amount(value: Decimal) -> Decimal:
    """
    Round to whole cents, ties away from zero.

    19.999 -> 20.00, 0.005 -> 0.01. Idempotent.
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(text: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse user input into a normalized, positive amount.

    Raises:
        AmountError: If the input is empty, not a number, not finite,
                    or not greater than zero after rounding
    """
    if text is None or isinstance(text, bool):
        raise AmountError("Amount is required")

    raw = str(text).strip()
    if not raw:
        raise AmountError("Amount is required")

    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise AmountError(f"Amount is not a number: {raw}")

    if not value.is_finite():
        raise AmountError("Amount must be a finite number")

    if value <= 0:
        raise AmountError("Amount must be greater than zero")

    try:
        normalized = normalize_amount(value)
    except InvalidOperation:
        raise AmountError("Amount is too large")

    if normalized <= 0:
        raise AmountError("Amount is less than the smallest transferable unit")

    return normalized


class TransferWorkflow:
    """
    Validates, submits and reconciles a money transfer.

    Holds no state beyond the in-flight flag; the identity comes from
    the session manager at submission time.
    """

    def __init__(
        self,
        session: SessionManager,
        transactions: TransactionServiceClient,
        on_history_reload: Optional[HistoryReloadHook] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize workflow.

        Args:
            session: Source of the sender identity; refreshed after success
            transactions: Transaction service client used for submission
            on_history_reload: Called once with the TransferResult after a
                              successful transfer so history views can re-fetch.
                              May be a plain function or a coroutine function.
            audit_logger: Audit sink; a local one is created if None
        """
        self._session = session
        self._transactions = transactions
        self._on_history_reload = on_history_reload
        self._audit = audit_logger or AuditLogger()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _reject(
        self,
        error: str,
        error_kind: ErrorKind,
        field: Optional[str],
        correlation_id,
    ) -> TransferOutcome:
        identity = self._session.identity
        self._audit.log_transfer_rejected(
            identity.id if identity else None, field, error, correlation_id,
        )
        return TransferOutcome.failure(error=error, error_kind=error_kind, field=field)

    async def submit(
        self,
        receiver_phone: Optional[str],
        raw_amount: Union[str, int, float, Decimal, None],
        description: Optional[str] = None,
    ) -> TransferOutcome:
        """
        Send money to a phone number.

        Args:
            receiver_phone: Counterparty phone number
            raw_amount: Amount as typed by the user, e.g. "19.99"
            description: Optional message shown to both parties

        Returns:
            TransferOutcome. On success `result` holds the service's
            TransferResult and `reconciliation` what happened afterwards.
        """
        correlation_id = create_correlation_id()

        if self._in_flight:
            return self._reject(
                "A transfer is already in progress",
                ErrorKind.IN_FLIGHT,
                None,
                correlation_id,
            )

        identity = self._session.identity
        sender_phone = identity.phone_number.strip() if identity else ""
        if not sender_phone:
            return self._reject(
                "Sender phone number is required; log in first",
                ErrorKind.VALIDATION,
                "sender_phone",
                correlation_id,
            )

        receiver = (receiver_phone or "").strip()
        if not receiver:
            return self._reject(
                "Receiver phone number is required",
                ErrorKind.VALIDATION,
                "receiver_phone",
                correlation_id,
            )

        try:
            amount = parse_amount(raw_amount)
        except AmountError as e:
            return self._reject(str(e), ErrorKind.VALIDATION, "amount", correlation_id)

        message = description.strip() if description else None
        try:
            request = TransferRequest(
                sender_phone=sender_phone,
                receiver_phone=receiver,
                amount=amount,
                description=message or None,
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first["loc"] else None
            return self._reject(
                f"Invalid {field}: {first['msg']}",
                ErrorKind.VALIDATION,
                field,
                correlation_id,
            )

        self._in_flight = True
        try:
            self._audit.log_transfer_submitted(
                identity.id, receiver, str(amount), correlation_id,
            )
            response = await self._transactions.create_transfer(request)
        finally:
            self._in_flight = False

        if not response.ok:
            reason = response.error or "Transfer failed"
            self._audit.log_transfer_failed(
                identity.id, reason, response.status_code, correlation_id,
            )
            return TransferOutcome.failure(
                error=reason,
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
                amount=amount,
            )

        try:
            result = TransferResult.model_validate(response.data)
        except ValidationError as e:
            logger.error(
                "transfer_response_invalid",
                correlation_id=str(correlation_id),
                error=str(e),
            )
            self._audit.log_transfer_failed(
                identity.id, "Malformed transfer response", response.status_code, correlation_id,
            )
            return TransferOutcome.failure(
                error="Malformed transfer response",
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
                amount=amount,
            )

        self._audit.log_transfer_completed(
            identity.id, result.transaction_id, result.status, correlation_id,
        )

        report = await self._reconcile(result)
        if report.errors:
            self._audit.log_reconciliation_failed(
                identity.id, result.transaction_id, report.errors, correlation_id,
            )

        return TransferOutcome.ok(
            status_code=response.status_code,
            amount=amount,
            result=result,
            reconciliation=report,
        )

    async def _reconcile(self, result: TransferResult) -> ReconciliationReport:
        """Refresh balance and notify history listeners concurrently."""
        balance_outcome, history_outcome = await asyncio.gather(
            self._session.refresh_balance(),
            self._notify_history(result),
            return_exceptions=True,
        )

        report = ReconciliationReport()

        if isinstance(balance_outcome, BaseException):
            report.errors.append(f"Balance refresh failed: {balance_outcome}")
        elif isinstance(balance_outcome, OperationResult) and not balance_outcome.success:
            report.errors.append(f"Balance refresh failed: {balance_outcome.error}")
        else:
            report.balance_refreshed = True

        if isinstance(history_outcome, BaseException):
            report.errors.append(f"History reload failed: {history_outcome}")
        else:
            report.history_notified = bool(history_outcome)

        return report

    async def _notify_history(self, result: TransferResult) -> bool:
        """Returns False when no hook is registered."""
        if self._on_history_reload is None:
            return False

        outcome: Any = self._on_history_reload(result)
        if inspect.isawaitable(outcome):
            await outcome
        return True
