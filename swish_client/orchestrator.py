"""
Main Orchestrator for Swish Client

This module ties together all the components:
1. Session (restore → login → refresh balance → logout)
2. History (current viewer's ledger entries)
3. Contacts (transfer targets)
4. Transfers (validate → submit → reconcile)

DESIGN DECISION: One WalletClient owns the one SessionManager and hands
it by reference to every consumer. Nothing else holds identity state.

Usage:

    async with create_client() as wallet:
        wallet.session.restore()
        await wallet.session.login("+46701234567", "secret")
        outcome = await wallet.send_money("+46731112233", "19.99", "Lunch")
        history = await wallet.recent_transactions()
"""

import inspect
from typing import Optional

import structlog

from swish_client.audit import AuditLogger, configure_logging
from swish_client.config import Settings, get_settings
from swish_client.contacts import ContactDirectory
from swish_client.models.results import (
    ApiResponse,
    ContactListResult,
    ErrorKind,
    HistoryResult,
    OperationResult,
    StatsResult,
    TransferOutcome,
)
from swish_client.models.transfer import TransferResult
from swish_client.services import (
    JsonFileSessionStore,
    ServiceTransport,
    SessionStoreInterface,
    TransactionServiceClient,
    UserServiceClient,
)
from swish_client.session import SessionManager
from swish_client.transfers import TransferWorkflow
from swish_client.transfers.workflow import HistoryReloadHook


logger = structlog.get_logger(__name__)


class WalletClient:
    """
    Facade over the session, history, contacts and transfer components.

    Convenience methods use the current identity as the viewer and
    return SESSION_STATE failures when nobody is logged in.
    """

    def __init__(
        self,
        session: SessionManager,
        users: UserServiceClient,
        transactions: TransactionServiceClient,
        contacts: ContactDirectory,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.session = session
        self.users = users
        self.transactions = transactions
        self.contact_directory = contacts
        self.audit_logger = audit_logger or AuditLogger()

        self._settings = (settings or get_settings()).app
        self._history_listeners: list[HistoryReloadHook] = []

        self.transfers = TransferWorkflow(
            session=session,
            transactions=transactions,
            on_history_reload=self._dispatch_history_reload,
            audit_logger=self.audit_logger,
        )

    # -------------------------------------------------------------------------
    # History reload listeners
    # -------------------------------------------------------------------------

    def add_history_listener(self, listener: HistoryReloadHook) -> None:
        """Register a callback run after every successful transfer."""
        self._history_listeners.append(listener)

    def remove_history_listener(self, listener: HistoryReloadHook) -> None:
        if listener in self._history_listeners:
            self._history_listeners.remove(listener)

    async def _dispatch_history_reload(self, result: TransferResult) -> None:
        for listener in list(self._history_listeners):
            outcome = listener(result)
            if inspect.isawaitable(outcome):
                await outcome

    # -------------------------------------------------------------------------
    # Queries for the current viewer
    # -------------------------------------------------------------------------

    def _viewer_id(self) -> Optional[str]:
        identity = self.session.identity
        return identity.id if identity else None

    async def recent_transactions(self, limit: Optional[int] = None) -> HistoryResult:
        """Recent ledger entries for the logged-in user."""
        viewer_id = self._viewer_id()
        if viewer_id is None:
            return HistoryResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )
        return await self.transactions.get_user_transactions(
            viewer_id,
            limit=limit or self._settings.history_limit,
        )

    async def transactions_with(
        self,
        other_user_id: str,
        limit: Optional[int] = None,
    ) -> HistoryResult:
        """Ledger entries between the logged-in user and another user."""
        viewer_id = self._viewer_id()
        if viewer_id is None:
            return HistoryResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )
        return await self.transactions.get_transactions_between(
            viewer_id,
            other_user_id,
            limit=limit or self._settings.between_limit,
        )

    async def stats(self, days: Optional[int] = None) -> StatsResult:
        viewer_id = self._viewer_id()
        if viewer_id is None:
            return StatsResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )
        return await self.transactions.get_user_stats(
            viewer_id,
            days=days or self._settings.stats_days,
        )

    async def contacts(self) -> ContactListResult:
        return await self.contact_directory.list(self._viewer_id() or "")

    async def add_contact(
        self,
        phone_number: str,
        nickname: Optional[str] = None,
    ) -> OperationResult:
        return await self.contact_directory.add(self._viewer_id() or "", phone_number, nickname)

    async def validate_recipient(self, phone_number: str) -> ApiResponse:
        """Ask the user service whether a phone number belongs to an account."""
        return await self.users.validate_user(phone_number=phone_number)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def send_money(
        self,
        receiver_phone: str,
        amount: str,
        description: Optional[str] = None,
    ) -> TransferOutcome:
        return await self.transfers.submit(receiver_phone, amount, description)

    async def cancel_transaction(self, transaction_id: str) -> OperationResult:
        """
        Cancel a pending transaction, then refresh the balance.

        The cancellation is reported as successful even if the refresh fails.
        """
        response = await self.transactions.cancel_transaction(transaction_id)
        if not response.ok:
            return OperationResult.from_response(response)

        refreshed = await self.session.refresh_balance()
        if not refreshed.success:
            logger.warning(
                "balance_refresh_after_cancel_failed",
                transaction_id=transaction_id,
                error=refreshed.error,
            )
        return OperationResult.ok(status_code=response.status_code)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def aclose(self) -> None:
        await self.users.transport.aclose()
        await self.transactions.transport.aclose()

    async def __aenter__(self) -> "WalletClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_client(
    settings: Optional[Settings] = None,
    store: Optional[SessionStoreInterface] = None,
    on_history_reload: Optional[HistoryReloadHook] = None,
    user_transport: Optional[ServiceTransport] = None,
    transaction_transport: Optional[ServiceTransport] = None,
) -> WalletClient:
    """
    Factory function to create all client components.

    Args:
        settings: Settings to use; the cached global settings if None
        store: Session store; a JsonFileSessionStore at the configured
              path if None
        on_history_reload: Registered as the first history listener
        user_transport: Pre-built transport for the user service
        transaction_transport: Pre-built transport for the transaction service.
                              Pre-built transports must read the same store.

    Returns:
        A WalletClient whose session has not been restored yet
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    store = store or JsonFileSessionStore(app_settings.session_file)
    audit_logger = AuditLogger()

    user_transport = user_transport or ServiceTransport(
        base_url=settings.user_service.base_url,
        store=store,
        timeout=app_settings.request_timeout_seconds,
        service_name="user_service",
        audit_logger=audit_logger,
    )
    transaction_transport = transaction_transport or ServiceTransport(
        base_url=settings.transaction_service.base_url,
        store=store,
        timeout=app_settings.request_timeout_seconds,
        service_name="transaction_service",
        audit_logger=audit_logger,
    )

    users = UserServiceClient(user_transport)
    transactions = TransactionServiceClient(transaction_transport)
    session = SessionManager(users, store, audit_logger)

    client = WalletClient(
        session=session,
        users=users,
        transactions=transactions,
        contacts=ContactDirectory(users),
        settings=settings,
        audit_logger=audit_logger,
    )

    if on_history_reload is not None:
        client.add_history_listener(on_history_reload)

    return client
