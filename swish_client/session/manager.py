"""
Session Manager

Owns the single session slot of the process: the current Identity and
its token. Every other component reads the identity from here; nothing
else writes it.

State machine:

    UNAUTHENTICATED --login()--> AUTHENTICATING --ok--> AUTHENTICATED
                                        |
                                        +--failure--> (previous slot, usually UNAUTHENTICATED)
    AUTHENTICATED --logout()--> UNAUTHENTICATED

CRITICAL: The token and the identity snapshot are written and cleared
together, in one store call. Each mutation replaces the whole slot in a
single synchronous step after any awaited call has returned.
"""

import math
from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import ValidationError

from swish_client.audit import AuditLogger
from swish_client.models.identity import Identity, SessionState
from swish_client.models.results import (
    ErrorKind,
    OperationResult,
    RegistrationResult,
)
from swish_client.models.transfer import RegistrationReceipt, RegistrationRequest
from swish_client.services.storage import (
    IDENTITY_KEY,
    TOKEN_KEY,
    SessionStoreError,
    SessionStoreInterface,
)
from swish_client.services.users import UserServiceClient


logger = structlog.get_logger(__name__)


class SessionManager:
    """
    Authentication lifecycle, persisted identity and balance refresh.

    One instance per process, passed by reference to every consumer.
    """

    def __init__(
        self,
        users: UserServiceClient,
        store: SessionStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = users
        self._store = store
        self._audit = audit_logger or AuditLogger()

        self._identity: Optional[Identity] = None
        self._token: Optional[str] = None
        self._state = SessionState.UNAUTHENTICATED

        self._restored = False
        self._pending = 0

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def is_loading(self) -> bool:
        """True until restore() has run, and while a login or registration is pending."""
        return not self._restored or self._pending > 0

    # -------------------------------------------------------------------------
    # Slot mutation
    # -------------------------------------------------------------------------

    def _set_session(self, identity: Identity, token: str) -> None:
        self._store.write_many({
            TOKEN_KEY: token,
            IDENTITY_KEY: identity.to_snapshot(),
        })
        self._identity = identity
        self._token = token
        self._state = SessionState.AUTHENTICATED

    def _clear_session(self) -> None:
        self._store.remove_many([TOKEN_KEY, IDENTITY_KEY])
        self._identity = None
        self._token = None
        self._state = SessionState.UNAUTHENTICATED

    def _settle_state(self) -> None:
        """Leave AUTHENTICATING once no login is pending."""
        if self._state == SessionState.AUTHENTICATING and self._pending == 0:
            self._state = (
                SessionState.AUTHENTICATED
                if self._identity is not None
                else SessionState.UNAUTHENTICATED
            )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def restore(self) -> SessionState:
        """
        Hydrate the session from the store.

        Runs once. A snapshot that fails to parse, or a token without a
        snapshot (or the reverse), is treated as corrupt: both keys are
        cleared and the session starts unauthenticated.

        Returns:
            The resulting session state
        """
        if self._restored:
            return self._state

        try:
            token = self._store.read(TOKEN_KEY)
            snapshot = self._store.read(IDENTITY_KEY)

            if not token and not snapshot:
                return self._state

            if not token or not snapshot:
                self._discard_persisted("token and identity snapshot are not both present")
                return self._state

            try:
                identity = Identity.from_snapshot(snapshot)
            except ValidationError as e:
                self._discard_persisted(f"identity snapshot failed to parse: {e.error_count()} errors")
                return self._state

            self._identity = identity
            self._token = token
            self._state = SessionState.AUTHENTICATED
            self._audit.log_session_restored(identity.id)
            return self._state
        finally:
            self._restored = True

    def _discard_persisted(self, reason: str) -> None:
        self._clear_session()
        self._audit.log_persisted_state_discarded(reason)

    async def login(self, phone_number: str, password: str) -> OperationResult:
        """
        Authenticate and store the resulting identity and token.

        Returns:
            OperationResult; on failure `error` is the service's message
            or a generic fallback
        """
        self._state = SessionState.AUTHENTICATING
        self._pending += 1
        try:
            response = await self._users.login(phone_number, password)

            if not response.ok:
                reason = response.error or "Login failed"
                self._audit.log_login_failed(phone_number, reason, response.status_code)
                return OperationResult.from_response(response)

            try:
                identity, token = self._parse_login(response.data)
            except ValueError as e:
                logger.warning("login_response_invalid", error=str(e))
                self._audit.log_login_failed(phone_number, "Malformed login response", response.status_code)
                return OperationResult.failure(
                    error="Malformed login response",
                    error_kind=ErrorKind.TRANSPORT,
                    status_code=response.status_code,
                )

            try:
                self._set_session(identity, token)
            except SessionStoreError as e:
                self._audit.log_login_failed(phone_number, str(e))
                return OperationResult.failure(error=str(e), error_kind=ErrorKind.STORAGE)

            self._audit.log_login_succeeded(identity.id)
            return OperationResult.ok()
        finally:
            self._pending -= 1
            self._settle_state()

    @staticmethod
    def _parse_login(data: Any) -> tuple[Identity, str]:
        """
        Pull the identity and token out of a login response.

        Raises:
            ValueError: If either is missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError("login response is not an object")

        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("login response has no token")

        return Identity.model_validate(data.get("user")), token

    async def register(
        self,
        request: Union[RegistrationRequest, Mapping[str, Any]],
    ) -> RegistrationResult:
        """
        Create an account. Does not log in.

        Args:
            request: RegistrationRequest, or a mapping with its fields
                    (camelCase or snake_case)
        """
        if not isinstance(request, RegistrationRequest):
            try:
                request = RegistrationRequest.model_validate(request)
            except ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first["loc"])
                return RegistrationResult.failure(
                    error=f"Invalid {field}: {first['msg']}",
                    error_kind=ErrorKind.VALIDATION,
                )

        self._pending += 1
        try:
            response = await self._users.register(request)
        finally:
            self._pending -= 1

        if not response.ok:
            reason = response.error or "Registration failed"
            self._audit.log_registration_failed(request.phone_number, reason, response.status_code)
            return RegistrationResult.from_response(response)

        try:
            receipt = RegistrationReceipt.model_validate(response.data or {})
        except ValidationError:
            receipt = RegistrationReceipt()

        self._audit.log_registration_succeeded(request.phone_number, receipt.user_id)
        return RegistrationResult.ok(receipt=receipt)

    def logout(self) -> None:
        """
        Clear token and identity, in memory and in the store.

        The store is cleared even when nothing is held in memory, so a
        logout before restore() still removes a persisted session.
        Only a logout that ended a session is audited.
        """
        had_session = self._identity is not None or self._token is not None
        user_id = self._identity.id if self._identity else ""
        self._clear_session()
        if had_session:
            self._audit.log_logout(user_id)

    # -------------------------------------------------------------------------
    # Identity updates
    # -------------------------------------------------------------------------

    def update_identity(self, **fields: Any) -> bool:
        """
        Merge fields into the current identity and persist it.

        Returns:
            False if there is no identity (nothing is changed)

        Raises:
            pydantic.ValidationError: If the merged identity is invalid
        """
        if self._identity is None:
            logger.debug("update_identity_skipped", reason="no identity")
            return False

        updated = self._identity.merged(**fields)
        self._store.write_many({IDENTITY_KEY: updated.to_snapshot()})
        self._identity = updated
        return True

    async def refresh_balance(self) -> OperationResult:
        """
        Fetch the latest balance and apply it to the identity.

        Only called explicitly, after an operation that may have moved
        money. If the identity changes while the request is in flight,
        the fetched balance is discarded.
        """
        identity = self._identity
        if identity is None:
            return OperationResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )

        response = await self._users.get_balance(identity.id)
        if not response.ok:
            self._audit.log_balance_refresh_failed(
                identity.id, response.error or "Request failed", response.status_code,
            )
            return OperationResult.from_response(response)

        balance = response.data.get("balance") if isinstance(response.data, dict) else None
        if isinstance(balance, bool) or not isinstance(balance, (int, float, str)):
            balance = None
        try:
            value = float(balance) if balance is not None else None
        except ValueError:
            value = None

        if value is None or not math.isfinite(value):
            self._audit.log_balance_refresh_failed(identity.id, "Malformed balance response")
            return OperationResult.failure(
                error="Malformed balance response",
                error_kind=ErrorKind.TRANSPORT,
                status_code=response.status_code,
            )

        if self._identity is None or self._identity.id != identity.id:
            logger.info("balance_discarded", user_id=identity.id, reason="session changed")
            return OperationResult.failure(
                error="Session changed during balance refresh",
                error_kind=ErrorKind.SESSION_STATE,
            )

        try:
            self.update_identity(balance=value)
        except SessionStoreError as e:
            return OperationResult.failure(error=str(e), error_kind=ErrorKind.STORAGE)

        self._audit.log_balance_refreshed(identity.id, value)
        return OperationResult.ok()

    async def verify(self, verification_code: str) -> OperationResult:
        """Submit a verification code and mark the identity verified."""
        identity = self._identity
        if identity is None:
            return OperationResult.failure(
                error="Not logged in",
                error_kind=ErrorKind.SESSION_STATE,
            )

        code = (verification_code or "").strip()
        if not code:
            return OperationResult.failure(
                error="Verification code is required",
                error_kind=ErrorKind.VALIDATION,
            )

        response = await self._users.verify_user(identity.id, code)
        if not response.ok:
            return OperationResult.from_response(response)

        if self._identity is not None and self._identity.id == identity.id:
            try:
                self.update_identity(is_verified=True)
            except SessionStoreError as e:
                return OperationResult.failure(error=str(e), error_kind=ErrorKind.STORAGE)
        self._audit.log_verification_succeeded(identity.id)
        return OperationResult.ok()
