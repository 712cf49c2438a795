"""
HTTP Transport

Generic request executor shared by the user and transaction service
clients.

This layer handles:
1. Building JSON requests against a service base URL
2. Attaching the bearer token from the session store
3. Normalizing every outcome into an ApiResponse

CRITICAL: request() never raises for expected failures.
- Non-2xx responses     -> error + HTTP status code
- Network failures      -> error + status code 0
- Unparseable JSON      -> error + HTTP status code
- Anything unexpected   -> logged, error + status code 0

Requests are never retried here.
"""

from typing import Any, Optional

import httpx
import structlog

from swish_client.audit import AuditLogger
from swish_client.models.results import ApiResponse
from swish_client.services.storage import TOKEN_KEY, SessionStoreInterface


logger = structlog.get_logger(__name__)


class ServiceTransport:
    """
    Executes authenticated JSON requests against one remote service.

    The token is read from the session store on every request, so a
    login or logout takes effect immediately without touching the
    transport. The transport itself never writes to the store.
    """

    def __init__(
        self,
        base_url: str,
        store: SessionStoreInterface,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        service_name: str = "service",
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize transport.

        Args:
            base_url: Service root, e.g. http://localhost:3003
            store: Session store holding the bearer token
            client: Pre-built httpx client (tests inject a MockTransport).
                   If None, one is created and owned by this transport.
            timeout: Per-request timeout in seconds; None waits forever
            service_name: Name used in log records
            audit_logger: If set, requests that get no HTTP response are
                         recorded as external service errors
        """
        self._base_url = base_url.rstrip("/")
        self._store = store
        self._service_name = service_name
        self._audit = audit_logger
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._store.read(TOKEN_KEY)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_message(payload: Any, status_code: int) -> str:
        """Pick the service's error text, falling back to the status line."""
        if isinstance(payload, dict):
            for key in ("error", "message"):
                value = payload.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"HTTP {status_code}"

    def _record_unreachable(self, message: str) -> None:
        if self._audit is not None:
            self._audit.log_external_service_error(self._service_name, message, 0)

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Execute one request.

        Args:
            endpoint: Path beginning with '/', e.g. /users/login
            method: HTTP method
            body: JSON-serializable request body
            params: Query string parameters

        Returns:
            ApiResponse with data on 2xx, error and status code otherwise
        """
        url = f"{self._base_url}{endpoint}"
        log = logger.bind(service=self._service_name, method=method, endpoint=endpoint)

        try:
            response = await self._client.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._build_headers(),
            )
        except httpx.TransportError as e:
            message = str(e) or "Network error"
            log.warning("request_network_error", error=message)
            self._record_unreachable(message)
            return ApiResponse(error=message, status_code=0)
        except Exception as e:
            log.error("request_unexpected_error", error=str(e), exc_info=True)
            self._record_unreachable(str(e))
            return ApiResponse(error=f"Unexpected error: {e}", status_code=0)

        status_code = response.status_code

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None
            if response.is_success:
                log.warning("response_not_json", status_code=status_code)
                return ApiResponse(
                    error="Invalid JSON in response",
                    status_code=status_code,
                )

        if not response.is_success:
            message = self._error_message(payload, status_code)
            log.info("request_failed", status_code=status_code, error=message)
            return ApiResponse(error=message, status_code=status_code)

        log.debug("request_succeeded", status_code=status_code)
        return ApiResponse(data=payload, status_code=status_code)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ServiceTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
