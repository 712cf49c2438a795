"""Tests for the HTTP transport."""

import json

import httpx

from swish_client.services import TOKEN_KEY, InMemorySessionStore, ServiceTransport

USER_BASE_URL = "http://users.test"


def transport_with(handler, store=None):
    store = store if store is not None else InMemorySessionStore()
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ServiceTransport(USER_BASE_URL, store, client=client, service_name="user_service")


class TestHeaders:
    """Authorization and content type."""

    def test_bearer_token_attached_when_stored(self, run):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        transport = transport_with(handler, InMemorySessionStore({TOKEN_KEY: "t1"}))
        run(transport.request("/users/u1/balance"))

        assert seen[0].headers["Authorization"] == "Bearer t1"
        assert seen[0].headers["Content-Type"] == "application/json"

    def test_no_authorization_without_token(self, run):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        run(transport_with(handler).request("/users/login", method="POST", body={}))
        assert "Authorization" not in seen[0].headers

    def test_token_read_per_request(self, run, store, backend):
        """A logout takes effect on the very next request."""
        backend.add("GET", "/ping", json_body={"ok": True})
        transport = ServiceTransport(
            USER_BASE_URL,
            store,
            client=httpx.AsyncClient(transport=httpx.MockTransport(backend.handle)),
        )

        async def scenario():
            store.write_many({TOKEN_KEY: "t1"})
            await transport.request("/ping")
            store.remove_many([TOKEN_KEY])
            await transport.request("/ping")

        run(scenario())
        first, second = backend.calls("GET", "/ping")
        assert first.headers["Authorization"] == "Bearer t1"
        assert "Authorization" not in second.headers


class TestOutcomes:
    """Every outcome becomes an ApiResponse."""

    def test_success_returns_data(self, run):
        transport = transport_with(lambda r: httpx.Response(200, json={"balance": 10}))
        response = run(transport.request("/users/u1/balance"))
        assert response.ok
        assert response.data == {"balance": 10}
        assert response.status_code == 200

    def test_request_body_and_query(self, run):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={})

        transport = transport_with(handler)
        run(transport.request("/x", method="POST", body={"a": 1}, params={"limit": 5}))

        assert seen[0].url.params["limit"] == "5"
        assert json.loads(seen[0].content) == {"a": 1}

    def test_error_field_used_as_message(self, run):
        transport = transport_with(lambda r: httpx.Response(401, json={"error": "Invalid credentials"}))
        response = run(transport.request("/users/login", method="POST"))
        assert not response.ok
        assert response.error == "Invalid credentials"
        assert response.status_code == 401

    def test_message_field_used_when_no_error(self, run):
        transport = transport_with(lambda r: httpx.Response(400, json={"message": "Bad input"}))
        assert run(transport.request("/x")).error == "Bad input"

    def test_generic_message_when_body_has_none(self, run):
        transport = transport_with(lambda r: httpx.Response(500, text="<html>oops</html>"))
        response = run(transport.request("/x"))
        assert response.error == "HTTP 500"
        assert response.status_code == 500

    def test_network_failure_is_status_zero(self, run):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        response = run(transport_with(handler).request("/x"))
        assert response.status_code == 0
        assert response.is_network_error
        assert response.error == "connection refused"

    def test_invalid_json_on_success(self, run):
        transport = transport_with(lambda r: httpx.Response(200, text="not json"))
        response = run(transport.request("/x"))
        assert not response.ok
        assert response.error == "Invalid JSON in response"
        assert response.status_code == 200

    def test_empty_success_body(self, run):
        transport = transport_with(lambda r: httpx.Response(204))
        response = run(transport.request("/x", method="PUT"))
        assert response.ok
        assert response.data is None

    def test_unexpected_exception_is_status_zero(self, run):
        def handler(request):
            raise RuntimeError("boom")

        response = run(transport_with(handler).request("/x"))
        assert response.status_code == 0
        assert response.error == "Unexpected error: boom"


class TestLifecycle:

    def test_base_url_trailing_slash_stripped(self):
        transport = ServiceTransport("http://users.test/", InMemorySessionStore())
        assert transport.base_url == "http://users.test"

    def test_aclose_leaves_injected_client_open(self, run):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = ServiceTransport(USER_BASE_URL, InMemorySessionStore(), client=client)
        run(transport.aclose())
        assert client.is_closed is False

    def test_aclose_closes_owned_client(self, run):
        transport = ServiceTransport(USER_BASE_URL, InMemorySessionStore())
        run(transport.aclose())
        assert transport._client.is_closed is True


class TestAudit:

    def test_unreachable_service_recorded(self, run, audit):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = ServiceTransport(
            USER_BASE_URL,
            InMemorySessionStore(),
            client=client,
            service_name="user_service",
            audit_logger=audit,
        )
        run(transport.request("/x"))

        assert audit.types() == ["external_service_error"]
        assert audit.events[0].details == {"service": "user_service"}

    def test_http_errors_not_recorded(self, run, audit):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        transport = ServiceTransport(USER_BASE_URL, InMemorySessionStore(), client=client, audit_logger=audit)
        run(transport.request("/x"))
        assert audit.events == []
