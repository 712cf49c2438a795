"""Tests for the contact directory."""

import pytest

from swish_client.contacts import initials_for, to_contact
from swish_client.models import Direction, ErrorKind


CONTACTS_PATH = "/users/u1/contacts"


class TestInitials:

    @pytest.mark.parametrize("name,expected", [
        ("anna berg", "AB"),
        ("Erik", "E"),
        ("Karl Johan Svensson", "KJ"),
        ("  lisa   ek ", "LE"),
        ("ßara Berg", "SS"),
        ("", ""),
        (None, ""),
    ])
    def test_initials_for(self, name, expected):
        assert initials_for(name) == expected


class TestMapping:
    """Raw contact records to Contact."""

    def test_nickname_preferred_over_name(self):
        contact = to_contact({"id": 2, "nickname": "Mamma", "name": "Eva Berg", "phoneNumber": "+4670"})
        assert contact.id == "2"
        assert contact.name == "Mamma"
        assert contact.initials == "M"
        assert contact.phone == "+4670"

    def test_initials_that_expand_when_uppercased(self):
        contact = to_contact({"id": "c1", "nickname": "ßara Berg", "phoneNumber": "+4670"})
        assert contact.initials == "SS"
        assert contact.name == "ßara Berg"

    def test_phone_spelling_fallback(self):
        assert to_contact({"name": "Erik", "phone": "+4673"}).phone == "+4673"

    def test_recent_transactions_seen_from_viewer(self):
        contact = to_contact({
            "id": "u2",
            "name": "Erik Lind",
            "recentTransactions": [{
                "id": "tx-1",
                "amount": 50,
                "status": "completed",
                "sender_id": "u2",
                "sender": {"id": "u2", "name": "Erik Lind"},
                "receiver": {"id": "u1", "name": "Anna Berg"},
            }],
        }, viewer_id="u1")

        assert len(contact.recent_transactions) == 1
        entry = contact.recent_transactions[0]
        assert entry.direction == Direction.RECEIVED
        assert entry.counterparty == "Erik Lind"

    def test_garbage_record(self):
        contact = to_contact(None)
        assert contact.name == ""
        assert contact.recent_transactions == []


class TestListing:
    """ContactDirectory.list"""

    def test_lists_contacts(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, json_body={"contacts": [
            {"id": "u2", "name": "Erik Lind", "phoneNumber": "+46731112233"},
            {"id": "u3", "nickname": "Boss", "phoneNumber": "+46735556677"},
        ]})

        result = run(directory.list("u1"))

        assert result.success
        assert [c.initials for c in result.contacts] == ["EL", "B"]
        assert result.status_code == 200

    def test_empty_list_is_success(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, json_body={"contacts": []})

        result = run(directory.list("u1"))

        assert result.success
        assert result.contacts == []
        assert result.error is None

    def test_missing_contacts_key_is_empty_success(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, json_body={})
        assert run(directory.list("u1")).success

    def test_fetch_failure_differs_from_empty(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, status=500, json_body={"error": "Database error"})

        result = run(directory.list("u1"))

        assert not result.success
        assert result.error == "Database error"
        assert result.contacts == []

    def test_non_list_contacts_is_malformed(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, json_body={"contacts": "nope"})
        result = run(directory.list("u1"))
        assert result.error == "Malformed contacts response"

    def test_no_user_id(self, run, directory, backend):
        result = run(directory.list(""))
        assert result.error_kind == ErrorKind.SESSION_STATE
        assert backend.requests == []

    def test_every_call_refetches(self, run, directory, backend):
        backend.add("GET", CONTACTS_PATH, json_body={"contacts": []})

        async def scenario():
            await directory.list("u1")
            await directory.list("u1")

        run(scenario())
        assert len(backend.calls("GET", CONTACTS_PATH)) == 2


class TestAdding:
    """ContactDirectory.add"""

    def test_add_contact_body(self, run, directory, backend):
        backend.add("POST", CONTACTS_PATH, status=201, json_body={"message": "Contact added"})

        result = run(directory.add("u1", " +46731112233 ", "Erik"))

        assert result.success
        body = backend.body_of(backend.calls("POST", CONTACTS_PATH)[0])
        assert body == {"phoneNumber": "+46731112233", "nickname": "Erik"}

    def test_add_without_nickname(self, run, directory, backend):
        backend.add("POST", CONTACTS_PATH, status=201, json_body={})
        run(directory.add("u1", "+46731112233"))
        body = backend.body_of(backend.calls("POST", CONTACTS_PATH)[0])
        assert "nickname" not in body

    def test_add_requires_phone(self, run, directory, backend):
        result = run(directory.add("u1", ""))
        assert result.error_kind == ErrorKind.VALIDATION
        assert backend.requests == []

    def test_add_unknown_user(self, run, directory, backend):
        backend.add("POST", CONTACTS_PATH, status=404, json_body={"error": "Contact user not found"})
        result = run(directory.add("u1", "+46700000000"))
        assert result.error == "Contact user not found"
        assert result.status_code == 404
