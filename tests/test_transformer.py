"""Tests for the ledger view transformer."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from swish_client.ledger import map_status, party_name, party_phone, to_view_entries, to_view_entry
from swish_client.models import Direction, EntryStatus


def make_raw(**overrides):
    raw = {
        "id": "tx-1",
        "amount": "150.00",
        "created_at": "2024-05-01T12:00:00Z",
        "description": "Lunch",
        "status": "completed",
        "sender_id": "u1",
        "sender": {"id": "u1", "firstName": "Anna", "lastName": "Berg", "phone": "+46701234567"},
        "receiver": {"id": "u2", "name": "Erik Lind", "phoneNumber": "+46731112233"},
    }
    raw.update(overrides)
    return raw


class TestDirection:
    """Direction is SENT exactly when the viewer is the sender."""

    def test_sender_sees_sent_with_receiver_as_counterparty(self):
        entry = to_view_entry(make_raw(), "u1")
        assert entry.direction == Direction.SENT
        assert entry.counterparty == "Erik Lind"
        assert entry.counterparty_phone == "+46731112233"

    def test_receiver_sees_received_with_sender_as_counterparty(self):
        entry = to_view_entry(make_raw(), "u2")
        assert entry.direction == Direction.RECEIVED
        assert entry.counterparty == "Anna Berg"
        assert entry.counterparty_phone == "+46701234567"

    def test_same_record_two_viewers_share_amount_and_id(self):
        raw = make_raw()
        as_sender = to_view_entry(raw, "u1")
        as_receiver = to_view_entry(raw, "u2")
        assert as_sender.id == as_receiver.id == "tx-1"
        assert as_sender.amount == as_receiver.amount == Decimal("150.00")
        assert as_sender.direction != as_receiver.direction

    def test_no_viewer_defaults_to_sent(self):
        entry = to_view_entry(make_raw(), None)
        assert entry.direction == Direction.SENT
        assert entry.counterparty == "Erik Lind"

    def test_sender_id_from_nested_sender(self):
        raw = make_raw()
        del raw["sender_id"]
        assert to_view_entry(raw, "u1").direction == Direction.SENT
        assert to_view_entry(raw, "u2").direction == Direction.RECEIVED

    def test_nested_sender_id_matches_when_top_level_differs(self):
        raw = make_raw(sender_id="legacy-7")
        entry = to_view_entry(raw, "u1")
        assert entry.direction == Direction.SENT
        assert entry.counterparty == "Erik Lind"

    def test_empty_viewer_treated_as_unknown(self):
        raw = make_raw(sender_id="", sender={"id": "", "name": "Anna Berg"})
        entry = to_view_entry(raw, "")
        assert entry.direction == Direction.SENT
        assert entry.counterparty == "Erik Lind"

    def test_numeric_ids_compare_as_strings(self):
        raw = make_raw(sender_id=7)
        assert to_view_entry(raw, "7").direction == Direction.SENT


class TestParties:
    """Name and phone fallbacks."""

    def test_party_name_prefers_explicit_name(self):
        assert party_name({"name": "Erik", "firstName": "E", "lastName": "L"}) == "Erik"

    def test_party_name_joins_first_and_last(self):
        assert party_name({"firstName": "Anna", "lastName": "Berg"}) == "Anna Berg"

    def test_party_name_trims_missing_last_name(self):
        assert party_name({"firstName": "Anna"}) == "Anna"

    def test_party_name_empty(self):
        assert party_name(None) == ""
        assert party_name({}) == ""

    def test_party_phone_accepts_both_spellings(self):
        assert party_phone({"phoneNumber": "+4670"}) == "+4670"
        assert party_phone({"phone": "+4673"}) == "+4673"
        assert party_phone(None) == ""

    def test_missing_counterparty_degrades_to_empty(self):
        entry = to_view_entry(make_raw(receiver=None), "u1")
        assert entry.counterparty == ""
        assert entry.counterparty_phone == ""
        assert entry.receiver is None


class TestStatus:
    """Status mapping onto the closed set."""

    @pytest.mark.parametrize("raw_status,expected", [
        ("completed", EntryStatus.COMPLETED),
        ("COMPLETED", EntryStatus.COMPLETED),
        ("pending", EntryStatus.PENDING),
        ("authorized", EntryStatus.PENDING),
        ("failed", EntryStatus.FAILED),
        ("cancelled", EntryStatus.FAILED),
        ("something_new", EntryStatus.PENDING),
        (None, EntryStatus.PENDING),
        (3, EntryStatus.PENDING),
    ])
    def test_map_status(self, raw_status, expected):
        assert map_status(raw_status) == expected

    def test_entry_uses_mapped_status(self):
        assert to_view_entry(make_raw(status="FAILED"), "u1").status == EntryStatus.FAILED


class TestMalformedInput:
    """The transformer never raises."""

    def test_malformed_amount_becomes_zero(self):
        assert to_view_entry(make_raw(amount="abc"), "u1").amount == Decimal("0")

    def test_missing_amount_becomes_zero(self):
        raw = make_raw()
        del raw["amount"]
        assert to_view_entry(raw, "u1").amount == Decimal("0")

    def test_non_finite_amount_becomes_zero(self):
        assert to_view_entry(make_raw(amount="NaN"), "u1").amount == Decimal("0")

    def test_negative_amount_loses_sign(self):
        assert to_view_entry(make_raw(amount=-25.5), "u1").amount == Decimal("25.5")

    def test_zulu_timestamp_parsed_as_utc(self):
        entry = to_view_entry(make_raw(), "u1")
        assert entry.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_bad_timestamp_becomes_none(self):
        assert to_view_entry(make_raw(created_at="yesterday"), "u1").timestamp is None

    def test_non_string_description_dropped(self):
        assert to_view_entry(make_raw(description=12), "u1").message is None

    def test_non_mapping_record(self):
        entry = to_view_entry("garbage", "u1")
        assert entry.id == ""
        assert entry.amount == Decimal("0")
        assert entry.status == EntryStatus.PENDING


class TestBatch:
    """Batch transformation."""

    def test_empty_and_none(self):
        assert to_view_entries([], "u1") == []
        assert to_view_entries(None, "u1") == []

    def test_order_preserved(self):
        raws = [make_raw(id="a"), make_raw(id="b"), make_raw(id="c")]
        assert [e.id for e in to_view_entries(raws, "u1")] == ["a", "b", "c"]

    def test_input_not_mutated(self):
        raw = make_raw()
        before = dict(raw)
        to_view_entry(raw, "u2")
        assert raw == before
