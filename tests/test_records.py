import datetime

import pytest

from equipdash.core.catalog import Collection
from equipdash.core.enforcer import IssueKind
from equipdash.core.errors import RecordNotFound
from equipdash.records.service import RecordService


def test_create_box_stores_uppercase(store):
    sub = RecordService(store).create_box("B-010", "ONU", ["ab:cd:ef:01:23:45"])

    assert sub.accepted
    assert store.get("inventory_boxes", sub.record["id"])["macs"] == ["AB:CD:EF:01:23:45"]


def test_create_blocked_by_conflict(store):
    sub = RecordService(store).create_box("B-011", "ONU", ["AA:BB:CC:DD:EE:FF", "ab:cd:ef:01:23:45"])

    assert not sub.accepted
    assert [i.kind for i in sub.validation.issues] == [IssueKind.CONFLICT]
    assert len(store.list("inventory_boxes")) == 1


def test_recovered_mac_allowed_in_production(store):
    records = RecordService(store)

    assert records.create_box("B-012", "ONU", ["11:22:33:44:55:66"]).accepted
    assert not records.create_recovery("ONU", "x", "y", "Ana", ["11:22:33:44:55:66"]).accepted


def test_equipment_single_mac(store):
    records = RecordService(store)

    assert records.create_equipment("AP", "12:34:56:78:9a:bc").record["mac_address"] == "12:34:56:78:9A:BC"
    assert records.create_equipment("Spare").record["mac_address"] is None

    sub = records.create(Collection.EQUIPMENT, {"name": "AP", "mac_address": ["12:34:56:78:9A:B1", "12:34:56:78:9A:B2"]})
    assert sub.validation.of_kind(IssueKind.FORMAT)


def test_defect_quantity(store):
    records = RecordService(store)

    sub = records.create_defect("ONU", "F601", ["12:34:56:78:9A:B1", "12:34:56:78:9A:B2"])
    assert sub.record["quantity"] == 2

    sub = records.create_defect("ONU", "F601", ["12:34:56:78:9A:B3"], quantity=3)
    assert not sub.accepted
    assert sub.validation.of_kind(IssueKind.QUANTITY)


def test_update_excludes_own_record(store):
    records = RecordService(store)

    sub = records.update("defect_report", "def-1", {"macs": ["DE:AD:BE:EF:00:01"]})
    assert sub.accepted
    assert sub.record["quantity"] == 1

    sub = records.update("defect_report", "def-1", {"macs": ["00:11:22:33:44:55"]})
    assert not sub.accepted
    assert store.get("defect_reports", "def-1")["macs"] == ["DE:AD:BE:EF:00:01"]


def test_rma_is_format_only(store):
    records = RecordService(store)

    sub = records.create_rma("Router", "aa:bb:cc:dd:ee:ff | 11:22:33:44:55:67")
    assert sub.accepted
    assert sub.record["mac_address"] == "AA:BB:CC:DD:EE:FF | 11:22:33:44:55:67"

    sub = records.create_rma("Router", "aa:bb:cc:dd:ee:ff | nope")
    assert not sub.accepted
    assert sub.validation.of_kind(IssueKind.FORMAT)[0].mac == "nope"


def test_next_rma_number(store):
    records = RecordService(store)
    assert records.next_rma_number(datetime.date(2024, 6, 1)) == "RMA-2024-002"
    assert records.next_rma_number(datetime.date(2023, 1, 1)) == "RMA-2023-001"


def test_non_numeric_quantity_is_reported(store):
    sub = RecordService(store).create_defect("ONU", "F601", ["12:34:56:78:9A:B1"], quantity="two")

    assert not sub.accepted
    assert "not a whole number" in sub.validation.of_kind(IssueKind.QUANTITY)[0].message
    assert len(store.list("defect_reports")) == 1


def test_mac_field_of_wrong_type_is_reported(store):
    records = RecordService(store)

    sub = records.create(Collection.INVENTORY_BOX, {"box_number": "B-9", "macs": 5})
    assert not sub.accepted
    assert sub.validation.of_kind(IssueKind.FORMAT)

    sub = records.update("inventory_box", "box-1", {"macs": {"a": 1}})
    assert not sub.accepted
    assert len(store.get("inventory_boxes", "box-1")["macs"]) == 2


def test_emptying_defect_macs_resets_quantity(store):
    sub = RecordService(store).update("defect_report", "def-1", {"macs": []})

    assert sub.accepted
    row = store.get("defect_reports", "def-1")
    assert row["macs"] == []
    assert row["quantity"] == 0


def test_quantity_edit_checked_against_stored_macs(store):
    records = RecordService(store)

    assert not records.update("defect_report", "def-1", {"quantity": 5}).accepted
    assert records.update("defect_report", "def-1", {"quantity": 2}).accepted


def test_update_unknown_record(store):
    with pytest.raises(RecordNotFound):
        RecordService(store).update("inventory_box", "nope", {"box_number": "B-X"})
