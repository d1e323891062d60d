import pytest

from equipdash.core.catalog import Collection
from equipdash.core.errors import PermissionDenied, RemediationError
from equipdash.core.resolution import Action, ConflictResolver, Role


def test_view_groups_by_collection(store):
    store.insert("inventory_boxes", {"id": "box-2", "box_number": "B-002", "macs": ["AA:BB:CC:DD:EE:FF"]})
    view = ConflictResolver(store).open("aabbccddeeff")

    assert view.mac == "AA:BB:CC:DD:EE:FF"
    assert [spec.collection for spec, _ in view.groups] == [Collection.EQUIPMENT, Collection.INVENTORY_BOX]

    (_, equipment), (_, boxes) = view.groups
    assert equipment[0].informational
    assert equipment[0].actions == []
    assert boxes[0].actions == [Action.REMOVE_MAC]


def test_admin_actions(store):
    view = ConflictResolver(store).open("00:11:22:33:44:55", Role.ADMIN)
    entry = view.groups[0][1][0]
    assert entry.actions == [Action.EDIT_RECORD, Action.DELETE_RECORD, Action.REMOVE_MAC]


def test_view_includes_recovery_reports(store):
    view = ConflictResolver(store).open("11:22:33:44:55:66")
    assert view.groups[0][0].collection is Collection.RECOVERY_REPORT


def test_remove_mac_updates_quantity(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate(Collection.DEFECT_REPORT, "def-1", "de:ad:be:ef:00:01")
    resolution = resolver.remove_mac(conflict)

    assert resolution.status == "removed"
    row = store.get("defect_reports", "def-1")
    assert row["macs"] == ["DE:AD:BE:EF:00:02"]
    assert row["quantity"] == 1


def test_remove_mac_from_single_mac_record(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate("equipment", "eq-1", "AA:BB:CC:DD:EE:FF")
    with pytest.raises(RemediationError):
        resolver.remove_mac(conflict)
    assert store.get("equipment", "eq-1")["mac_address"] == "AA:BB:CC:DD:EE:FF"


def test_remove_mac_store_failure(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate("inventory_box", "box-1", "00:11:22:33:44:55")
    store.fail_table("inventory_boxes")

    with pytest.raises(RemediationError):
        resolver.remove_mac(conflict)

    store.heal()
    assert len(store.get("inventory_boxes", "box-1")["macs"]) == 2


def test_locate_unknown_record(store):
    with pytest.raises(RemediationError):
        ConflictResolver(store).locate("inventory_box", "box-9", "00:11:22:33:44:55")


def test_edit_target(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate("equipment", "eq-1", "AA:BB:CC:DD:EE:FF")

    assert resolver.edit_target(conflict, Role.ADMIN).url == "/equipment?edit=eq-1"
    with pytest.raises(PermissionDenied):
        resolver.edit_target(conflict, Role.USER)


def test_delete_requires_admin_and_confirmation(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate("inventory_box", "box-1", "00:11:22:33:44:55")

    with pytest.raises(PermissionDenied):
        resolver.delete_record(conflict, Role.USER, confirmed=True)

    cancelled = resolver.delete_record(conflict, Role.ADMIN)
    assert cancelled.status == "cancelled"
    assert not cancelled.changed
    assert store.get("inventory_boxes", "box-1") is not None

    assert resolver.delete_record(conflict, Role.ADMIN, confirmed=True).status == "deleted"
    assert store.get("inventory_boxes", "box-1") is None


def test_delete_store_failure_leaves_record(store):
    resolver = ConflictResolver(store)
    conflict = resolver.locate("inventory_box", "box-1", "00:11:22:33:44:55")
    store.fail_table("inventory_boxes")

    with pytest.raises(RemediationError):
        resolver.delete_record(conflict, Role.ADMIN, confirmed=True)

    store.heal()
    assert store.get("inventory_boxes", "box-1") is not None


def test_remove_mac_skips_empty_entries(store):
    store.update("inventory_boxes", "box-1", {"macs": [None, "00:11:22:33:44:55", "00:11:22:33:44:56"]})
    resolver = ConflictResolver(store)

    resolver.remove_mac(resolver.locate("inventory_box", "box-1", "00:11:22:33:44:55"))
    assert store.get("inventory_boxes", "box-1")["macs"] == ["00:11:22:33:44:56"]
