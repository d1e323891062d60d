from equipdash.core import messages
from equipdash.core.enforcer import UniquenessEnforcer
from equipdash.core.mac import parse_bulk
from equipdash.core.search import search_equipment


def test_describe_check(store):
    enforcer = UniquenessEnforcer(store)

    taken = enforcer.check_exists("AA:BB:CC:DD:EE:FF")
    assert messages.describe_check(taken) == (
        "MAC AA:BB:CC:DD:EE:FF is already registered in equipment: Router X (RX-200)"
    )

    recovered = enforcer.check_exists_with_context("11:22:33:44:55:66", "production")
    assert "recovered in" in messages.describe_check(recovered)


def test_describe_bulk():
    lines = messages.describe_bulk(parse_bulk("aabbccddeeff\nxyz"))
    assert lines[0] == "1 valid MAC address(es) read"
    assert lines[1].startswith("Skipped 'xyz'")


def test_translate_store_error():
    text = 'MAC aa:bb:cc:dd:ee:ff is already registered (unique violation) in table inventory_boxes'
    assert messages.translate_store_error(text) == (
        "MAC AA:BB:CC:DD:EE:FF is already registered in inventory boxes. "
        "Every MAC must be unique across the system."
    )
    assert "more than once" in messages.translate_store_error(
        "MAC 00:11:22:33:44:55 is duplicated within the same record"
    )
    assert messages.translate_store_error("connection reset") == messages.GENERIC_VALIDATION_MESSAGE


def test_search_equipment(store):
    results = search_equipment(store, "c85a")
    assert [r["name"] for r in results] == ["Switch Y"]
    assert results[0]["model"] == "N/A"
    assert results[0]["location"] == "not set"

    assert len(search_equipment(store, "")) == 0
    assert len(search_equipment(store, "a")) == 0
    assert [r["id"] for r in search_equipment(store, "EE:F")] == ["eq-1"]
