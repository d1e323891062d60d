import pytest

from equipdash.core.catalog import CallContext, Collection
from equipdash.core.enforcer import POLICY, IssueKind, UniquenessEnforcer, Verdict, verdict_for
from equipdash.core.errors import ValidationIndeterminate


def test_strict_check_case_insensitive(store):
    check = UniquenessEnforcer(store).check_exists("aa:bb:cc:dd:ee:ff")

    assert check
    assert check.conflict.record_id == "eq-1"
    assert "Router X" in check.message


def test_free_mac(store):
    check = UniquenessEnforcer(store).check_exists("12:34:56:78:9A:BC")
    assert not check
    assert check.message is None


def test_strict_check_ignores_recovery(store):
    assert not UniquenessEnforcer(store).check_exists("11:22:33:44:55:66")


def test_recovery_exception(store):
    enforcer = UniquenessEnforcer(store)
    mac = "11:22:33:44:55:66"

    production = enforcer.check_exists_with_context(mac, "production")
    assert not production
    assert [c.record_id for c in production.allowed] == ["rec-1"]

    assert enforcer.check_exists_with_context(mac, "recovery")
    assert enforcer.check_exists_with_context(mac, CallContext.OTHER)


def test_production_still_rejects_strict_collections(store):
    assert UniquenessEnforcer(store).check_exists_with_context("AA:BB:CC:DD:EE:FF", "production")


def test_policy_table():
    assert len(POLICY) == len(Collection) * len(CallContext) - len(CallContext)
    allowed = [key for key, verdict in POLICY.items() if verdict is Verdict.ALLOW]
    assert allowed == [(Collection.RECOVERY_REPORT, CallContext.PRODUCTION)]
    # pairs not listed are rejected
    assert verdict_for(Collection.RMA, CallContext.PRODUCTION) is Verdict.REJECT


def test_list_validation_aggregates(store):
    result = UniquenessEnforcer(store).validate_list(
        ["AA:BB:CC:DD:EE:FF", "AA:BB:CC:DD:EE:FF", "ZZ"]
    )

    assert not result.valid
    assert len(result.errors) == 3
    assert len(result.of_kind(IssueKind.CONFLICT)) == 1
    assert len(result.of_kind(IssueKind.DUPLICATE)) == 1
    assert len(result.of_kind(IssueKind.FORMAT)) == 1


def test_list_duplicates_ignore_case(store):
    result = UniquenessEnforcer(store).validate_list(["12:34:56:78:9a:bc", "12:34:56:78:9A:BC"])
    assert [i.kind for i in result.issues] == [IssueKind.DUPLICATE]


def test_list_with_context(store):
    enforcer = UniquenessEnforcer(store)
    assert enforcer.validate_list(["11:22:33:44:55:66"], "production").valid
    assert not enforcer.validate_list(["11:22:33:44:55:66"], "recovery").valid


def test_exclusion_during_edit(store):
    enforcer = UniquenessEnforcer(store)

    assert enforcer.check_exists("DE:AD:BE:EF:00:02")
    assert not enforcer.check_exists("DE:AD:BE:EF:00:02", exclude_id="def-1")
    assert enforcer.validate_list(["DE:AD:BE:EF:00:02"], exclude_id="def-1").valid


def test_fail_closed(store):
    store.fail_table("inventory_boxes")
    enforcer = UniquenessEnforcer(store)

    with pytest.raises(ValidationIndeterminate):
        enforcer.check_exists("12:34:56:78:9A:BC")
    with pytest.raises(ValidationIndeterminate):
        enforcer.validate_list(["12:34:56:78:9A:BC"])

    store.heal()
    assert not enforcer.check_exists("12:34:56:78:9A:BC")


def test_fail_closed_recovery_table(store):
    store.fail_table("recovery_reports")
    with pytest.raises(ValidationIndeterminate):
        UniquenessEnforcer(store).check_exists_with_context("12:34:56:78:9A:BC", "production")
