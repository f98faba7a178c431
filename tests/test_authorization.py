# tests/test_authorization.py

import pytest

from shop_ledger.modules.ledger.authorization import DENIED_MESSAGE, ActionAuthorizationGate
from shop_ledger.modules.ledger.errors import AuthorizationError
from shop_ledger.modules.ledger.models import SaleRecord

from conftest import NOW, make_stock


class _Counter:
    def __init__(self):
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return "done"


@pytest.fixture()
def gate(qapp):
    return ActionAuthorizationGate(lambda: "1234")


@pytest.mark.parametrize("candidate, expected, ok", [
    ("1234", "1234", True),
    ("1235", "1234", False),
    ("", "1234", False),
    (None, "1234", False),
    ("1234", None, False),
    ("12345", "1234", False),
    ("0000", "0000", True),
])
def test_verify_is_plain_equality(candidate, expected, ok):
    assert ActionAuthorizationGate.verify(candidate, expected) is ok


def test_correct_pin_runs_action_once_and_returns_its_result(gate, qtbot):
    action = _Counter()
    with qtbot.assertNotEmitted(gate.denied):
        result = gate.guard("1234", action, "x", key=1)
    assert result == "done"
    assert action.calls == [(("x",), {"key": 1})]


def test_wrong_pin_never_runs_the_action(gate, qtbot):
    """
    A wrong PIN must not run the action; the denial is signalled and raised.
    """
    action = _Counter()
    with qtbot.waitSignal(gate.denied, timeout=1000) as blocker:
        with pytest.raises(AuthorizationError):
            gate.guard("9999", action)
    assert blocker.args == [DENIED_MESSAGE]
    assert action.calls == []


def test_no_lockout_after_repeated_failures(gate):
    action = _Counter()
    for _ in range(20):
        with pytest.raises(AuthorizationError):
            gate.guard("0000", action)
    assert gate.guard("1234", action) == "done"
    assert len(action.calls) == 1


def test_gate_reads_the_current_pin_on_every_check(qapp):
    pin = {"value": "1111"}
    gate = ActionAuthorizationGate(lambda: pin["value"])
    assert gate.guard("1111", lambda: True)
    pin["value"] = "2222"
    with pytest.raises(AuthorizationError):
        gate.guard("1111", lambda: True)
    assert gate.guard("2222", lambda: True)


def test_ledger_delete_needs_the_manager_pin(ledger, store, qtbot):
    ledger.record_stock_item(make_stock("Widget"))
    sale = ledger.record_sale(SaleRecord(
        item_name="Widget", category="General", quantity=1, unit_price=15.0, date=NOW,
    )).sale

    with qtbot.waitSignal(ledger.gate.denied, timeout=1000):
        with pytest.raises(AuthorizationError):
            ledger.delete_sale(sale.sale_id, "0000")
    assert len(store.sales.list()) == 1
    assert len(ledger.sales) == 1

    ledger.delete_sale(sale.sale_id, "1234")
    assert store.sales.list() == []
    assert ledger.sales == ()
