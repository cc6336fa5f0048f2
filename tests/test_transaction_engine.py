import random
from decimal import Decimal
from types import SimpleNamespace

import pytest

from conftest import TOKEN_A, make_wallet
from core.exceptions import QuoteUnavailable
from core.tokens import Token
from core.transaction_engine import AmountRange, BatchController, SwapRequest

REQUEST = SwapRequest(Token("MON", None, 18), Token("A", TOKEN_A, 6), AmountRange(Decimal("1"), Decimal("2")))


class ScriptedExecutor:
    """Падает первые failures[wallet] попыток, затем успех"""

    def __init__(self, failures):
        self.failures = failures
        self.calls = []

    async def execute(self, wallet, source, target, amount):
        self.calls.append((wallet.name, amount))
        attempts = sum(1 for name, _amount in self.calls if name == wallet.name)
        if attempts <= self.failures.get(wallet.name, 0):
            raise QuoteUnavailable("no pool")
        return SimpleNamespace(tx_hash="0x" + "ab" * 32, block_number=7)


def test_amount_range_validation():
    with pytest.raises(ValueError):
        AmountRange(Decimal("0"), Decimal("1"))
    with pytest.raises(ValueError):
        AmountRange(Decimal("3"), Decimal("2"))


@pytest.mark.asyncio
@pytest.mark.parametrize("failures", [0, 1, 4])
async def test_retries_until_success(failures):
    executor = ScriptedExecutor({"1": failures})
    controller = BatchController(executor, max_attempts=5, rng=random.Random(1))

    outcome = await controller.run_wallet(make_wallet("1"), REQUEST)

    assert outcome.success
    assert outcome.attempt_count == failures + 1
    assert outcome.attempts[-1].tx_hash == "0x" + "ab" * 32
    assert all(not a.success and "QuoteUnavailable" in a.reason for a in outcome.attempts[:-1])
    # Сумма выбирается один раз и повторяется во всех попытках
    assert len({amount for _name, amount in executor.calls}) == 1
    assert Decimal("1") <= Decimal(outcome.amount) <= Decimal("2")


@pytest.mark.asyncio
async def test_always_failing_wallet_uses_exactly_max_attempts():
    executor = ScriptedExecutor({"1": 100})
    controller = BatchController(executor, max_attempts=5)

    outcome = await controller.run_wallet(make_wallet("1"), REQUEST, amount="1.5")

    assert not outcome.success
    assert outcome.attempt_count == 5
    assert outcome.balances_after == {}


@pytest.mark.asyncio
async def test_batch_continues_after_failed_wallet():
    executor = ScriptedExecutor({"1": 100, "2": 0})
    controller = BatchController(executor, max_attempts=5)

    report = await controller.run_batch(REQUEST, [make_wallet("1"), make_wallet("2")])

    assert [outcome.wallet_name for outcome in report.outcomes] == ["1", "2"]
    assert report.successful == 1
    assert report.failed == 1
    assert report.success_rate == 50.0
    # Кошельки строго по очереди
    assert [name for name, _amount in executor.calls] == ["1"] * 5 + ["2"]


@pytest.mark.asyncio
async def test_balance_read_errors_do_not_fail_swap():
    def broken_balance(_token):
        raise ConnectionError("rpc down")

    wallet = make_wallet("1")
    wallet.get_balance = broken_balance
    controller = BatchController(ScriptedExecutor({}), max_attempts=5)

    outcome = await controller.run_wallet(wallet, REQUEST)

    assert outcome.success
    assert outcome.balances_before == {"MON": None, "A": None}


@pytest.mark.asyncio
async def test_balances_are_read_in_human_units():
    wallet = make_wallet("1")
    wallet.get_balance = lambda token: 2 * 10**token.decimals
    controller = BatchController(ScriptedExecutor({}), max_attempts=5)

    outcome = await controller.run_wallet(wallet, REQUEST)

    assert outcome.balances_before == {"MON": Decimal(2), "A": Decimal(2)}
    assert outcome.balances_after == {"MON": Decimal(2), "A": Decimal(2)}


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        BatchController(ScriptedExecutor({}), max_attempts=0)


def test_amount_range_without_six_decimal_amount_is_rejected():
    with pytest.raises(ValueError):
        AmountRange(Decimal("1.0000001"), Decimal("1.0000009"))
