import pytest

from conftest import FakeWeb3, ROUTER, TOKEN_A, TOKEN_B
from core.exceptions import QuoteUnavailable
from services.quote_service import QuoteResolver, minimum_output


def test_minimum_output_is_floor_of_95_percent():
    assert minimum_output(20 * 10**18) == 19 * 10**18
    assert minimum_output(19) == 18
    assert minimum_output(0) == 0
    assert minimum_output(1000, 99) == 990

    with pytest.raises(ValueError):
        minimum_output(-1)


def test_quote_returns_last_amount():
    web3 = FakeWeb3()
    web3.eth.respond(ROUTER, "getAmountsOut", lambda amount, path: [amount, amount * 2])

    quote = QuoteResolver(web3, ROUTER).quote([TOKEN_A, TOKEN_B], 500)

    assert quote.amount_in == 500
    assert quote.amount_out == 1000


def test_quote_rejects_non_pair_paths():
    with pytest.raises(ValueError):
        QuoteResolver(FakeWeb3(), ROUTER).quote([TOKEN_A], 1)


def test_missing_pool_is_quote_unavailable():
    web3 = FakeWeb3()
    web3.eth.respond(ROUTER, "getAmountsOut", RuntimeError("execution reverted"))

    with pytest.raises(QuoteUnavailable):
        QuoteResolver(web3, ROUTER).quote([TOKEN_A, TOKEN_B], 1)

    web3.eth.respond(ROUTER, "getAmountsOut", [])
    with pytest.raises(QuoteUnavailable):
        QuoteResolver(web3, ROUTER).quote([TOKEN_A, TOKEN_B], 1)
