from dataclasses import dataclass
from typing import Sequence

from web3 import Web3

from config.abi import get_router_abi
from config.constants import SLIPPAGE_NUMERATOR, SLIPPAGE_DENOMINATOR
from core.exceptions import QuoteUnavailable
from utils.logger import setup_logger


@dataclass(frozen=True)
class Quote:
    amount_in: int
    amount_out: int


def minimum_output(amount_out: int, numerator: int = SLIPPAGE_NUMERATOR,
                   denominator: int = SLIPPAGE_DENOMINATOR) -> int:
    """floor(amount_out * 95 / 100) - гарантия, которая уходит в роутер"""
    if amount_out < 0:
        raise ValueError("amount_out must be non-negative")
    return amount_out * numerator // denominator


class QuoteResolver:
    """Ожидаемый выход через getAmountsOut роутера (без ретраев)"""

    def __init__(self, web3, router_address: str):
        self.web3 = web3
        self.router_address = Web3.to_checksum_address(router_address)
        self.router_contract = self.web3.eth.contract(address=self.router_address, abi=get_router_abi())
        self.logger = setup_logger("QuoteResolver")

    def quote(self, path: Sequence[str], amount_in: int) -> Quote:
        if len(path) != 2:
            raise ValueError(f"Swap path must contain exactly 2 addresses, got {len(path)}")

        try:
            amounts = self.router_contract.functions.getAmountsOut(amount_in, list(path)).call()
        except Exception as e:
            raise QuoteUnavailable(f"getAmountsOut failed for {path[0]} -> {path[1]}: {e}") from e

        if not amounts:
            raise QuoteUnavailable(f"Router returned no amounts for {path[0]} -> {path[1]}")

        quote = Quote(amount_in=amount_in, amount_out=amounts[-1])
        self.logger.debug(f"🔮 Quote: {quote.amount_in} -> {quote.amount_out}")
        return quote
