import random
from dataclasses import dataclass
from typing import Optional

from web3 import Web3

from config.constants import GAS_LIMIT_MIN, GAS_LIMIT_MAX, FEE_PREMIUM_PERCENT
from core.exceptions import FeeDataUnavailable
from utils.logger import setup_logger
from utils.randomizer import Randomizer


@dataclass(frozen=True)
class FeeSnapshot:
    last_base_fee_per_gas: Optional[int]
    max_priority_fee_per_gas: Optional[int]


@dataclass(frozen=True)
class GasParameters:
    gas_limit: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int

    def to_tx_params(self) -> dict:
        return {
            'gas': self.gas_limit,
            'maxFeePerGas': self.max_fee_per_gas,
            'maxPriorityFeePerGas': self.max_priority_fee_per_gas
        }


class GasPolicy:
    """Рандомный gas limit + премия к base/priority fee сети"""

    def __init__(self, gas_limit_min: int = GAS_LIMIT_MIN, gas_limit_max: int = GAS_LIMIT_MAX,
                 fee_premium_percent: int = FEE_PREMIUM_PERCENT, rng: random.Random = None):
        if gas_limit_min > gas_limit_max:
            raise ValueError("gas_limit_min must not exceed gas_limit_max")

        self.gas_limit_min = gas_limit_min
        self.gas_limit_max = gas_limit_max
        self.fee_premium_percent = fee_premium_percent
        self.rng = rng or random.Random()
        self.logger = setup_logger("GasPolicy")

    def fetch_fee_snapshot(self, web3) -> FeeSnapshot:
        """Снимок комиссий из последнего блока"""
        try:
            block = web3.eth.get_block('latest')
            base_fee = block.get('baseFeePerGas')
            priority_fee = web3.eth.max_priority_fee
        except Exception as e:
            raise FeeDataUnavailable(f"Failed to fetch fee data: {e}") from e

        return FeeSnapshot(last_base_fee_per_gas=base_fee, max_priority_fee_per_gas=priority_fee)

    def compute_gas_parameters(self, fee_snapshot: FeeSnapshot) -> GasParameters:
        """Считается заново для каждой отправки, включая ретраи"""
        if fee_snapshot is None:
            raise FeeDataUnavailable("Fee snapshot is missing")
        if fee_snapshot.last_base_fee_per_gas is None:
            raise FeeDataUnavailable("Fee snapshot has no base fee")
        if fee_snapshot.max_priority_fee_per_gas is None:
            raise FeeDataUnavailable("Fee snapshot has no priority fee")

        params = GasParameters(
            gas_limit=Randomizer.get_random_interval(self.gas_limit_min, self.gas_limit_max, rng=self.rng),
            max_fee_per_gas=fee_snapshot.last_base_fee_per_gas * self.fee_premium_percent // 100,
            max_priority_fee_per_gas=fee_snapshot.max_priority_fee_per_gas * self.fee_premium_percent // 100
        )

        self.logger.info(
            f"⛽ Gas: limit {params.gas_limit}, "
            f"maxFee {Web3.from_wei(params.max_fee_per_gas, 'gwei'):.2f} Gwei, "
            f"priority {Web3.from_wei(params.max_priority_fee_per_gas, 'gwei'):.2f} Gwei"
        )
        return params

    def get_gas_parameters(self, web3) -> GasParameters:
        return self.compute_gas_parameters(self.fetch_fee_snapshot(web3))

    def get_fee_parameters(self, web3, gas_limit: int) -> GasParameters:
        """Премия к fee как у свапа, но с фиксированным gas limit (approve, wrap)"""
        params = self.compute_gas_parameters(self.fetch_fee_snapshot(web3))
        return GasParameters(
            gas_limit=gas_limit,
            max_fee_per_gas=params.max_fee_per_gas,
            max_priority_fee_per_gas=params.max_priority_fee_per_gas
        )
