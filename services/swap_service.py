import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union
from decimal import Decimal

from web3 import Web3

from config.abi import get_router_abi, get_wrapped_native_abi
from config.constants import SWAP_DEADLINE_SECONDS, WRAP_GAS_LIMIT, SLIPPAGE_NUMERATOR
from core.gas_monitor import GasPolicy
from core.tokens import Token, build_swap_path
from core.tx_sender import TransactionSender
from services.approval_service import ApprovalManager
from services.quote_service import QuoteResolver, minimum_output
from utils.logger import setup_logger


class SwapKind(Enum):
    WRAP = "wrap"
    UNWRAP = "unwrap"
    ROUTED = "routed"


def classify_swap(source: Token, target: Token, wrapped_native: str) -> SwapKind:
    """Выбор пути исполнения: зависит только от native-флагов и адреса wrapped-native"""
    wrapped = Web3.to_checksum_address(wrapped_native)

    if source.native and target.address == wrapped:
        return SwapKind.WRAP
    if source.address == wrapped and target.native:
        return SwapKind.UNWRAP
    return SwapKind.ROUTED


@dataclass
class SwapResult:
    kind: SwapKind
    tx_hash: str
    block_number: Optional[int]
    amount_in: int
    amount_out_min: Optional[int] = None
    expected_out: Optional[int] = None
    approval_tx_hashes: List[str] = field(default_factory=list)


class SwapExecutor:
    """Одна попытка свапа: WRAP / UNWRAP / ROUTED через роутер"""

    def __init__(self, router_address: str, wrapped_native_address: str, gas_policy: GasPolicy,
                 sender: TransactionSender, approval_manager: ApprovalManager,
                 approve_target_token: bool = True, deadline_seconds: int = SWAP_DEADLINE_SECONDS,
                 wrap_gas_limit: int = WRAP_GAS_LIMIT, slippage_percent: int = 100 - SLIPPAGE_NUMERATOR):
        self.router_address = Web3.to_checksum_address(router_address)
        self.wrapped_native_address = Web3.to_checksum_address(wrapped_native_address)
        self.gas_policy = gas_policy
        self.sender = sender
        self.approval_manager = approval_manager
        self.approve_target_token = approve_target_token
        self.deadline_seconds = deadline_seconds
        self.wrap_gas_limit = wrap_gas_limit
        self.slippage_percent = slippage_percent
        self.logger = setup_logger(__name__)

    async def execute(self, wallet, source: Token, target: Token, amount: Union[str, Decimal]) -> SwapResult:
        """Поднимает SwapError (или ValueError для native/native) при любой неудаче"""
        if source.native and target.native:
            raise ValueError("Source and target are both the native asset")

        amount_in = source.to_base_units(amount)
        if amount_in <= 0:
            raise ValueError(f"Swap amount {amount} {source.symbol} is zero in base units")

        kind = classify_swap(source, target, self.wrapped_native_address)

        if kind == SwapKind.WRAP:
            return await self._wrap(wallet, amount_in)
        if kind == SwapKind.UNWRAP:
            return await self._unwrap(wallet, amount_in)
        return await self._routed_swap(wallet, source, target, amount_in)

    def _wrapped_native_contract(self, web3):
        return web3.eth.contract(address=self.wrapped_native_address, abi=get_wrapped_native_abi())

    async def _wrap(self, wallet, amount_in: int) -> SwapResult:
        """native -> wrapped через deposit()"""
        self.logger.info("🔄 Converting native to wrapped via deposit...")
        gas = self.gas_policy.get_fee_parameters(wallet.web3, self.wrap_gas_limit)

        tx_hash, receipt = await self.sender.send(
            wallet,
            self._wrapped_native_contract(wallet.web3).functions.deposit(),
            {'value': amount_in, **gas.to_tx_params()},
            "Deposit"
        )
        return SwapResult(SwapKind.WRAP, tx_hash, getattr(receipt, 'blockNumber', None), amount_in)

    async def _unwrap(self, wallet, amount_in: int) -> SwapResult:
        """wrapped -> native через withdraw(amount)"""
        self.logger.info("🔄 Converting wrapped to native via withdraw...")
        gas = self.gas_policy.get_fee_parameters(wallet.web3, self.wrap_gas_limit)

        tx_hash, receipt = await self.sender.send(
            wallet,
            self._wrapped_native_contract(wallet.web3).functions.withdraw(amount_in),
            gas.to_tx_params(),
            "Withdraw"
        )
        return SwapResult(SwapKind.UNWRAP, tx_hash, getattr(receipt, 'blockNumber', None), amount_in)

    async def _routed_swap(self, wallet, source: Token, target: Token, amount_in: int) -> SwapResult:
        web3 = wallet.web3
        path = list(build_swap_path(source, target, self.wrapped_native_address))

        quote = QuoteResolver(web3, self.router_address).quote(path, amount_in)
        amount_out_min = minimum_output(quote.amount_out, 100 - self.slippage_percent)
        self.logger.info(
            f"🔮 Expected Amount to Receive: [{target.from_base_units(quote.amount_out)} {target.symbol}]"
        )

        approvals = []
        if not source.native:
            approval = await self.approval_manager.ensure_approval(wallet, source, amount_in, self.router_address)
            if approval:
                approvals.append(approval)
        # Approve покупаемого токена отключается через approve_target_token
        if not target.native and self.approve_target_token:
            approval = await self.approval_manager.ensure_approval(
                wallet, target, quote.amount_out, self.router_address
            )
            if approval:
                approvals.append(approval)

        gas = self.gas_policy.get_gas_parameters(web3)
        deadline = int(time.time()) + self.deadline_seconds
        router = web3.eth.contract(address=self.router_address, abi=get_router_abi())
        tx_params = gas.to_tx_params()

        if source.native:
            call = router.functions.swapExactETHForTokens(amount_out_min, path, wallet.address, deadline)
            tx_params['value'] = amount_in
        elif target.native:
            call = router.functions.swapExactTokensForETH(amount_in, amount_out_min, path, wallet.address, deadline)
        else:
            call = router.functions.swapExactTokensForTokens(
                amount_in, amount_out_min, path, wallet.address, deadline
            )

        self.logger.info(f"🔄 Swapping - [{source.symbol}/{target.symbol}]")
        tx_hash, receipt = await self.sender.send(wallet, call, tx_params, "Swap")

        return SwapResult(
            kind=SwapKind.ROUTED,
            tx_hash=tx_hash,
            block_number=getattr(receipt, 'blockNumber', None),
            amount_in=amount_in,
            amount_out_min=amount_out_min,
            expected_out=quote.amount_out,
            approval_tx_hashes=approvals
        )
