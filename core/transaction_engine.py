import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from config.constants import MAX_SWAP_ATTEMPTS
from core.tokens import Token
from utils.randomizer import Randomizer
from utils.logger import setup_logger


@dataclass(frozen=True)
class AmountRange:
    min_amount: Decimal
    max_amount: Decimal

    def __post_init__(self):
        if self.min_amount <= 0 or self.max_amount <= 0:
            raise ValueError("Amount range bounds must be positive")
        if self.min_amount > self.max_amount:
            raise ValueError("Amount range min must not exceed max")
        if not Randomizer.has_amount_in_range(self.min_amount, self.max_amount):
            raise ValueError("Amount range contains no amount with 6 decimals")


@dataclass(frozen=True)
class SwapRequest:
    """Полностью разрешенный запрос: результат интерактивной фазы"""
    source: Token
    target: Token
    amount_range: AmountRange


@dataclass
class AttemptResult:
    attempt: int
    success: bool
    reason: Optional[str] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None


@dataclass
class WalletSwapOutcome:
    wallet_name: str
    amount: str
    success: bool = False
    attempts: List[AttemptResult] = field(default_factory=list)
    balances_before: Dict[str, Optional[Decimal]] = field(default_factory=dict)
    balances_after: Dict[str, Optional[Decimal]] = field(default_factory=dict)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


@dataclass
class BatchReport:
    outcomes: List[WalletSwapOutcome] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)

    @property
    def successful(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.successful

    @property
    def success_rate(self) -> float:
        return (self.successful / len(self.outcomes) * 100) if self.outcomes else 0.0


class BatchController:
    """Ретраи одной попытки свапа и последовательный проход по кошелькам"""

    def __init__(self, swap_executor, max_attempts: int = MAX_SWAP_ATTEMPTS, rng=None):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.swap_executor = swap_executor
        self.max_attempts = max_attempts
        self.rng = rng
        self.logger = setup_logger("BatchController")

    async def _attempt(self, wallet, request: SwapRequest, amount: str, attempt: int) -> AttemptResult:
        """Граница попытки: любая ошибка превращается в AttemptResult"""
        try:
            result = await self.swap_executor.execute(wallet, request.source, request.target, amount)
        except Exception as e:
            return AttemptResult(attempt=attempt, success=False, reason=f"{type(e).__name__}: {e}")

        return AttemptResult(
            attempt=attempt,
            success=True,
            tx_hash=result.tx_hash,
            block_number=result.block_number
        )

    def _read_balances(self, wallet, tokens) -> Dict[str, Optional[Decimal]]:
        """Балансы только для отображения; ошибка чтения не влияет на свап"""
        balances = {}
        for token in tokens:
            try:
                balances[token.symbol] = token.from_base_units(wallet.get_balance(token))
            except Exception as e:
                self.logger.warning(f"⚠️ Failed to read {token.symbol} balance for {wallet.name}: {e}")
                balances[token.symbol] = None
        return balances

    def _log_balances(self, title: str, balances: Dict[str, Optional[Decimal]]):
        self.logger.info(title)
        for symbol, balance in balances.items():
            self.logger.info(f"   {symbol} - {balance if balance is not None else 'n/a'}")

    async def run_wallet(self, wallet, request: SwapRequest, amount: str = None) -> WalletSwapOutcome:
        """До max_attempts попыток для одного кошелька"""
        if amount is None:
            amount = Randomizer.get_random_amount(
                request.amount_range.min_amount, request.amount_range.max_amount, rng=self.rng
            )

        tokens = (request.source, request.target)
        outcome = WalletSwapOutcome(wallet_name=wallet.name, amount=amount)

        self.logger.info(f"👛 Current Wallet: {wallet.name}")
        outcome.balances_before = self._read_balances(wallet, tokens)
        self._log_balances("💰 Current Balances:", outcome.balances_before)
        self.logger.info(f"🎯 Swap {amount} {request.source.symbol} -> {request.target.symbol}")

        for attempt in range(1, self.max_attempts + 1):
            result = await self._attempt(wallet, request, amount, attempt)
            outcome.attempts.append(result)

            if result.success:
                outcome.success = True
                break

            if attempt < self.max_attempts:
                self.logger.warning(
                    f"⚠️ Swap attempt #{attempt} for wallet {wallet.name} failed: {result.reason}. Retrying..."
                )
            else:
                self.logger.error(
                    f"❌ Swap failed after {self.max_attempts} attempts for wallet {wallet.name}: {result.reason}"
                )

        if outcome.success:
            outcome.balances_after = self._read_balances(wallet, tokens)
            self._log_balances("💰 Current Balances After Swap:", outcome.balances_after)

        return outcome

    async def run_batch(self, request: SwapRequest, wallets: list) -> BatchReport:
        """Кошельки строго по очереди; неудача одного не останавливает остальные"""
        report = BatchReport()
        self.logger.info(
            f"🚀 Starting batch: {len(wallets)} wallets, {request.source.symbol} -> {request.target.symbol}, "
            f"range {request.amount_range.min_amount}-{request.amount_range.max_amount}"
        )

        for wallet in wallets:
            outcome = await self.run_wallet(wallet, request)
            report.outcomes.append(outcome)
            self.logger.info("-" * 54)

        self._print_final_stats(report)
        return report

    def _print_final_stats(self, report: BatchReport):
        elapsed_time = time.time() - report.started_at
        self.logger.info("🎯 FINAL SWAP STATISTICS")
        self.logger.info(f"⏰ Total time: {elapsed_time / 60:.2f} minutes")
        self.logger.info(f"✅ Successful: {report.successful}")
        self.logger.info(f"❌ Failed: {report.failed}")
        self.logger.info(f"📈 Success rate: {report.success_rate:.1f}%")
