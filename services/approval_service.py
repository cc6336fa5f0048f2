from typing import Optional

from web3 import Web3

from config.abi import get_erc20_abi
from config.constants import MAX_UINT256, APPROVE_GAS_LIMIT
from core.exceptions import ApprovalFailed, SwapError
from core.gas_monitor import GasPolicy
from core.tokens import Token
from core.tx_sender import TransactionSender
from utils.logger import setup_logger


class ApprovalManager:
    """Infinite approve: один раз на (кошелек, токен), дальше только чтение allowance"""

    def __init__(self, gas_policy: GasPolicy, sender: TransactionSender,
                 approve_gas_limit: int = APPROVE_GAS_LIMIT):
        self.gas_policy = gas_policy
        self.sender = sender
        self.approve_gas_limit = approve_gas_limit
        self.logger = setup_logger("ApprovalManager")

    def check_allowance(self, wallet, token: Token, spender: str) -> int:
        """Проверка allowance (всегда живой запрос, без кэша)"""
        if token.native:
            return MAX_UINT256

        token_contract = wallet.web3.eth.contract(address=token.address, abi=get_erc20_abi())
        return token_contract.functions.allowance(wallet.address, Web3.to_checksum_address(spender)).call()

    async def ensure_approval(self, wallet, token: Token, required_amount: int, spender: str) -> Optional[str]:
        """Возвращает hash approve-транзакции или None, если approve не понадобился"""
        if token.native:
            return None

        try:
            current_allowance = self.check_allowance(wallet, token, spender)
        except Exception as e:
            raise ApprovalFailed(f"Failed to read {token.symbol} allowance: {e}") from e

        if current_allowance >= required_amount:
            self.logger.info(f"✅ Allowance already sufficient for {token.symbol}")
            return None

        self.logger.info(f"⚙️ Approving - [{token.symbol}]")
        token_contract = wallet.web3.eth.contract(address=token.address, abi=get_erc20_abi())

        try:
            gas = self.gas_policy.get_fee_parameters(wallet.web3, self.approve_gas_limit)
            tx_hash, _receipt = await self.sender.send(
                wallet,
                token_contract.functions.approve(Web3.to_checksum_address(spender), MAX_UINT256),
                gas.to_tx_params(),
                f"Approve {token.symbol}"
            )
        except SwapError as e:
            raise ApprovalFailed(f"{token.symbol} approval failed: {e}") from e

        self.logger.info(f"✅ [{token.symbol}] Approved to be Used for Swap")
        return tx_hash
