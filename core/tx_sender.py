import asyncio

from web3.exceptions import TimeExhausted

from config.constants import RECEIPT_TIMEOUT
from core.exceptions import SubmissionFailed, TransactionTimeout, TransactionReverted
from utils.logger import setup_logger


def _hex(tx_hash) -> str:
    value = tx_hash.hex() if hasattr(tx_hash, 'hex') else str(tx_hash)
    return value if value.startswith('0x') else '0x' + value


class TransactionSender:
    """Подпись, отправка и ожидание receipt для одной транзакции"""

    def __init__(self, explorer_url: str = "", receipt_timeout: int = RECEIPT_TIMEOUT):
        self.explorer_url = explorer_url
        self.receipt_timeout = receipt_timeout
        self.logger = setup_logger("TransactionSender")

    def tx_link(self, tx_hash: str) -> str:
        return f"{self.explorer_url}{tx_hash}" if self.explorer_url else tx_hash

    async def send(self, wallet, contract_call, tx_params: dict, label: str):
        """Отправка вызова контракта, возвращает (tx_hash, receipt)

        SubmissionFailed - если провайдер не принял транзакцию,
        TransactionReverted - если receipt.status != 1.
        """
        web3 = wallet.web3
        try:
            transaction = contract_call.build_transaction({
                'from': wallet.address,
                'nonce': web3.eth.get_transaction_count(wallet.address),
                'chainId': web3.eth.chain_id,
                **tx_params
            })
            signed_txn = wallet.account.sign_transaction(transaction)
            tx_hash_bytes = web3.eth.send_raw_transaction(signed_txn.raw_transaction)
        except Exception as e:
            raise SubmissionFailed(f"{label} submission failed: {e}") from e

        tx_hash = _hex(tx_hash_bytes)
        self.logger.info(f"🚀 {label} Tx Sent! {self.tx_link(tx_hash)}")

        try:
            receipt = await asyncio.to_thread(
                web3.eth.wait_for_transaction_receipt,
                tx_hash_bytes,
                timeout=self.receipt_timeout
            )
        except TimeExhausted as e:
            raise TransactionTimeout(f"{label} not confirmed in {self.receipt_timeout}s: {tx_hash}") from e
        except Exception as e:
            raise SubmissionFailed(f"{label} receipt wait failed: {e}") from e

        if receipt.status != 1:
            raise TransactionReverted(f"{label} reverted: {tx_hash}", tx_hash=tx_hash)

        self.logger.info(f"✅ {label} Confirmed in Block - {getattr(receipt, 'blockNumber', 'n/a')}")
        return tx_hash, receipt
