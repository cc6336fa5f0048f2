import pytest
from web3.exceptions import TimeExhausted

from conftest import TOKEN_A
from core.exceptions import SubmissionFailed, TransactionReverted, TransactionTimeout
from core.tx_sender import TransactionSender


def _approve_call(wallet):
    return wallet.web3.eth.contract(address=TOKEN_A).functions.approve(wallet.address, 1)


@pytest.mark.asyncio
async def test_send_fills_sender_fields_and_waits_for_receipt(wallet):
    sender = TransactionSender("https://explorer/tx/")

    tx_hash, receipt = await sender.send(wallet, _approve_call(wallet), {"gas": 100000}, "Approve")

    built = wallet.web3.eth.built[0]["params"]
    assert built == {"from": wallet.address, "nonce": 0, "chainId": 10143, "gas": 100000}
    assert tx_hash == "0x" + "01" * 32
    assert receipt.status == 1
    assert sender.tx_link(tx_hash) == "https://explorer/tx/" + tx_hash


@pytest.mark.asyncio
async def test_reverted_receipt_raises(wallet):
    wallet.web3.eth.receipt_status = 0

    with pytest.raises(TransactionReverted) as exc_info:
        await TransactionSender().send(wallet, _approve_call(wallet), {}, "Swap")

    assert exc_info.value.tx_hash == "0x" + "01" * 32


@pytest.mark.asyncio
async def test_receipt_timeout_raises(wallet):
    wallet.web3.eth.receipt_error = TimeExhausted("not in chain")

    with pytest.raises(TransactionTimeout):
        await TransactionSender(receipt_timeout=1).send(wallet, _approve_call(wallet), {}, "Swap")


@pytest.mark.asyncio
async def test_rejected_submission_raises(wallet, monkeypatch):
    def reject(_raw):
        raise ValueError("insufficient funds for gas")

    monkeypatch.setattr(wallet.web3.eth, "send_raw_transaction", reject)

    with pytest.raises(SubmissionFailed):
        await TransactionSender().send(wallet, _approve_call(wallet), {}, "Swap")
