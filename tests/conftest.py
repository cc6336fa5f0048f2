from types import SimpleNamespace

import pytest
from web3 import Web3

ROUTER = "0x" + "a1" * 20
WRAPPED_NATIVE = "0x" + "b2" * 20
TOKEN_A = "0x" + "c3" * 20
TOKEN_B = "0x" + "d4" * 20
WALLET_ADDRESS = "0x" + "e5" * 20


class FakeCall:
    def __init__(self, eth, address, name, args):
        self.eth = eth
        self.address = address
        self.name = name
        self.args = args

    def call(self):
        self.eth.calls.append((self.address, self.name, self.args))
        response = self.eth.responses.get((self.address, self.name))
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*self.args)
        return response

    def build_transaction(self, params):
        self.eth.built.append({
            'to': self.address,
            'fn': self.name,
            'args': self.args,
            'params': dict(params)
        })
        return dict(params, to=self.address, data=self.name)


class FakeFunctions:
    def __init__(self, eth, address):
        self._eth = eth
        self._address = address

    def __getattr__(self, name):
        return lambda *args: FakeCall(self._eth, self._address, name, args)


class FakeEth:
    def __init__(self, chain_id: int = 10143):
        self.chain_id = chain_id
        self.base_fee = Web3.to_wei(50, "gwei")
        self.max_priority_fee = Web3.to_wei(2, "gwei")
        self.native_balance = Web3.to_wei(10, "ether")
        self.receipt_status = 1
        self.receipt_error = None
        self.responses = {}
        self.calls = []
        self.built = []
        self.sent = []
        self._nonce = 0

    def get_block(self, *_args, **_kwargs):
        return {"baseFeePerGas": self.base_fee, "number": 99}

    def get_transaction_count(self, *_args, **_kwargs):
        return self._nonce

    def get_balance(self, *_args, **_kwargs):
        return self.native_balance

    def send_raw_transaction(self, raw):
        self.sent.append(raw)
        self._nonce += 1
        return bytes([len(self.sent)]) * 32

    def wait_for_transaction_receipt(self, tx_hash, timeout=None):
        if self.receipt_error:
            raise self.receipt_error
        return SimpleNamespace(status=self.receipt_status, blockNumber=100 + len(self.sent))

    def contract(self, address, abi=None):
        checksum = Web3.to_checksum_address(address)
        return SimpleNamespace(address=checksum, abi=abi, functions=FakeFunctions(self, checksum))

    def respond(self, address, fn_name, response):
        self.responses[(Web3.to_checksum_address(address), fn_name)] = response


class FakeWeb3:
    def __init__(self, chain_id: int = 10143):
        self.eth = FakeEth(chain_id)

    def is_connected(self):
        return True


def make_wallet(name: str = "1", web3: FakeWeb3 = None):
    web3 = web3 or FakeWeb3()
    signed = []

    def sign_transaction(transaction):
        signed.append(transaction)
        return SimpleNamespace(raw_transaction=b"signed-" + str(len(signed)).encode())

    return SimpleNamespace(
        name=name,
        address=Web3.to_checksum_address(WALLET_ADDRESS),
        web3=web3,
        account=SimpleNamespace(sign_transaction=sign_transaction),
        signed=signed
    )


@pytest.fixture
def fake_web3():
    return FakeWeb3()


@pytest.fixture
def wallet(fake_web3):
    return make_wallet(web3=fake_web3)
