from types import SimpleNamespace

import pytest
from web3 import Web3

from conftest import FakeWeb3, TOKEN_A
from core.tokens import Token
from core.wallet_manager import Wallet, WalletManager

PRIVATE_KEY = "0x" + "4c" * 32


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    monkeypatch.setenv("ENCRYPTION_KEY", "test-encryption-key")


def _config(wallets):
    return SimpleNamespace(wallets=wallets, network={"rpc_url": "http://localhost:8545"})


def test_load_wallets_skips_invalid_keys():
    manager = WalletManager(_config([
        {"name": "1", "private_key": PRIVATE_KEY, "proxy": None},
        {"name": "2", "private_key": "not-a-key", "proxy": None},
        {"name": "3", "private_key": PRIVATE_KEY[2:], "proxy": {"ip": "1.2.3.4", "port": "80"}},
    ]))

    wallets = manager.load_wallets()

    assert [wallet.name for wallet in wallets] == ["1", "3"]
    assert wallets[1].proxy_manager.build_proxy_url() == "http://1.2.3.4:80"


def test_select_wallets():
    manager = WalletManager(_config([
        {"name": "1", "private_key": PRIVATE_KEY, "proxy": None},
        {"name": "2", "private_key": PRIVATE_KEY, "proxy": None},
    ]))
    manager.load_wallets()

    assert [wallet.name for wallet in manager.select_wallets("ALL")] == ["1", "2"]
    assert [wallet.name for wallet in manager.select_wallets(" 2 ")] == ["2"]
    assert manager.select_wallets("9") == []


def test_get_balance_native_and_erc20():
    wallet = Wallet("1", PRIVATE_KEY)
    wallet.web3 = FakeWeb3()
    wallet.web3.eth.respond(TOKEN_A, "balanceOf", 1234)

    assert wallet.get_balance(Token("MON", None, 18)) == Web3.to_wei(10, "ether")
    assert wallet.get_balance(Token("A", TOKEN_A, 6)) == 1234


def test_get_balance_requires_connection():
    with pytest.raises(ConnectionError):
        Wallet("1", PRIVATE_KEY).get_balance(Token("MON", None, 18))


def test_connect_wallets_returns_only_connected(monkeypatch):
    manager = WalletManager(_config([
        {"name": "1", "private_key": PRIVATE_KEY, "proxy": None},
        {"name": "2", "private_key": PRIVATE_KEY, "proxy": None},
    ]))
    manager.load_wallets()

    def fake_connect(self, rpc_url):
        self.web3 = FakeWeb3()
        return self.name == "1"

    monkeypatch.setattr(Wallet, "connect_to_network", fake_connect)

    assert [wallet.name for wallet in manager.connect_wallets()] == ["1"]
