from typing import List, Optional

from web3 import Web3
from eth_account import Account

from config.abi import get_erc20_abi
from core.proxy_manager import ProxyManager
from core.tokens import Token
from utils.security import load_private_key
from utils.logger import setup_logger


class Wallet:
    def __init__(self, name: str, private_key: str, proxy_config: dict = None):
        self.name = name

        # Ключ в конфиге может быть зашифрован
        self.account = Account.from_key(load_private_key(private_key))
        self.address = self.account.address
        self.proxy_manager = ProxyManager(proxy_config) if proxy_config else None
        self.web3 = None
        self.logger = None

    def set_logger(self, logger):
        """Установка логгера для кошелька и прокси менеджера"""
        self.logger = logger
        if self.proxy_manager:
            self.proxy_manager.set_logger(logger)

    def connect_to_network(self, rpc_url: str) -> bool:
        """Подключение к сети (через прокси, если он задан)"""
        if self.proxy_manager:
            self.web3 = self.proxy_manager.create_web3_instance(rpc_url)
            if self.logger:
                self.logger.info(f"🔌 Using proxy for wallet {self.name}")
        else:
            self.web3 = Web3(Web3.HTTPProvider(rpc_url))
            if self.logger:
                self.logger.info(f"🔗 Direct connection for wallet {self.name}")

        is_connected = self.web3.is_connected()
        if is_connected and self.logger:
            self.logger.info(f"🌐 Wallet {self.name} connected to chain {self.web3.eth.chain_id}")

        return is_connected

    def get_balance(self, token: Token) -> int:
        """Баланс кошелька в base units (нативный или ERC20)"""
        if not self.web3:
            raise ConnectionError(f"Wallet {self.name} is not connected")

        if token.native:
            return self.web3.eth.get_balance(self.address)

        token_contract = self.web3.eth.contract(address=token.address, abi=get_erc20_abi())
        return token_contract.functions.balanceOf(self.address).call()


class WalletManager:
    def __init__(self, config):
        self.config = config
        self.wallets: List[Wallet] = []
        self.logger = setup_logger("WalletManager")

    def load_wallets(self) -> List[Wallet]:
        """Загрузка кошельков из конфигурации (без подключения к сети)"""
        if not self.config.wallets:
            self.logger.warning("⚠️ No wallets configured")
            return self.wallets

        for wallet_config in self.config.wallets:
            name = wallet_config['name']
            try:
                wallet = Wallet(
                    name=name,
                    private_key=wallet_config['private_key'] or '',
                    proxy_config=wallet_config.get('proxy')
                )
            except ValueError as e:
                self.logger.error(f"❌ Failed to load wallet {name}: {e}")
                continue

            wallet.set_logger(self.logger)
            self.wallets.append(wallet)

        self.logger.info(f"✅ Loaded {len(self.wallets)} wallets")
        return self.wallets

    def connect_wallets(self, wallets: List[Wallet] = None) -> List[Wallet]:
        """Подключение кошельков к RPC; возвращает успешно подключенные"""
        rpc_url = self.config.network['rpc_url']
        connected = []

        for wallet in wallets if wallets is not None else self.wallets:
            try:
                if wallet.connect_to_network(rpc_url):
                    connected.append(wallet)
                else:
                    self.logger.warning(f"⚠️ Wallet {wallet.name} failed to connect to {rpc_url}")
            except Exception as e:
                self.logger.error(f"❌ Connection error for wallet {wallet.name}: {e}")

        return connected

    def get_wallet_by_name(self, name: str) -> Optional[Wallet]:
        for wallet in self.wallets:
            if wallet.name == str(name):
                return wallet
        return None

    def get_wallet_names(self) -> List[str]:
        return [wallet.name for wallet in self.wallets]

    def select_wallets(self, selection: str) -> List[Wallet]:
        """'all' - все кошельки по порядку, иначе один кошелек по имени/id"""
        if str(selection).strip().lower() == 'all':
            return list(self.wallets)

        wallet = self.get_wallet_by_name(str(selection).strip())
        return [wallet] if wallet else []

    async def test_proxies(self) -> dict:
        """Проверка прокси всех кошельков"""
        results = {}
        for wallet in self.wallets:
            if wallet.proxy_manager:
                results[wallet.name] = await wallet.proxy_manager.test_connection()
            else:
                results[wallet.name] = True
            status = "✅" if results[wallet.name] else "❌"
            self.logger.info(f"   {status} {wallet.name} ({'proxy' if wallet.proxy_manager else 'direct'})")
        return results
