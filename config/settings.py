import os
import json
import copy
from dataclasses import dataclass, fields
from typing import Dict, List, Optional
from dotenv import load_dotenv
from config.constants import (
    DEFAULT_NETWORK,
    DEFAULT_TOKENS,
    SLIPPAGE_NUMERATOR,
    MAX_SWAP_ATTEMPTS,
    GAS_LIMIT_MIN,
    GAS_LIMIT_MAX,
    FEE_PREMIUM_PERCENT,
    SWAP_DEADLINE_SECONDS,
    RECEIPT_TIMEOUT,
    APPROVE_GAS_LIMIT,
    WRAP_GAS_LIMIT,
)
from utils.logger import setup_logger

load_dotenv()


@dataclass
class SwapSettings:
    """Параметры исполнения свапов (секция swap в config.json)"""
    slippage_percent: int = 100 - SLIPPAGE_NUMERATOR
    max_attempts: int = MAX_SWAP_ATTEMPTS
    gas_limit_min: int = GAS_LIMIT_MIN
    gas_limit_max: int = GAS_LIMIT_MAX
    fee_premium_percent: int = FEE_PREMIUM_PERCENT
    deadline_seconds: int = SWAP_DEADLINE_SECONDS
    receipt_timeout: int = RECEIPT_TIMEOUT
    approve_target_token: bool = True
    probe_custom_tokens: bool = True
    approve_gas_limit: int = APPROVE_GAS_LIMIT
    wrap_gas_limit: int = WRAP_GAS_LIMIT

    @classmethod
    def from_dict(cls, data: dict) -> 'SwapSettings':
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in (data or {}).items() if key in known})

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _substitute_env(value):
    """Подстановка ${ENV_VAR} из окружения"""
    if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
        return os.getenv(value[2:-1], value)
    return value


class Config:
    def __init__(self, config_path: str = "config/config.json"):
        self.logger = setup_logger("Config")
        self.config_path = config_path
        self.wallets = []
        self.network = {}
        self.tokens_config = {}
        self.config_data = {}

        config_dir = os.path.dirname(config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        self.load_config()

    def load_config(self):
        """Загрузка конфигурации из JSON файла"""
        if not os.path.exists(self.config_path):
            self.logger.warning(f"⚠️ Config file not found: {self.config_path}")
            self.create_default_config()
            return

        try:
            with open(self.config_path, 'r') as f:
                self.config_data = json.load(f)
        except json.JSONDecodeError as e:
            self.logger.error(f"❌ JSON decode error in config: {e}")
            self.logger.info("🔄 Creating backup and generating new config...")
            self._backup_and_create_config()
            return

        if not isinstance(self.config_data, dict):
            self.logger.error("❌ Config root must be a JSON object")
            self._backup_and_create_config()
            return

        self._apply_config_data()
        self.logger.info(
            f"✅ Configuration loaded: {len(self.wallets)} wallets, network {self.network.get('name')}"
        )

    def _apply_config_data(self):
        self.wallets = self._process_wallets_config(self.config_data.get('wallets', []))
        self.network = self._process_network_config(self.config_data.get('network', {}))
        self.tokens_config = self.config_data.get('tokens') or copy.deepcopy(DEFAULT_TOKENS)

    def _backup_and_create_config(self):
        """Создание бэкапа поврежденного конфига и генерация нового"""
        if os.path.exists(self.config_path):
            backup_path = self.config_path + '.backup'
            os.replace(self.config_path, backup_path)
            self.logger.info(f"💾 Backup created: {backup_path}")

        self.create_default_config()

    def _process_wallets_config(self, wallets_config: List) -> List:
        """Обработка конфигурации кошельков"""
        if not isinstance(wallets_config, list):
            return []

        processed_wallets = []

        for index, wallet in enumerate(wallets_config, 1):
            if not isinstance(wallet, dict):
                continue

            processed_wallet = wallet.copy()
            processed_wallet['name'] = str(wallet.get('name') or wallet.get('id') or index)
            processed_wallet['private_key'] = wallet.get('private_key') or wallet.get('privateKey')

            proxy_config = processed_wallet.get('proxy')
            if isinstance(proxy_config, dict):
                processed_wallet['proxy'] = {key: _substitute_env(value) for key, value in proxy_config.items()}
            else:
                processed_wallet['proxy'] = None

            processed_wallets.append(processed_wallet)

        return processed_wallets

    def _process_network_config(self, network_config: Dict) -> Dict:
        """Сеть из конфига поверх дефолтной, с подстановкой переменных окружения"""
        network = copy.deepcopy(DEFAULT_NETWORK)
        if isinstance(network_config, dict):
            contracts = network_config.get('contracts') or {}
            network.update({key: value for key, value in network_config.items() if key != 'contracts'})
            network['contracts'].update(contracts)

        network['rpc_url'] = _substitute_env(network.get('rpc_url', ''))
        return network

    def validate_config(self) -> bool:
        """Валидация конфигурации при загрузке"""
        issues = []

        if not self.network.get('rpc_url'):
            issues.append("Network missing RPC URL")
        if not self.network.get('chain_id'):
            issues.append("Network missing chain_id")
        for contract in ('router', 'wrapped_native'):
            if not self.get_contract_address(contract):
                issues.append(f"Network missing {contract} contract address")

        for wallet in self.wallets:
            if not wallet.get('private_key'):
                issues.append(f"Wallet {wallet.get('name')} missing private key")

        settings = self.get_swap_settings()
        if settings.gas_limit_min > settings.gas_limit_max:
            issues.append("gas_limit_min is greater than gas_limit_max")
        if settings.max_attempts < 1:
            issues.append("max_attempts must be at least 1")

        if issues:
            self.logger.warning(f"Config validation issues: {issues}")

        return len(issues) == 0

    def create_default_config(self):
        """Создание конфигурации по умолчанию"""
        self.logger.info("🔄 Creating default configuration...")

        self.config_data = {
            "network": copy.deepcopy(DEFAULT_NETWORK),
            "tokens": copy.deepcopy(DEFAULT_TOKENS),
            "wallets": [
                {
                    "name": "1",
                    "private_key": "YOUR_ENCRYPTED_PRIVATE_KEY_HERE",
                    "proxy": None
                }
            ],
            "swap": SwapSettings().to_dict()
        }

        self.save_config()

    def save_config(self):
        """Сохранение конфигурации в файл"""
        with open(self.config_path, 'w') as f:
            json.dump(self.config_data, f, indent=2)
        self.logger.info(f"💾 Configuration saved to {self.config_path}")

        self._apply_config_data()

    def add_wallet(self, name: str, private_key: str, proxy_config: dict = None):
        """Добавление нового кошелька в конфиг"""
        from utils.security import encrypt_private_key

        wallets = self.config_data.setdefault('wallets', [])
        wallets.append({
            "name": name,
            "private_key": encrypt_private_key(private_key),
            "proxy": proxy_config
        })
        self.save_config()
        self.logger.info(f"✅ Wallet {name} added successfully")

    def get_swap_settings(self) -> SwapSettings:
        return SwapSettings.from_dict(self.config_data.get('swap', {}))

    def get_contract_address(self, contract_name: str) -> Optional[str]:
        return self.network.get('contracts', {}).get(contract_name)

    def get_explorer_url(self) -> str:
        return self.network.get('explorer', '')

    def get_wallet_by_name(self, name: str) -> Optional[dict]:
        for wallet in self.wallets:
            if wallet.get('name') == str(name):
                return wallet
        return None
