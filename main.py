import asyncio
import os
import sys
from typing import List, Optional

sys.path.append(os.path.dirname(__file__))

from config.settings import Config
from core.exceptions import SwapError
from core.gas_monitor import GasPolicy
from core.tokens import Token, TokenRegistry
from core.transaction_engine import AmountRange, BatchController, SwapRequest
from core.tx_sender import TransactionSender
from core.wallet_manager import WalletManager
from services.approval_service import ApprovalManager
from services.swap_service import SwapExecutor
from utils.input_utils import (
    confirm,
    parse_amount_range,
    secure_input,
    validate_ip_address,
    validate_port,
)
from utils.logger import setup_logger
from utils.security import setup_secure_environment, validate_private_key


class SwapRunner:
    """Сборка сервисов из конфига: вся исполнительная часть без ввода-вывода"""

    def __init__(self, config: Config):
        self.config = config
        self.logger = setup_logger("SwapRunner")
        self.settings = config.get_swap_settings()
        self.token_registry = TokenRegistry(config.tokens_config)
        self.wallet_manager = WalletManager(config)
        self.swap_executor = None
        self.batch_controller = None

    def _build_services(self):
        config = self.config
        gas_policy = GasPolicy(
            gas_limit_min=self.settings.gas_limit_min,
            gas_limit_max=self.settings.gas_limit_max,
            fee_premium_percent=self.settings.fee_premium_percent
        )
        sender = TransactionSender(config.get_explorer_url(), self.settings.receipt_timeout)
        approval_manager = ApprovalManager(gas_policy, sender, self.settings.approve_gas_limit)

        self.swap_executor = SwapExecutor(
            router_address=config.get_contract_address('router'),
            wrapped_native_address=config.get_contract_address('wrapped_native'),
            gas_policy=gas_policy,
            sender=sender,
            approval_manager=approval_manager,
            approve_target_token=self.settings.approve_target_token,
            deadline_seconds=self.settings.deadline_seconds,
            wrap_gas_limit=self.settings.wrap_gas_limit,
            slippage_percent=self.settings.slippage_percent
        )
        self.batch_controller = BatchController(self.swap_executor, self.settings.max_attempts)

    def initialize(self) -> bool:
        """False, если конфиг невалиден или нет ни одного кошелька"""
        if not self.config.validate_config():
            self.logger.error("❌ Invalid configuration, fix config/config.json and retry")
            return False

        self._build_services()
        self.wallet_manager.load_wallets()
        if not self.wallet_manager.wallets:
            self.logger.error("❌ No wallets available for operation")
            return False
        return True

    async def run(self, request: SwapRequest, wallets: list):
        connected = self.wallet_manager.connect_wallets(wallets)
        if len(connected) < len(wallets):
            self.logger.warning(f"⚠️ {len(wallets) - len(connected)} wallets skipped: no RPC connection")
        return await self.batch_controller.run_batch(request, connected)


def select_wallets_interactive(wallet_manager: WalletManager) -> List:
    """Кошелек по имени/id или 'all'"""
    names = wallet_manager.get_wallet_names()
    print("\n🎒 Кошельки:")
    for name in names:
        print(f"   Wallet {name}")
    print("   all - Все кошельки")

    while True:
        choice = secure_input("Введите ID кошелька для свапа (или 'all'): ")
        selected = wallet_manager.select_wallets(choice)
        if selected:
            return selected
        print("❌ Кошелек не найден. Попробуйте еще раз.")


def select_token_interactive(runner: SwapRunner, role: str, probe_web3=None) -> Token:
    """Встроенный токен или Other (символ/адрес/decimals вручную)"""
    registry = runner.token_registry
    choices = registry.symbols + ['Other']

    while True:
        print(f"\n🪙 Выберите токен ({role}):")
        for i, symbol in enumerate(choices, 1):
            print(f"{i}. {symbol}")

        choice = secure_input(f"Выберите токен (1-{len(choices)}): ")
        if not (choice.isascii() and choice.isdigit()) or not 1 <= int(choice) <= len(choices):
            print("❌ Неверный выбор")
            continue

        symbol = choices[int(choice) - 1]
        if symbol != 'Other':
            return registry.resolve(symbol)

        try:
            return registry.register_custom(
                secure_input("Символ токена: "),
                secure_input("Адрес контракта токена: "),
                secure_input("Decimals токена: "),
                web3=probe_web3 if runner.settings.probe_custom_tokens else None
            )
        except SwapError as e:
            print(f"❌ {e}")


def select_amount_range_interactive(source: Token) -> AmountRange:
    while True:
        value = secure_input(f"Введите диапазон {source.symbol} для свапа в формате min-max (например 1-5): ")
        parsed = parse_amount_range(value)
        if parsed:
            return AmountRange(*parsed)
        print("❌ Неверный диапазон. Попробуйте еще раз.")


def _first_connected_web3(runner: SwapRunner, wallets) -> Optional[object]:
    connected = runner.wallet_manager.connect_wallets(wallets[:1])
    return connected[0].web3 if connected else None


def swap_session(runner: SwapRunner):
    """Цикл: выбор -> исполнение -> 'еще свап?' -> 'тот же кошелек?'"""
    wallets = None

    while True:
        if wallets is None:
            wallets = select_wallets_interactive(runner.wallet_manager)

        probe_web3 = _first_connected_web3(runner, wallets) if runner.settings.probe_custom_tokens else None
        source = select_token_interactive(runner, "источник", probe_web3)
        target = select_token_interactive(runner, "получаемый", probe_web3)
        if source.native and target.native:
            print("❌ Нельзя свапать нативный актив сам в себя")
            continue

        request = SwapRequest(source, target, select_amount_range_interactive(source))

        print("\n⚠️  ВНИМАНИЕ: Будут выполнены РЕАЛЬНЫЕ транзакции!")
        if confirm("Продолжить?"):
            report = asyncio.run(runner.run(request, wallets))
            print(f"\n📊 Успешно: {report.successful}/{len(report.outcomes)}")
        else:
            print("❌ Отменено пользователем")

        if not confirm("Выполнить еще один свап?"):
            break
        if not confirm("Использовать тот же кошелек?", default=True):
            wallets = None


def add_wallet_interactive(config: Config):
    print("\n🎒 Добавление нового кошелька")
    print("=" * 40)

    name = secure_input("Имя / ID кошелька: ")
    if not name or config.get_wallet_by_name(name):
        print("❌ Пустое имя или кошелек уже существует")
        return

    private_key = secure_input("Введите приватный ключ", is_sensitive=True)
    if not validate_private_key(private_key):
        print("❌ Невалидный приватный ключ")
        return

    proxy_config = None
    if confirm("Использовать прокси?"):
        ip = secure_input("IP адрес прокси: ")
        port = secure_input("Порт прокси: ")
        if not validate_ip_address(ip) or not validate_port(port):
            print("❌ Невалидный IP или порт прокси")
            return
        proxy_config = {"ip": ip, "port": port}
        username = secure_input("Логин прокси (Enter чтобы пропустить): ")
        if username:
            proxy_config["username"] = username
            proxy_config["password"] = secure_input("Пароль прокси", is_sensitive=True)

    config.add_wallet(name, private_key, proxy_config)
    print(f"✅ Кошелек {name} добавлен")


def main_menu():
    """Главное меню при запуске"""
    while True:
        print("\n🚀 Bean Swap Runner - Меню запуска")
        print("=" * 40)
        print("1. 🔄 Выполнить свапы")
        print("2. ➕ Добавить кошелек")
        print("3. 🔌 Проверить прокси кошельков")
        print("4. 🚪 Выход")

        choice = secure_input("\nВыберите действие (1-4): ")

        if choice == "1":
            runner = SwapRunner(Config())
            if not runner.initialize():
                continue
            swap_session(runner)
            if confirm("Перейти к следующему раунду свапов?"):
                continue
            break

        elif choice == "2":
            add_wallet_interactive(Config())

        elif choice == "3":
            wallet_manager = WalletManager(Config())
            wallet_manager.load_wallets()
            asyncio.run(wallet_manager.test_proxies())

        elif choice == "4":
            print("👋 До свидания!")
            break
        else:
            print("❌ Неверный выбор. Попробуйте еще раз.")


def main():
    setup_secure_environment()
    print("🌐 Bean Swap Runner - Automated DEX swaps across wallets")

    try:
        main_menu()
    except KeyboardInterrupt:
        print("\n\n🛑 Программа прервана пользователем")


if __name__ == "__main__":
    main()
