from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Optional, Tuple, Union

from web3 import Web3

from config.abi import get_erc20_abi
from config.constants import DEFAULT_TOKENS
from core.exceptions import InvalidTokenSpec, UnknownToken, TokenProbeFailed
from utils.logger import setup_logger


@dataclass(frozen=True)
class Token:
    """Токен: address=None означает нативный актив сети"""
    symbol: str = field(compare=False)
    address: Optional[str]
    decimals: int = field(compare=False)

    def __post_init__(self):
        # Равенство по адресу без учета регистра
        if self.address is not None:
            object.__setattr__(self, 'address', Web3.to_checksum_address(self.address))

    @property
    def native(self) -> bool:
        return self.address is None

    def to_base_units(self, amount: Union[str, Decimal]) -> int:
        """Перевод человекочитаемой суммы в base units (лишние знаки отбрасываются)"""
        scaled = Decimal(str(amount)) * (Decimal(10) ** self.decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))

    def from_base_units(self, amount: int) -> Decimal:
        return Decimal(amount) / (Decimal(10) ** self.decimals)


def build_swap_path(source: Token, target: Token, wrapped_native: str) -> Tuple[str, str]:
    """Путь из двух адресов; нативные стороны заменяются на wrapped-native"""
    if source.native and target.native:
        raise ValueError("Native-to-native swap has no router path")

    wrapped = Web3.to_checksum_address(wrapped_native)
    return (
        wrapped if source.native else source.address,
        wrapped if target.native else target.address,
    )


def parse_decimals(value) -> int:
    """Проверка decimals: только неотрицательное целое"""
    if isinstance(value, bool):
        raise InvalidTokenSpec(f"Invalid decimals: {value!r}")
    if isinstance(value, int):
        decimals = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        decimals = int(value.strip())
    else:
        raise InvalidTokenSpec(f"Invalid decimals: {value!r}")

    if decimals < 0:
        raise InvalidTokenSpec(f"Decimals must be non-negative: {decimals}")
    return decimals


class TokenRegistry:
    """Реестр токенов: встроенные + пользовательские"""

    def __init__(self, tokens: Dict[str, dict] = None):
        self.logger = setup_logger("TokenRegistry")
        self._tokens: Dict[str, Token] = {}
        self._builtin = set()

        for symbol, token_config in (tokens or DEFAULT_TOKENS).items():
            self._tokens[symbol.upper()] = Token(
                symbol=symbol,
                address=token_config.get('address'),
                decimals=parse_decimals(token_config.get('decimals', 18))
            )
            self._builtin.add(symbol.upper())

    @property
    def symbols(self) -> list:
        return [token.symbol for token in self._tokens.values()]

    def resolve(self, symbol_or_custom, web3=None) -> Token:
        """Символ известного токена или dict {symbol, address, decimals}"""
        if isinstance(symbol_or_custom, Token):
            return symbol_or_custom

        if isinstance(symbol_or_custom, dict):
            return self.register_custom(
                symbol_or_custom.get('symbol'),
                symbol_or_custom.get('address'),
                symbol_or_custom.get('decimals'),
                web3=web3
            )

        token = self._tokens.get(str(symbol_or_custom).strip().upper())
        if token is None:
            raise UnknownToken(f"Unknown token symbol: {symbol_or_custom}")
        return token

    def build_custom(self, symbol: str, address: str, decimals) -> Token:
        """Проверка введенных данных без записи в реестр"""
        if not symbol or not str(symbol).strip():
            raise InvalidTokenSpec("Token symbol is empty")
        if str(symbol).strip().upper() in self._builtin:
            raise InvalidTokenSpec(f"Symbol {str(symbol).strip()} is reserved by a built-in token")
        if not address or not Web3.is_address(address):
            raise InvalidTokenSpec(f"Invalid token address: {address!r}")

        return Token(symbol=str(symbol).strip(), address=address, decimals=parse_decimals(decimals))

    def register_custom(self, symbol: str, address: str, decimals, web3=None) -> Token:
        """Пользовательский токен; при переданном web3 в реестр попадает только после проверки decimals()"""
        token = self.build_custom(symbol, address, decimals)
        if web3 is not None:
            self.probe(web3, token)

        self._tokens[token.symbol.upper()] = token
        self.logger.info(f"✅ Custom token registered: {token.symbol} ({token.address}, {token.decimals} decimals)")
        return token

    def probe(self, web3, token: Token) -> Token:
        """Проверка, что по адресу лежит ERC20 с заявленными decimals"""
        if token.native:
            return token

        try:
            contract = web3.eth.contract(address=token.address, abi=get_erc20_abi())
            onchain_decimals = contract.functions.decimals().call()
        except Exception as e:
            raise TokenProbeFailed(f"{token.symbol} at {token.address} does not answer decimals(): {e}") from e

        if onchain_decimals != token.decimals:
            raise TokenProbeFailed(
                f"{token.symbol} decimals mismatch: given {token.decimals}, contract reports {onchain_decimals}"
            )

        self.logger.debug(f"🔍 Token {token.symbol} probe passed")
        return token
