import os
import re
import sys
from decimal import Decimal, InvalidOperation
from getpass import getpass
from typing import Optional, Tuple

from utils.randomizer import Randomizer


def safe_getpass(prompt: str) -> str:
    """
    Безопасный ввод пароля/приватного ключа с обработкой для PyCharm
    """
    is_pycharm = 'PYCHARM_HOSTED' in os.environ

    if is_pycharm or not sys.stdin.isatty():
        print(f"🚨 ВНИМАНИЕ: {prompt} (данные будут видны при вводе!)")
        return input(f"{prompt}: ").strip()

    return getpass(f"{prompt}: ").strip()


def secure_input(prompt: str, is_sensitive: bool = False) -> str:
    """
    Универсальная функция для безопасного ввода
    """
    if is_sensitive:
        return safe_getpass(prompt)
    return input(prompt).strip()


def confirm(prompt: str, default: bool = False) -> bool:
    suffix = " (Y/n): " if default else " (y/N): "
    answer = secure_input(prompt + suffix).lower()
    if not answer:
        return default
    return answer in ('y', 'yes', 'д', 'да')


def parse_amount_range(value: str) -> Optional[Tuple[Decimal, Decimal]]:
    """Разбор диапазона 'min-max'; None если формат неверный

    Обе границы должны быть положительными, min <= max,
    и в диапазон должна попадать сумма с 6 знаками после запятой.
    """
    parts = value.strip().split('-')
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        return None

    try:
        min_val = Decimal(parts[0].strip())
        max_val = Decimal(parts[1].strip())
    except InvalidOperation:
        return None

    if not min_val.is_finite() or not max_val.is_finite():
        return None
    if min_val <= 0 or max_val <= 0 or min_val > max_val:
        return None
    if not Randomizer.has_amount_in_range(min_val, max_val):
        return None

    return min_val, max_val


def validate_ip_address(ip: str) -> bool:
    """Валидация IP адреса"""
    if re.match(r'^(\d{1,3}\.){3}\d{1,3}$', ip):
        return all(0 <= int(part) <= 255 for part in ip.split('.'))
    return False


def validate_port(port: str) -> bool:
    """Валидация порта"""
    try:
        return 1 <= int(port) <= 65535
    except ValueError:
        return False
