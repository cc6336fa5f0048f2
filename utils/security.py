import os
import base64
import re
import secrets
from pathlib import Path
from cryptography.fernet import Fernet, InvalidToken
from dotenv import load_dotenv
from eth_account import Account

_PRIVATE_KEY_PATTERN = re.compile(r'^(0x)?[0-9a-fA-F]{64}$')


class SecurityManager:
    def __init__(self, encryption_key: str = None):
        # Используем ключ из переменных окружения
        self.encryption_key = encryption_key or os.getenv('ENCRYPTION_KEY')
        if not self.encryption_key:
            raise ValueError("ENCRYPTION_KEY is not set. Call setup_secure_environment() first.")

        # Fernet требует ровно 32 байта
        normalized = self.encryption_key.ljust(32, '0')[:32]
        self.cipher_suite = Fernet(base64.urlsafe_b64encode(normalized.encode()))

    def encrypt_private_key(self, private_key: str) -> str:
        """Шифрование приватного ключа"""
        normalized = self._normalize_private_key(private_key)
        encrypted = self.cipher_suite.encrypt(normalized.encode())
        return base64.urlsafe_b64encode(encrypted).decode()

    def decrypt_private_key(self, encrypted_key: str) -> str:
        """Дешифрование приватного ключа"""
        try:
            decrypted = self.cipher_suite.decrypt(base64.urlsafe_b64decode(encrypted_key.encode()))
        except (InvalidToken, ValueError) as e:
            raise ValueError("Decryption failed: invalid encryption key or corrupted data") from e
        return '0x' + self._normalize_private_key(decrypted.decode())

    def load_private_key(self, stored_key: str) -> str:
        """В конфиге допускается как открытый hex-ключ, так и зашифрованный"""
        if _PRIVATE_KEY_PATTERN.match(stored_key.strip()):
            return '0x' + self._normalize_private_key(stored_key)
        return self.decrypt_private_key(stored_key)

    @staticmethod
    def _normalize_private_key(private_key: str) -> str:
        """Нормализация формата приватного ключа (64 hex без 0x)"""
        private_key = private_key.strip()
        if private_key.startswith('0x'):
            private_key = private_key[2:]

        if not re.match(r'^[0-9a-fA-F]{64}$', private_key):
            raise ValueError("Private key must be 64 hexadecimal characters")
        return private_key

    def validate_private_key(self, private_key: str) -> bool:
        """Валидация приватного ключа"""
        try:
            account = Account.from_key('0x' + self._normalize_private_key(private_key))
            return bool(account.address)
        except ValueError:
            return False


_security_manager = None


def _get_security_manager() -> SecurityManager:
    """Ленивая инициализация менеджера безопасности"""
    global _security_manager
    if _security_manager is None:
        setup_secure_environment()
        _security_manager = SecurityManager()
    return _security_manager


def encrypt_private_key(private_key: str) -> str:
    return _get_security_manager().encrypt_private_key(private_key)


def load_private_key(stored_key: str) -> str:
    return _get_security_manager().load_private_key(stored_key)


def validate_private_key(private_key: str) -> bool:
    return _get_security_manager().validate_private_key(private_key)


def generate_secure_key() -> str:
    """Генерация ключа шифрования"""
    return secrets.token_hex(32)


def setup_secure_environment():
    """Загрузка .env и генерация ENCRYPTION_KEY при первом запуске"""
    load_dotenv()

    if os.getenv('ENCRYPTION_KEY'):
        return

    print("⚠️  ENCRYPTION_KEY not found in environment variables")
    print("🔑 Generating new encryption key and saving it to .env ...")

    new_key = generate_secure_key()
    os.environ['ENCRYPTION_KEY'] = new_key

    env_path = Path('.env')
    try:
        with env_path.open('a') as env_file:
            env_file.write(f"\nENCRYPTION_KEY={new_key}\n")
        print(f"✅ ENCRYPTION_KEY saved to {env_path.resolve()}")
    except OSError as exc:
        print(f"⚠️  Failed to write ENCRYPTION_KEY to .env: {exc}")

    print("🚨 WARNING: Keep the generated key safe. Losing it will make existing wallets unreadable!")
