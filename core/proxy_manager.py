import asyncio
import aiohttp
import requests
from web3 import Web3, HTTPProvider
from urllib3.util.retry import Retry
from requests.adapters import HTTPAdapter

PROXY_CHECK_URL = 'http://httpbin.org/ip'


class ProxyManager:
    """HTTP-прокси для RPC-подключения отдельного кошелька"""

    def __init__(self, proxy_config: dict = None):
        self.proxy_config = proxy_config
        self.logger = None

    def set_logger(self, logger):
        self.logger = logger

    def create_web3_instance(self, rpc_url: str, request_timeout: int = 30) -> Web3:
        """Web3 через прокси с retry-стратегией (или напрямую, если прокси невалиден)"""
        if not self._validate_proxy_config():
            return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': request_timeout}))

        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS", "POST"],
            backoff_factor=1
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        proxy_url = self.build_proxy_url()
        session.proxies = {
            'http': proxy_url,
            'https': proxy_url
        }

        provider = HTTPProvider(rpc_url, session=session, request_kwargs={'timeout': request_timeout})
        return Web3(provider)

    def build_proxy_url(self) -> str:
        if not self.proxy_config:
            return ""

        ip = self.proxy_config.get('ip', '')
        port = self.proxy_config.get('port', '')
        username = self.proxy_config.get('username', '')
        password = self.proxy_config.get('password', '')

        if username and password:
            return f"http://{username}:{password}@{ip}:{port}"
        return f"http://{ip}:{port}"

    def _validate_proxy_config(self) -> bool:
        """Валидация конфигурации прокси"""
        if not self.proxy_config:
            return False

        for field in ('ip', 'port'):
            if not self.proxy_config.get(field):
                if self.logger:
                    self.logger.warning(f"⚠️ Proxy config missing required field: {field}")
                return False

        return True

    async def test_connection(self) -> bool:
        """Тестирование подключения прокси"""
        if not self.proxy_config:
            return True

        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(PROXY_CHECK_URL, proxy=self.build_proxy_url()) as response:
                    if response.status == 200:
                        if self.logger:
                            self.logger.info(f"✅ Proxy connection successful: {self.proxy_config.get('ip')}")
                        return True
                    if self.logger:
                        self.logger.warning(f"⚠️ Proxy connection failed with status: {response.status}")
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if self.logger:
                self.logger.error(f"❌ Proxy connection error: {e}")
            return False
