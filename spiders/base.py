"""
API客户端基类模块

包含 JSON API 客户端的公共基类：
- BaseApiClient: 会话管理、请求头、JSON 获取、统计
"""
import aiohttp
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from loguru import logger
from fake_useragent import UserAgent

from config import CrawlerConfig


class BaseApiClient(ABC):
    """
    API客户端基类

    所有客户端的公共基类，提供：
    - HTTP Session 管理（可共享外部会话）
    - 请求头
    - 统计信息
    - 异步上下文管理

    子类需要实现:
    - get_statistics(): 获取统计信息
    """

    def __init__(self, crawler_config: CrawlerConfig, session: Optional[aiohttp.ClientSession] = None):
        """
        初始化客户端

        Args:
            crawler_config: 爬虫配置
            session: 共享的HTTP会话（可选；不传则自行创建并负责关闭）
        """
        self.config = crawler_config
        self.session = session
        self._owns_session = session is None
        self.ua = UserAgent() if crawler_config.rotate_user_agent else None

        # 基础统计信息
        self.stats = {
            'requests_sent': 0,
            'requests_failed': 0,
        }

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    async def init(self):
        """初始化HTTP会话"""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def close(self):
        """关闭自行创建的会话"""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None
        logger.debug(f"{type(self).__name__} stats: {self.get_statistics()}")

    def get_headers(self) -> Dict[str, str]:
        """
        获取请求头

        子类可重写此方法添加特定请求头
        """
        return {
            "User-Agent": self.ua.random if self.ua else self.config.user_agent,
            "Accept": "application/json",
        }

    @abstractmethod
    def get_statistics(self) -> Dict[str, Any]:
        """
        获取统计信息

        子类必须实现此方法
        """
        pass
