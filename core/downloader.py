"""
图片下载器模块

GET 图片并分类结果：
- 404 / 重定向到 i.imgur.com 的 removed.png 占位图 -> NotFound
- 其他 >= 300 -> BadStatus
- 成功 -> FetchResult；启用哈希去重时边下载边计算 sha256，重复则丢弃
"""
import aiohttp
import mimetypes
import posixpath
from typing import Optional, Dict
from urllib.parse import urlparse
from loguru import logger
from fake_useragent import UserAgent

from config import CrawlerConfig
from core.deduplicator import Deduplicator
from core.exceptions import BadStatus, DuplicateContent, NotFound
from core.models import FetchResult

IMAGE_HOST = "i.imgur.com"
REMOVED_PLACEHOLDER = "removed.png"
CHUNK_SIZE = 64 * 1024


def resolve_extension(url: str, content_type: Optional[str]) -> str:
    """
    根据URL和Content-Type确定文件扩展名

    URL 自带扩展名且与 Content-Type 一致时保留，否则使用 Content-Type 的首选扩展名。
    """
    ext = posixpath.splitext(urlparse(url).path)[1]
    if not content_type:
        return ext
    mime = content_type.split(";")[0].strip().lower()
    candidates = mimetypes.guess_all_extensions(mime)
    if not candidates:
        return ext
    if ext and ext.lower() in candidates:
        return ext
    return mimetypes.guess_extension(mime) or candidates[0]


class ImageDownloader:
    """图片下载器"""

    def __init__(
        self,
        deduplicator: Deduplicator,
        crawler_config: Optional[CrawlerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.deduplicator = deduplicator
        self.crawler_config = crawler_config or CrawlerConfig()
        self.session = session
        self._owns_session = session is None
        self.ua = UserAgent() if self.crawler_config.rotate_user_agent else None
        self.download_stats = {
            "total": 0,
            "success": 0,
            "not_found": 0,
            "bad_status": 0,
            "duplicates": 0,
        }

    async def __aenter__(self):
        """异步上下文管理器入口"""
        await self.init_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    async def init_session(self):
        """初始化HTTP会话（未传入共享会话时）"""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.crawler_config.request_timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        logger.info("Image downloader initialized")

    async def close(self):
        """关闭会话"""
        if self.session and self._owns_session:
            await self.session.close()
        logger.info(f"Download stats: {self.download_stats}")

    def get_headers(self) -> Dict[str, str]:
        """获取请求头"""
        user_agent = self.ua.random if self.ua else self.crawler_config.user_agent
        return {
            "User-Agent": user_agent,
            "Accept": "image/webp,image/apng,image/*,*/*;q=0.8",
        }

    async def fetch(self, url: str, check_hash: bool = False) -> FetchResult:
        """
        下载单张图片

        Args:
            url: 图片URL
            check_hash: 是否对内容做哈希去重（由调用点的去重策略决定）

        Returns:
            FetchResult

        Raises:
            NotFound / BadStatus / DuplicateContent: 跳过
            aiohttp.ClientError / asyncio.TimeoutError: 网络错误
        """
        self.download_stats["total"] += 1
        logger.debug(f"Downloading image: {url}")

        async with self.session.get(url, headers=self.get_headers()) as response:
            final_url = response.url
            if response.status == 404 or (
                final_url.host == IMAGE_HOST and final_url.path.endswith(REMOVED_PLACEHOLDER)
            ):
                self.download_stats["not_found"] += 1
                raise NotFound("not found")
            if response.status >= 300:
                self.download_stats["bad_status"] += 1
                raise BadStatus(response.status)

            hasher = self.deduplicator.new_hasher() if check_hash else None
            chunks = []
            async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                if hasher is not None:
                    hasher.update(chunk)
                chunks.append(chunk)
            data = b"".join(chunks)
            content_type = response.headers.get("Content-Type", "")

        digest = hasher.digest() if hasher is not None else None
        if digest is not None and self.deduplicator.check_hash(digest):
            self.download_stats["duplicates"] += 1
            raise DuplicateContent("hash exists already")

        self.download_stats["success"] += 1
        return FetchResult(
            url=url,
            final_url=str(final_url),
            data=data,
            content_type=content_type,
            digest=digest,
        )

    def get_stats(self) -> Dict[str, int]:
        """获取下载统计"""
        return self.download_stats.copy()
