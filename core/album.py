"""
相册展开（imgur）

- /a/<id> 路径: 解析相册为有序图片列表，逐张下载（相册内去重策略独立）
- 其他路径: 视为同一服务上的单图，缺少扩展名时补 .png
"""
import asyncio
import posixpath
from typing import Awaitable, Callable, Dict, List, Optional, Protocol
from urllib.parse import urlparse

import aiohttp
from loguru import logger

from core.exceptions import AlbumError
from core.models import AlbumEntry, Item

ALBUM_DOMAIN = "imgur.com"
ALBUM_PATH_PREFIX = "/a/"
IMAGE_BASE_URL = "https://i.imgur.com"
DEFAULT_EXTENSION = ".png"


class AlbumSource(Protocol):
    """相册数据源接口"""

    async def get_album(self, album_id: str) -> List[AlbumEntry]:
        ...


def album_id_of(url: str) -> Optional[str]:
    """
    提取相册ID

    Returns:
        相册ID；不是相册路径时返回 None

    Raises:
        ValueError: URL 格式错误
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"invalid url: {url}")
    if parsed.path.startswith(ALBUM_PATH_PREFIX):
        album_id = parsed.path[len(ALBUM_PATH_PREFIX):].strip("/")
        return album_id or None
    return None


def direct_image_url(url: str) -> str:
    """同服务单图链接转换为图片直链"""
    path = urlparse(url).path
    if not posixpath.splitext(path)[1]:
        path += DEFAULT_EXTENSION
    return IMAGE_BASE_URL + path


def entry_url(entry: AlbumEntry) -> str:
    """相册图片直链"""
    return f"{IMAGE_BASE_URL}/{entry.hash}{entry.ext}"


EntryFetcher = Callable[[str, Item, AlbumEntry], Awaitable[Dict]]


class AlbumExpander:
    """相册展开器"""

    def __init__(self, album_source: AlbumSource, fetch_entry: EntryFetcher):
        """
        Args:
            album_source: 相册数据源
            fetch_entry: 单张图片的下载/校验/保存流程（使用相册内去重策略）
        """
        self.album_source = album_source
        self.fetch_entry = fetch_entry
        self.stats = {
            "albums_expanded": 0,
            "albums_failed": 0,
            "entries_found": 0,
        }

    async def expand(self, album_id: str, item: Item) -> List[Dict]:
        """
        展开相册并逐张处理

        单张失败（下载错误、校验失败、重复）只记录日志，不影响同相册其他图片。

        Returns:
            每张图片的处理结果
        """
        try:
            entries = await self.album_source.get_album(album_id)
        except (AlbumError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.stats["albums_failed"] += 1
            logger.error(f"fetching imgur album: {item.url} ({item.context}) => {e!r}")
            return [{"success": False, "url": item.url, "error": str(e)}]

        self.stats["albums_expanded"] += 1
        self.stats["entries_found"] += len(entries)
        logger.debug(f"album {album_id}: {len(entries)} images")

        results = []
        for entry in entries:
            results.append(await self.fetch_entry(entry_url(entry), item, entry))
        return results

    def get_stats(self) -> Dict[str, int]:
        return self.stats.copy()
