"""
消费者处理流程

条目过滤 -> 按服务分流:
- 单图: URL去重 -> 下载(哈希去重) -> 大小/图片头校验 -> 命名 -> 写入
- imgur: 相册展开（逐张同上，使用相册内去重策略）或同服务单图

所有跳过与单条错误只记录日志；命名模板错误向上抛出（致命）。
"""
import asyncio
from typing import Callable, Dict, List

import aiohttp
from loguru import logger

from config import DedupConfig, FilterConfig
from core.album import ALBUM_DOMAIN, AlbumExpander, AlbumSource, album_id_of, direct_image_url
from core.deduplicator import Deduplicator
from core.downloader import ImageDownloader, resolve_extension
from core.exceptions import DestinationExists, SkipItem
from core.filters import accept_item
from core.models import AlbumEntry, FetchResult, Item
from core.naming import Namer
from core.validator import ImageValidator
from core.writer import FileWriter


class ImagePipeline:
    """单条目处理流程（仅在消费者中运行，独占去重状态）"""

    def __init__(
        self,
        downloader: ImageDownloader,
        album_source: AlbumSource,
        deduplicator: Deduplicator,
        validator: ImageValidator,
        namer: Namer,
        writer: FileWriter,
        filters: FilterConfig,
        dedup: DedupConfig,
        quiet: bool = False,
    ):
        self.downloader = downloader
        self.deduplicator = deduplicator
        self.validator = validator
        self.namer = namer
        self.writer = writer
        self.filters = filters
        self.dedup = dedup
        self.quiet = quiet
        self.albums = AlbumExpander(album_source, self.fetch_album_entry)

        self.stats = {
            "items_seen": 0,
            "items_filtered": 0,
            "images_downloaded": 0,
            "images_skipped": 0,
            "images_failed": 0,
            "duplicates_skipped": 0,
            "unsupported": 0,
        }

    async def process(self, item: Item) -> List[Dict]:
        """
        处理一个条目

        Returns:
            每张图片的处理结果列表（过滤/不支持时为空）
        """
        self.stats["items_seen"] += 1
        if not accept_item(item, self.filters):
            self.stats["items_filtered"] += 1
            return []

        if item.post_hint == "image":
            return [await self.fetch_single(item.url, item)]
        if item.domain == ALBUM_DOMAIN:
            return await self.fetch_imgur(item)

        self.stats["unsupported"] += 1
        logger.warning(f"could not fetch {item.url}, unknown service {item.domain}")
        return []

    async def fetch_single(self, url: str, item: Item) -> Dict:
        """单图（使用单图去重策略）"""
        def render(result: FetchResult) -> str:
            return self.namer.render_single(item, resolve_extension(url, result.content_type))

        return await self._download(
            url,
            item,
            render,
            check_url=self.dedup.skip_duplicate_urls,
            check_hash=self.dedup.skip_duplicate_hashes,
        )

    async def fetch_album_entry(self, url: str, item: Item, entry: AlbumEntry) -> Dict:
        """相册中的一张图片（使用相册内去重策略）"""
        def render(result: FetchResult) -> str:
            ext = entry.ext or resolve_extension(url, result.content_type)
            return self.namer.render_album(item, entry, ext)

        return await self._download(
            url,
            item,
            render,
            check_url=self.dedup.skip_duplicate_urls_in_albums,
            check_hash=self.dedup.skip_duplicate_hashes_in_albums,
        )

    async def fetch_imgur(self, item: Item) -> List[Dict]:
        """imgur: 相册或同服务单图"""
        try:
            album_id = album_id_of(item.url)
        except ValueError:
            self.stats["images_failed"] += 1
            logger.error(f"invalid url: {item.url} ({item.context})")
            return [{"success": False, "url": item.url, "error": "invalid url"}]

        if album_id is None:
            return [await self.fetch_single(direct_image_url(item.url), item)]

        if not self.filters.albums:
            self.stats["images_skipped"] += 1
            logger.info(f"skipping imgur album, albums disabled: {item.url} ({item.context})")
            return []

        if self.deduplicator.check_url(item.url, enabled=self.dedup.skip_duplicate_urls):
            self.stats["duplicates_skipped"] += 1
            logger.info(f"skipping imgur album: {item.url} ({item.context})")
            return []

        return await self.albums.expand(album_id, item)

    async def _download(
        self,
        url: str,
        item: Item,
        render: Callable[[FetchResult], str],
        check_url: bool,
        check_hash: bool,
    ) -> Dict:
        """下载 -> 校验 -> 命名 -> 写入"""
        if self.deduplicator.check_url(url, enabled=check_url):
            self.stats["duplicates_skipped"] += 1
            logger.info(f"skipping {url} ({item.context})")
            return {"success": False, "url": url, "reason": "duplicate_url"}

        try:
            result = await self.downloader.fetch(url, check_hash=check_hash)
            self.validator.check(result.data)
        except SkipItem as e:
            if e.reason == "duplicate_hash":
                self.stats["duplicates_skipped"] += 1
            else:
                self.stats["images_skipped"] += 1
            logger.info(f"fetching {url} ({item.context}) => {e}, skipping")
            return {"success": False, "url": url, "reason": e.reason}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.stats["images_failed"] += 1
            logger.error(f"fetching {url} ({item.context}) => {e!r}")
            return {"success": False, "url": url, "error": str(e) or type(e).__name__}

        path = render(result)
        try:
            saved = self.writer.write(path, result.data)
        except DestinationExists:
            self.stats["images_skipped"] += 1
            logger.info(f"fetching {url} ({item.context}) => file exists, overwrite disabled")
            return {"success": False, "url": url, "reason": "file_exists"}
        except (OSError, ValueError) as e:
            self.stats["images_failed"] += 1
            logger.error(f"fetching {url} ({item.context}) => {e}")
            return {"success": False, "url": url, "error": str(e)}

        self.stats["images_downloaded"] += 1
        if not self.quiet:
            logger.info(f"fetching {url} ({item.context}) => {saved}")
        return {
            "success": True,
            "url": url,
            "save_path": str(saved),
            "file_size": result.size,
        }

    def get_stats(self) -> Dict[str, int]:
        """获取处理统计"""
        return {**self.stats, **self.albums.get_stats()}
