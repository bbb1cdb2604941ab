"""
列表图片爬虫

组装各组件：
- 生产者: CrawlScheduler（RedditClient + Throttle）
- 消费者: ImagePipeline（ImageDownloader + ImgurClient + 去重/校验/命名/写入）
- 二者通过容量为 1 的 CrawlQueue 交接
"""
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from config import Config
from core.crawl_queue import CrawlQueue
from core.deduplicator import Deduplicator
from core.downloader import ImageDownloader
from core.naming import Namer
from core.pipeline import ImagePipeline
from core.scheduler import CrawlScheduler, RetryPolicy
from core.throttle import Throttle
from core.validator import ImageValidator
from core.writer import FileWriter
from spiders.imgur import ImgurClient
from spiders.reddit import RedditClient


class ImageSpider:
    """
    多来源图片爬虫

    Examples:
        async with ImageSpider(config) as spider:
            await spider.run()
    """

    def __init__(self, config: Config, retry_policy: Optional[RetryPolicy] = None):
        """
        初始化爬虫

        Args:
            config: 配置对象（sources 不能为空）
            retry_policy: 列表请求重试策略（默认无限重试）

        Raises:
            TemplateError: 命名模板无效（启动前校验）
        """
        self.config = config
        self.retry_policy = retry_policy

        # 启动前校验模板
        self.namer = Namer(config.output.single_template, config.output.album_template)
        self.namer.validate()

        self.session: Optional[aiohttp.ClientSession] = None
        self.deduplicator = Deduplicator()
        self.throttle = Throttle(config.crawler.throttle)
        self.reddit: Optional[RedditClient] = None
        self.imgur: Optional[ImgurClient] = None
        self.downloader: Optional[ImageDownloader] = None
        self.pipeline: Optional[ImagePipeline] = None
        self.scheduler: Optional[CrawlScheduler] = None
        self.queue: Optional[CrawlQueue] = None

        logger.info(f"🚀 初始化爬虫: {', '.join(config.sources)}")

    async def __aenter__(self):
        """异步上下文管理器"""
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器退出"""
        await self.close()

    async def init(self):
        """初始化爬虫"""
        logger.info("⚙️  初始化爬虫组件...")

        # 共享HTTP会话
        timeout = aiohttp.ClientTimeout(total=self.config.crawler.request_timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)

        self.reddit = RedditClient(self.config.crawler, session=self.session)
        self.imgur = ImgurClient(self.config.crawler, session=self.session)
        self.downloader = ImageDownloader(self.deduplicator, self.config.crawler, session=self.session)

        self.pipeline = ImagePipeline(
            downloader=self.downloader,
            album_source=self.imgur,
            deduplicator=self.deduplicator,
            validator=ImageValidator(self.config.filters),
            namer=self.namer,
            writer=FileWriter(self.config.output.output_root, self.config.output.overwrite),
            filters=self.config.filters,
            dedup=self.config.dedup,
            quiet=self.config.output.quiet,
        )
        self.scheduler = CrawlScheduler(
            listing=self.reddit,
            sources=self.config.sources,
            throttle=self.throttle,
            page_size=self.config.crawler.page_size,
            search=self.config.crawler.search,
            retry_policy=self.retry_policy,
        )
        self.queue = CrawlQueue(queue_size=1)

        logger.success("✅ 爬虫初始化完成")

    async def run(self) -> Dict[str, Any]:
        """
        运行直到所有来源翻页完成

        Returns:
            统计信息
        """
        logger.info(f"🚀 开始爬取 {len(self.config.sources)} 个来源...")
        await self.queue.run(self.scheduler.crawl(), self.pipeline.process)
        logger.success("🎉 finished")
        return self.get_statistics()

    async def close(self):
        """关闭爬虫"""
        logger.info("🔒 关闭爬虫...")

        await self.throttle.close()
        if self.session:
            await self.session.close()
            self.session = None

        # 输出统计信息
        logger.info(f"📊 爬虫统计: {self.get_statistics()}")
        logger.info(f"🔄 去重统计: {self.deduplicator.get_stats()}")

    def get_statistics(self) -> Dict[str, Any]:
        """获取统计信息"""
        stats: Dict[str, Any] = {}
        if self.scheduler:
            stats.update(self.scheduler.get_stats())
        if self.pipeline:
            stats.update(self.pipeline.get_stats())
        if self.queue:
            stats["processing_errors"] = self.queue.get_stats()["failed_tasks"]
        return stats
