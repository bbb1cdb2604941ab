"""
核心模块

包含基础组件：
- throttle: 固定频率节流器
- scheduler: 多来源轮询翻页调度器（生产者）
- crawl_queue: 生产者-消费者交接队列
- filters: 条目过滤
- deduplicator: URL / 内容哈希去重
- downloader: 图片下载器
- album: 相册展开
- validator: 图片校验
- naming: 文件命名
- writer: 文件写入
- pipeline: 消费者处理流程
"""
from .throttle import Throttle
from .scheduler import CrawlScheduler, RetryPolicy
from .crawl_queue import CrawlQueue
from .deduplicator import Deduplicator
from .downloader import ImageDownloader
from .album import AlbumExpander
from .validator import ImageValidator
from .naming import Namer
from .writer import FileWriter
from .pipeline import ImagePipeline

__all__ = [
    'Throttle',
    'CrawlScheduler',
    'RetryPolicy',
    'CrawlQueue',
    'Deduplicator',
    'ImageDownloader',
    'AlbumExpander',
    'ImageValidator',
    'Namer',
    'FileWriter',
    'ImagePipeline',
]
