"""
爬虫模块

包含：
- BaseApiClient: API客户端基类
- RedditClient: 列表数据源
- ImgurClient: 相册数据源
- ImageSpider: 组装生产者/消费者的图片爬虫
"""
from spiders.base import BaseApiClient
from spiders.reddit import RedditClient
from spiders.imgur import ImgurClient
from spiders.image_spider import ImageSpider

__all__ = [
    'BaseApiClient',
    'RedditClient',
    'ImgurClient',
    'ImageSpider',
]
