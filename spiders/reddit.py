"""
Reddit 列表客户端

- new 列表: /r/<sub>/new.json
- 搜索列表: /r/<sub>/search.json（restrict_sr=on, sort=new）
- HTTP 429 -> RateLimited；其他非 2XX / 非法 JSON -> ListingError
"""
import json
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from core.exceptions import ListingError, RateLimited
from core.models import Item, ListingPage
from spiders.base import BaseApiClient


def build_listing_params(
    after: str = "",
    limit: int = 0,
    search: Optional[str] = None,
) -> Dict[str, str]:
    """构造列表查询参数"""
    params = {"raw_json": "1"}
    if search:
        params["restrict_sr"] = "on"
        params["sort"] = "new"
    if limit > 0:
        params["limit"] = str(limit)
    if after:
        params["after"] = after
    if search:
        params["q"] = search
    return params


def parse_listing(payload: Dict[str, Any]) -> ListingPage:
    """解析列表 JSON"""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise ListingError("unexpected listing payload")
    data = payload["data"]
    items = [
        Item.from_listing_child(child)
        for child in data.get("children") or []
        if isinstance(child, dict)
    ]
    return ListingPage(items=items, after=data.get("after") or "")


class RedditClient(BaseApiClient):
    """列表数据源"""

    async def fetch_page(
        self,
        source: str,
        after: str,
        limit: int,
        search: Optional[str] = None,
    ) -> ListingPage:
        """
        获取一页列表

        Args:
            source: subreddit 名称
            after: 翻页游标（空表示第一页）
            limit: 分页大小
            search: 搜索关键词（可选）

        Raises:
            RateLimited: 被限流
            ListingError: 其他错误
        """
        endpoint = "search.json" if search else "new.json"
        url = f"{self.config.listing_base_url}/r/{source}/{endpoint}"
        params = build_listing_params(after, limit, search)

        self.stats['requests_sent'] += 1
        async with self.session.get(url, params=params, headers=self.get_headers()) as response:
            if response.status == 429:
                self.stats['requests_failed'] += 1
                raise RateLimited()
            if response.status >= 300:
                self.stats['requests_failed'] += 1
                raise ListingError(f"HTTP {response.status} for {url}")
            try:
                body = await response.text()
            except UnicodeDecodeError as e:
                self.stats['requests_failed'] += 1
                raise ListingError(f"undecodable body from {url}: {e}")

        try:
            page = parse_listing(json.loads(body))
        except json.JSONDecodeError as e:
            self.stats['requests_failed'] += 1
            raise ListingError(f"invalid JSON from {url}: {e}")
        except (ValidationError, TypeError, AttributeError) as e:
            self.stats['requests_failed'] += 1
            raise ListingError(f"malformed listing from {url}: {e}")

        logger.debug(f"r/{source}: {len(page.items)} items, after={page.after or '-'}")
        return page

    def get_statistics(self) -> Dict[str, Any]:
        return self.stats.copy()
