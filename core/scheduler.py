"""
爬取调度器

对多个来源轮询翻页：每一轮按固定顺序访问每个未完成的来源，各取一页。
- 每次请求前通过 Throttle 领取许可
- 限流（RateLimited）：退避时间每次增加一个节流间隔，同一游标重试，不重新领取许可
- 其他临时错误：记录日志，领取新许可后重试
- 来源返回空游标即标记完成；全部完成后结束

重试策略可注入（tenacity stop + sleep），默认永不放弃。
"""
import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Protocol

import aiohttp
from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_never

from core.exceptions import ListingError, RateLimited
from core.models import Item, ListingPage
from core.throttle import Throttle


RETRYABLE_ERRORS = (RateLimited, ListingError, aiohttp.ClientError, asyncio.TimeoutError)


class ListingSource(Protocol):
    """列表数据源接口"""

    async def fetch_page(
        self,
        source: str,
        after: str,
        limit: int,
        search: Optional[str] = None,
    ) -> ListingPage:
        ...


@dataclass
class RetryPolicy:
    """
    列表请求重试策略

    Attributes:
        stop: tenacity stop 策略（默认 stop_never，长时间运行的爬取优先保证存活）
        sleep: 退避时使用的 sleep 协程（测试中可替换为记录器）
    """
    stop: Callable = stop_never
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep


@dataclass
class SourceState:
    """单个来源的翻页状态（仅调度器读写）"""
    name: str
    after: str = ""
    exhausted: bool = False
    pages: int = 0
    items: int = 0


class CrawlScheduler:
    """多来源轮询调度器（生产者）"""

    def __init__(
        self,
        listing: ListingSource,
        sources: List[str],
        throttle: Throttle,
        page_size: int = 25,
        search: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.listing = listing
        self.throttle = throttle
        self.page_size = page_size
        self.search = search
        self.retry_policy = retry_policy or RetryPolicy()
        self.states: Dict[str, SourceState] = {}
        for name in sources:
            self.states.setdefault(name, SourceState(name=name))
        self.stats = {
            "rounds": 0,
            "pages_fetched": 0,
            "items_emitted": 0,
            "rate_limited": 0,
            "fetch_errors": 0,
        }

    @property
    def completed(self) -> bool:
        return all(state.exhausted for state in self.states.values())

    async def crawl(self) -> AsyncIterator[Item]:
        """
        按轮次产出所有来源的条目

        同一来源内保持页序及页内顺序；不同来源之间按轮询交错。
        """
        while not self.completed:
            self.stats["rounds"] += 1
            page_no = self.stats["rounds"]
            for state in self.states.values():
                if state.exhausted:
                    continue

                await self.throttle.acquire()
                logger.info(f"fetching page {page_no} on r/{state.name}")

                try:
                    page = await self._fetch_with_retry(state)
                except RETRYABLE_ERRORS as e:
                    # 仅在注入了有限重试策略时出现
                    logger.error(f"giving up on r/{state.name} after retries: {e}")
                    state.exhausted = True
                    continue

                state.pages += 1
                self.stats["pages_fetched"] += 1
                for item in page.items:
                    state.items += 1
                    self.stats["items_emitted"] += 1
                    yield item

                if not page.after:
                    state.exhausted = True
                    logger.info(f"completed {state.name}")
                else:
                    state.after = page.after

        logger.info(f"crawl finished: {self.stats}")

    async def _fetch_with_retry(self, state: SourceState) -> ListingPage:
        """抓取一页，按重试策略处理限流和临时错误"""
        rate_limit_delay = 0.0
        needs_permit = False

        def backoff(retry_state: RetryCallState) -> float:
            nonlocal rate_limit_delay, needs_permit
            error = retry_state.outcome.exception()
            if isinstance(error, RateLimited):
                self.stats["rate_limited"] += 1
                rate_limit_delay += self.throttle.interval
                needs_permit = False
                logger.warning(f"rate limit reached, retrying after {rate_limit_delay:.1f}s")
                return rate_limit_delay
            self.stats["fetch_errors"] += 1
            needs_permit = True
            logger.warning(f"fetching failed: {error!r}, retrying")
            return 0

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=self.retry_policy.stop,
            wait=backoff,
            sleep=self.retry_policy.sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if needs_permit:
                    await self.throttle.acquire()
                return await self.listing.fetch_page(
                    state.name,
                    state.after,
                    self.page_size,
                    self.search,
                )

    def get_stats(self) -> Dict[str, int]:
        """获取调度统计"""
        return self.stats.copy()
