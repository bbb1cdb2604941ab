"""
异步任务队列模块

生产者-消费者模式：一个生产者（爬取调度器）、一个消费者（处理流程），
通过容量为 1 的 asyncio.Queue 交接条目。消费者处理上一条时生产者在 put 处阻塞，
翻页速度不会超过处理速度。
"""
import asyncio
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List
from collections import deque
from loguru import logger

from core.exceptions import TemplateError

# 流结束标记
_END_OF_STREAM = object()


class CrawlQueue:
    """
    爬取任务队列

    Example:
        queue = CrawlQueue()
        await queue.run(scheduler.crawl(), pipeline.process)
    """

    def __init__(self, queue_size: int = 1):
        """
        初始化爬取队列

        Args:
            queue_size: 队列最大容量（默认 1，相当于无缓冲交接）
        """
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

        # 统计信息
        self.stats = {
            'total_tasks': 0,
            'completed_tasks': 0,
            'failed_tasks': 0,
        }

        # 错误记录
        self.errors = deque(maxlen=100)

    async def producer(self, items: AsyncIterator[Any]):
        """
        生产者：把异步迭代器中的条目依次放入队列，结束后放入结束标记

        Args:
            items: 条目异步迭代器
        """
        async for item in items:
            self.stats['total_tasks'] += 1
            await self.queue.put(item)
        await self.queue.put(_END_OF_STREAM)
        logger.debug(f"producer finished, {self.stats['total_tasks']} items queued")

    async def consumer(self, worker_func: Callable[[Any], Awaitable[Any]]):
        """
        消费者：从队列取条目并处理，直到收到结束标记

        单条失败只记录，不中断；命名模板错误直接抛出。
        """
        while True:
            item = await self.queue.get()
            try:
                if item is _END_OF_STREAM:
                    break
                try:
                    await worker_func(item)
                    self.stats['completed_tasks'] += 1
                except TemplateError:
                    raise
                except Exception as e:
                    self.stats['failed_tasks'] += 1
                    self.errors.append({
                        'item': str(item)[:100],
                        'error': repr(e),
                    })
                    logger.exception(f"processing failed: {e!r}")
            finally:
                self.queue.task_done()

    async def run(
        self,
        items: AsyncIterator[Any],
        worker_func: Callable[[Any], Awaitable[Any]],
    ) -> Dict[str, Any]:
        """
        并发运行生产者与消费者，直到流结束

        Returns:
            统计信息字典
        """
        producer_task = asyncio.create_task(self.producer(items))
        consumer_task = asyncio.create_task(self.consumer(worker_func))
        try:
            await asyncio.gather(producer_task, consumer_task)
        except BaseException:
            for task in (producer_task, consumer_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(producer_task, consumer_task, return_exceptions=True)
            raise

        logger.info(f"queue finished: total={self.stats['total_tasks']}, "
                    f"completed={self.stats['completed_tasks']}, "
                    f"failed={self.stats['failed_tasks']}")
        return self.stats.copy()

    def get_stats(self) -> Dict[str, Any]:
        """获取统计信息"""
        return self.stats.copy()

    def get_errors(self) -> List[Dict[str, Any]]:
        """获取错误列表"""
        return list(self.errors)
