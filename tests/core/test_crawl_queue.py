"""
CrawlQueue 单元测试
"""
import unittest
import asyncio

from core.crawl_queue import CrawlQueue
from core.exceptions import TemplateError


async def agen(items, log=None):
    for item in items:
        if log is not None:
            log.append(("produced", item))
        yield item


class TestCrawlQueue(unittest.TestCase):
    """CrawlQueue 测试类"""

    def setUp(self):
        """测试前准备"""
        self.queue = CrawlQueue()

    def test_init(self):
        """测试初始化"""
        self.assertEqual(self.queue.queue.maxsize, 1)
        self.assertEqual(self.queue.stats['total_tasks'], 0)

    async def async_test_run_in_order(self):
        results = []

        async def worker_func(item):
            results.append(item)
            await asyncio.sleep(0)

        stats = await self.queue.run(agen([1, 2, 3, 4, 5]), worker_func)
        self.assertEqual(results, [1, 2, 3, 4, 5])
        self.assertEqual(stats['total_tasks'], 5)
        self.assertEqual(stats['completed_tasks'], 5)

    def test_run_in_order(self):
        """条目按生产顺序处理"""
        asyncio.run(self.async_test_run_in_order())

    async def async_test_backpressure(self):
        log = []

        async def worker_func(item):
            log.append(("consumed", item))
            await asyncio.sleep(0.01)

        await self.queue.run(agen(range(1, 8), log), worker_func)

        for index, event in enumerate(log):
            if event[0] != "consumed":
                continue
            produced = sum(1 for kind, _ in log[:index] if kind == "produced")
            # 消费第 n 条时，生产者最多领先：队列中 1 条 + 阻塞在 put 的 1 条
            self.assertLessEqual(produced, event[1] + 2)

    def test_backpressure(self):
        """生产者不会远远领先于消费者"""
        asyncio.run(self.async_test_backpressure())

    async def async_test_worker_error(self):
        async def worker_func(item):
            if item == 3:
                raise RuntimeError("boom")

        stats = await self.queue.run(agen([1, 2, 3, 4]), worker_func)
        self.assertEqual(stats['completed_tasks'], 3)
        self.assertEqual(stats['failed_tasks'], 1)
        self.assertEqual(len(self.queue.get_errors()), 1)
        self.assertIn("boom", self.queue.get_errors()[0]['error'])

    def test_worker_error(self):
        """单条失败不影响后续条目"""
        asyncio.run(self.async_test_worker_error())

    async def async_test_template_error_propagates(self):
        async def worker_func(item):
            raise TemplateError("bad template")

        with self.assertRaises(TemplateError):
            await self.queue.run(agen([1, 2, 3]), worker_func)

    def test_template_error_propagates(self):
        """命名模板错误终止运行"""
        asyncio.run(self.async_test_template_error_propagates())

    async def async_test_empty_stream(self):
        async def worker_func(item):
            raise AssertionError("should not be called")

        stats = await self.queue.run(agen([]), worker_func)
        self.assertEqual(stats['total_tasks'], 0)

    def test_empty_stream(self):
        asyncio.run(self.async_test_empty_stream())


if __name__ == '__main__':
    unittest.main()
