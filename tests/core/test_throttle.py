"""
Throttle 单元测试
"""
import unittest
import asyncio

from core.throttle import Throttle


class TestThrottle(unittest.TestCase):
    """Throttle 测试类"""

    def test_negative_interval(self):
        with self.assertRaises(ValueError):
            Throttle(-1)

    async def async_test_first_permit_immediate(self):
        throttle = Throttle(10)
        loop = asyncio.get_running_loop()
        start = loop.time()
        await asyncio.wait_for(throttle.acquire(), timeout=1)
        self.assertLess(loop.time() - start, 0.5)
        await throttle.close()

    def test_first_permit_immediate(self):
        """构造后第一次 acquire 立即返回"""
        asyncio.run(self.async_test_first_permit_immediate())

    async def async_test_permits_spaced(self):
        async with Throttle(0.05) as throttle:
            times = [await throttle.acquire() for _ in range(3)]
        gaps = [b - a for a, b in zip(times, times[1:])]
        for gap in gaps:
            self.assertGreaterEqual(gap, 0.04)

    def test_permits_spaced(self):
        """许可按间隔发放"""
        asyncio.run(self.async_test_permits_spaced())

    async def async_test_idle_ticks_dropped(self):
        async with Throttle(0.02) as throttle:
            await throttle.acquire()
            await asyncio.sleep(0.2)
            # 空闲期间只缓存一个许可
            self.assertGreater(throttle.dropped, 0)
            await throttle.acquire()
            self.assertTrue(throttle._permits.empty())

    def test_idle_ticks_dropped(self):
        """无人领取时多余 tick 被丢弃，不形成突发"""
        asyncio.run(self.async_test_idle_ticks_dropped())

    async def async_test_zero_interval_unthrottled(self):
        throttle = Throttle(0)
        for _ in range(5):
            await asyncio.wait_for(throttle.acquire(), timeout=1)
        self.assertIsNone(throttle._ticker)
        self.assertEqual(throttle.dropped, 0)
        await throttle.close()

    def test_zero_interval_unthrottled(self):
        """interval 为 0 时不启动 ticker，acquire 立即返回"""
        asyncio.run(self.async_test_zero_interval_unthrottled())

    async def async_test_close_idempotent(self):
        throttle = Throttle(0.01)
        await throttle.close()
        await throttle.acquire()
        await throttle.close()
        await throttle.close()
        self.assertIsNone(throttle._ticker)

    def test_close_idempotent(self):
        asyncio.run(self.async_test_close_idempotent())


if __name__ == '__main__':
    unittest.main()
