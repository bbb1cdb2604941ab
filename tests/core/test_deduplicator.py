"""
Deduplicator 单元测试
"""
import unittest

from core.deduplicator import Deduplicator


class TestDeduplicator(unittest.TestCase):
    """Deduplicator 测试类"""

    def setUp(self):
        self.dedup = Deduplicator()

    def test_url_first_seen_then_duplicate(self):
        self.assertFalse(self.dedup.check_url("https://example.com/a.jpg"))
        self.assertTrue(self.dedup.check_url("https://example.com/a.jpg"))
        self.assertFalse(self.dedup.check_url("https://example.com/b.jpg"))

    def test_disabled_check_does_not_record(self):
        """未启用时永不判重，也不影响后续启用的检查"""
        url = "https://example.com/a.jpg"
        self.assertFalse(self.dedup.check_url(url, enabled=False))
        self.assertFalse(self.dedup.check_url(url, enabled=False))
        self.assertNotIn(url, self.dedup.seen_urls)
        self.assertFalse(self.dedup.check_url(url))

    def test_hash_check(self):
        digest = Deduplicator.hash_bytes(b"image bytes")
        self.assertFalse(self.dedup.check_hash(digest))
        self.assertTrue(self.dedup.check_hash(Deduplicator.hash_bytes(b"image bytes")))
        self.assertFalse(self.dedup.check_hash(digest, enabled=False))

    def test_urls_and_hashes_independent(self):
        self.dedup.check_url("abc")
        self.assertFalse(self.dedup.check_hash(b"abc"))

    def test_streaming_hash_matches(self):
        hasher = Deduplicator.new_hasher()
        hasher.update(b"image ")
        hasher.update(b"bytes")
        self.assertEqual(hasher.digest(), Deduplicator.hash_bytes(b"image bytes"))

    def test_get_stats(self):
        self.dedup.check_url("a")
        self.dedup.check_url("a")
        stats = self.dedup.get_stats()
        self.assertEqual(stats["total_checked"], 2)
        self.assertEqual(stats["duplicates_found"], 1)
        self.assertEqual(stats["unique_items"], 1)
        self.assertAlmostEqual(stats["duplicate_rate"], 0.5)

    def test_get_stats_empty(self):
        self.assertEqual(self.dedup.get_stats()["duplicate_rate"], 0.0)


if __name__ == '__main__':
    unittest.main()
