"""
去重模块

两个独立的集合：
- seen_urls: 下载前按来源 URL 去重
- seen_hashes: 下载后按内容哈希(sha256)去重

集合只增不减，生命周期为本次进程；由消费者独占，无需加锁。
"""
from typing import Set
import hashlib
from loguru import logger


class Deduplicator:
    """URL / 内容哈希去重器"""

    def __init__(self):
        self.seen_urls: Set[str] = set()  # URL集合
        self.seen_hashes: Set[bytes] = set()  # 内容哈希集合
        self.stats = {
            "total_checked": 0,
            "duplicates_found": 0,
            "unique_items": 0
        }

    def check_url(self, url: str, enabled: bool = True) -> bool:
        """
        检查URL是否重复（不存在则记录）

        Args:
            url: 来源URL
            enabled: 该调用点是否启用URL去重；未启用时永不判重且不记录

        Returns:
            是否重复
        """
        if not enabled:
            return False
        return self._check_and_insert(self.seen_urls, url, f"Duplicate URL found: {url}")

    def check_hash(self, digest: bytes, enabled: bool = True) -> bool:
        """
        检查内容哈希是否重复（不存在则记录）

        Args:
            digest: 内容摘要
            enabled: 该调用点是否启用哈希去重

        Returns:
            是否重复
        """
        if not enabled:
            return False
        return self._check_and_insert(self.seen_hashes, digest, f"Duplicate content found: {digest.hex()[:16]}")

    def _check_and_insert(self, seen: set, key, message: str) -> bool:
        self.stats["total_checked"] += 1
        if key in seen:
            self.stats["duplicates_found"] += 1
            logger.debug(message)
            return True
        seen.add(key)
        self.stats["unique_items"] += 1
        return False

    @staticmethod
    def new_hasher():
        """流式计算内容哈希"""
        return hashlib.sha256()

    @staticmethod
    def hash_bytes(data: bytes) -> bytes:
        """计算内容哈希"""
        return hashlib.sha256(data).digest()

    def get_stats(self) -> dict:
        """获取去重统计"""
        stats = self.stats.copy()
        if stats["total_checked"] > 0:
            stats["duplicate_rate"] = stats["duplicates_found"] / stats["total_checked"]
        else:
            stats["duplicate_rate"] = 0.0
        return stats
