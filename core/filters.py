"""
条目过滤（下载前，仅依据静态属性）
"""
from typing import Optional

from loguru import logger

from config import FilterConfig
from core.models import Item


def reject_reason(item: Item, filters: FilterConfig) -> Optional[str]:
    """
    判断条目是否应被过滤

    Args:
        item: 列表条目
        filters: 过滤配置

    Returns:
        过滤原因；None 表示通过
    """
    if item.is_meta:
        return "meta"
    if item.nsfw and not filters.nsfw:
        return "nsfw"
    if filters.min_score is not None and item.score < filters.min_score:
        return "score"
    return None


def accept_item(item: Item, filters: FilterConfig) -> bool:
    """过滤并记录日志；返回是否继续处理"""
    reason = reject_reason(item, filters)
    if reason is None:
        return True
    if reason == "nsfw":
        logger.info(f"skipping NSFW: {item.url} ({item.context})")
    elif reason == "score":
        logger.info(f"skipping low score ({item.score} < {filters.min_score}): {item.url} ({item.context})")
    else:
        logger.debug(f"skipping meta post: {item.url} ({item.context})")
    return False
