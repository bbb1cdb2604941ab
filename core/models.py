"""
数据模型

- Item: 列表中的一条帖子（不可变）
- ListingPage: 一页列表 + 翻页游标
- AlbumEntry: 相册中的一张图片
- FetchResult: 下载结果
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """列表条目（帖子）"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    title: str = ""
    url: str = ""
    permalink: str = ""
    subreddit: str = ""
    author: str = ""
    created_utc: float = 0.0
    domain: str = ""
    post_hint: str = ""
    nsfw: bool = False
    is_meta: bool = False
    score: int = 0

    @property
    def created(self) -> datetime:
        return datetime.fromtimestamp(self.created_utc, tz=timezone.utc)

    @property
    def context(self) -> str:
        """日志中引用的上下文（永久链接）"""
        if self.permalink.startswith("/"):
            return f"https://www.reddit.com{self.permalink}"
        return self.permalink or self.id

    @classmethod
    def from_listing_child(cls, child: Dict[str, Any]) -> "Item":
        """
        从列表 JSON 的 children 元素构造

        Args:
            child: {"kind": "t3", "data": {...}}
        """
        data = child.get("data", child)
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            title=data.get("title") or "",
            url=data.get("url") or "",
            permalink=data.get("permalink") or "",
            subreddit=data.get("subreddit") or "",
            author=data.get("author") or "",
            created_utc=float(data.get("created_utc") or 0),
            domain=data.get("domain") or "",
            post_hint=data.get("post_hint") or "",
            nsfw=bool(data.get("over_18", False)),
            is_meta=bool(data.get("is_meta", False)),
            score=int(data.get("score") or 0),
        )


class ListingPage(BaseModel):
    """一页列表"""
    items: List[Item] = Field(default_factory=list)
    after: str = ""


class AlbumEntry(BaseModel):
    """相册中的一张图片（num 从 1 开始）"""
    model_config = ConfigDict(frozen=True)

    hash: str
    title: str = ""
    ext: str = ""
    num: int = 1
    uploaded: Optional[str] = None


class FetchResult(BaseModel):
    """下载结果"""
    url: str
    final_url: str
    data: bytes
    content_type: str = ""
    digest: Optional[bytes] = None

    @property
    def size(self) -> int:
        return len(self.data)
