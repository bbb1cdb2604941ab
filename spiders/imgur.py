"""
Imgur 相册客户端
"""
import asyncio
import json
from typing import Any, Dict, List

import aiohttp
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.exceptions import AlbumError
from core.models import AlbumEntry
from spiders.base import BaseApiClient


def parse_album(payload: Dict[str, Any]) -> List[AlbumEntry]:
    """
    解析相册 JSON

    空相册时 data 可能是列表而非对象，视为无图片。
    """
    if not isinstance(payload, dict):
        raise AlbumError("unexpected album payload")
    data = payload.get("data")
    if not isinstance(data, dict):
        return []
    entries = []
    for num, image in enumerate(data.get("images") or [], 1):
        entries.append(AlbumEntry(
            hash=image.get("hash", ""),
            title=image.get("title") or "",
            ext=image.get("ext") or "",
            num=num,
            uploaded=str(image["datetime"]) if image.get("datetime") is not None else None,
        ))
    return entries


class ImgurClient(BaseApiClient):
    """相册数据源"""

    @retry(
        retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_album(self, album_id: str) -> List[AlbumEntry]:
        """
        获取相册图片列表（按相册内顺序，num 从 1 开始）

        Raises:
            AlbumError: 非 2XX 或 JSON 格式错误
        """
        url = f"{self.config.album_base_url}/ajaxalbums/getimages/{album_id}"
        self.stats['requests_sent'] += 1
        async with self.session.get(url, headers=self.get_headers()) as response:
            if response.status >= 300:
                self.stats['requests_failed'] += 1
                raise AlbumError(f"HTTP {response.status} for album {album_id}")
            try:
                body = await response.text()
            except UnicodeDecodeError as e:
                self.stats['requests_failed'] += 1
                raise AlbumError(f"undecodable body for album {album_id}: {e}")

        try:
            return parse_album(json.loads(body))
        except json.JSONDecodeError as e:
            self.stats['requests_failed'] += 1
            raise AlbumError(f"invalid JSON for album {album_id}: {e}")
        except (ValidationError, TypeError, AttributeError) as e:
            self.stats['requests_failed'] += 1
            raise AlbumError(f"malformed album {album_id}: {e}")

    def get_statistics(self) -> Dict[str, Any]:
        return self.stats.copy()
