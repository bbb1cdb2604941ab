"""
文件写入

相对路径基于输出根目录；未开启覆盖时，目标已存在（或 stat 出现"不存在"以外的错误）则跳过。
单图与相册图片使用同一套覆盖策略。
"""
from pathlib import Path
from typing import Union

from loguru import logger

from core.exceptions import DestinationExists


class FileWriter:
    """文件写入器"""

    def __init__(self, output_root: Union[str, Path] = ".", overwrite: bool = False):
        self.output_root = Path(output_root)
        self.overwrite = overwrite

    def resolve(self, path: Union[str, Path]) -> Path:
        """相对路径拼接到输出根目录"""
        p = Path(path)
        if not p.is_absolute():
            p = self.output_root / p
        return p

    def should_skip(self, path: Path) -> bool:
        """未开启覆盖时判断是否跳过"""
        if self.overwrite:
            return False
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.debug(f"stat {path} failed: {e}")
            return True
        return True

    def write(self, path: Union[str, Path], data: bytes) -> Path:
        """
        写入文件

        Returns:
            实际写入路径

        Raises:
            DestinationExists: 目标已存在且未开启覆盖
            OSError: 写入失败
        """
        target = self.resolve(path)
        if self.should_skip(target):
            raise DestinationExists(f"{target} exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return target
