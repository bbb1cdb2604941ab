"""
图片校验

- 文件大小（始终检查，基于原始字节长度，0 = 不限制）
- 格式 / 方向 / 宽高（仅在配置了相关约束时检查，只解析图片头，不完整解码）
"""
import io
from typing import Tuple

from loguru import logger
from PIL import Image, UnidentifiedImageError

from config import FilterConfig
from core.exceptions import ValidationRejected


def orientation_of(width: int, height: int) -> str:
    """根据宽高判断方向"""
    if height > width:
        return "portrait"
    if width > height:
        return "landscape"
    return "square"


class ImageValidator:
    """图片校验器"""

    def __init__(self, filters: FilterConfig):
        self.config = filters

    def check_size(self, data: bytes):
        """检查文件大小"""
        size = len(data)
        if self.config.min_size and size < self.config.min_size:
            raise ValidationRejected(f"too small: {size} < {self.config.min_size} bytes")
        if self.config.max_size and size > self.config.max_size:
            raise ValidationRejected(f"too large: {size} > {self.config.max_size} bytes")

    def read_header(self, data: bytes) -> Tuple[str, int, int]:
        """
        解析图片头

        Returns:
            (格式小写, 宽, 高)
        """
        try:
            # Image.open 只读取文件头，像素数据延迟加载
            with Image.open(io.BytesIO(data)) as img:
                img_format = img.format.lower() if img.format else ""
                width, height = img.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ValidationRejected(f"cannot decode image header: {e}")
        return img_format, width, height

    def validate(self, data: bytes):
        """
        校验格式 / 方向 / 宽高；未配置约束时直接通过

        Raises:
            ValidationRejected: 校验失败（包含具体原因）
        """
        if not self.config.has_image_constraints():
            return

        img_format, width, height = self.read_header(data)

        if self.config.allowed_types and img_format not in self.config.allowed_types:
            raise ValidationRejected(f"type {img_format or 'unknown'} not allowed")

        orientation = orientation_of(width, height)
        if orientation in self.config.disabled_orientations:
            raise ValidationRejected(f"{orientation} images disabled ({width}x{height})")

        if width < self.config.min_width:
            raise ValidationRejected(f"width {width} < {self.config.min_width}")
        if self.config.max_width and width > self.config.max_width:
            raise ValidationRejected(f"width {width} > {self.config.max_width}")
        if height < self.config.min_height:
            raise ValidationRejected(f"height {height} < {self.config.min_height}")
        if self.config.max_height and height > self.config.max_height:
            raise ValidationRejected(f"height {height} > {self.config.max_height}")

        logger.trace(f"Image accepted: {img_format} {width}x{height}")

    def check(self, data: bytes):
        """先检查大小，再校验图片头"""
        self.check_size(data)
        self.validate(data)
