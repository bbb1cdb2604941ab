"""
异常定义

- 可重试: RateLimited, ListingError（列表抓取阶段，调度器无限重试）
- 单条跳过: SkipItem 及其子类（记录日志，继续处理下一条）
- 致命: TemplateError（命名模板缺陷，影响每一条）
"""


class SpiderError(Exception):
    """爬虫异常基类"""


class RateLimited(SpiderError):
    """列表 API 返回限流（HTTP 429）"""

    def __init__(self, message: str = "rate limited"):
        super().__init__(message)


class ListingError(SpiderError):
    """列表 API 的其他可重试错误（非 2XX、JSON 格式错误等）"""


class AlbumError(SpiderError):
    """相册解析失败"""


class SkipItem(SpiderError):
    """单条内容跳过（非错误）"""

    reason = "skipped"

    def __init__(self, message: str = "", reason: str = None):
        super().__init__(message or self.reason)
        if reason:
            self.reason = reason


class NotFound(SkipItem):
    """404 或已删除占位图"""

    reason = "not_found"


class BadStatus(SkipItem):
    """非 2XX 状态码"""

    reason = "bad_status"

    def __init__(self, status: int):
        super().__init__(f"HTTP status {status}")
        self.status = status


class DuplicateContent(SkipItem):
    """内容哈希重复"""

    reason = "duplicate_hash"


class ValidationRejected(SkipItem):
    """大小 / 格式 / 方向 / 尺寸校验未通过"""

    reason = "validation_failed"


class TemplateError(SpiderError):
    """命名模板错误"""


class DestinationExists(SkipItem):
    """目标文件已存在且未开启覆盖"""

    reason = "file_exists"
