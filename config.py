"""
配置管理模块 - 列表图片爬虫
统一配置管理：默认值 -> 环境变量(.env) -> 命令行参数
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Set
import os
import re
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# 项目根目录
BASE_DIR = Path(__file__).parent


class ConfigError(ValueError):
    """配置或命令行参数错误（启动阶段，尚未开始爬取）"""

DEFAULT_SINGLE_TEMPLATE = "{subreddit}/{timestamp}-{id}-{title_slug}{ext}"
DEFAULT_ALBUM_TEMPLATE = "{subreddit}/{timestamp}-{id}-{title_slug}/{num}-{image_hash}{ext}"

ORIENTATIONS = ("portrait", "landscape", "square")

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([kmg]?i?b?)\s*$", re.IGNORECASE)
_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "kib": 1024,
    "m": 1024 ** 2,
    "mb": 1024 ** 2,
    "mib": 1024 ** 2,
    "g": 1024 ** 3,
    "gb": 1024 ** 3,
    "gib": 1024 ** 3,
}


def parse_size(value: Optional[str]) -> int:
    """
    解析文件大小字符串

    Args:
        value: 如 "500", "500KB", "2MB", "1gb"；空值表示不限制

    Returns:
        字节数（0 表示不限制）

    Raises:
        ConfigError: 格式错误
    """
    if value is None or str(value).strip() == "":
        return 0
    match = _SIZE_PATTERN.match(str(value))
    if not match:
        raise ConfigError(f"invalid size: {value!r} (expected e.g. 500KB, 2MB)")
    number, unit = match.groups()
    unit = unit.lower()
    if unit not in _SIZE_UNITS:
        raise ConfigError(f"invalid size unit: {value!r}")
    return int(number) * _SIZE_UNITS[unit]


class CrawlerConfig(BaseModel):
    """爬虫配置"""
    # 节流
    throttle: float = Field(default=2.0, description="列表 API 请求最小间隔（秒）")
    page_size: int = Field(default=25, description="列表分页大小")
    search: Optional[str] = Field(default=None, description="搜索关键词（为空则抓取 new 列表）")
    request_timeout: int = Field(default=10, description="单次请求超时时间（秒）")

    # User-Agent配置
    user_agent: str = Field(default="reddit image downloader", description="固定 UA")
    rotate_user_agent: bool = Field(default=False, description="是否轮换UA")

    # API 地址
    listing_base_url: str = Field(default="https://www.reddit.com", description="列表 API 地址")
    album_base_url: str = Field(default="https://imgur.com", description="相册 API 地址")


class FilterConfig(BaseModel):
    """过滤配置（整个进程内不可变）"""
    model_config = ConfigDict(frozen=True)

    nsfw: bool = Field(default=False, description="是否包含 NSFW 内容")
    min_score: Optional[int] = Field(default=None, description="最低分数")

    # 文件大小（0 = 不限制）
    min_size: int = Field(default=0, description="最小文件大小（字节）")
    max_size: int = Field(default=0, description="最大文件大小（字节）")

    # 像素尺寸（max 为 0 = 不限制）
    min_width: int = Field(default=0, description="最小宽度")
    max_width: int = Field(default=0, description="最大宽度")
    min_height: int = Field(default=0, description="最小高度")
    max_height: int = Field(default=0, description="最大高度")

    disabled_orientations: Set[str] = Field(default_factory=set, description="禁用的方向")
    allowed_types: Set[str] = Field(default_factory=set, description="允许的图片格式（空 = 全部）")

    albums: bool = Field(default=True, description="是否展开相册")

    def has_image_constraints(self) -> bool:
        """是否配置了需要解码图片头的约束"""
        return bool(
            self.allowed_types
            or self.disabled_orientations
            or self.min_width
            or self.max_width
            or self.min_height
            or self.max_height
        )


class DedupConfig(BaseModel):
    """去重配置（单图 / 相册内分别控制）"""
    model_config = ConfigDict(frozen=True)

    skip_duplicate_urls: bool = Field(default=True, description="单图 URL 去重")
    skip_duplicate_hashes: bool = Field(default=True, description="单图内容哈希去重")
    skip_duplicate_urls_in_albums: bool = Field(default=False, description="相册内 URL 去重")
    skip_duplicate_hashes_in_albums: bool = Field(default=False, description="相册内内容哈希去重")


class OutputConfig(BaseModel):
    """输出配置"""
    output_root: Path = Field(default=Path("."), description="输出根目录")
    overwrite: bool = Field(default=False, description="是否覆盖已存在文件")
    quiet: bool = Field(default=False, description="不输出成功日志（跳过/错误仍输出）")
    single_template: str = Field(default=DEFAULT_SINGLE_TEMPLATE, description="单图路径模板")
    album_template: str = Field(default=DEFAULT_ALBUM_TEMPLATE, description="相册图片路径模板")


class LogConfig(BaseModel):
    """日志配置"""
    log_level: str = Field(default="INFO", description="日志级别")
    log_dir: Path = Field(default=BASE_DIR / "logs", description="日志目录")
    log_file: str = Field(default="spider.log", description="日志文件名")
    rotation: str = Field(default="100 MB", description="日志轮转大小")
    retention: str = Field(default="30 days", description="日志保留时间")


class Config(BaseModel):
    """全局配置"""
    sources: List[str] = Field(default_factory=list, description="要爬取的来源（subreddit）")
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log: LogConfig = Field(default_factory=LogConfig)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# 从环境变量加载配置
def load_config_from_env() -> Config:
    """从环境变量加载配置"""
    config_data = {
        "crawler": {
            "throttle": float(os.getenv("SPIDER_THROTTLE", "2.0")),
            "page_size": int(os.getenv("SPIDER_PAGE_SIZE", "25")),
            "request_timeout": int(os.getenv("SPIDER_REQUEST_TIMEOUT", "10")),
            "user_agent": os.getenv("SPIDER_USER_AGENT", "reddit image downloader"),
            "rotate_user_agent": _env_bool("SPIDER_ROTATE_USER_AGENT", False),
        },
        "output": {
            "output_root": Path(os.getenv("SPIDER_OUTPUT_ROOT", ".")),
            "overwrite": _env_bool("SPIDER_OVERWRITE", False),
            "quiet": _env_bool("SPIDER_QUIET", False),
        },
        "log": {
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        },
    }
    return Config(**config_data)


def apply_cli_args(base: Config, args) -> Config:
    """
    将命令行参数合并到配置中

    Args:
        base: 基础配置（通常来自环境变量）
        args: argparse 解析结果

    Returns:
        新的 Config 实例

    Raises:
        ConfigError: 参数格式错误（如文件大小）
    """
    disabled = {
        name for name, flag in (
            ("portrait", args.no_portrait),
            ("landscape", args.no_landscape),
            ("square", args.no_square),
        ) if flag
    }
    types = {t.strip().lower() for t in (args.types or "").split(",") if t.strip()}
    types = {"jpeg" if t == "jpg" else t for t in types}

    crawler = base.crawler.model_copy(update={
        "throttle": args.throttle if args.throttle is not None else base.crawler.throttle,
        "page_size": args.page_size if args.page_size is not None else base.crawler.page_size,
        "search": args.search or None,
    })
    filters = FilterConfig(
        nsfw=args.nsfw,
        min_score=args.min_score,
        min_size=parse_size(args.min_size),
        max_size=parse_size(args.max_size),
        min_width=args.min_width,
        max_width=args.max_width,
        min_height=args.min_height,
        max_height=args.max_height,
        disabled_orientations=disabled,
        allowed_types=types,
        albums=args.albums,
    )
    dedup = DedupConfig(
        skip_duplicate_urls=args.skip_duplicates,
        skip_duplicate_hashes=args.skip_duplicates,
        skip_duplicate_urls_in_albums=args.skip_duplicates_in_albums,
        skip_duplicate_hashes_in_albums=args.skip_duplicates_in_albums,
    )
    output = base.output.model_copy(update={
        "output_root": Path(args.out) if args.out else base.output.output_root,
        "overwrite": args.overwrite or base.output.overwrite,
        "quiet": args.quiet or base.output.quiet,
        "single_template": args.single_template,
        "album_template": args.album_template,
    })
    log = base.log.model_copy(update={
        "log_level": args.log_level or base.log.log_level,
    })
    return Config(
        sources=list(args.sources),
        crawler=crawler,
        filters=filters,
        dedup=dedup,
        output=output,
        log=log,
    )
