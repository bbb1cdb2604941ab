"""
列表图片爬虫 - 命令行入口
从 subreddit 列表翻页抓取图片，支持 imgur 相册展开、去重、过滤和路径模板
"""
import asyncio
import sys
from typing import List, Optional

from loguru import logger

from cli import create_parser, handle_crawl
from config import LogConfig, load_config_from_env


def setup_logging(log_config: LogConfig):
    """
    配置日志：彩色控制台 + 轮转文件

    Args:
        log_config: 日志配置
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=log_config.log_level,
        colorize=True
    )

    log_file = log_config.log_dir / log_config.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation=log_config.rotation,
        retention=log_config.retention,
        encoding="utf-8",
        level="DEBUG"
    )


async def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    parser = create_parser()
    args = parser.parse_args(argv)

    log_config = load_config_from_env().log
    if args.log_level:
        log_config = log_config.model_copy(update={"log_level": args.log_level})
    setup_logging(log_config)

    print("\n" + "=" * 60)
    print("🕷️  列表图片爬虫")
    print("=" * 60)

    return await handle_crawl(args, parser)


def run():
    """命令行脚本入口"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
