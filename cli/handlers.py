"""
CLI命令处理函数
"""
import argparse
import sys
from typing import Optional

from loguru import logger

from config import Config, ConfigError, apply_cli_args, load_config_from_env
from core.exceptions import TemplateError
from spiders import ImageSpider


def build_config(args, parser: argparse.ArgumentParser) -> Optional[Config]:
    """
    由命令行参数构造配置

    格式错误时输出错误和用法，返回 None（不开始爬取）
    """
    try:
        return apply_cli_args(load_config_from_env(), args)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return None


async def handle_crawl(args, parser: argparse.ArgumentParser) -> int:
    """
    处理爬取命令

    Returns:
        退出码
    """
    if not args.sources:
        print("No sources provided. Usage:", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 0

    config = build_config(args, parser)
    if config is None:
        return 2

    print(f"\n📌 来源: {', '.join(config.sources)}")
    print(f"输出目录: {config.output.output_root}")
    if config.crawler.search:
        print(f"搜索: {config.crawler.search}")

    try:
        spider = ImageSpider(config)
    except TemplateError as e:
        logger.error(f"❌ 模板错误: {e}")
        return 1

    async with spider:
        try:
            await spider.run()
        except TemplateError as e:
            logger.error(f"❌ 模板错误，爬取中止: {e}")
            return 1
        print_statistics(spider)
    return 0


# ============================================================================
# 辅助函数
# ============================================================================

def print_statistics(spider):
    """输出统计信息"""
    stats = spider.get_statistics()
    print("\n" + "=" * 60)
    print("📊 爬取统计:")
    print(f"  列表页数: {stats.get('pages_fetched', 0)}")
    print(f"  条目数: {stats.get('items_seen', 0)}")
    print(f"  过滤: {stats.get('items_filtered', 0)}")
    print(f"  下载成功: {stats.get('images_downloaded', 0)}")
    print(f"  跳过: {stats.get('images_skipped', 0)}")
    print(f"  下载失败: {stats.get('images_failed', 0)}")
    print(f"  去重跳过: {stats.get('duplicates_skipped', 0)}")
    print("=" * 60)
