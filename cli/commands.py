"""
CLI命令定义（argparse）
"""
import argparse

from config import DEFAULT_ALBUM_TEMPLATE, DEFAULT_SINGLE_TEMPLATE


def create_parser() -> argparse.ArgumentParser:
    """
    创建命令行参数解析器

    Returns:
        ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog='spider.py',
        description='多来源列表图片爬虫',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
示例:
  python spider.py pics earthporn --out downloads
  python spider.py wallpapers --min-width 1920 --no-portrait --types jpeg,png
  python spider.py pics --search "sunset" --throttle 3 --quiet
  python spider.py pics --min-size 100KB --max-size 10MB --skip-duplicates-in-albums

模板字段:
  {subreddit} {id} {name} {title} {title_slug} {author} {domain} {timestamp} {ext}
  相册额外: {num} {image_hash} {image_title}
        '''
    )

    parser.add_argument('sources', nargs='*', help='要爬取的来源（subreddit 名称）')

    # 输出
    parser.add_argument('--out', type=str, default=None, help='输出根目录（默认：.）')
    parser.add_argument('--single-template', type=str, default=DEFAULT_SINGLE_TEMPLATE,
                        help='单图路径模板（str.format 语法）')
    parser.add_argument('--album-template', type=str, default=DEFAULT_ALBUM_TEMPLATE,
                        help='相册图片路径模板（str.format 语法）')
    parser.add_argument('--overwrite', action='store_true', help='覆盖已存在文件')
    parser.add_argument('--quiet', action='store_true',
                        help='不输出每条成功日志（跳过和错误仍输出）')

    # 去重
    parser.add_argument('--skip-duplicates', dest='skip_duplicates', action='store_true', default=True,
                        help='跳过重复的单图（URL + 内容哈希，默认：启用）')
    parser.add_argument('--no-skip-duplicates', dest='skip_duplicates', action='store_false',
                        help='不跳过重复的单图')
    parser.add_argument('--skip-duplicates-in-albums', action='store_true', default=False,
                        help='跳过相册内重复的图片（默认：禁用）')

    # 列表
    parser.add_argument('--throttle', type=float, default=None,
                        help='列表 API 请求最小间隔秒数（默认：2）')
    parser.add_argument('--page-size', type=int, default=None, help='列表分页大小（默认：25）')
    parser.add_argument('--search', type=str, default=None, help='搜索关键词')

    # 条目过滤
    parser.add_argument('--nsfw', action='store_true', help='包含 NSFW 内容')
    parser.add_argument('--min-score', type=int, default=None, help='最低分数')
    parser.add_argument('--no-albums', dest='albums', action='store_false', default=True,
                        help='不展开相册')

    # 图片过滤
    parser.add_argument('--min-size', type=str, default=None, help='最小文件大小，如 100KB')
    parser.add_argument('--max-size', type=str, default=None, help='最大文件大小，如 10MB')
    parser.add_argument('--min-width', type=int, default=0, help='最小宽度')
    parser.add_argument('--max-width', type=int, default=0, help='最大宽度（0 = 不限制）')
    parser.add_argument('--min-height', type=int, default=0, help='最小高度')
    parser.add_argument('--max-height', type=int, default=0, help='最大高度（0 = 不限制）')
    parser.add_argument('--no-portrait', action='store_true', help='跳过竖图')
    parser.add_argument('--no-landscape', action='store_true', help='跳过横图')
    parser.add_argument('--no-square', action='store_true', help='跳过方图')
    parser.add_argument('--types', type=str, default=None,
                        help='允许的图片格式，逗号分隔（如 jpeg,png,gif）')

    # 日志
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='控制台日志级别（默认：INFO）')

    return parser
