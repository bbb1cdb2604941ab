"""
文件命名

模板使用 str.format 语法，字段来自 NameContext；启动时用样例上下文校验一次，
运行期的渲染错误同样视为致命（命名缺陷会影响每一条）。

可用字段:
    subreddit, id, name, title, title_slug, author, domain, timestamp, ext
    相册额外: num, image_hash, image_title
"""
import re
import unicodedata
from dataclasses import asdict, dataclass
from typing import Optional

from core.exceptions import TemplateError
from core.models import AlbumEntry, Item

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "untitled") -> str:
    """生成仅含 ASCII 小写字母、数字和连字符的文件名片段"""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    normalized = SLUG_PATTERN.sub("-", normalized.lower()).strip("-")
    return normalized or fallback


@dataclass(frozen=True)
class NameContext:
    """模板渲染上下文"""
    subreddit: str
    id: str
    name: str
    title: str
    title_slug: str
    author: str
    domain: str
    timestamp: str
    ext: str
    num: int = 0
    image_hash: str = ""
    image_title: str = ""

    @classmethod
    def build(cls, item: Item, ext: str, entry: Optional[AlbumEntry] = None) -> "NameContext":
        return cls(
            subreddit=item.subreddit,
            id=item.id,
            name=item.name,
            title=item.title,
            title_slug=slugify(item.title),
            author=item.author,
            domain=item.domain,
            timestamp=item.created.strftime(TIMESTAMP_FORMAT),
            ext=ext,
            num=entry.num if entry else 0,
            image_hash=entry.hash if entry else "",
            image_title=entry.title if entry else "",
        )


class Namer:
    """根据模板生成保存路径（相对或绝对）"""

    def __init__(self, single_template: str, album_template: str):
        self.single_template = single_template
        self.album_template = album_template

    def validate(self):
        """
        启动时校验模板

        Raises:
            TemplateError: 模板语法错误或引用了未知字段
        """
        sample = Item(id="abc123", title="Sample title", subreddit="pics", created_utc=0)
        entry = AlbumEntry(hash="XyZ", ext=".jpg", num=1)
        self.render_single(sample, ".jpg")
        self.render_album(sample, entry, ".jpg")

    def render_single(self, item: Item, ext: str) -> str:
        return self._render(self.single_template, NameContext.build(item, ext))

    def render_album(self, item: Item, entry: AlbumEntry, ext: str) -> str:
        return self._render(self.album_template, NameContext.build(item, ext, entry))

    @staticmethod
    def _render(template: str, context: NameContext) -> str:
        try:
            path = template.format(**asdict(context))
        except (KeyError, IndexError, ValueError, AttributeError) as e:
            raise TemplateError(f"template error in {template!r}: {e!r}")
        if not path.strip():
            raise TemplateError(f"template {template!r} rendered an empty path")
        return path
