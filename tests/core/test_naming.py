"""
命名模板测试
"""
import unittest

from config import DEFAULT_ALBUM_TEMPLATE, DEFAULT_SINGLE_TEMPLATE
from core.exceptions import TemplateError
from core.models import AlbumEntry, Item
from core.naming import NameContext, Namer, slugify


ITEM = Item(
    id="abc",
    name="t3_abc",
    title="Hello, World!",
    subreddit="pics",
    author="someone",
    domain="i.redd.it",
    created_utc=0,
)


class TestSlugify(unittest.TestCase):

    def test_basic(self):
        self.assertEqual(slugify("Hello, World!"), "hello-world")

    def test_accents_folded(self):
        self.assertEqual(slugify("Café  déjà vu"), "cafe-deja-vu")

    def test_fallback(self):
        self.assertEqual(slugify("日本"), "untitled")
        self.assertEqual(slugify("", fallback="x"), "x")


class TestNamer(unittest.TestCase):

    def setUp(self):
        self.namer = Namer(DEFAULT_SINGLE_TEMPLATE, DEFAULT_ALBUM_TEMPLATE)

    def test_default_single(self):
        self.assertEqual(
            self.namer.render_single(ITEM, ".jpg"),
            "pics/1970-01-01-00-00-00-abc-hello-world.jpg",
        )

    def test_default_album(self):
        entry = AlbumEntry(hash="XyZ", ext=".png", num=2)
        self.assertEqual(
            self.namer.render_album(ITEM, entry, ".png"),
            "pics/1970-01-01-00-00-00-abc-hello-world/2-XyZ.png",
        )

    def test_custom_fields(self):
        namer = Namer("{author}/{name}-{domain}{ext}", "{num:03d}{ext}")
        self.assertEqual(namer.render_single(ITEM, ".gif"), "someone/t3_abc-i.redd.it.gif")
        self.assertEqual(namer.render_album(ITEM, AlbumEntry(hash="h", num=7), ".jpg"), "007.jpg")

    def test_validate_ok(self):
        self.namer.validate()

    def test_unknown_field(self):
        with self.assertRaises(TemplateError):
            Namer("{nope}{ext}", DEFAULT_ALBUM_TEMPLATE).validate()

    def test_bad_syntax(self):
        with self.assertRaises(TemplateError):
            Namer(DEFAULT_SINGLE_TEMPLATE, "{num").validate()

    def test_empty_result(self):
        with self.assertRaises(TemplateError):
            Namer("", DEFAULT_ALBUM_TEMPLATE).validate()

    def test_context_without_entry(self):
        context = NameContext.build(ITEM, ".jpg")
        self.assertEqual(context.num, 0)
        self.assertEqual(context.image_hash, "")
        self.assertEqual(context.timestamp, "1970-01-01-00-00-00")


if __name__ == '__main__':
    unittest.main()
