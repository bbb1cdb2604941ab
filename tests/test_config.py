"""
配置模块单元测试
"""
import os
import unittest
from pathlib import Path
from unittest.mock import patch

from cli.commands import create_parser
from config import (
    Config,
    ConfigError,
    DedupConfig,
    FilterConfig,
    apply_cli_args,
    load_config_from_env,
    parse_size,
)


class TestParseSize(unittest.TestCase):

    def test_plain_bytes(self):
        self.assertEqual(parse_size("500"), 500)
        self.assertEqual(parse_size("500B"), 500)

    def test_units(self):
        self.assertEqual(parse_size("2KB"), 2048)
        self.assertEqual(parse_size("2k"), 2048)
        self.assertEqual(parse_size("1 MiB"), 1024 ** 2)
        self.assertEqual(parse_size("3mb"), 3 * 1024 ** 2)
        self.assertEqual(parse_size("1G"), 1024 ** 3)

    def test_empty(self):
        self.assertEqual(parse_size(None), 0)
        self.assertEqual(parse_size(""), 0)

    def test_invalid(self):
        for value in ("lots", "1.5MB", "-1", "10TB"):
            with self.assertRaises(ConfigError):
                parse_size(value)


class TestDefaults(unittest.TestCase):

    def test_config_defaults(self):
        config = Config()
        self.assertEqual(config.crawler.throttle, 2.0)
        self.assertEqual(config.crawler.page_size, 25)
        self.assertEqual(config.output.output_root, Path("."))
        self.assertFalse(config.output.overwrite)

    def test_dedup_defaults(self):
        dedup = DedupConfig()
        self.assertTrue(dedup.skip_duplicate_urls)
        self.assertTrue(dedup.skip_duplicate_hashes)
        self.assertFalse(dedup.skip_duplicate_urls_in_albums)
        self.assertFalse(dedup.skip_duplicate_hashes_in_albums)

    def test_filter_constraints(self):
        self.assertFalse(FilterConfig(min_size=10, nsfw=True).has_image_constraints())
        self.assertTrue(FilterConfig(allowed_types={"png"}).has_image_constraints())
        self.assertTrue(FilterConfig(disabled_orientations={"square"}).has_image_constraints())

    def test_filters_frozen(self):
        with self.assertRaises(Exception):
            FilterConfig().nsfw = True


class TestLoadConfigFromEnv(unittest.TestCase):

    @patch.dict(os.environ, {
        "SPIDER_THROTTLE": "5",
        "SPIDER_PAGE_SIZE": "100",
        "SPIDER_OUTPUT_ROOT": "/tmp/out",
        "SPIDER_OVERWRITE": "true",
        "LOG_LEVEL": "DEBUG",
    })
    def test_env(self):
        config = load_config_from_env()
        self.assertEqual(config.crawler.throttle, 5.0)
        self.assertEqual(config.crawler.page_size, 100)
        self.assertEqual(config.output.output_root, Path("/tmp/out"))
        self.assertTrue(config.output.overwrite)
        self.assertEqual(config.log.log_level, "DEBUG")


class TestApplyCliArgs(unittest.TestCase):

    def setUp(self):
        self.parser = create_parser()

    def apply(self, argv):
        return apply_cli_args(Config(), self.parser.parse_args(argv))

    def test_sources_and_listing(self):
        config = self.apply(["pics", "aww", "--throttle", "4", "--page-size", "10", "--search", "dog"])
        self.assertEqual(config.sources, ["pics", "aww"])
        self.assertEqual(config.crawler.throttle, 4.0)
        self.assertEqual(config.crawler.page_size, 10)
        self.assertEqual(config.crawler.search, "dog")

    def test_unset_values_keep_base(self):
        config = self.apply(["pics"])
        self.assertEqual(config.crawler.throttle, 2.0)
        self.assertIsNone(config.crawler.search)
        self.assertEqual(config.filters, FilterConfig())
        self.assertEqual(config.dedup, DedupConfig())

    def test_filters(self):
        config = self.apply([
            "pics", "--nsfw", "--min-score", "5", "--min-size", "10KB", "--max-size", "1MB",
            "--no-landscape", "--no-square", "--types", "JPG, png", "--no-albums",
        ])
        filters = config.filters
        self.assertTrue(filters.nsfw)
        self.assertEqual(filters.min_score, 5)
        self.assertEqual(filters.min_size, 10 * 1024)
        self.assertEqual(filters.max_size, 1024 ** 2)
        self.assertEqual(filters.disabled_orientations, {"landscape", "square"})
        self.assertEqual(filters.allowed_types, {"jpeg", "png"})
        self.assertFalse(filters.albums)

    def test_dedup_flags(self):
        config = self.apply(["pics", "--no-skip-duplicates", "--skip-duplicates-in-albums"])
        self.assertFalse(config.dedup.skip_duplicate_urls)
        self.assertFalse(config.dedup.skip_duplicate_hashes)
        self.assertTrue(config.dedup.skip_duplicate_urls_in_albums)
        self.assertTrue(config.dedup.skip_duplicate_hashes_in_albums)

    def test_output(self):
        config = self.apply(["pics", "--out", "dl", "--overwrite", "--quiet",
                             "--single-template", "{id}{ext}", "--log-level", "DEBUG"])
        self.assertEqual(config.output.output_root, Path("dl"))
        self.assertTrue(config.output.overwrite)
        self.assertTrue(config.output.quiet)
        self.assertEqual(config.output.single_template, "{id}{ext}")
        self.assertEqual(config.log.log_level, "DEBUG")

    def test_bad_size(self):
        with self.assertRaises(ConfigError):
            self.apply(["pics", "--min-size", "big"])


if __name__ == '__main__':
    unittest.main()
