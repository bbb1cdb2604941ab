"""
FileWriter 单元测试
"""
import unittest
import tempfile
import shutil
from pathlib import Path

from core.exceptions import DestinationExists
from core.writer import FileWriter


class TestFileWriter(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_creates_parent_directories(self):
        writer = FileWriter(self.test_dir)
        target = writer.write("pics/2024/a.jpg", b"data")
        self.assertEqual(target, self.test_dir / "pics" / "2024" / "a.jpg")
        self.assertEqual(target.read_bytes(), b"data")

    def test_existing_file_skipped_without_overwrite(self):
        """已存在且未开启覆盖：跳过，内容不变"""
        existing = self.test_dir / "a.jpg"
        existing.write_bytes(b"old")
        writer = FileWriter(self.test_dir, overwrite=False)
        with self.assertRaises(DestinationExists) as ctx:
            writer.write("a.jpg", b"new")
        self.assertEqual(ctx.exception.reason, "file_exists")
        self.assertEqual(existing.read_bytes(), b"old")

    def test_existing_file_replaced_with_overwrite(self):
        existing = self.test_dir / "a.jpg"
        existing.write_bytes(b"old")
        FileWriter(self.test_dir, overwrite=True).write("a.jpg", b"new")
        self.assertEqual(existing.read_bytes(), b"new")

    def test_absolute_path_ignores_root(self):
        writer = FileWriter("/nonexistent-root")
        target = writer.write(self.test_dir / "abs.jpg", b"x")
        self.assertEqual(target, self.test_dir / "abs.jpg")

    def test_should_skip(self):
        writer = FileWriter(self.test_dir)
        self.assertFalse(writer.should_skip(self.test_dir / "missing.jpg"))
        (self.test_dir / "here.jpg").write_bytes(b"")
        self.assertTrue(writer.should_skip(self.test_dir / "here.jpg"))


if __name__ == '__main__':
    unittest.main()
