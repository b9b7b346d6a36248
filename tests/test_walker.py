"""
Unit tests for tree walking and file reads.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from gitdigest.core.exceptions import FileAccessError
from gitdigest.ingestion.walker import TreeWalker, file_size, is_excluded_directory, read_text

from helpers import write_tree


class TestTreeWalker(unittest.TestCase):
    """Tests for directory pruning and ordering."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _walk(self):
        return [relative for relative, _ in TreeWalker(self.tmpdir).walk()]

    def test_excluded_directories_are_pruned(self):
        """Test that excluded and hidden directories are never visited."""
        write_tree(self.tmpdir, {
            "src/index.js": "console.log(1);",
            "node_modules/pkg/index.js": "module.exports = 1;",
            ".git/config": "[core]",
            ".github/workflows/ci.yml": "on: push",
            "dist/bundle.js": "x",
            "coverage/lcov.info": "x",
            "venv/lib/site.py": "x",
            "__pycache__/a.cpython-311.pyc": b"\x00",
            "src/node_modules/inner.js": "x",
        })

        self.assertEqual(self._walk(), ["src/index.js"])

    def test_hidden_files_are_kept(self):
        """Test that only hidden directories are pruned, not hidden files."""
        write_tree(self.tmpdir, {".gitignore": "node_modules\n", "a.py": "x"})

        self.assertEqual(self._walk(), [".gitignore", "a.py"])

    def test_walk_order_is_sorted(self):
        """Test that directories are entered where they sort among files."""
        write_tree(self.tmpdir, {
            "b.txt": "b",
            "a.txt": "a",
            "src/z.py": "z",
            "src/lib/m.py": "m",
            "docs/x.md": "x",
        })

        self.assertEqual(
            self._walk(),
            ["a.txt", "b.txt", "docs/x.md", "src/lib/m.py", "src/z.py"],
        )

    def test_directories_interleave_with_files(self):
        """Test that a directory sorting before a file is walked first."""
        write_tree(self.tmpdir, {
            "main.py": "m",
            "lib/x.py": "x",
            "src/z.py": "z",
            "src/lib/m.py": "m",
        })

        self.assertEqual(
            self._walk(),
            ["lib/x.py", "main.py", "src/lib/m.py", "src/z.py"],
        )

    def test_yields_absolute_paths(self):
        """Test that absolute paths point at the files."""
        write_tree(self.tmpdir, {"src/a.py": "print(1)"})

        pairs = list(TreeWalker(self.tmpdir))
        self.assertEqual(len(pairs), 1)
        relative, absolute = pairs[0]
        self.assertEqual(relative, "src/a.py")
        self.assertEqual(absolute, self.tmpdir / "src" / "a.py")
        self.assertTrue(absolute.is_file())

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_symlinks_are_skipped(self):
        """Test that symbolic links are neither followed nor emitted."""
        outside = Path(tempfile.mkdtemp())
        try:
            write_tree(outside, {"secret.txt": "secret"})
            write_tree(self.tmpdir, {"a.py": "x"})
            os.symlink(outside / "secret.txt", self.tmpdir / "link.txt")
            os.symlink(outside, self.tmpdir / "linked_dir")

            self.assertEqual(self._walk(), ["a.py"])
        finally:
            shutil.rmtree(outside, ignore_errors=True)

    def test_is_excluded_directory(self):
        """Test the directory exclusion rule."""
        self.assertTrue(is_excluded_directory("node_modules"))
        self.assertTrue(is_excluded_directory(".cache"))
        self.assertTrue(is_excluded_directory("build"))
        self.assertFalse(is_excluded_directory("src"))
        self.assertFalse(is_excluded_directory("builder"))


class TestFileAccess(unittest.TestCase):
    """Tests for stat and read helpers."""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_file_size_is_bytes(self):
        """Test that size is the on-disk byte count."""
        write_tree(self.tmpdir, {"u.txt": "héllo"})

        self.assertEqual(file_size(self.tmpdir / "u.txt"), 6)
        self.assertEqual(len(read_text(self.tmpdir / "u.txt")), 5)

    def test_missing_file(self):
        """Test that vanished files raise FileAccessError."""
        with self.assertRaises(FileAccessError):
            file_size(self.tmpdir / "gone.txt", "gone.txt")
        with self.assertRaises(FileAccessError):
            read_text(self.tmpdir / "gone.txt", "gone.txt")

    def test_invalid_utf8_is_replaced(self):
        """Test that undecodable bytes do not fail the read."""
        write_tree(self.tmpdir, {"latin1.txt": b"caf\xe9 au lait"})

        self.assertEqual(read_text(self.tmpdir / "latin1.txt"), "caf\ufffd au lait")


if __name__ == "__main__":
    unittest.main()
