"""
Unit tests for file classification.
"""

import unittest

from gitdigest.analysis.classifier import FileClassifier, extension_of


class TestFileClassifier(unittest.TestCase):
    """Tests for language, binary, test and doc classification."""

    def setUp(self):
        self.classifier = FileClassifier()

    def test_language_mapping(self):
        """Test that language tags depend on the extension only."""
        self.assertEqual(self.classifier.detect_language("Button.tsx"), "typescript")
        self.assertEqual(self.classifier.detect_language("main.rs"), "rust")
        self.assertEqual(self.classifier.detect_language("notes.xyz"), "text")
        self.assertEqual(self.classifier.detect_language("src/app.PY"), "python")
        self.assertEqual(self.classifier.detect_language("scripts/run.sh"), "bash")

    def test_files_without_extension(self):
        """Test that extensionless and dotfiles classify as text."""
        self.assertEqual(self.classifier.detect_language("Makefile"), "text")
        self.assertEqual(self.classifier.detect_language(".gitignore"), "text")
        self.assertEqual(extension_of("dir.d/Makefile"), "")

    def test_binary_extensions(self):
        """Test known binary extensions."""
        for path in ("logo.png", "img/photo.JPEG", "dist.tar.gz", "font.woff2",
                     "app.exe", "clip.mp4", "song.mp3", "lib.so"):
            self.assertTrue(self.classifier.is_binary(path), path)

        for path in ("main.py", "README.md", "png.txt"):
            self.assertFalse(self.classifier.is_binary(path), path)

    def test_test_file_patterns(self):
        """Test test-intent path patterns."""
        for path in ("src/a.test.ts", "src/a.spec.js", "__tests__/a.js",
                     "tests/helpers.py", "Test/Main.java", "spec/model_spec.rb",
                     "pkg/foo_test.go"):
            self.assertTrue(self.classifier.is_test_file(path), path)

        for path in ("src/a.ts", "lib/index.js", "README.md"):
            self.assertFalse(self.classifier.is_test_file(path), path)

    def test_doc_file_patterns(self):
        """Test doc-signaling path patterns."""
        for path in ("README.md", "readme.txt", "docs/guide.rst", "doc/api.txt",
                     "notes.MD", "CHANGELOG", "LICENSE", "CONTRIBUTING.rst",
                     "documentation/index.html"):
            self.assertTrue(self.classifier.is_doc_file(path), path)

        for path in ("src/a.ts", "setup.py"):
            self.assertFalse(self.classifier.is_doc_file(path), path)

    def test_flags_are_independent(self):
        """Test that a file can be both a test and a doc file."""
        result = self.classifier.classify("tests/README.md")

        self.assertTrue(result.is_test)
        self.assertTrue(result.is_doc)
        self.assertEqual(result.language, "markdown")

    def test_classify(self):
        """Test the combined classification."""
        result = self.classifier.classify("src/components/Button.tsx")

        self.assertEqual(result.path, "src/components/Button.tsx")
        self.assertEqual(result.extension, ".tsx")
        self.assertEqual(result.language, "typescript")
        self.assertFalse(result.is_binary)
        self.assertFalse(result.is_test)
        self.assertFalse(result.is_doc)

    def test_supported_languages(self):
        """Test the language listing."""
        languages = self.classifier.get_supported_languages()

        self.assertIn("python", languages)
        self.assertEqual(languages, sorted(languages))
        self.assertEqual(
            sorted(self.classifier.get_extensions_for_language("typescript")),
            [".ts", ".tsx"],
        )


if __name__ == "__main__":
    unittest.main()
