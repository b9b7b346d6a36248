"""
End-to-end tests for the digest engine with a fake fetcher.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gitdigest.core.config import DigestConfig
from gitdigest.core.exceptions import (
    FetchError,
    FileAccessError,
    InvalidInputError,
    InvalidSourceError,
)
from gitdigest.core.options import OutputFormat, ProcessOptions
from gitdigest.engine import DigestEngine, digest_repository
from gitdigest.ingestion.source import RepositorySource
from gitdigest.ingestion.walker import file_size, read_text

from helpers import FailingFetcher, FakeFetcher, code

REPO = "https://github.com/owner/repo"


def make_options(**overrides):
    values = dict(
        include_tests=False,
        include_docs=False,
        smart_filter=False,
        max_file_size=100000,
        output_format=OutputFormat.MARKDOWN,
    )
    values.update(overrides)
    return ProcessOptions(**values)


class EngineTestCase(unittest.TestCase):

    def setUp(self):
        self.base_dir = Path(tempfile.mkdtemp())
        self.config = DigestConfig()
        self.config.workspace.base_dir = str(self.base_dir)

    def tearDown(self):
        shutil.rmtree(self.base_dir, ignore_errors=True)

    def engine(self, fetcher):
        return DigestEngine(self.config, fetcher=fetcher)

    def assertWorkspaceGone(self, fetcher):
        self.assertTrue(fetcher.destinations)
        for destination in fetcher.destinations:
            self.assertFalse(destination.exists())
        self.assertEqual(list(self.base_dir.iterdir()), [])


class TestDigest(EngineTestCase):
    """Tests for filtering and rendering through the whole pipeline."""

    def test_tests_and_docs_excluded(self):
        """Test the basic include/exclude example."""
        fetcher = FakeFetcher({
            "src/a.ts": code(200),
            "src/a.test.ts": code(120),
            "README.md": "# Readme\n" + "x" * 491,
        })

        result = self.engine(fetcher).digest(REPO, make_options())

        self.assertEqual(result.file_paths, ["src/a.ts"])
        self.assertEqual(result.stats.total_files, 1)
        self.assertEqual(result.stats.total_size, 200)
        self.assertEqual(result.stats.test_files, 0)
        self.assertEqual(result.stats.doc_files, 0)
        self.assertEqual(result.stats.languages, ("typescript",))
        self.assertTrue(result.content.startswith(f"# Repository: {REPO}\n"))
        self.assertWorkspaceGone(fetcher)

    def test_tests_included(self):
        """Test that enabling tests keeps test files and counts them."""
        fetcher = FakeFetcher({"src/a.ts": code(200), "src/a.test.ts": code(120)})

        result = self.engine(fetcher).digest(REPO, make_options(include_tests=True))

        self.assertEqual(result.file_paths, ["src/a.test.ts", "src/a.ts"])
        self.assertEqual(result.stats.test_files, 1)

    def test_docs_included(self):
        """Test that enabling docs keeps documentation files."""
        fetcher = FakeFetcher({"README.md": "# Readme\n" + "x" * 100, "docs/guide.txt": "guide text"})

        result = self.engine(fetcher).digest(REPO, make_options(include_docs=True))

        self.assertEqual(result.file_paths, ["README.md", "docs/guide.txt"])
        self.assertEqual(result.stats.doc_files, 2)

    def test_binary_never_included(self):
        """Test that binary files are dropped under every option set."""
        fetcher = FakeFetcher({
            "logo.png": b"\x89PNG\r\n\x1a\n" + b"\x00" * 64,
            "lib/native.so": b"\x7fELF" + b"\x00" * 64,
            "main.py": code(40, "print('hello')\n"),
        })
        options = make_options(include_tests=True, include_docs=True, max_file_size=10 ** 9)

        result = self.engine(fetcher).digest(REPO, options)

        self.assertEqual(result.file_paths, ["main.py"])

    def test_oversize_excluded(self):
        """Test the byte-size ceiling."""
        fetcher = FakeFetcher({"big.js": code(101), "edge.js": code(100), "small.js": code(10)})

        result = self.engine(fetcher).digest(REPO, make_options(max_file_size=100))

        self.assertEqual(result.file_paths, ["edge.js", "small.js"])

    def test_zero_size_ceiling(self):
        """Test that a zero ceiling keeps only empty files."""
        fetcher = FakeFetcher({"empty.py": "", "full.py": "x = 1\n"})

        result = self.engine(fetcher).digest(REPO, make_options(max_file_size=0))

        self.assertEqual(result.file_paths, ["empty.py"])

    def test_excluded_directories_never_visited(self):
        """Test that dependency and VCS directories are pruned."""
        fetcher = FakeFetcher({
            "index.js": code(50),
            "node_modules/pkg/index.js": code(50),
            ".git/config": "[core]\n",
            ".github/workflows/ci.yml": "on: push\n",
            "build/out.js": code(50),
        })

        result = self.engine(fetcher).digest(REPO, make_options())

        self.assertEqual(result.file_paths, ["index.js"])

    def test_smart_filter(self):
        """Test that the smart filter drops noise when enabled."""
        files = {
            "tiny.py": "x = 1",
            "dist.min.js": code(200),
            "schema.py": "# Code generated by protoc. DO NOT EDIT.\n" + code(100),
            "app.py": code(200, "value = compute()\n"),
        }

        filtered = self.engine(FakeFetcher(files)).digest(REPO, make_options(smart_filter=True))
        unfiltered = self.engine(FakeFetcher(files)).digest(REPO, make_options())

        self.assertEqual(filtered.file_paths, ["app.py"])
        self.assertEqual(len(unfiltered.file_paths), 4)

    def test_empty_repository(self):
        """Test a repository with nothing to include."""
        fetcher = FakeFetcher({"logo.png": b"\x89PNG"})

        result = self.engine(fetcher).digest(REPO, make_options())

        self.assertEqual(result.stats.total_files, 0)
        self.assertEqual(result.stats.languages, ())
        self.assertIn("- **Languages**: \n", result.content)

    def test_invalid_utf8_is_replaced(self):
        """Test that undecodable bytes do not fail the request."""
        fetcher = FakeFetcher({"latin.txt": b"caf\xe9 au lait"})

        result = self.engine(fetcher).digest(
            REPO, make_options(output_format=OutputFormat.STRUCTURED)
        )

        record = result.files[0]
        self.assertEqual(record.content, "caf\ufffd au lait")
        self.assertEqual(record.size, 12)

    def test_structured_render(self):
        """Test the structured output end to end."""
        fetcher = FakeFetcher({"src/main.rs": "fn main() {}\n"})

        result = self.engine(fetcher).digest(
            REPO, make_options(output_format=OutputFormat.STRUCTURED)
        )
        data = json.loads(result.render())

        self.assertEqual(data["repository"], REPO)
        self.assertEqual(data["files"], [{
            "path": "src/main.rs",
            "content": "fn main() {}\n",
            "language": "rust",
            "size": 13,
        }])

    def test_deterministic(self):
        """Test that identical trees produce identical digests."""
        files = {"b.py": code(30), "a/z.go": code(40), "a/y.ts": code(50), "c.md": "# c\n"}
        options = make_options(include_docs=True)

        first = self.engine(FakeFetcher(files)).digest(REPO, options).render()
        second = self.engine(FakeFetcher(files)).digest(REPO, options).render()

        self.assertEqual(first, second)

    def test_repository_identifier_is_trimmed_url(self):
        """Test that the digest names the repository as submitted."""
        fetcher = FakeFetcher({"a.py": code(20)})

        result = self.engine(fetcher).digest(f"  {REPO}.git  ", make_options())

        self.assertEqual(result.repository, f"{REPO}.git")
        self.assertEqual(fetcher.sources[0].clone_url, f"{REPO}.git")


class TestFailures(EngineTestCase):
    """Tests for validation and cleanup on failure."""

    def test_invalid_url_rejected_before_fetch(self):
        """Test that validation happens before any filesystem work."""
        fetcher = FakeFetcher({"a.py": code(20)})

        with self.assertRaises(InvalidSourceError):
            self.engine(fetcher).digest("https://example.com/owner/repo", make_options())

        self.assertEqual(fetcher.sources, [])
        self.assertEqual(list(self.base_dir.iterdir()), [])

    def test_options_type_checked(self):
        """Test that raw dictionaries are not accepted as options."""
        with self.assertRaises(InvalidInputError):
            self.engine(FakeFetcher({})).digest(REPO, {"includeTests": True})

    def test_fetch_failure_removes_workspace(self):
        """Test cleanup after a failed clone."""
        fetcher = FailingFetcher({"partial/file.py": code(20)})

        with self.assertRaises(FetchError) as ctx:
            self.engine(fetcher).digest(REPO, make_options())

        self.assertIn("stderr", ctx.exception.details)
        self.assertWorkspaceGone(fetcher)

    def test_success_removes_workspace(self):
        """Test cleanup after a successful request."""
        fetcher = FakeFetcher({"a.py": code(20)})

        self.engine(fetcher).digest(REPO, make_options())

        self.assertWorkspaceGone(fetcher)


class TestPipelineLayout(EngineTestCase):
    """Tests for stage registration."""

    def test_stage_order(self):
        """Test that the engine registers every stage in order."""
        pipeline = self.engine(FakeFetcher({})).pipeline

        self.assertEqual(pipeline.list_stages(), ["fetch", "collect", "aggregate", "serialize"])
        self.assertEqual(pipeline.execution_order, pipeline.list_stages())
        self.assertEqual(pipeline.get_stage("aggregate").dependencies, ["collect"])
        self.assertIsNone(pipeline.get_stage("embed"))

    def test_unknown_stage_in_order(self):
        """Test that the execution order only names registered stages."""
        with self.assertRaises(ValueError):
            self.engine(FakeFetcher({})).pipeline.set_execution_order(["fetch", "embed"])

    def test_digest_repository(self):
        """Test the convenience function with configured defaults."""
        fetcher = FakeFetcher({"src/app.py": code(200)})

        with mock.patch("gitdigest.ingestion.collector.GitHandler", return_value=fetcher):
            result = digest_repository(REPO, config=self.config)

        self.assertEqual(result.output_format, OutputFormat.MARKDOWN)
        self.assertEqual(result.file_paths, ["src/app.py"])


class TestUnreadableFiles(EngineTestCase):
    """Tests for per-file read failures."""

    def test_unreadable_file_is_skipped(self):
        """Test that one unreadable file drops out while the walk continues."""
        fetcher = FakeFetcher({"a.py": code(20), "b.py": code(20), "c.py": code(20)})
        engine = self.engine(fetcher)
        source = RepositorySource.parse(REPO)

        def failing_read(path, relative_path=None):
            if relative_path == "b.py":
                raise FileAccessError(relative_path, "Permission denied")
            return read_text(path, relative_path)

        with mock.patch("gitdigest.ingestion.collector.read_text", side_effect=failing_read):
            state = engine.pipeline.run(source, make_options())

        result = state.data["serialize"]
        self.assertEqual(result.file_paths, ["a.py", "c.py"])
        self.assertEqual(result.stats.total_files, 2)
        collect_metrics = state.stage_results["collect"].metrics
        self.assertEqual(collect_metrics["files_seen"], 3)
        self.assertEqual(collect_metrics["files_unreadable"], 1)
        self.assertFalse(state.workspace.exists())
        self.assertWorkspaceGone(fetcher)

    def test_vanished_file_is_skipped(self):
        """Test that a file deleted between walk and stat is skipped."""
        fetcher = FakeFetcher({"a.py": code(20), "b.py": code(20)})

        def vanishing_size(path, relative_path=None):
            if relative_path == "a.py":
                path.unlink()
            return file_size(path, relative_path)

        with mock.patch("gitdigest.ingestion.collector.file_size", side_effect=vanishing_size):
            result = self.engine(fetcher).digest(REPO, make_options())

        self.assertEqual(result.file_paths, ["b.py"])
        self.assertWorkspaceGone(fetcher)


class TestProcessRequest(EngineTestCase):
    """Tests for request-body handling."""

    def test_defaults_applied(self):
        """Test that omitted options fall back to configured defaults."""
        fetcher = FakeFetcher({"src/app.py": code(200), "tests/test_app.py": code(200)})

        result = self.engine(fetcher).process_request({"url": REPO})

        self.assertEqual(result.output_format, OutputFormat.MARKDOWN)
        self.assertEqual(result.file_paths, ["src/app.py", "tests/test_app.py"])

    def test_options_parsed(self):
        """Test camelCase options from a request body."""
        fetcher = FakeFetcher({"src/app.py": code(200), "tests/test_app.py": code(200)})
        payload = {
            "url": REPO,
            "options": {
                "includeTests": False,
                "includeDocs": True,
                "smartFilter": True,
                "maxFileSize": 51200,
                "outputFormat": "text",
            },
        }

        result = self.engine(fetcher).process_request(payload)

        self.assertEqual(result.output_format, OutputFormat.PLAINTEXT)
        self.assertEqual(result.file_paths, ["src/app.py"])

    def test_missing_options_without_defaults(self):
        """Test that strict parsing reports the missing field."""
        with self.assertRaises(InvalidInputError):
            self.engine(FakeFetcher({})).process_request(
                {"url": REPO, "options": {"includeTests": True}}, apply_defaults=False
            )

    def test_private_requires_credential(self):
        """Test that private sources need a credential."""
        fetcher = FakeFetcher({})

        with self.assertRaises(InvalidSourceError):
            self.engine(fetcher).process_request({"url": REPO, "options": {"private": True}})

        self.assertEqual(fetcher.sources, [])

    def test_credential_reaches_source(self):
        """Test that the credential travels with the source."""
        fetcher = FakeFetcher({"a.py": code(20)})
        payload = {"url": REPO, "options": {"private": True, "credential": "s3cret"}}

        self.engine(fetcher).process_request(payload)

        source = fetcher.sources[0]
        self.assertTrue(source.private)
        self.assertIn("s3cret", source.authenticated_clone_url())

    def test_malformed_bodies(self):
        """Test rejection of malformed bodies."""
        engine = self.engine(FakeFetcher({}))

        for payload in (None, [], {"url": 42}, {"url": REPO, "options": []},
                        {"url": REPO, "options": {"private": "yes"}},
                        {"url": REPO, "options": {"maxFileSize": -1}}):
            with self.subTest(payload=payload):
                with self.assertRaises(InvalidInputError):
                    engine.process_request(payload)


if __name__ == "__main__":
    unittest.main()
