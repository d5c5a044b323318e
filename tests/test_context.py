"""Tests for reconciliation settings, the executor and the value pipelines."""

import unittest
from pathlib import Path

from statesync.core.context import ReconcileContext
from statesync.core.errors import InvalidValue
from statesync.core.executor import CommandExecutor
from statesync.core.matcher import matches
from statesync.core.pipeline import IntegerPipeline, PathPipeline, TextPipeline


class TestReconcileContext(unittest.TestCase):
    def test_defaults(self):
        ctx = ReconcileContext.from_env({})
        self.assertFalse(ctx.noop)
        self.assertEqual(ctx.loglevel, "notice")
        self.assertEqual(ctx.data_dir, Path.home() / ".statesync")

    def test_environment(self):
        ctx = ReconcileContext.from_env(
            {"STATESYNC_NOOP": "yes", "STATESYNC_LOGLEVEL": "DEBUG", "STATESYNC_DATA_DIR": "/tmp/ss"}
        )
        self.assertTrue(ctx.noop)
        self.assertEqual(ctx.loglevel, "debug")
        self.assertEqual(ctx.data_dir, Path("/tmp/ss"))

    def test_overrides_win_unless_none(self):
        ctx = ReconcileContext.from_env({"STATESYNC_NOOP": "1"}, noop=None, loglevel="info")
        self.assertTrue(ctx.noop)
        self.assertEqual(ctx.loglevel, "info")

    def test_context_is_immutable(self):
        ctx = ReconcileContext()
        with self.assertRaises(AttributeError):
            ctx.noop = True


class TestCommandExecutor(unittest.TestCase):
    def test_captures_output_and_status(self):
        result = CommandExecutor().run("echo hello; echo oops 1>&2; exit 3")
        self.assertEqual(result.exit_status, 3)
        self.assertFalse(result.ok)
        self.assertEqual(result.output, "hello\n")
        self.assertIn("oops", result.error)

    def test_missing_tool_reports_on_stderr_only(self):
        result = CommandExecutor().run("definitely-not-a-real-tool-xyz -r /users/nosuchuser /")
        self.assertFalse(result.ok)
        self.assertEqual(result.output, "")
        self.assertNotEqual(result.error, "")

    def test_which(self):
        self.assertIsNone(CommandExecutor().which("definitely-not-a-real-tool-xyz"))


class TestMatcher(unittest.TestCase):
    def test_matches(self):
        self.assertTrue(matches(2, [1, 2]))
        self.assertFalse(matches("2", [1, 2]))
        self.assertFalse(matches(None, []))


class TestPipelines(unittest.TestCase):
    def test_integer(self):
        pipeline = IntegerPipeline()
        for value in (5, "5", "-5", "+5"):
            pipeline.validate(value)
        self.assertEqual(pipeline.munge("+5"), 5)
        for value in ("5a", 1.5, True, None):
            with self.assertRaises(InvalidValue):
                pipeline.validate(value)

    def test_path(self):
        PathPipeline().validate("/bin/sh")
        with self.assertRaises(InvalidValue):
            PathPipeline().validate("bin/sh")

    def test_text(self):
        TextPipeline().validate("Bob Smith")
        for value in ("a\nb", "O'Brien", 3):
            with self.assertRaises(InvalidValue):
                TextPipeline().validate(value)


if __name__ == "__main__":
    unittest.main()
