"""Tests for converging properties and reporting the transitions."""

import tempfile
import unittest
from pathlib import Path

from fakes import FakeExecutor

from statesync.core.applier import PropertyApplier
from statesync.core.audit import AuditChain, AuditLogger, AuditResult
from statesync.core.context import ReconcileContext
from statesync.core.executor import CommandResult
from statesync.core.property import NOT_FOUND
from statesync.core.report import ChangeReporter
from statesync.core.resource import User
from statesync.nameservice.netinfo import UID, Comment


REPORT_REALNAME = "nireport / /users name realname"
MODIFY_BOB = "niutil -createprop / /users/bob realname 'Bob Smith'"


class SequencedExecutor(FakeExecutor):
    """Serves successive outputs for the same command line."""

    def __init__(self, sequences, **kwargs):
        super().__init__(**kwargs)
        self.sequences = {k: list(v) for k, v in sequences.items()}

    def run(self, command):
        if command in self.sequences and self.sequences[command]:
            self.responses[command] = self.sequences[command].pop(0)
        return super().run(command)


class TestPlan(unittest.TestCase):
    def _prop(self, prop_class, executor, **kwargs):
        return prop_class(parent=User("bob"), context=ReconcileContext(executor=executor), **kwargs)

    def test_in_sync_needs_nothing(self):
        prop = self._prop(Comment, FakeExecutor(), should="Bob Smith", is_="Bob Smith")
        self.assertEqual(PropertyApplier().plan(prop), [])

    def test_divergent_value_is_modified(self):
        prop = self._prop(Comment, FakeExecutor(), should="Bob Smith", is_="Robert")
        commands = PropertyApplier().plan(prop)
        self.assertEqual([c.text for c in commands], [MODIFY_BOB])

    def test_missing_object_is_created_then_modified(self):
        prop = self._prop(Comment, FakeExecutor(), should="Bob Smith", is_=NOT_FOUND)
        commands = PropertyApplier().plan(prop)
        self.assertEqual([c.text for c in commands], ["niutil -create / /users/bob", MODIFY_BOB])

    def test_existing_object_missing_value_is_only_modified(self):
        executor = FakeExecutor({"nidump -r /users/bob /": "name = bob;"})
        prop = self._prop(Comment, executor, should="Bob Smith", is_=NOT_FOUND)
        commands = PropertyApplier().plan(prop)
        self.assertEqual([c.text for c in commands], [MODIFY_BOB])

    def test_missing_object_with_stderr_from_nidump_is_created(self):
        executor = FakeExecutor(
            {"nidump -r /users/bob /": CommandResult(output="", exit_status=1, error="nidump: /users/bob: No such directory\n")}
        )
        prop = self._prop(Comment, executor, should="Bob Smith", is_=NOT_FOUND)
        commands = PropertyApplier().plan(prop)
        self.assertEqual([c.text for c in commands], ["niutil -create / /users/bob", MODIFY_BOB])

    def test_absent_should_undefines_only_the_property(self):
        prop = self._prop(Comment, FakeExecutor(), should=NOT_FOUND, is_="Bob")
        self.assertEqual(prop.change_description(), "undefined comment from 'Bob'")
        commands = PropertyApplier().plan(prop)
        self.assertEqual([c.text for c in commands], ["niutil -destroyprop / /users/bob realname"])

    def test_absent_should_already_absent_needs_nothing(self):
        prop = self._prop(UID, FakeExecutor(), should=NOT_FOUND, is_=NOT_FOUND)
        self.assertEqual(PropertyApplier().plan(prop), [])


class TestSync(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.chain = AuditChain(Path(self.tmpdir.name) / "audit.db")
        self.reporter = ChangeReporter(AuditLogger(self.chain, user="tester"))

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_sync_executes_and_rereads(self):
        executor = SequencedExecutor(
            {REPORT_REALNAME: ["bob Robert\n", "bob Bob Smith\n"]},
        )
        prop = Comment(parent=User("bob"), should="Bob Smith", context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.SUCCESS)
        self.assertTrue(result.changed)
        self.assertIn(MODIFY_BOB, executor.commands)
        self.assertEqual(prop.is_, "Bob Smith")
        self.assertTrue(prop.insync())
        self.assertEqual(result.event.message, "comment changed 'Robert' to 'Bob Smith'")

        entries = self.chain.query(resource="/user[bob]")
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].result, AuditResult.SUCCESS)
        self.assertEqual(entries[0].details["is"], "Robert")

    def test_in_sync_property_is_left_alone(self):
        executor = FakeExecutor({REPORT_REALNAME: "bob Bob Smith\n"})
        prop = Comment(parent=User("bob"), should="Bob Smith", context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.IN_SYNC)
        self.assertNotIn(MODIFY_BOB, executor.commands)
        self.assertEqual(self.chain.query(), [])

    def test_numeric_comment_stays_in_sync(self):
        executor = FakeExecutor({REPORT_REALNAME: "bob 1234\n"})
        prop = Comment(parent=User("bob"), should="1234", context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.IN_SYNC)
        self.assertFalse(any(c.startswith("niutil") for c in executor.commands))

    def test_undefining_comment_keeps_the_user(self):
        executor = SequencedExecutor({REPORT_REALNAME: ["bob Bob\n", ""]})
        prop = Comment(parent=User("bob"), should=NOT_FOUND, context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.SUCCESS)
        self.assertIn("niutil -destroyprop / /users/bob realname", executor.commands)
        self.assertNotIn("niutil -destroy / /users/bob", executor.commands)
        self.assertIs(prop.is_, NOT_FOUND)
        self.assertEqual(result.event.message, "undefined comment from 'Bob'")

    def test_noop_reports_without_executing(self):
        executor = FakeExecutor({REPORT_REALNAME: "bob Robert\n"})
        context = ReconcileContext(executor=executor, noop=True)
        prop = Comment(parent=User("bob"), should="Bob Smith", context=context)

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.NOOP)
        self.assertNotIn(MODIFY_BOB, executor.commands)
        self.assertTrue(result.event.noop)
        self.assertTrue(result.event.message.endswith("(noop)"))
        self.assertEqual(self.chain.query()[0].result, AuditResult.NOOP)

    def test_dry_run_applier_does_not_execute(self):
        executor = FakeExecutor({REPORT_REALNAME: "bob Robert\n"})
        prop = Comment(parent=User("bob"), should="Bob Smith", context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter, dry_run=True).sync(prop)

        self.assertEqual(result.result, AuditResult.NOOP)
        self.assertNotIn(MODIFY_BOB, executor.commands)

    def test_failed_command_is_reported(self):
        executor = FakeExecutor(
            {
                REPORT_REALNAME: "bob Robert\n",
                MODIFY_BOB: CommandResult(output="niutil: permission denied", exit_status=1),
            }
        )
        prop = Comment(parent=User("bob"), should="Bob Smith", context=ReconcileContext(executor=executor))

        result = PropertyApplier(self.reporter).sync(prop)

        self.assertEqual(result.result, AuditResult.FAILURE)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("permission denied", result.errors[0])
        self.assertEqual(self.chain.query()[0].result, AuditResult.FAILURE)
        ok, errors = self.chain.verify_chain()
        self.assertTrue(ok, errors)


class TestChangeReporter(unittest.TestCase):
    def test_describe_builds_structured_record(self):
        prop = Comment(parent=User("bob", loglevel="info"), should="Bob Smith", is_=NOT_FOUND)
        event = ChangeReporter().describe(prop)
        record = event.to_dict()
        self.assertEqual(record["resource"], "/user[bob]")
        self.assertEqual(record["property"], "comment")
        self.assertEqual(record["message"], "defined 'comment' as 'Bob Smith'")
        self.assertEqual(record["is"], "notfound")
        self.assertEqual(record["level"], "info")
        self.assertFalse(record["noop"])

    def test_report_logs_through_property(self):
        prop = Comment(parent=User("bob", loglevel="notice"), should="Bob Smith", is_="Robert")
        with self.assertLogs("statesync.events", level="INFO") as captured:
            ChangeReporter().report(prop, AuditResult.SUCCESS)
        self.assertIn("comment changed 'Robert' to 'Bob Smith'", captured.output[0])
        self.assertTrue(captured.output[0].startswith("NOTICE:"))


if __name__ == "__main__":
    unittest.main()
