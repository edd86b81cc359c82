"""
Shell module behavioral tests (front-end behavior over a dispatcher).

Scope
- Validate accept(): results, rendered faults, suggestions and fallbacks.
- Validate run(): exit word, EOF and blank lines.
- Validate the built-in --help command and its filters.

Conventions
- Test method names follow CamelCase per project convention.
- Output goes to an in-memory rich Console without colors.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from shellbind import Shell, command, positional, required, flag
from shellbind.faults import ParseException, UnknownCommand


def console():
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)


class Recorder:
    __prefix__ = "rec"

    def __init__(self):
        self.calls = []

    @command(descr="record two numbers")
    def add(self, x=positional(type=int), y=positional(type=int), verbose=flag()):
        self.calls.append((x, y, verbose))
        return x + y

    @command(descr="record a name")
    def name(self, value=required("-value")):
        self.calls.append(value)


class TestAccept(TestCase):
    """Behavioral tests for Shell.accept."""

    def setUp(self):
        self.recorder = Recorder()
        self.console = console()
        self.shell = Shell(self.recorder, console=self.console, colorful=False)

    def output(self):
        return self.console.file.getvalue()

    def testResult(self):
        self.assertEqual(self.shell.accept("rec add 3 4"), 7)
        self.assertEqual(self.recorder.calls, [(3, 4, False)])

    def testCallable(self):
        self.assertEqual(self.shell("rec add 1 1 -verbose"), 2)

    def testSuggestion(self):
        self.assertIsNone(self.shell.accept("rec add 3"))
        self.assertIn("did you mean", self.output())
        self.assertIn("rec add <x> <y> [-verbose]", self.output())

    def testUnknownWithoutSuggestion(self):
        shell = Shell(self.recorder, console=self.console, suggest=False, colorful=False)
        shell.accept("rec add 3")
        self.assertIn("unknown command", self.output())
        self.assertNotIn("did you mean", self.output())

    def testNothingAlike(self):
        self.shell.accept("zzz")
        self.assertIn("unknown command 'zzz'", self.output())

    def testParseFaultRendered(self):
        self.assertIsNone(self.shell.accept("rec add 3 x"))
        self.assertIn("invalid value 'x' for y", self.output())
        self.assertEqual(self.recorder.calls, [])

    def testFancyFault(self):
        shell = Shell(self.recorder, console=self.console, fancy=True, colorful=False)
        shell.accept("rec name")
        self.assertIn("missing required argument -value", self.output())

    def testFallback(self):
        faults = []
        append = faults.append
        self.assertIs(self.shell.fallback(append), append)
        self.shell.accept("rec add 3")
        self.shell.accept("rec add 3 x")
        self.assertIsInstance(faults[0], UnknownCommand)
        self.assertIsInstance(faults[1], ParseException)
        self.assertEqual(self.output(), "")

    def testFallbackSetOnce(self):
        self.shell.fallback(print)
        with self.assertRaises(TypeError):
            self.shell.fallback(print)

    def testFallbackMustBeCallable(self):
        with self.assertRaises(TypeError):
            self.shell.fallback("print")

    def testHandlerExceptionsPropagate(self):
        @command
        def fail():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            Shell(fail, console=self.console).accept("fail")

    def testInvalidOptions(self):
        with self.assertRaises(TypeError):
            Shell(prompt=1)
        with self.assertRaises(ValueError):
            Shell(exit=" ")


class TestRun(TestCase):
    """Behavioral tests for Shell.run."""

    def setUp(self):
        self.recorder = Recorder()
        self.shell = Shell(self.recorder, console=console())

    def testStopsAtExit(self):
        self.shell.run(io.StringIO("rec add 1 2\nexit\nrec add 3 4\n"))
        self.assertEqual(self.recorder.calls, [(1, 2, False)])

    def testStopsAtEof(self):
        self.shell.run(io.StringIO("rec add 1 2\nrec add 3 4"))
        self.assertEqual(self.recorder.calls, [(1, 2, False), (3, 4, False)])

    def testSkipsBlankLines(self):
        faults = []
        self.shell.fallback(faults.append)
        self.shell.run(io.StringIO("\n   \nrec add 1 2\n"))
        self.assertEqual(faults, [])
        self.assertEqual(self.recorder.calls, [(1, 2, False)])

    def testCustomExitWord(self):
        shell = Shell(self.recorder, console=console(), exit="quit")
        shell.run(io.StringIO("quit\nrec add 1 2\n"))
        self.assertEqual(self.recorder.calls, [])


class TestHelp(TestCase):
    """Behavioral tests for the built-in --help command."""

    def setUp(self):
        self.console = console()
        self.shell = Shell(Recorder(), console=self.console, colorful=False)

    def names(self, line):
        return [command.name for command in self.shell.accept(line)]

    def testListsEverything(self):
        self.assertEqual(self.names("--help"), ["add", "name", "--help"])
        self.assertIn("record two numbers", self.console.file.getvalue())

    def testFilterByName(self):
        self.assertEqual(self.names("--help -name add"), ["add"])

    def testFilterByPrefix(self):
        self.assertEqual(self.names("--help -prefix rec"), ["add", "name"])

    def testFilterByArguments(self):
        self.assertEqual(self.names("--help -args -verbose"), ["add"])
        self.assertEqual(self.names("--help -args x,y"), ["add"])
        self.assertEqual(self.names("--help -args x,-value"), [])

    def testHelperDisabled(self):
        faults = []
        shell = Shell(Recorder(), console=console(), helper=False)
        shell.fallback(faults.append)
        shell.accept("--help")
        self.assertIsInstance(faults[0], UnknownCommand)
        self.assertEqual(len(shell.commands), 2)


if __name__ == "__main__":
    unittest.main()
