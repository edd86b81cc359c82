"""
Commands module behavioral tests (binding, handler discovery, commands).

Scope
- Validate the @command binding: default names, docstring descr, self skip,
  keyword-only parameters and rejected declarations.
- Validate handlers(): functions, bound methods, owner instances, __prefix__.
- Validate Command: build faults, positions, signature, likeness, invoke.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from shellbind import (
    Command,
    Handler,
    Converters,
    Positional,
    Required,
    Optional,
    command,
    handlers,
    positional,
    required,
    optional,
    flag,
)
from shellbind.faults import InvalidHandlerError, NoConverterFound


@command(descr="add two numbers")
def add(x=positional(type=int), y=positional(type=int), verbose=flag()):
    return x, y, verbose


@command
def greet(name=required(), *, loud=flag()):
    """Say hello.

    Longer explanation that never shows up in help.
    """
    return name.upper() if loud else name


class Calculator:
    __prefix__ = "calc"

    def __init__(self):
        self.calls = []

    @command
    def mul(self, x=positional(type=int), y=positional(type=int)):
        self.calls.append((x, y))
        return x * y

    @staticmethod
    @command
    def ping():
        return "pong"

    @classmethod
    @command(prefix="meta")
    def kind(cls):
        return cls.__name__

    def helper(self):
        return "not a command"


class TestBinding(TestCase):
    """Behavioral tests for the @command decorator."""

    def testFunctionIsReturnedUnchanged(self):
        self.assertEqual(add(1, 2, False), (1, 2, False))
        self.assertIsInstance(add.__handler__, Handler)

    def testDefaultNames(self):
        handler = add.__handler__
        self.assertEqual(handler.name, "add")
        self.assertEqual([parameter.name for parameter in handler.parameters], ["x", "y", "-verbose"])

    def testUnderscoreBecomesDash(self):
        @command
        def tool(dry_run=flag()):
            pass

        self.assertEqual(tool.__handler__.parameters[0].name, "-dry-run")

    def testExplicitNamesWin(self):
        @command(name="sum")
        def total(values=positional("numbers", list[int])):
            pass

        self.assertEqual(total.__handler__.name, "sum")
        self.assertEqual(total.__handler__.parameters[0].name, "numbers")

    def testDescrFromDocstring(self):
        self.assertEqual(greet.__handler__.descr, "Say hello.")

    def testSelfIsSkipped(self):
        parameters = Calculator.mul.__handler__.parameters
        self.assertEqual([parameter.name for parameter in parameters], ["x", "y"])

    def testKeywordOnlyParameters(self):
        self.assertEqual(greet.__handler__.keywords, ("loud",))

    def testPlainDefaultRejected(self):
        with self.assertRaises(InvalidHandlerError):
            @command
            def tool(x=1):
                pass

    def testVariadicRejected(self):
        with self.assertRaises(InvalidHandlerError):
            @command
            def tool(*values):
                pass

    def testStaticmethodOrderEnforced(self):
        with self.assertRaises(TypeError):
            command(staticmethod(lambda: None))


class TestHandlers(TestCase):
    """Behavioral tests for handler discovery."""

    def testFunctionSource(self):
        self.assertEqual(list(handlers(add)), [(None, add.__handler__)])

    def testHandlerSource(self):
        handler = Handler(lambda: None, "noop")
        self.assertEqual(list(handlers(handler)), [(None, handler)])

    def testBoundMethodSource(self):
        calculator = Calculator()
        (owner, handler), = handlers(calculator.mul)
        self.assertIs(owner, calculator)
        self.assertEqual(handler.name, "mul")

    def testInstanceSource(self):
        calculator = Calculator()
        found = {handler.name: (owner, handler) for owner, handler in handlers(calculator)}
        self.assertEqual(set(found), {"mul", "ping", "kind"})
        self.assertIs(found["mul"][0], calculator)
        self.assertIsNone(found["ping"][0])
        self.assertIs(found["kind"][0], Calculator)

    def testDeclarationOrder(self):
        class Base:
            @command
            def zeta(self):
                pass

            @command
            def alpha(self):
                pass

        class Child(Base):
            @command
            def beta(self):
                pass

            @command(name="zeta")
            def zeta(self):
                return "child"

        found = list(handlers(Child()))
        self.assertEqual([handler.name for _, handler in found], ["zeta", "alpha", "beta"])
        self.assertIs(found[0][1], Child.zeta.__handler__)

    def testClassPrefixApplies(self):
        found = {handler.name: handler for _, handler in handlers(Calculator())}
        self.assertEqual(found["mul"].prefix, "calc")
        self.assertEqual(found["kind"].prefix, "meta")

    def testUndecoratedRoutineRejected(self):
        with self.assertRaises(TypeError):
            list(handlers(Calculator().helper))

    def testClassRejected(self):
        with self.assertRaises(TypeError):
            list(handlers(Calculator))

    def testInstanceWithoutHandlersWarns(self):
        with self.assertLogs("shellbind.commands", "WARNING"):
            self.assertEqual(list(handlers(object())), [])


class TestCommand(TestCase):
    """Behavioral tests for Command construction and use."""

    def testArgumentsAreSorted(self):
        @command
        def tool(verbose=flag(), name=required(), path=positional()):
            pass

        kinds = [type(argument) for argument in Command(tool.__handler__).arguments]
        self.assertEqual(kinds, [Positional, Required, Optional])

    def testPositionsWithoutPrefix(self):
        positions = [argument.position for argument in Command(add.__handler__).positionals]
        self.assertEqual(positions, [0, 1])

    def testPositionsWithPrefix(self):
        owner, handler = next((o, h) for o, h in handlers(Calculator()) if h.name == "mul")
        positions = [argument.position for argument in Command(handler, owner).positionals]
        self.assertEqual(positions, [1, 2])

    def testDescr(self):
        self.assertEqual(Command(add.__handler__).descr, "add two numbers")
        self.assertIsNone(Command(Handler(lambda: None, "noop")).descr)

    def testMarkers(self):
        markers = Command(add.__handler__).markers
        self.assertEqual(list(markers), ["-verbose"])

    def testDuplicateArgumentNameRejected(self):
        @command
        def tool(a=required("-x"), b=optional("-x")):
            pass

        with self.assertRaises(InvalidHandlerError):
            Command(tool.__handler__)

    def testBadNameRejected(self):
        with self.assertRaises(InvalidHandlerError) as context:
            Command(Handler(lambda: None, "two words"))
        self.assertIn("lambda", str(context.exception.handler))

    def testMissingConverterNamesHandler(self):
        with self.assertRaises(NoConverterFound) as context:
            Command(add.__handler__, converters=Converters(False))
        self.assertEqual(context.exception.command, "add")
        self.assertEqual(context.exception.handler, "add")

    def testSignatureWithoutPositionals(self):
        @command
        def cmd(a=required("-a"), b=optional("-b"), p=positional()):
            pass

        self.assertEqual(Command(cmd.__handler__).signature, frozenset({
            ("cmd", "-a", "-b"),
            ("cmd", "-b", "-a"),
        }))

    def testSignatureWithPrefix(self):
        handler = Handler(lambda: None, "ping", "net")
        self.assertEqual(Command(handler).signature, frozenset({("net", "ping")}))

    def testLikeness(self):
        greeter = Command(greet.__handler__)
        self.assertEqual(greeter.likeness("greet -name"), 2)
        self.assertEqual(greeter.likeness("-name greet"), 2)
        self.assertEqual(greeter.likeness(["-loud", "-name", "x"]), 2)
        self.assertEqual(greeter.likeness("other"), 0)
        self.assertEqual(greeter.likeness('greet "-name'), 0)

    def testManyFlagsKeepSignatureSmall(self):
        wide = Command(Handler(lambda **_: None, "wide", parameters=[flag("-f%d" % index) for index in range(30)]))
        self.assertEqual(len(wide.signature), 1)
        self.assertEqual(wide.likeness("wide -f0 -f29 -other"), 3)

    def testInvokeDeclarationOrder(self):
        self.assertEqual(Command(add.__handler__).invoke([3, 4, True]), (3, 4, True))

    def testInvokeKeywords(self):
        self.assertEqual(Command(greet.__handler__).invoke(["ada", True]), "ADA")

    def testInvokeWithOwner(self):
        calculator = Calculator()
        owner, handler = next(handlers(calculator.mul))
        self.assertEqual(Command(handler, owner).invoke([6, 7]), 42)
        self.assertEqual(calculator.calls, [(6, 7)])

    def testInvokeChecksCount(self):
        with self.assertRaises(TypeError):
            Command(add.__handler__).invoke([1])

    def testHandlerExceptionsPropagate(self):
        @command
        def boom():
            raise KeyError("boom")

        with self.assertRaises(KeyError):
            Command(boom.__handler__).invoke([])

    def testUsage(self):
        self.assertEqual(str(Command(add.__handler__)), "add <x> <y> [-verbose]")


if __name__ == "__main__":
    unittest.main()
