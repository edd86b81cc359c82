"""
Shell: interactive console front-end over a Dispatcher.

What the shell adds to the core
- a read loop (run) over a stream of lines, stopping at EOF or the exit word.
- fault handling: unknown commands and parse faults are handed to a fallback
  when one is registered, else rendered on the console (stderr) through rich.
- suggestions: for an unknown command the usage of the best guess is shown
  instead of the fault, unless suggest=False or nothing looks alike.
- a built-in "--help" command listing usages, filterable by name, prefix and
  argument names.

Example
    shell = Shell(Calculator(), fancy=True)
    shell.run()              # reads sys.stdin until EOF or "exit"

Palette
- Define a mapping named __styles__ in __main__ to override palette entries.
"""
import logging
import sys
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import optional
from .commands import command
from .dispatcher import Dispatcher
from .faults import ParseException, UnknownCommand
from .utils import *

logger = logging.getLogger(__name__)


class Shell:
    """
    Console front-end.

    Parameters
    - sources: handler sources handed to the Dispatcher.
    - converters: registry used for every command; defaults to the process one.
    - suggest: show the best guess for unknown commands.
    - helper: register the built-in --help command.
    - strict: abort construction when a command cannot be built.
    - console: rich Console for regular output; faults go to a stderr console.
    - prompt: text shown before each line read from an interactive terminal.
    - exit: word ending run().
    - fancy: frame faults and help in panels.
    - colorful: style output; when False everything renders plain.
    """

    def __init__(
            self,
            *sources,
            converters=Unset,
            suggest=True,
            helper=True,
            strict=False,
            console=Unset,
            prompt="> ",
            exit="exit",
            fancy=False,
            colorful=True,
    ):
        if not isinstance(prompt, str):
            raise TypeError("shell 'prompt' must be a string")
        if not isinstance(exit, str) or not exit.strip():
            raise ValueError("shell 'exit' must be a non-empty string")
        self._console = Console() if console is Unset else console
        self._errors = Console(stderr=True) if console is Unset else console
        self._suggest = bool(suggest)
        self._prompt = prompt
        self._exit = exit.strip()
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._fallback = Unset
        self._dispatcher = Dispatcher(
            *sources,
            *((self.help,) if helper else ()),
            converters=converters,
            strict=strict,
        )

    @property
    def dispatcher(self):
        return self._dispatcher

    @property
    def commands(self):
        return self._dispatcher.commands

    @property
    def console(self):
        return self._console

    def fallback(self, fallback, /):
        """
        Register a one-time fallback for faults.

        The fallback receives the UnknownCommand or ParseException instead of
        the shell rendering it. Returns the callable so it works as a
        decorator: @shell.fallback
        """
        if not callable(fallback):
            raise TypeError("shell fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("shell fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def accept(self, line, /):
        """
        Dispatch one line. Returns the handler result, or None on a fault.
        """
        try:
            return self._dispatcher.accept(line)
        except UnknownCommand as fault:
            logger.debug("unknown command %r", line)
            self._unknown(fault)
        except ParseException as fault:
            logger.debug("parse fault for %r: %s", line, fault)
            self._trigger(fault)
        return None

    __call__ = accept

    def run(self, stream=Unset, /):
        """
        Read lines from stream (sys.stdin by default) and accept each of them.

        Blank lines are skipped; the loop ends at EOF or at the exit word.
        """
        stream = coalesce(stream, sys.stdin)
        interactive = stream is sys.stdin and sys.stdin.isatty()
        while True:
            if interactive:
                try:
                    line = self._console.input(self._prompt)
                except EOFError:
                    break
            else:
                line = stream.readline()
                if not line:
                    break
            line = line.rstrip("\r\n")
            if line.strip() == self._exit:
                break
            if not line.strip():
                continue
            self.accept(line)

    def _unknown(self, fault):
        if self._fallback is not Unset:
            self._fallback(fault)
            return
        if self._suggest and (guess := self._dispatcher.suggest(fault.input)) is not None:
            self._render(self._usages([guess], "did you mean"))
            return
        self._trigger(fault)

    def _trigger(self, fault):
        if self._fallback is not Unset:
            self._fallback(fault)
            return
        self._errors.print(fault.__replace__(fancy=self._fancy, colorful=self._colorful))

    def _styles(self):
        return defaultdict(str, {
            "title": "bold #FF4D94",
            "prefix": "bold #36C5F0",
            "name": "bold #00E6FF",
            "usage": "#FFD600",
            "descr": "italic #A3A3A3",
            "border": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def _usages(self, commands, title):
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""

        table = Table(
            "usage", "description",
            title=Text(title, styler("title")),
            box=ROUNDED,
            border_style=styler("border"),
            header_style=styler("title"),
        )
        for command in commands:
            usage = Text()
            if command.prefix:
                usage.append(command.prefix, styler("prefix")).append(" ")
            usage.append(command.name, styler("name"))
            for argument in command.arguments:
                usage.append(" ").append(str(argument), styler("usage"))
            descr = command.descr
            if isinstance(descr, Text):
                descr = descr.plain
            table.add_row(usage, Text(descr or "", styler("descr")))
        return table

    def _render(self, renderable):
        if self._fancy:
            renderable = Panel(Group(renderable), box=ROUNDED)
        self._console.print(renderable)

    @command(name="--help", descr="lists all commands")
    def help(
            self,
            name=optional("-name", descr="name of command"),
            prefix=optional("-prefix", descr="prefix of command"),
            args=optional("-args", list[str], descr="argument names of command"),
    ):
        """
        List registered commands, keeping those matching every given filter.
        """
        commands = list(self._dispatcher.commands)
        if name is not None:
            commands = [command for command in commands if command.name == name]
        if prefix is not None:
            commands = [command for command in commands if command.prefix == prefix]
        if args:
            commands = [
                command for command in commands
                if set(args) <= {argument.name for argument in command.arguments}
            ]
        self._render(self._usages(commands, "commands"))
        return commands

    def __repr__(self):
        return f"shell({self._dispatcher!r})"


__all__ = (
    "Shell",
)
