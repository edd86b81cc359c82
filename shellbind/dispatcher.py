"""
Dispatcher: the registry of compiled commands and the core entry point.

Construction
- Dispatcher(*sources, converters=..., strict=False)
  • every (owner, Handler) pair found in sources (see commands.handlers) is
    built into a Command and compiled into a Matcher.
  • InvalidHandlerError aborts the construction.
  • NoConverterFound is logged and the command is left out, the rest still
    build; strict=True re-raises it instead.
  • the table (Matcher -> Command) is read-only afterwards.

Operations
- match(line) -> Command                 UnknownCommand when nothing accepts
- suggest(line) -> Command | None        highest likeness, first wins ties
- parse(command, line) -> list           ParseException on bad input
- accept(line) -> handler result         match, parse, invoke
  • a line fitting a command except for missing Required markers raises
    the ParseException naming the first missing one.

Ambiguity
- registration order decides: the first registered command accepting a line
  is matched, and the first one reaching the best score is suggested.
- within one owner, commands are registered in method declaration order.
"""
import logging
from types import MappingProxyType

from .commands import Command, handlers
from .converters import registry as _converters
from .faults import FaultCode, NoConverterFound, UnknownCommand
from .parser import Parser
from . import patterns
from .utils import *

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Holds compiled commands and dispatches input lines to them.
    """

    def __init__(self, *sources, converters=Unset, strict=False):
        self._converters = coalesce(converters, _converters)
        self._parser = Parser(self._converters)
        self._strict = bool(strict)
        table = {}
        for source in sources:
            for owner, handler in handlers(source):
                try:
                    command = Command(handler, owner, self._converters)
                except NoConverterFound as fault:
                    if self._strict:
                        raise
                    logger.error("command %r excluded (handler %s): %s", fault.command, fault.handler, fault)
                    continue
                table[patterns.compile(command)] = command
                logger.debug("registered %s", command)
        self._table = MappingProxyType(table)

    @property
    def converters(self):
        return self._converters

    @property
    def strict(self):
        return self._strict

    @property
    def commands(self):
        """
        Registered commands, in registration order.
        """
        return tuple(self._table.values())

    def match(self, line, /):
        """
        Return the first registered command whose matcher accepts line.
        """
        for matcher, command in self._table.items():
            if matcher.matches(line):
                logger.debug("matched %r to %s", line, command)
                return command
        raise UnknownCommand(
            "unknown command %r" % line.strip(),
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            hint="type --help to list the commands",
            input=line,
        )

    def suggest(self, line, /):
        """
        Return the command most alike line, or None when nothing overlaps.

        The score of a command is Command.likeness(tokens of line). Only a
        strictly greater score replaces the current best. A line split() cannot
        read (unbalanced quotes) resembles nothing.
        """
        try:
            tokens = set(split(line))
        except ValueError:
            logger.debug("nothing suggested for unreadable input %r", line)
            return None
        best, score = None, 0
        for command in self._table.values():
            if (likeness := command.likeness(tokens)) > score:
                best, score = command, likeness
        logger.debug("suggested %s for %r (score %d)", best, line, score)
        return best

    def parse(self, command, line, /):
        return self._parser.parse(command, line)

    def accept(self, line, /):
        """
        Match line, parse it and invoke the handler, returning its result.

        Raises UnknownCommand or ParseException; exceptions raised by the
        handler itself propagate unchanged.
        """
        try:
            command = self.match(line)
        except UnknownCommand:
            # a line only lacking Required markers is a parse fault, not an unknown command
            for matcher, command in self._table.items():
                if matcher.matches(line, complete=False):
                    self.parse(command, line)
            raise
        return command.invoke(self.parse(command, line))

    def __contains__(self, command):
        return command in self._table.values()

    def __iter__(self):
        return iter(self._table.values())

    def __len__(self):
        return len(self._table)

    def __repr__(self):
        return f"dispatcher({", ".join(map(str, self._table.values()))})"


__all__ = (
    "Dispatcher",
)
