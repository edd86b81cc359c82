"""
Pattern compiler: per-command matchers and suggestion signatures.

Matcher
- accepts exactly the lines that invoke one command:
    [prefix] name <positional values...> {marker [value]}*
  • the prefix token is mandatory when the command has one.
  • positional values come right after the name, in fixed order.
  • markers of Required/Optional arguments follow in any order, each at most
    once; value-bearing markers take the next token, flags take none.
  • every Required marker must be present.
- two stages: a compiled regular expression checks the shape of the raw line
  (literal tokens, token count, quoting), then a walk over split(line) checks
  marker cardinality. The walk consumes tokens exactly like the parser does.

Signature
- frozenset of token tuples (prefix?, name, *markers) where markers range over
  the orderings of all Required and Optional names. Positional names are never
  part of it. Only suggestions use it.
- proper subsets of the names are left out: the full set always shares the
  most tokens with an input, and scores are set based.
- above LIMIT named arguments a single ordering is kept, for the same reason.
"""
import itertools
import logging
import re

from .arguments import Positional, Required, Optional
from .utils import split, _TOKEN

logger = logging.getLogger(__name__)

VALUE = f"(?:{_TOKEN})"

LIMIT = 5


class Matcher:
    """
    Compiled matcher of one command.

    Attributes
    - pattern: re.Pattern for the shape of the line.
    - head: number of leading tokens (prefix, name, positional values).
    - markers: marker token -> True when the marker is a flag.
    - required: frozenset of markers that must appear.
    """
    __slots__ = ("pattern", "head", "markers", "required")

    def __init__(self, pattern, head, markers, required):
        self.pattern = pattern
        self.head = head
        self.markers = dict(markers)
        self.required = frozenset(required)

    def matches(self, line, /, complete=True):
        """
        True when line invokes the command.

        With complete=False missing Required markers are tolerated; everything
        else must still fit.
        """
        if not isinstance(line, str) or not self.pattern.fullmatch(line):
            return False
        tokens = split(line)[self.head:]
        seen = set()
        index = 0
        while index < len(tokens):
            marker = tokens[index]
            if marker not in self.markers or marker in seen:
                return False
            seen.add(marker)
            index += 1 if self.markers[marker] else 2
        return index == len(tokens) and (not complete or self.required <= seen)

    __call__ = matches

    def __repr__(self):
        return f"matcher({self.pattern.pattern!r})"


def compile(command, /):
    """
    Build the Matcher of a command.
    """
    positionals = [argument for argument in command.arguments if isinstance(argument, Positional)]
    named = [argument for argument in command.arguments if not isinstance(argument, Positional)]

    pattern = r"\s*"
    if command.prefix:
        pattern += re.escape(command.prefix) + r"\s+"
    pattern += re.escape(command.name)
    pattern += (r"\s+" + VALUE) * len(positionals)
    if named:
        alternatives = "|".join(
            re.escape(argument.name) if argument.flag else re.escape(argument.name) + r"\s+" + VALUE
            for argument in named
        )
        pattern += r"(?:\s+(?:%s))*" % alternatives
    pattern += r"\s*"

    matcher = Matcher(
        re.compile(pattern),
        head=(2 if command.prefix else 1) + len(positionals),
        markers={argument.name: argument.flag for argument in named},
        required={argument.name for argument in named if isinstance(argument, Required)},
    )
    logger.debug("compiled %r for %s", matcher, command)
    return matcher


def signature(prefix, name, arguments, /):
    """
    Token sequences a command can be addressed by, for likeness scoring.
    """
    head = tuple(filter(None, (prefix, name)))
    required = [argument.name for argument in arguments if isinstance(argument, Required)]
    optional = [argument.name for argument in arguments if isinstance(argument, Optional)]
    names = required + optional
    orderings = itertools.permutations(names) if len(names) <= LIMIT else (names,)
    return frozenset(head + tuple(ordering) for ordering in orderings)


__all__ = (
    "Matcher",
    "compile",
    "signature",
)
