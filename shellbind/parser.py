"""
Parser: typed handler values from an input line and its Command.

Algorithm
- tokenize with utils.split, exactly like the matcher.
- the head (prefix, name) must address the command.
- each Positional takes the token at its fixed place, right after the head.
- the remaining tokens are markers of named arguments, each followed by its
  value unless the argument is a flag.
- absent Required markers fail; absent Optionals get their default (False for
  flags).
- values come back in declaration order, the order the handler expects.

Parsing is all-or-nothing: the first failure raises ParseException and no
partial value list ever escapes.
"""
import logging

from .arguments import Required
from .converters import registry as _converters
from .faults import FaultCode, ConversionFailed, ParseException
from .utils import *

logger = logging.getLogger(__name__)


class Parser:
    """
    Converts the tokens of matched lines through a converter registry.
    """
    __slots__ = ("_converters",)

    def __init__(self, converters=_converters):
        self._converters = converters

    @property
    def converters(self):
        return self._converters

    def parse(self, command, line, /):
        """
        Return the handler values for line, in declaration order.

        Raises
        - ParseException: the line does not fit command, a Required marker is
          missing, or a token cannot be converted. The fault carries the
          command, the raw input and, where known, the argument.
        """
        try:
            tokens = split(line)
        except ValueError as error:
            raise self._fault(
                command, line,
                "cannot split input: %s" % error,
                code=FaultCode.UNPARSED_TOKENS,
            ) from None
        head =[*filter(None, (command.prefix, command.name))]
        if tokens[:len(head)] != head:
            raise self._fault(
                command, line,
                "input does not address command %r" % " ".join(head),
                code=FaultCode.UNPARSED_TOKENS,
            )

        values = [Unset] * len(command.arguments)
        positionals = command.positionals
        for argument in positionals:
            at = argument.position + 1
            if at >= len(tokens):
                raise self._fault(
                    command, line,
                    "missing value for %s" % argument,
                    code=FaultCode.MISSING_POSITIONAL,
                    argument=argument,
                )
            values[argument.index] = self._convert(command, argument, tokens[at], line)

        markers = command.markers
        rest = tokens[len(head) + len(positionals):]
        seen = set()
        while rest:
            token = rest.pop(0)
            if (argument := markers.get(token)) is None:
                raise self._fault(
                    command, line,
                    "unexpected token %r" % token,
                    code=FaultCode.UNPARSED_TOKENS,
                    token=token,
                )
            if token in seen:
                raise self._fault(
                    command, line,
                    "argument %s given more than once" % token,
                    code=FaultCode.DUPLICATED_ARGUMENT,
                    argument=argument,
                )
            seen.add(token)
            if argument.flag:
                values[argument.index] = True
            elif not rest:
                raise self._fault(
                    command, line,
                    "missing value after %s" % token,
                    code=FaultCode.MISSING_ARGUMENT,
                    argument=argument,
                )
            else:
                values[argument.index] = self._convert(command, argument, rest.pop(0), line)

        for name, argument in markers.items():
            if name in seen:
                continue
            if isinstance(argument, Required):
                raise self._fault(
                    command, line,
                    "missing required argument %s" % name,
                    code=FaultCode.MISSING_ARGUMENT,
                    argument=argument,
                )
            values[argument.index] = argument.default

        logger.debug("parsed %r for %s: %r", line, command.name, values)
        return values

    __call__ = parse

    def _convert(self, command, argument, token, line):
        try:
            return self._converters.convert(token, argument.type)
        except ConversionFailed as fault:
            raise self._fault(
                command, line,
                "invalid value %r for %s" % (token, argument.name),
                code=FaultCode.CONVERSION_FAILED,
                hint=fault.hint,
                argument=argument,
                token=token,
            ) from fault

    @staticmethod
    def _fault(command, line, message, /, **options):
        return ParseException(
            message,
            title="invalid arguments",
            hint=options.pop("hint", "usage: %s" % command),
            command=command,
            input=line,
            **options
        )

    def __repr__(self):
        return f"parser({self._converters!r})"


def parse(command, line, /, converters=_converters):
    """
    Parse line for command with a throwaway Parser over converters.
    """
    return Parser(converters).parse(command, line)


__all__ = (
    "Parser",
    "parse",
)
