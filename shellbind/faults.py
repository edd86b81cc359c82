"""
Shellbind faults (errors raised while building and dispatching commands).

Scope
- FaultCode: stable numeric identifiers, grouped by the phase that raises them.
- CommandException: base type carrying a message plus read-only options; it
  renders itself through rich (__rich__) and supports copy.replace().
- Concrete faults
  • build time: InvalidHandlerError, NoConverterFound
  • run time:   ConversionFailed, ParseException, UnknownCommand

Options
- Every fault accepts arbitrary keyword options. The ones understood by the
  renderer are: code, title, hint, colorful, fancy, styles.
- Context options are set by the raiser and exposed as attributes on the
  concrete classes: command, argument, input, token, type, handler.

Rendering
- Faults never print themselves. A front-end (see shellbind.shell) passes the
  fault to a rich Console, which calls __rich__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - build (210xx): handlers that cannot become commands.
    - matching (211xx): input that no command accepts.
    - parsing (212xx): input accepted by a matcher but not convertible.
    """
    # --- build faults (210xx) ---
    INVALID_HANDLER     = 21001
    NO_CONVERTER        = 21002

    # --- matching faults (211xx) ---
    UNKNOWN_COMMAND     = 21101

    # --- parsing faults (212xx) ---
    CONVERSION_FAILED   = 21201
    MISSING_ARGUMENT    = 21202
    MISSING_POSITIONAL  = 21203
    DUPLICATED_ARGUMENT = 21204
    UNPARSED_TOKENS     = 21205

    def normalize(self):
        """
        return the code as shown to users.
        """
        return str(self.value)


class CommandException(Exception):
    """
    base class of every shellbind fault.

    the message is the short, lowercased sentence shown to users; everything
    else travels in options, which are frozen after construction.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message else ()))
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # context options read like attributes (fault.command, fault.input, ...)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} fault has no {name!r} option") from None

    def __str__(self):
        return str(self.message) if self.message else type(self).__name__

    def __rich__(self):
        styles = defaultdict(str, {
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | dict(self.options.get("styles", {})))
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(code.normalize() if code else type(self).__name__, "code"),
            " | ",
            text(str(self.options.get("title", "error")).title(), "title"),
            " ]"
        )
        message = text(self.message, "message")
        renderables = [message]
        if hint := self.options.get("hint"):
            renderables.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renderables), title=header, title_align="left")
        return Group(header, *renderables)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidHandlerError(CommandException): ...
class NoConverterFound(CommandException): ...
class ConversionFailed(CommandException): ...
class ParseException(CommandException): ...
class UnknownCommand(CommandException): ...


__all__ = (
    "FaultCode",
    "CommandException",
    "InvalidHandlerError",
    "NoConverterFound",
    "ConversionFailed",
    "ParseException",
    "UnknownCommand",
)
