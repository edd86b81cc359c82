"""
Shellbind utilities (small helpers shared by every layer)

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "not provided", distinct from None.
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers
    come back as fresh copies so public state cannot be mutated in place.

- normalize(text, what)
  • Validate and trim a command, prefix or argument name into a single token.

- split(line)
  • The one tokenizer of the package (shlex.split). Matching, parsing and
    suggestions all go through it, so a line is always cut the same way.

Stability
- Names in __all__ are re-exported by the package; anything else may change.
"""
import builtins
import functools
import re
import shlex
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    None is a legitimate value for optional arguments and descriptions, so the
    API defaults its parameters to Unset and materializes them with coalesce().
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Examples
    - coalesce("add", "fallback") -> "add"
    - coalesce(Unset, "fallback") -> "fallback"
    - coalesce(None, "fallback")  -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - @rename(name)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy containers one level at a time so callers never share our storage.

    Tuples and frozensets are already immutable and pass through untouched.
    """
    if isinstance(object, tuple | frozenset | str):
        return object
    if isinstance(object, Sequence):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property exposing the backing field "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


# Shape of one token as split() reads it: a quoted span or a run of plain
# characters. Backslashes are left out so shlex escapes never change the count.
_TOKEN = r"\"[^\"\\]*\"|'[^']*'|[^\s\"'\\]+"


def typename(type, /):
    """
    Readable name of a value type: "int", "Path", "list[int]".
    """
    if getattr(type, "__args__", None):
        return repr(type)
    return getattr(type, "__name__", repr(type))


def split(line, /):
    """
    Cut an input line into tokens.

    Shell-style splitting (shlex.split): quotes group whitespace and are
    removed, adjacent quoted parts are joined, backslashes escape.

    Raises
    - TypeError: line is not a string.
    - ValueError: unbalanced quotes or a trailing escape.

    examples
    - split('add 3 4')            -> ['add', '3', '4']
    - split('greet -name "a b"')  -> ['greet', '-name', 'a b']
    """
    if not isinstance(line, str):
        raise TypeError("split() argument must be a string")
    return shlex.split(line)


def normalize(text, what="name", /):
    """
    Trim a name and check it is usable as a single input token.

    Raises
    - TypeError: text is not a string.
    - ValueError: text is empty after trimming, holds whitespace, quotes or
      backslashes.
    """
    if not isinstance(text, str):
        raise TypeError(f"{what} must be a string")
    if not (text := text.strip()):
        raise ValueError(f"{what} cannot be empty")
    if re.search(r"[\s\"'\\]", text):
        raise ValueError(f"{what} {text!r} must be a single token (no whitespace, quotes or backslashes)")
    return text


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "split",
    "typename",
    "normalize",
)
