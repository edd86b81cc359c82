r"""
Shellbind arguments: parameter metadata and the arguments built from it.

Overview
- Parameter metadata (plain data handed over by the binding layer)
  • Parameter(kind, name, type, descr, default): one handler parameter.
  • positional(...), required(...), optional(...), flag(...): factories used
    as parameter defaults by @command (see shellbind.commands).

- Arguments (what a Command matches and parses)
  • Positional: addressed by its place in the token stream, no marker.
  • Required: addressed by a marker token ("-name value"); must be present.
  • Optional: addressed by a marker token; may be omitted. A bool Optional is
    a flag: the marker carries no value and its presence is the value.

Classification (build)
- kind Optional, or type bool          -> Optional
- kind Required                        -> Required
- kind Positional (or no kind at all)  -> Positional, with the next position
- the value type must have a converter (bool excepted); otherwise the build
  fails right away with NoConverterFound, never at the first invocation.

Ordering
- Arguments compare by (kind rank, declaration index): every Positional sorts
  before every Required, which sorts before every Optional. Sorting a list of
  arguments therefore yields the matching-time traversal order, while `index`
  keeps the declaration order needed to call the handler.

Quick example
    >>> from shellbind.arguments import Parameter, Positional, build
    >>> build(Parameter(Positional, "x", int), index=0, position=0)
    positional(name='x', type=<class 'int'>, descr=None, index=0, position=0)
"""
import functools
import operator
import re

from rich.text import Text

from .converters import registry as _converters
from .faults import FaultCode, InvalidHandlerError, NoConverterFound
from .utils import *


class ArgumentType(type):
    """
    Metaclass giving argument classes a typename, read-only fields and reprs.

    Responsibilities
    - __typename__: class name split on capitals and lowercased ("positional").
    - one mirror() property per name listed in __introspectable__.
    - __repr__/__rich_repr__ built from __introspectable__.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


class Argument(metaclass=ArgumentType):
    """
    Base of the three argument variants.

    An argument is immutable once built: every field is exposed through a
    read-only property over a private backing attribute.
    """
    __introspectable__ = (
        "name",
        "type",
        "descr",
        "index",
    )
    __rank__ = 0

    def __new__(cls, name, /, type=str, descr=Unset, *, index=0):
        if cls is Argument:
            raise TypeError("type 'Argument' cannot be instantiated directly")
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise ValueError(f"{cls.__typename__} 'index' must be a non-negative integer")
        self = super().__new__(cls)
        self._name = normalize(name, f"{cls.__typename__} name")
        self._type = type
        self._descr = _sanitize_descr(cls, descr)
        self._index = index
        return self

    @property
    def flag(self):
        """
        True when the argument is a presence-only boolean.
        """
        return self.type is bool

    def __lt__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return (self.__rank__, self.index) < (other.__rank__, other.index)

    def __gt__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return other < self

    def _metavar(self):
        return "<%s>" % typename(self.type)


class Positional(Argument):
    """
    Argument addressed by position.

    `position` counts positional slots of the owning command, starting at 1
    when the command has a prefix (the prefix takes slot 0).
    """
    __introspectable__ = Argument.__introspectable__ + ("position",)
    __rank__ = 0

    def __new__(cls, name, /, type=str, descr=Unset, *, index=0, position=0):
        if not isinstance(position, int) or isinstance(position, bool) or position < 0:
            raise ValueError(f"{cls.__typename__} 'position' must be a non-negative integer")
        self = super().__new__(cls, name, type, descr, index=index)
        self._position = position
        return self

    def __str__(self):
        return "<%s>" % self.name


class Required(Argument):
    """
    Named argument that must appear in the input as "<name> <value>".
    """
    __rank__ = 1

    def __str__(self):
        return "%s %s" % (self.name, self._metavar())


class Optional(Argument):
    """
    Named argument that may be left out.

    When absent the handler receives `default` (None unless given), or False
    for flags.
    """
    __introspectable__ = Argument.__introspectable__ + ("default",)
    __rank__ = 2

    def __new__(cls, name, /, type=str, descr=Unset, *, index=0, default=None):
        self = super().__new__(cls, name, type, descr, index=index)
        self._default = False if type is bool else default
        return self

    def __str__(self):
        if self.flag:
            return "[%s]" % self.name
        return "[%s %s]" % (self.name, self._metavar())


class Parameter(metaclass=ArgumentType):
    """
    Metadata of one handler parameter, as produced by the binding layer.

    Parameters
    - kind: Positional | Required | Optional | Unset
      The marker chosen by the author. Unset means "unmarked", treated as
      Positional (or Optional for bool).
    - name: str | Unset
      Positional name, or marker token for named kinds. The binding layer
      fills it from the Python parameter name when left Unset.
    - type: the value type, used as the converter key.
    - descr: str | Text | Unset, short help text.
    - default: value handed over when an Optional is absent.
    """
    __introspectable__ = (
        "kind",
        "name",
        "type",
        "descr",
        "default",
    )

    def __new__(cls, kind=Unset, /, name=Unset, type=str, descr=Unset, default=None):
        if kind is not Unset and kind not in (Positional, Required, Optional):
            raise TypeError(f"{cls.__typename__} 'kind' must be Positional, Required or Optional")
        self = super().__new__(cls)
        self._kind = kind
        self._name = name if name is Unset else normalize(name, f"{cls.__typename__} name")
        self._type = type
        self._descr = descr if descr is Unset else _sanitize_descr(cls, descr)
        self._default = default
        return self

    def __replace__(self, **overrides):
        fields = dict(self.__rich_repr__()) | overrides
        return type(self)(fields.pop("kind"), **fields)


def positional(name=Unset, /, type=str, descr=Unset):
    """
    Metadata for a positional parameter.
    """
    return Parameter(Positional, name, type, descr)


def required(name=Unset, /, type=str, descr=Unset):
    """
    Metadata for a required named parameter ("-name value").
    """
    return Parameter(Required, name, type, descr)


def optional(name=Unset, /, type=str, descr=Unset, default=None):
    """
    Metadata for an optional named parameter.
    """
    return Parameter(Optional, name, type, descr, default)


def flag(name=Unset, /, descr=Unset):
    """
    Metadata for a presence-only parameter (an Optional of type bool).
    """
    return Parameter(Optional, name, bool, descr)


def build(parameter, /, index, position, converters=_converters):
    """
    Turn one parameter's metadata into an Argument.

    Parameters
    - parameter: Parameter with a name.
    - index: declaration index within the handler.
    - position: the positional slot this parameter gets if it is positional.
    - converters: registry checked for the value type.

    Raises
    - InvalidHandlerError: parameter is not a Parameter or has no name.
    - NoConverterFound: non-bool type without a registered converter.
    """
    if not isinstance(parameter, Parameter):
        raise InvalidHandlerError(
            "parameter at index %d is not described by a Parameter" % index,
            title="invalid handler",
            code=FaultCode.INVALID_HANDLER,
            hint="use positional(), required(), optional() or flag() as metadata",
            index=index,
        )
    if parameter.name is Unset:
        raise InvalidHandlerError(
            "parameter at index %d has no name" % index,
            title="invalid handler",
            code=FaultCode.INVALID_HANDLER,
            hint="give the parameter a name",
            index=index,
        )

    if parameter.kind is Optional or parameter.type is bool:
        argument = Optional(parameter.name, parameter.type, parameter.descr, index=index, default=parameter.default)
    elif parameter.kind is Required:
        argument = Required(parameter.name, parameter.type, parameter.descr, index=index)
    else:
        argument = Positional(parameter.name, parameter.type, parameter.descr, index=index, position=position)

    if not argument.flag:
        try:
            converters.lookup(argument.type)
        except NoConverterFound as fault:
            raise fault.__replace__(argument=argument) from None
    return argument


__all__ = (
    "Argument",
    "Positional",
    "Required",
    "Optional",
    "Parameter",
    "positional",
    "required",
    "optional",
    "flag",
    "build",
)

# Keep the metaclass out of star-imports and docs.
del ArgumentType
