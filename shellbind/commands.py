"""
Shellbind command layer: handler records and the commands built from them.

What this module provides
- Handler: plain-data description of one handler (callback, name, prefix,
  descr, parameters). This is everything the core needs; it never looks at
  the callback's signature itself.
- command(...): binding decorator. Reads a function's parameter defaults
  (Parameter metadata) into a Handler and attaches it as `__handler__`.
- handlers(source): yields (owner, Handler) pairs from a decorated function,
  a bound method, or an instance whose class holds decorated methods.
- Command: a Handler bound to its owner, with built Arguments (sorted
  Positional < Required < Optional) and its suggestion signature.

Quick start
    from shellbind import command, positional, flag

    @command(descr="add two numbers")
    def add(x=positional(type=int), y=positional(type=int), verbose=flag()):
        print(x + y)

    # input "add 3 4 -verbose" calls add(3, 4, True)

Naming rules (binding layer)
- command name defaults to the function's __name__.
- positional parameters default to the Python parameter name.
- named parameters default to "-" + parameter name, "_" becoming "-".
- a leading self/cls parameter is skipped; owners are supplied separately.
- keyword-only parameters are passed by keyword, everything else by position.

Lifecycle
- Commands are built once, at dispatcher construction, and never mutated.
"""
import copy
import functools
import inspect
import logging
import operator
import re
from inspect import Parameter as PythonParameter

from rich.text import Text

from .arguments import Parameter, Positional, Required, Optional, build
from .converters import registry as _converters
from .faults import FaultCode, InvalidHandlerError, NoConverterFound
from .patterns import signature as _signature
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass for Handler and Command: typename, read-only fields, reprs.

    __displayable__ (when set) narrows the fields shown by __repr__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _invalid(handler, message, /, **options):
    return InvalidHandlerError(
        "handler %s: %s" % (handler, message),
        title="invalid handler",
        code=FaultCode.INVALID_HANDLER,
        hint="fix the handler declaration; it cannot be bound to a command",
        handler=handler,
        **options
    )


class Handler(metaclass=CommandType):
    """
    Description of one handler, as handed over by the binding layer.

    Parameters
    - callback: the procedure to invoke. When an owner is supplied at command
      build time it is passed as the first argument.
    - name: command name; defaults to callback.__name__.
    - prefix: group token typed before the name; Unset or "" for none.
    - descr: short help text.
    - parameters: Parameter metadata in declaration order.
    - keywords: Python names of the trailing parameters that must be passed
      by keyword (keyword-only parameters).
    """
    __introspectable__ = (
        "callback",
        "name",
        "prefix",
        "descr",
        "parameters",
        "keywords",
    )
    __displayable__ = (
        "name",
        "prefix",
        "descr",
        "parameters",
    )

    def __new__(cls, callback, /, name=Unset, prefix=Unset, descr=Unset, parameters=(), keywords=()):
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        self = super().__new__(cls)
        self._callback = callback
        self._name = coalesce(name, getattr(callback, "__name__", Unset))
        self._prefix = prefix
        self._descr = descr
        self._parameters = tuple(parameters)
        self._keywords = tuple(keywords)
        if len(self._keywords) > len(self._parameters):
            raise ValueError(f"{cls.__typename__} 'keywords' cannot outnumber 'parameters'")
        return self

    def __str__(self):
        return getattr(self.callback, "__qualname__", repr(self.callback))

    def __replace__(self, **overrides):
        fields = dict((name, getattr(self, name)) for name in type(self).__introspectable__) | overrides
        return type(self)(fields.pop("callback"), **fields)


def _describe(callback, /, name=Unset, prefix=Unset, descr=Unset):
    """
    Read a function's parameter defaults into a Handler.
    """
    qualname = getattr(callback, "__qualname__", repr(callback))
    try:
        parameters = list(inspect.signature(callback).parameters.values())
    except (TypeError, ValueError):
        raise TypeError("@command() must be applied to an inspectable callable") from None

    if parameters and parameters[0].name in ("self", "cls") and parameters[0].default is PythonParameter.empty:
        parameters = parameters[1:]

    metadata = []
    keywords = []
    for parameter in parameters:
        if parameter.kind in (PythonParameter.VAR_POSITIONAL, PythonParameter.VAR_KEYWORD):
            raise _invalid(qualname, "variadic parameter %r cannot be bound" % parameter.name)
        if not isinstance(default := parameter.default, Parameter):
            raise _invalid(qualname, "parameter %r must default to positional(), required(), optional() or flag()" % parameter.name)
        if parameter.kind is PythonParameter.KEYWORD_ONLY:
            keywords.append(parameter.name)
        if default.name is Unset:
            if default.kind in (Required, Optional) or default.type is bool:
                default = copy.replace(default, name="-" + parameter.name.replace("_", "-"))
            else:
                default = copy.replace(default, name=parameter.name)
        metadata.append(default)

    if descr is Unset and (doc := inspect.getdoc(callback)):
        descr = doc.strip().splitlines()[0]

    return Handler(callback, name, prefix, descr, metadata, keywords)


def command(source=Unset, /, name=Unset, descr=Unset, prefix=Unset):
    """
    Bind a function as a command handler, or return a decorator doing so.

    Forms
    - @command
    - @command(name="sum", descr="add numbers", prefix="math")
    - command(function, ...)

    The function is returned unchanged, carrying its Handler as __handler__.
    """
    @rename("command")
    def wrapper(callback, /):
        if isinstance(callback, staticmethod | classmethod):
            raise TypeError("@command() must be applied below @staticmethod/@classmethod")
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        callback.__handler__ = _describe(callback, name, prefix, descr)
        return callback

    return wrapper(source) if source is not Unset else wrapper


def handlers(source, /):
    """
    Yield (owner, Handler) pairs found in source.

    Sources
    - a Handler: yielded with no owner.
    - a decorated function or static function: no owner.
    - a bound method of a decorated function: owner is the bound object.
    - any other object: every decorated method of its class, bound to the
      object (static methods get no owner, class methods get the class).
      A class attribute __prefix__ applies to handlers declaring no prefix.
      Methods come in declaration order, base classes first; an override
      keeps the place of the method it replaces.
    """
    if isinstance(source, Handler):
        yield None, source
        return
    if inspect.ismethod(source) and isinstance(getattr(source, "__handler__", None), Handler):
        yield source.__self__, source.__handler__
        return
    if inspect.isfunction(source) and isinstance(getattr(source, "__handler__", None), Handler):
        yield None, source.__handler__
        return
    if inspect.isroutine(source) or inspect.isclass(source):
        raise TypeError("handlers() argument must be a handler, a decorated function or an owner instance")

    cls = type(source)
    found = False
    names = dict.fromkeys(name for klass in reversed(cls.__mro__) for name in vars(klass))
    for name in names:
        member = getattr(cls, name, None)
        if not isinstance(handler := getattr(member, "__handler__", None), Handler):
            continue
        static = inspect.getattr_static(cls, name)
        if isinstance(static, staticmethod):
            owner = None
        elif isinstance(static, classmethod):
            owner = cls
        else:
            owner = source
        if handler.prefix is Unset and (prefix := getattr(cls, "__prefix__", Unset)) is not Unset:
            handler = copy.replace(handler, prefix=prefix)
        found = True
        yield owner, handler
    if not found:
        logger.warning("no handlers found on %s instance", cls.__qualname__)


class Command(metaclass=CommandType):
    """
    A handler bound to its owner, ready to be matched and invoked.

    Fields
    - owner: object passed as the callback's first argument, or None.
    - callback: the handler procedure.
    - prefix: group token ("" when none).
    - name: command token.
    - descr: help text or None.
    - arguments: tuple sorted Positional < Required < Optional, declaration
      order kept within a kind.
    - signature: frozenset of token tuples used for suggestions only.
    - keywords: names of the parameters passed by keyword.

    Raises (construction)
    - InvalidHandlerError: bad names, duplicate argument names, bad metadata.
    - NoConverterFound: an argument type has no converter.
    """
    __introspectable__ = (
        "owner",
        "callback",
        "prefix",
        "name",
        "descr",
        "arguments",
        "signature",
        "keywords",
    )
    __displayable__ = (
        "prefix",
        "name",
        "descr",
        "arguments",
    )

    def __new__(cls, handler, /, owner=None, converters=_converters):
        if not isinstance(handler, Handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be a handler")

        try:
            prefix = "" if handler.prefix in (Unset, None, "") else normalize(handler.prefix, "prefix")
            name = normalize(handler.name, "command name")
        except (TypeError, ValueError) as exception:
            raise _invalid(str(handler), str(exception)) from None

        descr = handler.descr
        if isinstance(descr, str):
            descr = descr.strip() or None
        elif not isinstance(descr, Text | UnsetType | None):
            raise _invalid(str(handler), "descr must be a string")

        arguments = []
        position = 1 if prefix else 0
        for index, parameter in enumerate(handler.parameters):
            try:
                argument = build(parameter, index=index, position=position, converters=converters)
            except InvalidHandlerError as fault:
                raise _invalid(str(handler), fault.message, index=index) from None
            except NoConverterFound as fault:
                raise fault.__replace__(handler=str(handler), command=name) from None
            except (TypeError, ValueError) as exception:
                raise _invalid(str(handler), str(exception), index=index) from None
            if any(other.name == argument.name for other in arguments):
                raise _invalid(str(handler), "argument name %r is used twice" % argument.name)
            if isinstance(argument, Positional):
                position += 1
            arguments.append(argument)
        arguments.sort()

        self = super().__new__(cls)
        self._owner = owner
        self._callback = handler.callback
        self._prefix = prefix
        self._name = name
        self._descr = coalesce(descr)
        self._arguments = tuple(arguments)
        self._keywords = handler.keywords
        self._signature = _signature(prefix, name, self._arguments)
        return self

    @property
    def positionals(self):
        return tuple(argument for argument in self.arguments if isinstance(argument, Positional))

    @property
    def markers(self):
        """
        Named arguments (Required and Optional) keyed by their marker token.
        """
        return {argument.name: argument for argument in self.arguments if not isinstance(argument, Positional)}

    def likeness(self, tokens, /):
        """
        Largest number of distinct tokens shared with any signature sequence.

        Order does not matter and tokens match exactly; the score is a raw
        count, never normalized by length. A string split() cannot read scores 0.
        """
        if isinstance(tokens, str):
            try:
                tokens = split(tokens)
            except ValueError:
                return 0
        tokens = set(tokens)
        return max((len(set(sequence) & tokens) for sequence in self.signature), default=0)

    def invoke(self, values, /):
        """
        Call the handler with values given in declaration order.

        Exceptions raised by the handler propagate unchanged.
        """
        values = tuple(values)
        if len(values) != len(self.arguments):
            raise TypeError(f"{type(self).__typename__} {self.name!r} expects {len(self.arguments)} values, got {len(values)}")
        cut = len(values) - len(self.keywords)
        args = values[:cut]
        kwargs = dict(zip(self.keywords, values[cut:]))
        if self._owner is not None:
            return self._callback(self._owner, *args, **kwargs)
        return self._callback(*args, **kwargs)

    def __str__(self):
        return " ".join([*filter(None, (self.prefix, self.name)), *map(str, self.arguments)])


__all__ = (
    "Handler",
    "Command",
    "command",
    "handlers",
)

# Keep the metaclass out of star-imports and docs.
del CommandType
