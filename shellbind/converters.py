"""
Type-converter registry.

A registry maps a value type (the exact object used as a key: int, Path,
list[int], ...) to a converter, a callable taking one token and returning
the typed value. Lookups are exact; a subclass never borrows its parent's
converter.

Contract
- register(type, converter): add or overwrite the converter for type.
- convert(token, type): parsed value, or
  • NoConverterFound when nothing is registered for type,
  • ConversionFailed when the converter rejects the token (ValueError,
    TypeError or ArithmeticError raised by it).
- bool is never converted: a flag's presence is its value, so the registry
  refuses to hold a converter for it.

Defaults
- str, int, float, complex, Decimal, Fraction and Path.
- list[str], list[int] and list[float]: one token holding comma-separated
  elements ("1,2,3").

Quick example
    >>> from shellbind.converters import registry
    >>> registry.convert("42", int)
    42
    >>> registry.convert("a,b", list[str])
    ['a', 'b']
"""
import logging
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

from .faults import FaultCode, NoConverterFound, ConversionFailed
from .utils import rename, typename

logger = logging.getLogger(__name__)


def sequence(converter, /, separator=","):
    """
    Build a converter reading one token as separator-delimited elements.

    Each element goes through converter; empty elements ("1,,2") are rejected
    with ValueError so that a typo never turns into a silent gap.
    """
    if not callable(converter):
        raise TypeError("sequence() argument must be callable")

    @rename("sequence")
    def convert(token):
        elements = token.split(separator)
        if any(not element.strip() for element in elements):
            raise ValueError(f"empty element in {token!r}")
        return [converter(element.strip()) for element in elements]

    return convert


class Converters:
    """
    Mutable mapping of value types to converters.

    Instances are independent from each other; the module-level `registry`
    instance is the process default used when a dispatcher is not given one.
    """

    def __init__(self, defaults=True, /):
        self._converters = {}
        if defaults:
            for type, converter in (
                    (str, str),
                    (int, int),
                    (float, float),
                    (complex, complex),
                    (Decimal, Decimal),
                    (Fraction, Fraction),
                    (Path, Path),
                    (list[str], sequence(str)),
                    (list[int], sequence(int)),
                    (list[float], sequence(float)),
            ):
                self.register(type, converter)

    def register(self, type, converter, /):
        """
        Associate converter with type, replacing any earlier entry.

        Returns the converter, so the method also works as a decorator factory
        through functools.partial(registry.register, type).
        """
        if type is bool:
            raise TypeError("bool values are flags and cannot have a converter")
        if not callable(converter):
            raise TypeError("register() converter must be callable")
        if type in self._converters:
            logger.debug("replacing converter for %s", typename(type))
        self._converters[type] = converter
        return converter

    def lookup(self, type, /):
        """
        Return the converter registered for type or raise NoConverterFound.
        """
        try:
            return self._converters[type]
        except (KeyError, TypeError):  # TypeError: unhashable type objects
            raise NoConverterFound(
                "no converter registered for type %s" % typename(type),
                title="no converter",
                code=FaultCode.NO_CONVERTER,
                hint="register one with Converters.register(type, converter)",
                type=type,
            ) from None

    def convert(self, token, type, /):
        """
        Convert token into a value of type.
        """
        converter = self.lookup(type)
        try:
            return converter(token)
        except (ValueError, TypeError, ArithmeticError) as exception:
            raise ConversionFailed(
                "cannot convert %r to %s" % (token, typename(type)),
                title="conversion failed",
                code=FaultCode.CONVERSION_FAILED,
                hint="pass a value of type %s" % typename(type),
                token=token,
                type=type,
            ) from exception

    def copy(self):
        """
        Return an independent registry holding the same entries.
        """
        clone = type(self)(False)
        clone._converters.update(self._converters)
        return clone

    def __contains__(self, type):
        try:
            return type in self._converters
        except TypeError:
            return False

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"converters({", ".join(map(typename, self._converters))})"


registry = Converters()


__all__ = (
    "Converters",
    "registry",
    "sequence",
)
