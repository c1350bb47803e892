"""
snapcli matches: the resolved name → value table produced by one matching pass.

A Matches object is a read-only Mapping[str, str]. The matching engine creates
it empty, fills it while scanning tokens, and hands it over; callers only read.

Accessors
- value_of(key, default=None): raw lookup, never raises.
- require(key): raises MissingValueError when the key is absent.
- as_int(key, default=Unset): base-10 signed integer; absent and no default →
  MissingValueError, present but not numeric → InvalidValueError.
- is_present(key): existence check.
- merge(other): new table where `other` wins on collisions (command over global).

Every value is a string: flags resolve to "true", options and positionals to the
token that was supplied (or their declared default).
"""
import re
from collections.abc import Mapping

from rich.pretty import pretty_repr

from .faults import MissingValueError, InvalidValueError
from .utils import Unset


class Matches(Mapping):
    """
    Read-only table of resolved argument values, keyed by canonical argument name.
    """

    __slots__ = ("_values",)

    def __init__(self, values=(), /):
        self._values = dict(values)

    def _insert(self, key, value, /):
        # Engine-only writer; last write wins.
        self._values[key] = value

    def __getitem__(self, key):
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"matches({pretty_repr(self._values)})"

    def __rich_repr__(self):
        yield from self._values.items()

    def value_of(self, key, default=None, /):
        """
        Return the value bound to `key`, or `default` when it is absent.
        """
        return self._values.get(key, default)

    def require(self, key, /):
        """
        Return the value bound to `key`; absence is a MissingValueError.
        """
        try:
            return self._values[key]
        except KeyError:
            raise MissingValueError(key, "required argument %r was not provided" % key) from None

    def as_int(self, key, default=Unset, /):
        """
        Return the value bound to `key` parsed as a base-10 signed integer.

        Raises
        - MissingValueError: the key is absent and no default was given.
        - InvalidValueError: the value is present but is not a base-10 integer.
        """
        try:
            value = self._values[key]
        except KeyError:
            if default is not Unset:
                return default
            raise MissingValueError(key, "required argument %r was not provided" % key) from None

        # int() alone would also accept "1_000" and surrounding whitespace.
        if not re.fullmatch(r"[+-]?[0-9]+", value):
            raise InvalidValueError(key, "value %r of argument %r is not an integer" % (value, key))
        try:
            return int(value)
        except ValueError:
            # digit count above sys.get_int_max_str_digits()
            raise InvalidValueError(key, "value of argument %r is too large to convert" % key) from None

    def is_present(self, key, /):
        """
        Tell whether `key` was resolved (supplied or defaulted).
        """
        return key in self._values

    def merge(self, other, /):
        """
        Return a new table with the entries of both; `other` wins on collisions.
        """
        return type(self)(self._values | dict(other))


__all__ = (
    "Matches",
)
