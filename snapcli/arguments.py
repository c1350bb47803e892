r"""
snapcli argument specifications.

Overview
- Arg: one declared argument of a command schema. An argument is either
  • a valued option (--name VALUE / -s VALUE),
  • a flag (--name / -s, presence-only, resolves to "true"), or
  • a positional (bound by its declaration order among bare tokens).

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- name: str, unique within its owning command; no whitespace, no leading "-".
- short: Unset | str, single-token alias written as -<short>; no whitespace, no leading "-".
- about: Unset | str | Text, one-line help; non-empty when provided.
- flag: bool, never consumes a following value token.
- positional: bool, matched by position, never by --name/-short syntax.
- default: Unset | str, value used when the argument is declared but not supplied.

Immutability
- Specs never change after construction. Derive a new one with copy.replace():
    >>> import copy
    >>> text = Arg("text", about="The text to print")
    >>> text = copy.replace(text, default="Hello, world!")

Quick example:
    >>> from snapcli.arguments import Arg
    >>> Arg("verbose", "v", about="Enable verbose mode", flag=True)
    arg(name='verbose', short='v', about='Enable verbose mode', flag=True, positional=False, default=None)
    >>> Arg("a", about="add a", positional=True, default="0")
    ...

Public API
- Classes: Arg
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only records.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
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
            """
            Return a concise, stable representation with every field.

            Example
            - arg(name='verbose', short='v', about=None, flag=True, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identifiers(cls, metadata, /):
    """
    Internal: validate and normalize 'name' and 'short'.

    Both are written on the command line behind a marker ("--" or "-"), so they
    cannot carry the marker themselves nor contain whitespace (a token never does).

    Raises
    - TypeError: when name is not a string, or short is neither a string nor Unset.
    - ValueError: when either is empty after trimming, contains whitespace, or
      starts with a hyphen.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name) or name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' must not contain whitespace nor start with '-'")
    metadata["name"] = name

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str):
        if not (short := short.strip()):
            raise ValueError(f"{cls.__typename__} 'short' cannot be empty")
        elif re.search(r"\s", short) or short.startswith("-"):
            raise ValueError(f"{cls.__typename__} 'short' must not contain whitespace nor start with '-'")
    metadata["short"] = short


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize help and value metadata.

    - about: optional short description. Unset stays Unset (rendered as None);
      a provided string must be non-empty after trimming. Text is kept as-is.
    - default: optional fallback value. Matched values are always strings, so
      the default must be a string too (the empty string is a legitimate value).
    - flag/positional: coerced to bool.
    """
    if not isinstance(about := metadata["about"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'about' must be a string")
    elif isinstance(about, str) and not (about := about.strip()):
        raise ValueError(f"{cls.__typename__} 'about' cannot be empty")
    metadata["about"] = about

    if not isinstance(metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")

    metadata["flag"] = bool(metadata["flag"])
    metadata["positional"] = bool(metadata["positional"])


class Arg(metaclass=ArgumentType):
    """
    Declared argument of a command schema.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances; Unset metadata reads back as None.

    Notes
    - A positional flag is allowed; once bound it simply carries the positional
      token as its value.
    - Unlike `default`, `flag` and `positional` are plain booleans.
    """

    __introspectable__ = (
        "name",
        "short",
        "about",
        "flag",
        "positional",
        "default",
    )

    __slots__ = (
        "_name",
        "_short",
        "_about",
        "_flag",
        "_positional",
        "_default",
    )

    def __new__(
            cls,
            name,
            /,
            short=Unset,
            about=Unset,
            *,
            flag=False,
            positional=False,
            default=Unset
    ):
        """
        Construct an Arg spec with the provided metadata.

        Parameters
        - name: str
          Canonical key of the argument; also the key used in the matches table.
        - short: Unset | str
          Alias written as -<short>. Resolved values are still keyed by `name`.
        - about: Unset | str | Text
          Help line.
        - flag: bool
          Presence-only argument.
        - positional: bool
          Bound by position among bare tokens.
        - default: Unset | str
          Fallback value.
        """
        metadata = {
            "name": name,
            "short": short,
            "about": about,
            "flag": flag,
            "positional": positional,
            "default": default,
        }
        _sanitize_identifiers(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        # Backing slots are written once here; __setattr__ rejects anything later.
        for name, value in metadata.items():
            object.__setattr__(self, "_" + name, value)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __replace__(self, *unused, **overrides):
        """
        copy.replace() hook: build a new, re-validated spec with some fields overridden.
        """
        assert not unused, "positional arguments are not allowed"
        metadata = {name: getattr(self, "_" + name) for name in type(self).__introspectable__} | overrides
        return type(self)(metadata.pop("name"), **metadata)

    def __eq__(self, other):
        if not isinstance(other, Arg):
            return NotImplemented
        return all(
            getattr(self, "_" + name) == getattr(other, "_" + name) for name in type(self).__introspectable__
        )

    def __hash__(self):
        return hash(tuple(getattr(self, "_" + name) for name in type(self).__introspectable__))

    @property
    def valued(self):
        """
        True when the argument consumes a following value token (named and not a flag).
        """
        return not self._flag and not self._positional


__all__ = (
    # Classes (specifications)
    "Arg",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del ArgumentType
