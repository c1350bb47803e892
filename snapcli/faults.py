"""
snapcli faults (matching errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
- MatchError: base type that carries message + options and knows how to render
  itself (rich) and how to surface itself (raise or print-and-exit).
- One subclass per failure of the matching pipeline:
  • NoArgumentsError         no token at all was supplied
  • UnknownCommandError      first bare token names no declared command
  • UnknownArgumentError     a short alias (-x) is not declared by the active schema
  • MissingValueError        a declared valued argument has no value and no default
  • InvalidValueError        a present value failed conversion (e.g., to int)
  • UnexpectedArgumentError  a bare token arrived with no positional slot left
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Integration
- The matching engine raises these faults and never prints.
- The dispatcher (App) surfaces them through trigger(fault, **ctx): outside shell
  mode the fault is raised to the caller; in shell mode it is rendered with rich
  on stderr and the process exits with status 1.

Host configuration (looked up on __main__)
- __prog__: program name shown in fault headers.
- __styles__: palette overrides.
- __codes__: mapping FaultCode -> label, replaces the numeric code in headers.
- __docs__: mapping FaultCode -> documentation string (see getdoc()).
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the matcher (stable identifiers).

    grouping (by high-level domain)
    - invocation / routing (1110x)
      • NO_ARGUMENTS, UNKNOWN_COMMAND
    - named arguments (1111x)
      • UNKNOWN_ARGUMENT, MISSING_VALUE
    - positionals (1112x)
      • UNEXPECTED_ARGUMENT
    - values (1113x)
      • INVALID_VALUE
    """
    # --- invocation / routing errors ---
    NO_ARGUMENTS                = 11100
    UNKNOWN_COMMAND             = 11101

    # --- named argument errors ---
    UNKNOWN_ARGUMENT            = 11112
    MISSING_VALUE               = 11117

    # --- positional errors ---
    UNEXPECTED_ARGUMENT         = 11121

    # --- value errors ---
    INVALID_VALUE               = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class MatchError(Exception):
    """
    Base class of every matching failure.

    Attributes
    - message: str, one-sentence, lowercased description.
    - options: read-only mapping with at least 'title', 'code' and 'hint'; the
      dispatcher adds runtime context ('tool', 'shell', 'fancy', 'colorful').
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def _payload(self):
        """
        Positional constructor arguments that identify the offending input.
        """
        return ()

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment.copy()
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", "snapcli")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code is not None else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(coalesce(self.message, ""), styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))
        body = [message, hint]
        if docs := self.options.get("docs"):
            body.append(text(docs, styler("error-message")))

        if fancy:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*body), title=header, title_align="left", width=width)

        return Group(header, *body)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(*self._payload(), self.message, **{**self.options, **overrides})


class NoArgumentsError(MatchError):
    """
    Raised by the dispatcher when the invocation carries no token at all.
    """

    def __init__(self, message=Unset, /, **options):
        super().__init__(coalesce(message, "no arguments were provided"), **{
            "title": "no arguments",
            "code": FaultCode.NO_ARGUMENTS,
            "hint": "run with '--help' to see the available commands",
        } | options)


class UnknownCommandError(MatchError):
    """
    The first bare token does not name any declared top-level command.
    """

    def __init__(self, name, /, message=Unset, **options):
        self.name = name
        super().__init__(coalesce(message, "unknown command %r" % name), **{
            "title": "unknown command",
            "code": FaultCode.UNKNOWN_COMMAND,
            "hint": "run with '--help' to see the available commands",
        } | options)

    def _payload(self):
        return (self.name,)


class UnknownArgumentError(MatchError):
    """
    A short alias is not declared by the active schema (short forms have no lenient fallback).
    """

    def __init__(self, key, /, message=Unset, **options):
        self.key = key
        super().__init__(coalesce(message, "unknown argument '-%s'" % key), **{
            "title": "unknown argument",
            "code": FaultCode.UNKNOWN_ARGUMENT,
            "hint": "run with '--help' to see the declared short aliases",
        } | options)

    def _payload(self):
        return (self.key,)


class MissingValueError(MatchError):
    """
    A declared valued argument got no value token and has no default, or a
    required lookup found nothing.
    """

    def __init__(self, key, /, message=Unset, **options):
        self.key = key
        super().__init__(coalesce(message, "missing value for argument %r" % key), **{
            "title": "missing value",
            "code": FaultCode.MISSING_VALUE,
            "hint": "pass a value after the argument (for example: --%s <value>)" % key,
        } | options)

    def _payload(self):
        return (self.key,)


class InvalidValueError(MatchError):
    """
    A value is present but could not be converted to the requested type.
    """

    def __init__(self, key, /, message=Unset, **options):
        self.key = key
        super().__init__(coalesce(message, "invalid value for argument %r" % key), **{
            "title": "invalid value",
            "code": FaultCode.INVALID_VALUE,
            "hint": "check the expected type of %r with '--help'" % key,
        } | options)

    def _payload(self):
        return (self.key,)


class UnexpectedArgumentError(MatchError):
    """
    A bare token arrived when every positional slot was already bound.
    """

    def __init__(self, token, /, message=Unset, **options):
        self.token = token
        super().__init__(coalesce(message, "unexpected argument %r" % token), **{
            "title": "unexpected argument",
            "code": FaultCode.UNEXPECTED_ARGUMENT,
            "hint": "remove this extra value or run with '--help' to see the expected usage",
        } | options)

    def _payload(self):
        return (self.token,)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see MatchError).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise the fault is raised.

    typical options
    - tool, shell, fancy, colorful, and any context the renderer may show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings; when not
    found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "MatchError",
    "NoArgumentsError",
    "UnknownCommandError",
    "UnknownArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "UnexpectedArgumentError",
    "trigger",
    "getdoc",
)
