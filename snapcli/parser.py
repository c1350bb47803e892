"""
snapcli matching engine: resolve a token sequence against one command schema.

Token classification (bit-exact)
- "--<key>": long form. <key> is looked up by exact name among the named
  (non-positional) arguments of the schema.
    • declared flag      → key = "true"
    • declared valued    → key = next token; or its default when no token
                           follows; otherwise MissingValueError(key)
    • undeclared         → lenient: key = next token when it exists and does
                           not itself start with "--", otherwise key = "true"
- "-<alias>": short form. <alias> must be the short alias of a named argument;
  the value is resolved exactly like the long form and stored under the
  argument's canonical name. An undeclared alias is an UnknownArgumentError.
- anything else: bare token, bound to the next positional argument in
  declaration order, or UnexpectedArgumentError when none is left.

After the scan, positional arguments that were not bound but declare a
default are backfilled with it. Positionals without default stay absent.

The long form is lenient on purpose so that callers can read ad hoc
--key [value] pairs they never declared; short aliases and positionals have
no self-describing syntax and are always validated.

Entry points
- match(schema, tokens): resolve every token; returns Matches or raises.
- scan(schema, tokens, interspersed=False): stop at the first bare token that
  has no positional slot left and report where; used for command routing.
"""
import logging
from collections.abc import Iterable

from .arguments import Arg
from .faults import MissingValueError, UnknownArgumentError, UnexpectedArgumentError
from .matches import Matches

lg = logging.getLogger(__name__)

LONG = "--"
SHORT = "-"


def _tokenize(tokens):
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("match() tokens must be an iterable of strings")
    tokens = tuple(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("match() tokens must be an iterable of strings")
    return tokens


def _partition(schema):
    """
    Split a schema's arguments into lookup tables, once per call.

    Returns
    - named: mapping name -> Arg for non-positional arguments.
    - shorts: mapping alias -> Arg for non-positional arguments with a short alias.
    - positionals: tuple of positional Arg in declaration (= binding) order.

    Raises
    - TypeError: when the schema is neither a command nor an iterable of Arg.
    - ValueError: when names or short aliases are not unique.
    """
    specs = getattr(schema, "args", schema)
    if not isinstance(specs, Iterable):
        raise TypeError("match() schema must be a command or an iterable of args")

    names = set()
    named = {}
    shorts = {}
    positionals = []
    for spec in specs:
        if not isinstance(spec, Arg):
            raise TypeError("match() schema must be a command or an iterable of args")
        if spec.name in names:
            raise ValueError(f"argument name {spec.name!r} is declared twice")
        names.add(spec.name)

        if spec.positional:
            positionals.append(spec)
            continue
        named[spec.name] = spec
        if spec.short is not None:
            if spec.short in shorts:
                raise ValueError(f"argument short alias {spec.short!r} is declared twice")
            shorts[spec.short] = spec

    return named, shorts, tuple(positionals)


def _resolve(matches, spec, tokens, index):
    """
    Bind a declared named argument found at tokens[index]; return how many tokens it used.
    """
    if spec.flag:
        matches._insert(spec.name, "true")
        return 1
    if index + 1 < len(tokens):
        matches._insert(spec.name, tokens[index + 1])
        return 2
    if spec.default is not None:
        matches._insert(spec.name, spec.default)
        return 1
    raise MissingValueError(spec.name)


def scan(schema, tokens, /, *, interspersed=True):
    """
    Scan tokens left to right against a schema.

    Parameters
    - schema: Command | App | Iterable[Arg]
    - tokens: Iterable[str], without the command name that selected the schema.
    - interspersed: bool (keyword-only)
      When True, every bare token must bind to a positional argument. When False,
      the scan stops at the first bare token that has no positional slot left
      (a command or subcommand name) instead of failing.

    Returns
    - (Matches, int): the resolved table and the index of the first token that
      was not consumed (len(tokens) when everything was consumed).

    Raises
    - MissingValueError, UnknownArgumentError, UnexpectedArgumentError; no
      partial table escapes a failed scan.
    """
    tokens = _tokenize(tokens)
    named, shorts, positionals = _partition(schema)

    matches = Matches()
    cursor = 0
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if token.startswith(LONG):
            key = token[len(LONG):]
            try:
                spec = named[key]
            except KeyError:
                # undeclared long option: take the next token as value unless it is another long option
                if index + 1 < len(tokens) and not tokens[index + 1].startswith(LONG):
                    lg.debug("undeclared option %r bound to %r", key, tokens[index + 1])
                    matches._insert(key, tokens[index + 1])
                    index += 2
                else:
                    lg.debug("undeclared option %r bound as flag", key)
                    matches._insert(key, "true")
                    index += 1
                continue
            index += _resolve(matches, spec, tokens, index)

        elif token.startswith(SHORT):
            key = token[len(SHORT):]
            try:
                spec = shorts[key]
            except KeyError:
                raise UnknownArgumentError(key) from None
            index += _resolve(matches, spec, tokens, index)

        elif cursor < len(positionals):
            matches._insert(positionals[cursor].name, token)
            cursor += 1
            index += 1

        elif not interspersed:
            lg.debug("scan stopped at bare token %r (position %d)", token, index)
            break

        else:
            raise UnexpectedArgumentError(token)

    for spec in positionals[cursor:]:
        if spec.default is not None and not matches.is_present(spec.name):
            matches._insert(spec.name, spec.default)

    return matches, index


def match(schema, tokens, /):
    """
    Resolve every token against a schema.

    Example
        >>> from snapcli import Arg, match
        >>> schema = [Arg("a", positional=True, default="0"), Arg("b", positional=True, default="0")]
        >>> match(schema, ["3", "4"]).as_int("a")
        3

    Returns
    - Matches: the resolved name → value table.

    Raises
    - MissingValueError, UnknownArgumentError, UnexpectedArgumentError.
    """
    matches, _ = scan(schema, tokens, interspersed=True)
    return matches


__all__ = (
    "match",
    "scan",
)
