"""
snapcli command layer: declare command trees, dispatch tokens, render help.

What this module provides
- Command: one node of the command tree (a schema). It owns its arguments,
  its subcommands (keyed by name) and an optional callback receiving Matches.
- App: the root of the tree. It owns the application-wide (global) arguments
  and the top-level commands, and dispatches a token sequence:
    1. leading options are matched against the global arguments,
    2. the first bare token selects a command,
    3. the remaining tokens are matched against that command's schema,
    4. the global matches are merged in (command values win) and the
       command's callback is invoked with the result.
  A command without a callback routes the next bare token to one of its
  subcommands, one level at a time, and renders its own help when none matches.
- command(...): decorator building a Command around a callback.
- invoke(app, prompt): convenience runner.

Quick start
    from snapcli import App, Arg, command

    @command("hello", args=[Arg("name", positional=True, default="world")])
    def hello(matches):
        \"\"\"Prints a greeting\"\"\"
        print("Hello, %s!" % matches.value_of("name"))

    app = App("cli", version="1.0.0", about="A simple CLI app", shell=True)
    app.arg(Arg("verbose", "v", about="Enable verbose mode", flag=True))
    app.command(hello)

    if __name__ == "__main__":
        app.get_matches()

Faults
- Matching faults are raised by snapcli.parser and surfaced by App.trigger():
  raised outside shell mode, rendered with rich (exit status 1) inside it.
- "--help" / "-h" anywhere renders the help of the routed command, unless that
  command declares an argument named "help" or a short alias "h" itself.
"""
import functools
import inspect
import logging
import operator
import re
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Arg
from .faults import *
from .matches import Matches
from .parser import match, scan
from .utils import *

lg = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass that turns schema classes into introspectable records.

    - Exposes every name listed in __introspectable__ as a read-only property
      through mirror().
    - Provides stable __repr__/__rich_repr__ restricted to __displayable__
      (falls back to __introspectable__).
    - Derives __typename__ from the class name for messages.
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


def _process_strings(cls, metadata, *names):
    """
    Normalize scalar string/Text metadata fields in place.

    - name must be a non-empty string without whitespace (it is typed as a token).
    - other fields must be str | Text | Unset; strings are trimmed and must stay non-empty.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name) or name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' must not contain whitespace nor start with '-'")
    metadata["name"] = name

    for field in names:
        if not isinstance(object := metadata[field], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = object


def _tokenize(prompt):
    """
    Normalize a prompt into a list of tokens.

    - Unset: the current process arguments (sys.argv[1:]).
    - str: shell-like string split with shlex.
    - Iterable[str]: used as-is (empty strings are legitimate values).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("get_matches() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("get_matches() argument must be a string or an iterable of strings")


class Command(metaclass=CommandType):
    """
    Command schema: arguments, subcommands and an optional callback.

    Ownership
    - A command belongs to at most one parent; attaching it twice is an error.
    - Subcommands are stored by name; names are unique within a parent.

    Routing rules
    - Bare tokens bind to the declared positional arguments first; the first
      bare token left over selects a subcommand.
    """

    __introspectable__ = (
        "name",
        "about",
        "args",
        "subcommands",
        "callback",
        "parent",
    )

    __displayable__ = (
        "name",
        "about",
        "args",
        "subcommands",
    )

    def __new__(cls, name, /, about=Unset, args=(), subcommands=(), callback=Unset):
        """
        Construct a Command.

        Parameters
        - name: str
          Token that selects this command on the command line.
        - about: Unset | str | Text
          Help line.
        - args: Iterable[Arg]
          Declared arguments, in order (positional binding order included).
        - subcommands: Iterable[Command]
          Children, attached in order.
        - callback: Unset | Callable[[Matches], Any]
          Invoked with the merged matches when this command is selected.
        """
        metadata = {"name": name, "about": about}
        _process_strings(cls, metadata, "about")

        self = super().__new__(cls)
        self._name = metadata["name"]
        self._about = metadata["about"]
        self._args = []
        self._subcommands = {}
        self._callback = Unset
        self._parent = Unset

        for arg in args:
            self.arg(arg)
        for subcommand in subcommands:
            self.subcommand(subcommand)
        if callback is not Unset:
            self.execute(callback)
        return self

    @property
    def root(self):
        """
        Return the topmost node of the tree this command belongs to.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        return " ".join(step.name for step in self.path)

    @property
    def shell(self):
        return self.root is not self and self.root.shell

    @property
    def fancy(self):
        return self.root is not self and self.root.fancy

    @property
    def colorful(self):
        return self.root is not self and self.root.colorful

    def arg(self, arg, /):
        """
        Declare an argument; returns the command for chaining.

        Raises
        - TypeError: when arg is not an Arg.
        - ValueError: on a duplicate name or short alias.
        """
        if not isinstance(arg, Arg):
            raise TypeError(f"{type(self).__typename__} arguments must be args")
        for other in self._args:
            if other.name == arg.name:
                raise ValueError(f"{type(self).__typename__} argument name {arg.name!r} is already in use")
            if arg.short is not None and other.short == arg.short:
                raise ValueError(f"{type(self).__typename__} argument short alias {arg.short!r} is already in use")
        self._args.append(arg)
        return self

    def subcommand(self, subcommand, /):
        """
        Attach a child command; returns this command for chaining.

        Raises
        - TypeError: when subcommand is not a Command (or is an App).
        - ValueError: when the name is taken or the child already has a parent.
        """
        if not isinstance(subcommand, Command) or isinstance(subcommand, App):
            raise TypeError(f"{type(self).__typename__} subcommands must be commands")
        if subcommand.parent:
            raise ValueError(f"{type(self).__typename__} {subcommand.name!r} is already attached to {subcommand.parent.name!r}")
        if self._subcommands.setdefault(subcommand.name, subcommand) is not subcommand:
            typeof = "command" if isinstance(self, App) else "subcommand"
            raise ValueError(f"{type(self).__typename__} {typeof} name {subcommand.name!r} is already in use")
        subcommand._parent = self
        return self

    def execute(self, callback, /):
        """
        Bind the callback invoked with the matches; returns the callback so it
        can be used as a decorator (@cmd.execute).
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} callback must be callable")
        if self._callback is not Unset:
            raise TypeError(f"{type(self).__typename__} callback cannot be overridden")
        self._callback = callback
        return callback

    def _dispatch(self, tokens, inherited):
        """
        Match tokens (without this command's name) and run or route.

        - With a callback: every token is matched against this schema; the
          merged table is handed to the callback.
        - Without: leading options are matched, then the next bare token selects
          a subcommand; otherwise this command's help is rendered.
        """
        if self._callback is not Unset:
            matches = inherited.merge(match(self, tokens))
            lg.debug("running %r with %d resolved values", self.route, len(matches))
            self._callback(matches)
            return matches

        own, index = scan(self, tokens, interspersed=False)
        matches = inherited.merge(own)
        if index < len(tokens) and (child := self._subcommands.get(tokens[index])):
            lg.debug("routing %r to subcommand %r", self.route, child.name)
            return child._dispatch(tokens[index + 1:], matches)

        lg.debug("nothing to run for %r, rendering its help", self.route)
        self._helper()
        return matches

    def _helper(self, *, stderr=False):
        """
        Render this command's help to the console.

        Palette keys
        - usage-label, program-name, usage-section, description-section, version-section
        - group-label, argument-name, short-name, metavar, argument-description, default
        - children-title, children-table, children, children-description
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        console = Console(stderr=stderr)
        styles = defaultdict(str, {
            # === Head sections ===
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "version-section": "#737373",

            # === Arguments ===
            "group-label": "bold #FFFFFF",
            "argument-name": "bold #00E6FF",
            "short-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "default": "italic #737373",

            # === Children table ===
            "children-title": "bold #FFFFFF",
            "children-table": "#4B5563",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",

            # === Fancy panel ===
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment.copy()
            return Text(str(fragment), style)

        renders = []
        width = console.width - 4 * self.fancy

        for line in self._heading():
            renders.append(text(line, styler("version-section")))

        # usage: <route> [options] <positionals...> | <command>
        usage = Text()
        usage.append("usage", styler("usage-label")).append(": ")
        usage.append(text(self.route, styler("program-name")))
        if any(not arg.positional for arg in self._args):
            usage.append(" ").append(text("[options]", styler("usage-section")))
        for arg in filter(lambda x: x.positional, self._args):
            metavar = "<%s>" % arg.name
            usage.append(" ").append(text(metavar if arg.default is None else "[%s]" % metavar, styler("metavar")))
        if self._subcommands:
            typeof = "<subcommand>" if self.parent else "<command>"
            usage.append(" ").append(text(typeof, styler("usage-section")))
        renders.append(usage.append("\n"))

        if self.about:
            renders.append(text(self.about, styler("description-section")).append("\n"))

        if self._args:
            padding = 2
            indent = max(len(self._signature(arg)) for arg in self._args) + padding * 2
            section = Text()
            section.append(text("arguments", styler("group-label"))).append(":\n")
            for arg in self._args:
                line = Text(" " * padding)
                if arg.positional:
                    line.append(text("<%s>" % arg.name, styler("metavar")))
                else:
                    line.append(text("--" + arg.name, styler("argument-name")))
                    if arg.short is not None:
                        line.append(", ").append(text("-" + arg.short, styler("short-name")))
                    if arg.valued:
                        line.append(" ").append(text("<%s>" % arg.name, styler("metavar")))
                descr = Text.assemble(
                    text(arg.about, styler("argument-description")),
                    text(" [default: %s]" % arg.default if arg.default is not None else "", styler("default")),
                )
                if descr:
                    line.append(" " * max(indent - len(line), 1))
                    wrapped = descr.wrap(console, max(width - indent, 10))
                    line.append(wrapped[0])
                    for segment in wrapped[1:]:
                        line.append("\n").append(" " * indent).append(segment)
                section.append(line).append("\n")
            renders.append(section)

        if self._subcommands:
            typeof = "subcommands" if self.parent else "commands"
            table = Table(
                "name", "help",
                title=text(typeof, styler("children-title")),
                width=int(width * (2 / 3)),
                box=ROUNDED,
                style=styler("children-table"),
                header_style=styler("children-title"),
            )
            for name, child, depth in self._children():
                if child.about:
                    help = text(child.about, styler("children-description"))
                else:
                    help = text("run '%s --help' for details" % child.route, styler("children-description"))
                table.add_row(text("  " * depth + name, styler("children")), help)
            renders.append(table)

        if isinstance(renders[-1], Text):
            renders[-1].rstrip()

        renderable = Group(*renders)
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{self.route} HELP".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )
        console.print(renderable)

    def _heading(self):
        """
        Lines printed above the usage line (none for plain commands).
        """
        return ()

    def _signature(self, arg):
        """
        Plain-text width of an argument's names column (used to align descriptions).
        """
        if arg.positional:
            return "<%s>" % arg.name
        signature = "--" + arg.name
        if arg.short is not None:
            signature += ", -" + arg.short
        if arg.valued:
            signature += " <%s>" % arg.name
        return signature

    def _children(self, depth=0):
        """
        Yield (name, command, depth) for subcommands, one nested level deep.
        """
        for name, child in self._subcommands.items():
            yield name, child, depth
            if depth == 0:
                yield from child._children(depth + 1)


class App(Command):
    """
    Root of a command tree and dispatcher of the process arguments.

    Runtime flags
    - shell: when True, faults are rendered on stderr and the process exits with
      status 1; help exits with status 0. When False, faults are raised.
    - fancy: render help and faults inside rich panels.
    - colorful: enable the rich palette.
    """

    __introspectable__ = (
        "name",
        "version",
        "author",
        "about",
        "args",
        "subcommands",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "version",
        "about",
        "subcommands",
        "shell",
    )

    def __new__(
            cls,
            name,
            /,
            version=Unset,
            author=Unset,
            about=Unset,
            args=(),
            commands=(),
            *,
            shell=False,
            fancy=False,
            colorful=False
    ):
        """
        Construct an App.

        Parameters
        - name: str, program name used in usage lines and fault headers.
        - version, author, about: Unset | str | Text, help heading.
        - args: Iterable[Arg], global arguments (accepted before the command name).
        - commands: Iterable[Command], top-level commands.
        - shell, fancy, colorful: runtime flags (see class docstring).
        """
        metadata = {"name": name, "version": version, "author": author}
        _process_strings(cls, metadata, "version", "author")

        self = super().__new__(cls, name, about, args, commands)
        self._version = metadata["version"]
        self._author = metadata["author"]
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        return self

    @property
    def commands(self):
        return self.subcommands

    def command(self, command, /):
        """
        Attach a top-level command; returns the app for chaining.
        """
        return self.subcommand(command)

    def execute(self, callback, /):
        raise TypeError(f"{type(self).__typename__} cannot have a callback, attach commands instead")

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this app's runtime flags (raise, or render and exit).
        """
        if not isinstance(fault, MatchError):
            raise TypeError("trigger() argument must be a match error")
        trigger(fault, **{
            "tool": self,
            "shell": self.shell,
            "fancy": self.fancy,
            "colorful": self.colorful,
            "docs": getdoc(fault.code) if isinstance(fault.code, FaultCode) else None,
        } | options)

    def get_matches(self, prompt=Unset, /):
        """
        Match a token sequence, run the selected command and return its matches.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Returns
        - Matches: the merged table handed to the command's callback; the global
          matches alone when no command was named; an empty table when help
          was rendered.

        Raises (outside shell mode)
        - NoArgumentsError, UnknownCommandError, UnknownArgumentError,
          MissingValueError, UnexpectedArgumentError.
        """
        tokens = _tokenize(prompt)

        try:
            if not tokens:
                if self.shell:
                    self._helper(stderr=True)
                raise NoArgumentsError()

            target = self._route(tokens)
            if _wants_help(target, tokens):
                target._helper()
                if self.shell:
                    sys.exit(0)
                return Matches()

            matches, index = scan(self, tokens, interspersed=False)

            # only the global prefix may ask for the version
            if self.version and "--version" in tokens[:index] and "version" not in {arg.name for arg in self.args}:
                Console().print(Text(self._heading()[0]))
                if self.shell:
                    sys.exit(0)
                return Matches()

            if not self._subcommands:
                return match(self, tokens)

            if index == len(tokens):
                lg.debug("no command named, returning %d global values", len(matches))
                return matches

            try:
                command = self._subcommands[name := tokens[index]]
            except KeyError:
                raise UnknownCommandError(name) from None
            return command._dispatch(tokens[index + 1:], matches)
        except MatchError as fault:
            self.trigger(fault)

    def _route(self, tokens):
        """
        Best-effort walk of the bare tokens down the tree (used to pick the help target).

        Bare tokens fill the positional slots of the current command before one
        may select a subcommand, as in dispatch.
        """
        command = self
        slots = sum(arg.positional for arg in command._args)
        for token in tokens:
            if token.startswith("-"):
                continue
            if slots:
                slots -= 1
            elif (child := command._subcommands.get(token)) is not None:
                command = child
                slots = sum(arg.positional for arg in command._args)
            else:
                break
        return command

    def _heading(self):
        heading = self.name if not self.version else "%s %s" % (self.name, self.version)
        lines = [heading]
        if self.author:
            lines.append("author: %s" % self.author)
        return lines


def _wants_help(command, tokens):
    """
    Tell whether the tokens ask for help, unless the command claims those names itself.
    """
    names = {arg.name for arg in command.args if not arg.positional}
    shorts = {arg.short for arg in command.args if arg.short is not None}
    return ("--help" in tokens and "help" not in names) or ("-h" in tokens and "h" not in shorts)


def command(source=Unset, /, *args, **kwargs):
    """
    Build a Command around a callback, directly or as a decorator.

    Invocation modes
    - Bare decorator (name taken from the function):
        @command
        def hello(matches): ...
    - Decorator with metadata:
        @command("bye", about="Prints goodbye world")
        def bye(matches): ...

    The command's about defaults to the first line of the callback's docstring.

    Returns
    - Command | Callable[[Callable], Command]
    """
    name = Unset if callable(source) else source

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        if not args and "about" not in options and (doc := inspect.getdoc(callback)):
            options["about"] = doc.splitlines()[0]
        return Command(coalesce(name, callback.__name__), *args, callback=callback, **options)

    return wrapper(source) if callable(source) else wrapper


def invoke(app, prompt=Unset, /):
    """
    Convenience runner: app.get_matches(prompt).
    """
    if not isinstance(app, App):
        raise TypeError("invoke() first argument must be an app")
    return app.get_matches(prompt)


__all__ = (
    # Public API surface for consumers of snapcli.commands.
    "Command",
    "App",
    "command",
    "invoke",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del CommandType
