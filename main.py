from snapcli import *

__prog__ = "cli"

app = App("cli", version="1.0.0", author="Blue", about="A simple CLI app", shell=True, colorful=True)
app.arg(Arg("verbose", "v", about="Enable verbose mode", flag=True))


@command
def hello(matches):
    """Prints hello world"""
    print("Hello, world!" if matches.is_present("verbose") else "Hello!")


@command("bye", about="Prints goodbye world")
def bye(matches):
    print("Goodbye, world!" if matches.is_present("verbose") else "Goodbye!")


@command("echo", about="Prints what you say", args=[Arg("text", "t", about="The text to print")])
def echo(matches):
    print(matches.value_of("text", "No text provided"))


@command("sub", about="A subcommand", args=[
    Arg("a", about="add a", positional=True, default="0"),
    Arg("b", about="add b", positional=True, default="0"),
])
def sub(matches):
    print(matches.as_int("a", 0) + matches.as_int("b", 0))


main = Command(
    "main",
    "The main command",
    args=[Arg("text", about="The text to print", default="Hello, world!")],
    subcommands=[sub],
)

app.command(hello).command(bye).command(echo).command(main)


if __name__ == '__main__':
    app.get_matches()
