"""
saltstream CLI - Main entry point.

Commands:
    saltstream tail     - Follow the event stream and print each event
    saltstream login    - Check credentials against the Salt API
    saltstream version  - Show the version
"""

import typer

from .commands import login, tail

app = typer.Typer(
    name="saltstream",
    help="saltstream CLI - Follow the Salt API event stream.",
    no_args_is_help=True,
)

# Register commands
app.command(name="tail", help="Follow the event stream and print each event.")(tail.tail_events)
app.command(name="login", help="Log in to the Salt API and report the result.")(login.check_login)


@app.command()
def version():
    """
    Show the saltstream version.
    """
    from saltstream import __version__
    typer.echo(f"saltstream v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
