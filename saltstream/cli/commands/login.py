"""
saltstream login - Check credentials against the Salt API.
"""

import httpx
import typer

from saltstream.auth import SessionAuthenticator
from saltstream.config import configure_logging, get_settings
from saltstream.errors import AuthError


def check_login(
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
):
    """
    Perform the login handshake only and print a token prefix.
    """
    settings = get_settings()
    configure_logging(debug or settings.debug)

    timeout = httpx.Timeout(settings.connect_timeout)
    with httpx.Client(verify=settings.verify_ssl, timeout=timeout) as client:
        try:
            token = SessionAuthenticator(settings.credentials(), client).login()
        except AuthError as e:
            typer.echo(f"❌ Login failed: {e}", err=True)
            raise typer.Exit(1)

    typer.echo(f"✓ Logged in to {settings.url} as {settings.user} (token {token[:6]}...)")
