"""
saltstream tail - Follow the event stream and print each event.

A headless consumer: polls the streamer once per frame, the same way a
renderer would, and prints each payload as one line of compact JSON.
"""

import json
import time
from typing import Any, Optional

import typer

from saltstream.client import start
from saltstream.config import configure_logging, get_settings
from saltstream.errors import ChannelClosed


def format_payload(payload: Any, width: int) -> str:
    """Render a payload as compact JSON, cut to ``width`` characters."""
    text = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    if width > 0 and len(text) > width:
        return text[:width]
    return text


def tail_events(
    fps: float = typer.Option(
        60.0,
        "--fps",
        min=1.0,
        help="Polls per second.",
    ),
    width: int = typer.Option(
        150,
        "--width", "-w",
        help="Maximum characters printed per event (0 = no limit).",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit", "-n",
        min=1,
        help="Exit after this many events.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging.",
    ),
):
    """
    Start the event streamer and print events until the stream ends.
    """
    settings = get_settings()
    configure_logging(debug or settings.debug)

    streamer = start(settings)
    frame_interval = 1.0 / fps
    received = 0
    failed = False
    finished = False
    limit_reached = False

    try:
        while not finished:
            # Drain whatever arrived since the last frame
            while True:
                try:
                    outcome = streamer.poll()
                except ChannelClosed:
                    finished = True
                    break

                if outcome is None:
                    break

                if outcome.ok:
                    typer.echo(format_payload(outcome.payload, width))
                    received += 1
                    if limit is not None and received >= limit:
                        finished = True
                        limit_reached = True
                        break
                else:
                    typer.echo(f"⚠️  {outcome.kind.value}: {outcome.error}", err=True)
                    if outcome.fatal:
                        failed = True

            if not finished:
                time.sleep(frame_interval)
    except KeyboardInterrupt:
        typer.echo("\nStopping...", err=True)
    finally:
        if limit_reached:
            # The stream is still live; joining would wait for the next message.
            streamer.stop()
        else:
            streamer.stop(wait=True, timeout=settings.join_timeout)
        streamer.close()

    if failed:
        raise typer.Exit(1)
