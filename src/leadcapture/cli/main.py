"""Command-line interface for the lead capture service."""

from __future__ import annotations

import logging
from typing import Optional

import click

from leadcapture.config.settings import Settings
from leadcapture.client import FormStatus, SubmissionClient
from leadcapture.submissions.models import SubmissionKind

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def _configure_logging(verbose: int, quiet: bool) -> None:
    level_index = min(verbose, len(LOG_LEVELS) - 1)
    level = LOG_LEVELS[level_index]
    if quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", count=True, help="Increase verbosity (use up to -vv)")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool) -> None:
    """Serve the submission API or send a form to it."""
    _configure_logging(verbose, quiet)
    ctx.obj = {"settings": Settings()}


@cli.command()
@click.option("--host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    settings: Settings = ctx.obj["settings"]
    uvicorn.run(
        "leadcapture.api.endpoints:app",
        host=host or settings.API_HOST,
        port=port or settings.API_PORT,
        reload=reload or settings.API_RELOAD,
        log_level="info",
    )


@cli.command()
@click.option("--api-url", default=None, help="API base URL (default: LEADCAPTURE_API_URL)")
@click.option("--kind", type=click.Choice([k.value for k in SubmissionKind]), default="contact")
@click.option("--name", default="")
@click.option("--email", default="")
@click.option("--phone", default="")
@click.option("--event-date", default="")
@click.option("--event-location", default="")
@click.option("--event-type", default="")
@click.option("--headcount", default="")
@click.option("--message", default="")
@click.option("--lenient", is_flag=True, help="Only require name and email")
@click.pass_context
def submit(
    ctx: click.Context,
    api_url: Optional[str],
    kind: str,
    name: str,
    email: str,
    phone: str,
    event_date: str,
    event_location: str,
    event_type: str,
    headcount: str,
    message: str,
    lenient: bool,
) -> None:
    """Submit a contact or catering-request form."""
    settings: Settings = ctx.obj["settings"]
    client = SubmissionClient(api_url or settings.API_URL, strict=not lenient)

    def show(status: FormStatus) -> None:
        if status.state == "sending":
            click.echo(status.text)

    status = client.submit(
        {
            "name": name,
            "email": email,
            "phone": phone,
            "eventDate": event_date,
            "eventLocation": event_location,
            "eventType": event_type,
            "headcount": headcount,
            "message": message,
        },
        SubmissionKind(kind),
        on_status=show,
    )

    if not status.ok:
        raise click.ClickException(status.text)
    click.echo(status.text)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
