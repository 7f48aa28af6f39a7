"""CLI entry point for issue-creator.

Commands:
- create: render the next ticket of a series and create it on GitHub
- render: print the next ticket without creating anything
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from issue_creator.config import ConfigError, load_config
from issue_creator.logging import setup_logging
from issue_creator.service import IssueServiceError
from issue_creator.wiring import open_service

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to issue-creator.yaml (auto-detected if not specified)",
)
verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)


@click.group()
@click.version_option(package_name="issue-creator")
def main() -> None:
    """Create recurring GitHub issues and discussions from template tickets."""
    pass


@main.command()
@click.argument("template_url")
@config_option
@click.option(
    "--close-last-issue/--no-close-last-issue",
    default=None,
    help="Close the previous ticket after creating the new one",
)
@click.option(
    "--check-before-create-issue",
    "check_script",
    default=None,
    help="Shell script that must exit 0 before the ticket is created",
)
@verbose_option
def create(
    template_url: str,
    config_path: Path | None,
    close_last_issue: bool | None,
    check_script: str | None,
    verbose: bool,
) -> None:
    """Create the next ticket from TEMPLATE_URL."""
    setup_logging("DEBUG" if verbose else None)

    try:
        config = load_config(
            config_path,
            overrides={
                "close_last_issue": close_last_issue,
                "check_before_create_issue": check_script,
            },
        )
        with open_service(config) as service:
            created = service.create(template_url)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except IssueServiceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(created.url)


@main.command()
@click.argument("template_url")
@config_option
@verbose_option
def render(template_url: str, config_path: Path | None, verbose: bool) -> None:
    """Print the next ticket from TEMPLATE_URL without creating it."""
    setup_logging("DEBUG" if verbose else None)

    try:
        config = load_config(config_path)
        with open_service(config) as service:
            ticket = service.render(template_url)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except IssueServiceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Title: {ticket.title}")
    click.echo(f"Labels: {', '.join(ticket.labels)}")
    click.echo(f"Last issue: {ticket.last_issue_url}")
    click.echo("")
    click.echo(ticket.body)


if __name__ == "__main__":
    main()
