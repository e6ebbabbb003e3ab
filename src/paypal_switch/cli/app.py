"""Main Typer application."""

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from paypal_switch.cli.config import CLIConfig, _default_config_dir

app = typer.Typer(
    name="paypal-switch",
    help="PayPal browser-switch developer tools.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    sandbox: bool = typer.Option(
        True,
        "--sandbox/--production",
        "-s/-p",
        help="Use sandbox (default) or production gateway.",
        envvar="PAYPAL_SWITCH_SANDBOX",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    config_dir: Path | None = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Config directory (default: ~/.config/paypal-switch).",
        envvar="PAYPAL_SWITCH_CONFIG_DIR",
    ),
) -> None:
    """PayPal browser-switch developer tools.

    Use --production to talk to the production gateway.
    Default is sandbox mode for testing.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        )
    ctx.obj = CLIConfig(
        sandbox=sandbox,
        verbose=verbose,
        config_dir=config_dir or _default_config_dir(),
    )
