"""Redirect URL commands."""

import typer

from paypal_switch.cli.config import CLIConfig, OutputFormat
from paypal_switch.cli.formatters import console, format_output, print_error, print_success
from paypal_switch.exceptions import PayPalUnexpectedResponseError
from paypal_switch.return_url import (
    ReturnURLValidator,
    SourceApplicationPolicy,
    is_callback_url_scheme_valid,
    redirect_urls_for_scheme,
)

app = typer.Typer(no_args_is_help=True)


@app.command("redirect")
def redirect(
    ctx: typer.Context,
    scheme: str | None = typer.Option(
        None,
        "--scheme",
        help="Return URL scheme (default: from settings).",
    ),
) -> None:
    """Show the return and cancel URLs sent with payment requests."""
    config: CLIConfig = ctx.obj

    app_identifier = ""
    if scheme is None:
        try:
            switch_config = config.load_switch_config()
        except ValueError as e:
            print_error(str(e))
            raise typer.Exit(1) from None
        scheme = switch_config.return_url_scheme
        app_identifier = switch_config.app_identifier

    if not scheme:
        print_error("No return URL scheme configured")
        raise typer.Exit(1)

    urls = redirect_urls_for_scheme(scheme)
    console.print(f"Return URL: {urls.return_url}")
    console.print(f"Cancel URL: {urls.cancel_url}")

    if app_identifier and not is_callback_url_scheme_valid(scheme, app_identifier):
        print_error(f"Scheme {scheme} does not begin with app identifier {app_identifier}")
        raise typer.Exit(1)


@app.command("validate")
def validate(
    url: str = typer.Argument(..., help="URL delivered back to the application."),
    source: str | None = typer.Option(
        None,
        "--source",
        help="Source application that opened the URL.",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format.",
    ),
) -> None:
    """Validate a return URL and show its action and query."""
    if source is not None and not SourceApplicationPolicy().allows(source):
        print_error(f"Source application {source} is not allowed to return URLs")
        raise typer.Exit(1)

    try:
        validated = ReturnURLValidator().validate(url)
    except PayPalUnexpectedResponseError as e:
        print_error(f"{e.message}: {url}")
        raise typer.Exit(1) from None

    format_output(
        {"action": validated.action.value, "query": validated.query_params},
        output,
        title="Return URL",
    )
    print_success("Return URL is valid")
