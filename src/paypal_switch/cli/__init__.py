"""PayPal browser-switch CLI."""

from paypal_switch.cli.app import app

# Import command modules to register them with the app
from paypal_switch.cli.commands import checkout, urls

# Register sub-apps
app.add_typer(urls.app, name="urls", help="Redirect URL tools.")
app.add_typer(checkout.app, name="checkout", help="Run PayPal flows end to end.")


def main() -> None:
    """Entry point for the CLI."""
    app()


__all__ = ["app", "main"]
