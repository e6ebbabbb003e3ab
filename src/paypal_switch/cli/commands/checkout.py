"""Checkout commands."""

import asyncio
import webbrowser

import typer

from paypal_switch.cli.async_runner import async_command
from paypal_switch.cli.client_factory import get_client
from paypal_switch.cli.config import CLIConfig, OutputFormat
from paypal_switch.cli.formatters import console, format_output, print_info, print_warning
from paypal_switch.models.approval import ApprovalContext
from paypal_switch.models.nonce import PayPalAccountNonce
from paypal_switch.models.request import PayPalIntent, PayPalRequest, UserAction
from paypal_switch.transports import ReturnChannel

app = typer.Typer(no_args_is_help=True)


class BrowserPromptHandler:
    """Approval handler that opens the system browser and asks for the redirect URL."""

    def __init__(self, *, open_browser: bool = True) -> None:
        self.open_browser = open_browser

    async def handle_approval(self, context: ApprovalContext, delegate: ReturnChannel) -> None:
        if self.open_browser:
            print_info("Opening browser for approval...")
            webbrowser.open(context.approval_url)
            console.print("\n[dim]If browser didn't open, visit:[/dim]")
        else:
            console.print("\nOpen this URL in your browser:")
        console.print(f"[link]{context.approval_url}[/link]")
        console.print(f"\n[dim]Environment: {context.environment} | token: {context.pairing_token}[/dim]")

        console.print()
        url = await asyncio.to_thread(
            typer.prompt,
            f"Paste the {context.callback_url_scheme}:// URL you were redirected to (blank to cancel)",
            default="",
            show_default=False,
        )
        url = url.strip()
        if url:
            await delegate.on_approval_complete(url)
        else:
            await delegate.on_approval_cancel()


def _report(nonce: PayPalAccountNonce | None, output: OutputFormat) -> None:
    if nonce is None:
        print_warning("Canceled by user")
        return
    format_output(nonce, output, title="PayPal Account")


@app.command("one-time")
@async_command
async def one_time(
    ctx: typer.Context,
    amount: str = typer.Option(..., "--amount", "-a", help="Amount, e.g. 10.00."),
    currency: str | None = typer.Option(None, "--currency", help="ISO currency code."),
    intent: PayPalIntent = typer.Option(PayPalIntent.AUTHORIZE, "--intent", help="Payment intent."),
    user_action: UserAction = typer.Option(
        UserAction.DEFAULT, "--user-action", help="Final button label on the approval page."
    ),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser automatically."),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--output", "-o", help="Output format."),
) -> None:
    """Run a one-time payment and print the resulting nonce."""
    config: CLIConfig = ctx.obj
    request = PayPalRequest(
        amount=amount,
        currency_code=currency,
        intent=intent,
        user_action=user_action,
    )

    async with get_client(config) as client:
        nonce = await client.request_one_time_payment(
            request, handler=BrowserPromptHandler(open_browser=not no_browser)
        )

    _report(nonce, output)


@app.command("billing-agreement")
@async_command
async def billing_agreement(
    ctx: typer.Context,
    description: str | None = typer.Option(None, "--description", "-d", help="Agreement description."),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser automatically."),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--output", "-o", help="Output format."),
) -> None:
    """Set up a billing agreement and print the resulting nonce."""
    config: CLIConfig = ctx.obj
    request = PayPalRequest(billing_agreement_description=description)

    async with get_client(config) as client:
        nonce = await client.request_billing_agreement(
            request, handler=BrowserPromptHandler(open_browser=not no_browser)
        )

    _report(nonce, output)
