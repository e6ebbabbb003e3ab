"""Async command support for Typer."""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

import typer

from paypal_switch.exceptions import PayPalError

T = TypeVar("T")


def async_command(f: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., T]:
    """Decorator to run async Typer commands.

    PayPal errors are printed (with their code and any recovery suggestion)
    and turned into exit status 1.

    Usage:
        @app.command()
        @async_command
        async def my_command(ctx: typer.Context):
            ...
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return asyncio.run(f(*args, **kwargs))
        except PayPalError as e:
            from paypal_switch.cli.formatters import print_error, print_info

            print_error(f"{e.message} ({e.code})")
            if e.recovery_suggestion:
                print_info(e.recovery_suggestion)
            raise typer.Exit(1) from None

    return wrapper
