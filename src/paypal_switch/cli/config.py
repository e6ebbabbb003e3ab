"""CLI configuration with XDG-compliant paths and environment variable overrides."""

import dataclasses
import os
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from paypal_switch.config import PayPalSwitchConfig


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _default_config_dir() -> Path:
    """Get XDG-compliant config directory.

    Uses XDG_CONFIG_HOME if set, otherwise ~/.config/paypal-switch.
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "paypal-switch"
    return Path.home() / ".config" / "paypal-switch"


_ENV_OVERRIDES = {
    "authorization": "PAYPAL_SWITCH_AUTHORIZATION",
    "merchant_id": "PAYPAL_SWITCH_MERCHANT_ID",
    "return_url_scheme": "PAYPAL_SWITCH_RETURN_URL_SCHEME",
    "app_identifier": "PAYPAL_SWITCH_APP_IDENTIFIER",
}


@dataclass
class CLIConfig:
    """Configuration passed through Typer context.

    Directory Structure:
        config_dir/
        ├── sandbox.json        # Sandbox merchant settings
        └── production.json     # Production merchant settings
    """

    sandbox: bool = True
    verbose: bool = False
    config_dir: Path = field(default_factory=_default_config_dir)

    @property
    def environment(self) -> str:
        """Get the environment name."""
        return "sandbox" if self.sandbox else "production"

    @property
    def settings_path(self) -> Path:
        """Get the settings file path for current environment."""
        return self.config_dir / f"{self.environment}.json"

    def load_switch_config(self) -> PayPalSwitchConfig:
        """Load client settings from file with environment variable overrides.

        Raises:
            ValueError: If authorization or merchant id cannot be determined
        """
        values: dict[str, str] = {}
        base: PayPalSwitchConfig | None = None

        if self.settings_path.exists():
            base = PayPalSwitchConfig.from_file(self.settings_path, sandbox=self.sandbox)

        for name, env_var in _ENV_OVERRIDES.items():
            if env_value := os.environ.get(env_var):
                values[name] = env_value

        if base is not None:
            return dataclasses.replace(base, **values)

        missing = [name for name in ("authorization", "merchant_id") if name not in values]
        if missing:
            msg = (
                f"Missing settings: {', '.join(missing)}. "
                f"Set via environment variables (PAYPAL_SWITCH_AUTHORIZATION, "
                f"PAYPAL_SWITCH_MERCHANT_ID) or create a settings file at {self.settings_path}"
            )
            raise ValueError(msg)

        return PayPalSwitchConfig(sandbox=self.sandbox, **values)
