"""Process settings for berth.

Settings come from ``BERTH_*`` environment variables and are read once per
run. The sanitizer configuration derived from them is passed explicitly to
everything that validates commands.
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

from berth.errors import ConfigParseError
from berth.shell.sanitizer import SanitizerConfig, parse_sanitize_mode, warn_unknown_mode

ENV_PREFIX = "BERTH_"


class BerthSettings(BaseSettings):
    """Environment-driven settings."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    sanitize_mode: str = Field("strict", description="disabled, warn, strict or script")
    sanitize_allow_pipes: bool = Field(False, description="Allow the pipe operator")
    sanitize_allow_redirects: bool = Field(False, description="Allow redirections")
    verbose: bool = Field(False, description="Debug logging")
    quiet: bool = Field(False, description="Errors only")
    home: Optional[Path] = Field(None, description="Home directory override")
    shell: str = Field("sh", description="Shell used to run commands")

    @property
    def home_dir(self) -> Path:
        """Effective home directory."""
        return (self.home or Path.home()).expanduser()

    def sanitizer_config(self, console: Optional[Console] = None) -> SanitizerConfig:
        """Build the run's sanitizer configuration.

        An unrecognized mode falls back to strict and prints a warning to
        standard error.
        """
        mode, recognized = parse_sanitize_mode(self.sanitize_mode)
        if not recognized:
            warn_unknown_mode(self.sanitize_mode, console)
        return SanitizerConfig(
            mode=mode,
            allow_pipes=self.sanitize_allow_pipes,
            allow_redirects=self.sanitize_allow_redirects,
        )


def load_settings(**overrides: Any) -> BerthSettings:
    """Read settings from the environment.

    Raises:
        ConfigParseError: If a ``BERTH_*`` variable holds an invalid value
    """
    try:
        return BerthSettings(**overrides)
    except PydanticValidationError as e:
        variables = []
        problems = []
        for error in e.errors():
            variable = ENV_PREFIX + "_".join(str(part) for part in error.get("loc", ())).upper()
            variables.append(variable)
            problems.append(f"{variable}: {error.get('msg', 'invalid value')}")
        failure = ConfigParseError(
            "invalid environment settings: " + "; ".join(problems),
            field_path=", ".join(variables),
            error_code="CONFIG_INVALID_SETTINGS",
            cause=e,
        )
        failure.with_suggestion("Boolean variables accept values such as 1/0, true/false, yes/no or on/off")
        raise failure from e
