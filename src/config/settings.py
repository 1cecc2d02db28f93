"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use RUNMD_ prefix (e.g., RUNMD_FENCE_LANGUAGE=python).

Settings can also be loaded from a .env file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use RUNMD_ prefix.

    Examples:
        RUNMD_FENCE_LANGUAGE=py
        RUNMD_REQUIRE_FLAGS=false
        RUNMD_WATCH_INTERVAL=0.5
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNMD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Directive configuration
    fence_language: str = Field(
        default="python",
        description="Language tag that marks a fenced code block as executable",
    )

    require_flags: bool = Field(
        default=True,
        description="Only execute fences that carry a '--' flag string (e.g. ```python --run); false runs every tagged fence",
    )

    # Rendering configuration
    output_marker: str = Field(
        default="⇒",
        description="Glyph prefixed to every line of captured block output",
    )

    footer_rule: str = Field(
        default="----",
        description="Horizontal rule emitted above the attribution footer",
    )

    branding_link: str = Field(
        default="[![RunMD Logo](http://i.imgur.com/h0FVyzU.png)](https://github.com/broofa/runmd)",
        description="Markdown link named in the attribution footer",
    )

    # Watch configuration
    watch_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between modification-time checks in --watch mode",
    )

    def outputLine_make(self, text: str) -> str:
        """
        Prefix one line of captured output with the output marker.

        Args:
            text: A single line of block output (no newlines)

        Returns:
            Marker-prefixed line

        Example:
            >>> settings = AppSettings()
            >>> settings.outputLine_make('hi')
            '⇒ hi'
        """
        return f"{self.output_marker} {text}"


# Singleton instance - import this in your code
appsettings = AppSettings()
