"""
Name: Engine Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Normalize enum-like values (render mode, animation effect, speed)
  - Provide defaults that match the observed host behavior

Collaborators:
  - container.py: reads settings to decide which passes are active
  - application/usecases: read caps and tokens
  - crosscutting/logger.py: reads log_level / log_json

Constraints:
  - No business logic, pure configuration
  - Storage and UI for these values live in the host (out of scope)

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
  - All caps configurable for different hosts
"""

from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.locale_ranges import UNICODE_RANGES

STREAM_RENDER_MODES = {"live", "buffered"}
STREAM_ANIM_EFFECTS = {"none", "typewriter", "blur", "glow"}

_MIN_ANIM_SPEED = 10
_MAX_ANIM_SPEED = 80
_DEFAULT_ANIM_SPEED = 20


class LocaleFontRule(BaseModel):
    """Regla range-key -> descripción de fuente (la fuente es opaca para el motor)."""

    range_key: str
    font: str


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Attributes:
        fonts_enabled: Master switch for every pass (default: True)
        dialogue_font: Font for dialogue quotes; empty disables the quote pass
        custom_font: Font for custom-delimited ranges
        custom_font_open: Opening delimiter token
        custom_font_close: Closing delimiter token
        custom_font_wrap_enabled: Enable the delimiter pass
        locale_font_enabled: Enable the locale pass
        locale_fonts: JSON list of {"range_key", "font"} rules
        stream_render_mode: live|buffered (default: live)
        stream_anim_effect: none|typewriter|blur|glow (default: none)
        stream_anim_speed: Step in ms, clamped to [10, 80] (default: 20)
        stream_anim_cursor: Show cursor while streaming (typewriter only)
        typewriter_step_ms: Step used to chain typewriter containers (default: 20)
        grapheme_segmentation: Cluster segmentation capability (default: True)
        max_text_chars: TextView character cap (default: 50_000)
        max_fragments: TextView fragment cap (default: 20_000)
        max_delimiter_spans: Delimiter span cap (default: 200)
        max_locale_wraps: Locale wrap operations per pass (default: 12_000)
        max_stream_units: Stream units per pass (default: 20_000)
        log_level: Logging level (default: INFO)
        log_json: JSON log output (default: True)
    """

    # Feature flags
    fonts_enabled: bool = True
    dialogue_font: str = ""
    custom_font: str = ""
    custom_font_open: str = ""
    custom_font_close: str = ""
    custom_font_wrap_enabled: bool = False
    locale_font_enabled: bool = False
    locale_fonts: list[LocaleFontRule] = []

    # Streaming
    stream_render_mode: str = "live"
    stream_anim_effect: str = "none"
    stream_anim_speed: int = _DEFAULT_ANIM_SPEED
    stream_anim_cursor: bool = True
    typewriter_step_ms: int = 20

    # Platform capability
    grapheme_segmentation: bool = True

    # Hard caps (soft-fail)
    max_text_chars: int = 50_000
    max_fragments: int = 20_000
    max_delimiter_spans: int = 200
    max_locale_wraps: int = 12_000
    max_stream_units: int = 20_000

    # Observability
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("stream_render_mode", mode="before")
    @classmethod
    def normalize_render_mode(cls, v) -> str:
        mode = str(v or "").strip().lower()
        if mode in {"buffer", "buffered"}:
            return "buffered"
        return "live"

    @field_validator("stream_anim_effect", mode="before")
    @classmethod
    def normalize_anim_effect(cls, v) -> str:
        effect = str(v or "").strip().lower()
        return effect if effect in STREAM_ANIM_EFFECTS else "none"

    @field_validator("stream_anim_speed", mode="before")
    @classmethod
    def clamp_anim_speed(cls, v) -> int:
        try:
            num = float(v)
        except (TypeError, ValueError):
            return _DEFAULT_ANIM_SPEED
        if num != num:  # NaN
            return _DEFAULT_ANIM_SPEED
        return round(min(_MAX_ANIM_SPEED, max(_MIN_ANIM_SPEED, num)))

    @field_validator(
        "max_text_chars",
        "max_fragments",
        "max_delimiter_spans",
        "max_locale_wraps",
        "max_stream_units",
        "typewriter_step_ms",
    )
    @classmethod
    def caps_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("caps must be greater than 0")
        return v

    def custom_tokens(self) -> tuple[str, str]:
        """Delimitadores custom normalizados (trim)."""
        return (self.custom_font_open or "").strip(), (
            self.custom_font_close or ""
        ).strip()

    def delimiter_pass_active(self) -> bool:
        open_token, close_token = self.custom_tokens()
        return bool(
            self.fonts_enabled
            and self.custom_font_wrap_enabled
            and open_token
            and close_token
            and (self.custom_font or "").strip()
        )

    def quote_pass_active(self) -> bool:
        return bool(self.fonts_enabled and (self.dialogue_font or "").strip())

    def active_locale_fonts(self) -> dict[str, str]:
        """
        Mapa range_key -> font de reglas válidas.

        Reglas con clave desconocida o fuente vacía se descartan.
        """
        if not (self.fonts_enabled and self.locale_font_enabled):
            return {}
        out: dict[str, str] = {}
        for rule in self.locale_fonts:
            key = (rule.range_key or "").strip()
            font = (rule.font or "").strip()
            if not key or key not in UNICODE_RANGES or not font:
                continue
            out[key] = font
        return out

    def stream_granularity(self) -> str:
        return "grapheme" if self.stream_anim_effect == "typewriter" else "word"

    def stream_cursor_enabled(self) -> bool:
        return self.stream_anim_cursor and self.stream_anim_effect == "typewriter"

    model_config = SettingsConfigDict(
        env_prefix="RUNMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
