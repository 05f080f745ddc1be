"""
Name: Settings Unit Tests

Responsibilities:
  - Test normalization of streaming options
  - Test derived pass activation helpers
  - Test validation of caps
"""

import pytest
from pydantic import ValidationError
from runmark.crosscutting.config import LocaleFontRule, Settings

pytestmark = pytest.mark.unit


class TestStreamingOptions:
    @pytest.mark.parametrize(
        "raw,expected",
        [("buffered", "buffered"), ("BUFFER", "buffered"), ("live", "live"), ("", "live"), ("weird", "live")],
    )
    def test_render_mode_normalization(self, make_settings, raw, expected):
        """R: Unknown modes fall back to live."""
        assert make_settings(stream_render_mode=raw).stream_render_mode == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [(5, 10), (200, 80), (33.6, 34), ("nan", 20), ("abc", 20), (None, 20), ("inf", 80)],
    )
    def test_anim_speed_is_clamped(self, make_settings, raw, expected):
        """R: Speed is clamped to [10, 80]; invalid values use the default."""
        assert make_settings(stream_anim_speed=raw).stream_anim_speed == expected

    def test_unknown_effect_is_none(self, make_settings):
        """R: Unknown effects normalize to none."""
        assert make_settings(stream_anim_effect="sparkle").stream_anim_effect == "none"

    def test_granularity_and_cursor(self, make_settings):
        """R: Typewriter effect animates graphemes and may show a cursor."""
        typewriter = make_settings(stream_anim_effect="typewriter")
        blur = make_settings(stream_anim_effect="blur")

        assert typewriter.stream_granularity() == "grapheme"
        assert typewriter.stream_cursor_enabled() is True
        assert blur.stream_granularity() == "word"
        assert blur.stream_cursor_enabled() is False


class TestPassActivation:
    def test_delimiter_pass_requires_flag_and_both_tokens(self, make_settings):
        """R: Blank tokens after trim disable the delimiter pass."""
        active = make_settings(
            custom_font="Mono",
            custom_font_wrap_enabled=True,
            custom_font_open=" << ",
            custom_font_close=">>",
        )
        blank = make_settings(
            custom_font="Mono",
            custom_font_wrap_enabled=True,
            custom_font_open="  ",
            custom_font_close=">>",
        )

        assert active.delimiter_pass_active() is True
        assert active.custom_tokens() == ("<<", ">>")
        assert blank.delimiter_pass_active() is False

    def test_delimiter_pass_requires_custom_font(self, make_settings):
        """R: Without a custom font the delimiter pass stays off."""
        tokens = {
            "custom_font_wrap_enabled": True,
            "custom_font_open": "<<",
            "custom_font_close": ">>",
        }

        assert make_settings(**tokens).delimiter_pass_active() is False
        assert make_settings(custom_font="   ", **tokens).delimiter_pass_active() is False
        assert make_settings(custom_font="Mono", **tokens).delimiter_pass_active() is True

    def test_master_switch_disables_everything(self, make_settings):
        """R: fonts_enabled=False turns every pass off."""
        s = make_settings(
            fonts_enabled=False,
            dialogue_font="Serif",
            custom_font_wrap_enabled=True,
            custom_font_open="<<",
            custom_font_close=">>",
            locale_font_enabled=True,
            locale_fonts=[LocaleFontRule(range_key="latin", font="Serif")],
        )

        assert s.delimiter_pass_active() is False
        assert s.quote_pass_active() is False
        assert s.active_locale_fonts() == {}

    def test_active_locale_fonts_drops_invalid_rules(self, make_settings):
        """R: Unknown keys and blank fonts are discarded."""
        s = make_settings(
            locale_font_enabled=True,
            locale_fonts=[
                {"range_key": "latin", "font": " Serif "},
                {"range_key": "klingon", "font": "X"},
                {"range_key": "cjk", "font": "  "},
            ],
        )

        assert s.active_locale_fonts() == {"latin": "Serif"}


class TestValidation:
    @pytest.mark.parametrize("field", ["max_text_chars", "max_locale_wraps", "typewriter_step_ms"])
    def test_caps_must_be_positive(self, make_settings, field):
        """R: Non-positive caps are rejected."""
        with pytest.raises(ValidationError):
            make_settings(**{field: 0})

    def test_env_prefix(self, monkeypatch):
        """R: Settings are read from RUNMARK_* env vars."""
        monkeypatch.setenv("RUNMARK_STREAM_RENDER_MODE", "buffered")

        assert Settings().stream_render_mode == "buffered"
