"""Tests for appearance side effects and the accent color helper."""

import pytest

from onyxflow.settings.effects import (
    ACCENT_HOVER_VAR,
    ACCENT_VAR,
    FONT_SIZE_ATTR,
    DocumentScope,
    adjust_brightness,
)
from onyxflow.settings.schema import AppearanceSettings


class TestAdjustBrightness:
    def test_default_accent_hover_shade(self):
        assert adjust_brightness("#4f46e5", -20) == "#3b32d1"

    def test_zero_is_identity(self):
        assert adjust_brightness("#abcdef", 0) == "#abcdef"
        assert adjust_brightness("#ABCDEF", 0) == "#abcdef"

    def test_clamps_channels(self):
        assert adjust_brightness("#000000", -20) == "#000000"
        assert adjust_brightness("#ffffff", 20) == "#ffffff"
        assert adjust_brightness("#0a80f5", 20) == "#1e94ff"

    def test_without_pound(self):
        assert adjust_brightness("4f46e5", -20) == "3b32d1"

    @pytest.mark.parametrize("color", ["#fff", "#12345g", "", "#1234567"])
    def test_invalid_color(self, color):
        with pytest.raises(ValueError):
            adjust_brightness(color, 10)


class TestDocumentScope:
    def test_apply_dark_defaults(self):
        doc = DocumentScope()
        doc.apply_appearance(AppearanceSettings())

        assert doc.is_dark
        assert doc.body_attributes[FONT_SIZE_ATTR] == "medium"
        assert doc.style_properties[ACCENT_VAR] == "#4f46e5"
        assert doc.style_properties[ACCENT_HOVER_VAR] == "#3b32d1"

    @pytest.mark.parametrize("prefers_dark, expected", [(True, True), (False, False)])
    def test_auto_theme_follows_os(self, prefers_dark, expected):
        doc = DocumentScope(prefers_dark=lambda: prefers_dark)
        doc.apply_appearance(AppearanceSettings(theme="auto"))
        assert doc.is_dark is expected

    def test_custom_theme_is_light(self):
        doc = DocumentScope(prefers_dark=lambda: True)
        doc.apply_appearance(AppearanceSettings(theme="custom"))
        assert not doc.is_dark

    def test_clear(self):
        doc = DocumentScope()
        doc.apply_appearance(AppearanceSettings())
        doc.root_classes.add("sidebar-open")

        doc.clear()

        assert doc.root_classes == {"sidebar-open"}
        assert doc.body_attributes == {}
        assert doc.style_properties == {}

    def test_css(self):
        doc = DocumentScope()
        doc.apply_appearance(AppearanceSettings(accent_color="#10b981"))
        css = doc.to_css()

        assert css.startswith(":root {")
        assert "--color-accent-500: #10b981;" in css
        assert "--color-accent-600: #00a56d;" in css
