"""Live visual side effects of the appearance settings.

The ``DocumentScope`` holds what a front-end applies to its document: the
dark-mode class on the root element, the font-size marker on the body and
the accent color custom properties.
"""

import re
from typing import Callable

from onyxflow.settings.schema import AppearanceSettings

ACCENT_VAR = "--color-accent-500"
ACCENT_HOVER_VAR = "--color-accent-600"
ACCENT_SHADE_OFFSET = -20  # hover/600 shade
FONT_SIZE_ATTR = "data-font-size"
DARK_CLASS = "dark"

_HEX6 = re.compile(r"[0-9a-fA-F]{6}")


def adjust_brightness(color: str, amount: int) -> str:
    """Shift each RGB channel of a 6-digit hex color by ``amount``.

    Channels are clamped to [0, 255]; a leading ``#`` is kept if present.

    >>> adjust_brightness("#4f46e5", -20)
    '#3b32d1'
    """
    use_pound = color.startswith("#")
    digits = color[1:] if use_pound else color
    if not _HEX6.fullmatch(digits):
        raise ValueError(f"Not a 6-digit hex color: {color!r}")

    num = int(digits, 16)
    r = min(255, max(0, (num >> 16) + amount))
    g = min(255, max(0, ((num >> 8) & 0xFF) + amount))
    b = min(255, max(0, (num & 0xFF) + amount))
    return ("#" if use_pound else "") + f"{(r << 16) | (g << 8) | b:06x}"


class DocumentScope:
    """Root document state driven by the appearance category.

    Args:
        prefers_dark: OS color-scheme probe, evaluated each time the
            appearance is applied (later OS changes are not observed).
    """

    def __init__(self, prefers_dark: Callable[[], bool] = lambda: False):
        self.prefers_dark = prefers_dark
        self.root_classes: set[str] = set()
        self.body_attributes: dict[str, str] = {}
        self.style_properties: dict[str, str] = {}

    @property
    def is_dark(self) -> bool:
        return DARK_CLASS in self.root_classes

    def apply_appearance(self, appearance: AppearanceSettings) -> None:
        theme = appearance.theme
        if theme == "dark" or (theme == "auto" and self.prefers_dark()):
            self.root_classes.add(DARK_CLASS)
        else:
            self.root_classes.discard(DARK_CLASS)

        self.body_attributes[FONT_SIZE_ATTR] = appearance.font_size

        self.style_properties[ACCENT_VAR] = appearance.accent_color
        self.style_properties[ACCENT_HOVER_VAR] = adjust_brightness(
            appearance.accent_color, ACCENT_SHADE_OFFSET
        )

    def clear(self) -> None:
        """Undo everything ``apply_appearance`` set."""
        self.root_classes.discard(DARK_CLASS)
        self.body_attributes.pop(FONT_SIZE_ATTR, None)
        self.style_properties.pop(ACCENT_VAR, None)
        self.style_properties.pop(ACCENT_HOVER_VAR, None)

    def to_css(self) -> str:
        """Render the custom properties as a ``:root`` stylesheet."""
        lines = [f"  {name}: {value};" for name, value in sorted(self.style_properties.items())]
        return ":root {\n" + "\n".join(lines) + "\n}\n"
