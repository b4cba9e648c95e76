"""Build the per-card visual theme from an extracted palette.

Every region of the card frame gets a style descriptor (CSS property name to
value). Backgrounds are layered: a few translucent radial "glows" on top of
a linear gradient through the palette. All positions, stops and alpha
values are fixed, so the same palette and name always produce the same theme.
"""

from typing import Dict

from .colors import best_text_color, hex_to_rgba
from .models import CardTheme, Palette, ThemeColors

BORDER_WIDTH = "min(0.25vw, 2px)"
TEXT_SHADOW_BASE = "2px 2px 4px rgba(0, 0, 0, 0.8)"


def radial(position: str, color: str, fade: int) -> str:
    return f"radial-gradient(circle at {position}, {color} 0%, transparent {fade}%)"


def linear(angle: int, *colors: str) -> str:
    return f"linear-gradient({angle}deg, {', '.join(colors)})"


def layered(*layers: str) -> str:
    return ",\n".join(layers)


def solid_border(color: str) -> str:
    return f"{BORDER_WIDTH} solid {color}"


def _glow_text_shadow(colors: ThemeColors) -> str:
    return f"{TEXT_SHADOW_BASE}, 0 0 10px {hex_to_rgba(colors.vibrant, 0.6)}"


def _build_regions(colors: ThemeColors) -> Dict[str, Dict[str, str]]:
    vibrant_glow = hex_to_rgba(colors.vibrant, 0.4)
    dark_vibrant_glow = hex_to_rgba(colors.dark_vibrant, 0.5)
    light_vibrant_glow = hex_to_rgba(colors.light_vibrant, 0.3)
    muted_glow = hex_to_rgba(colors.muted, 0.4)

    # Header and type line share the same five-stop sweep.
    banner_sweep = linear(
        135,
        colors.vibrant,
        colors.muted,
        colors.light_vibrant,
        colors.vibrant,
        colors.dark_vibrant,
    )
    banner_text = best_text_color(colors.vibrant)

    return {
        "background": {
            "background": layered(
                radial("20% 30%", vibrant_glow, 50),
                radial("80% 70%", dark_vibrant_glow, 40),
                radial("60% 10%", light_vibrant_glow, 45),
                linear(145, colors.dark_muted, colors.dark_vibrant, colors.muted),
            ),
        },
        "header": {
            "background": layered(
                radial("25% 50%", vibrant_glow, 60),
                radial("75% 50%", muted_glow, 60),
                banner_sweep,
            ),
            "color": banner_text,
            "textShadow": _glow_text_shadow(colors),
            "boxShadow": (
                f"0 min(0.5vw, 4px) min(1.8vw, 15px) {hex_to_rgba(colors.vibrant, 0.4)}, "
                f"inset 0 min(0.25vw, 2px) 0 {hex_to_rgba(colors.light_vibrant, 0.3)}"
            ),
        },
        "imageArea": {
            "background": layered(
                radial("30% 20%", vibrant_glow, 45),
                radial("70% 80%", dark_vibrant_glow, 50),
                linear(145, colors.dark_muted, colors.dark_vibrant, colors.muted),
            ),
            "border": solid_border(colors.vibrant),
            "boxShadow": (
                "inset 0 min(0.5vw, 4px) min(1vw, 8px) rgba(0, 0, 0, 0.6), "
                f"0 0 min(2vw, 15px) {hex_to_rgba(colors.vibrant, 0.3)}"
            ),
        },
        "typeSection": {
            "background": layered(
                radial("30% 60%", vibrant_glow, 55),
                radial("70% 60%", muted_glow, 55),
                banner_sweep,
            ),
            "color": banner_text,
            "textShadow": _glow_text_shadow(colors),
        },
        "flavorText": {
            "background": layered(
                radial("40% 30%", vibrant_glow, 50),
                radial("60% 70%", muted_glow, 50),
                linear(145, colors.dark_muted, colors.dark_vibrant),
            ),
            "color": colors.light_muted,
            "accentColor": colors.vibrant,
            "border": solid_border(colors.vibrant),
        },
        "bottomSection": {
            "background": linear(135, colors.dark_vibrant, colors.dark_muted),
        },
        "stat": {
            "background": hex_to_rgba(colors.dark_vibrant, 0.8),
            "border": solid_border(colors.vibrant),
            "color": colors.light_vibrant,
            "boxShadow": f"0 0 min(1vw, 8px) {hex_to_rgba(colors.vibrant, 0.5)}",
        },
        "rarity": {
            "background": linear(135, colors.vibrant, colors.muted),
            "color": banner_text,
            "border": solid_border(colors.dark_vibrant),
            "boxShadow": f"0 0 min(1.2vw, 10px) {hex_to_rgba(colors.vibrant, 0.6)}",
        },
    }


def build_theme(palette: Palette, name: str) -> CardTheme:
    """Return the theme for card ``name`` drawn from ``palette``."""

    colors = palette.resolve()
    return CardTheme(name=name, colors=colors, theme=_build_regions(colors))
