"""
Icon registry.

Categories store a symbolic icon name. The UI resolves it through this
explicit table; names that are not in the table fall back to a neutral glyph
instead of failing.
"""

from typing import Optional

FALLBACK_ICON = "MoreHorizontal"

ICON_GLYPHS: dict[str, str] = {
    # Categories
    "Utensils": "🍽️",
    "Bus": "🚌",
    "Home": "🏠",
    "ShoppingBag": "🛍️",
    "Film": "🎬",
    "Gamepad2": "🎮",
    "HeartPulse": "❤️",
    "GraduationCap": "🎓",
    "BookOpen": "📖",
    "Gift": "🎁",
    "Briefcase": "💼",
    "TrendingUp": "📈",
    "TrendingDown": "📉",
    "Percent": "💹",
    "Award": "🏅",
    "Tag": "🏷️",
    "MoreHorizontal": "⋯",
    # Payment methods
    "Wallet": "👛",
    "CreditCard": "💳",
    "Banknote": "💵",
    "Smartphone": "📱",
    # Interface
    "Income": "⬆️",
    "Expense": "⬇️",
    "Alert": "⚠️",
    "Calendar": "📅",
    "Filter": "🔎",
    "Edit": "✏️",
    "Trash": "🗑️",
    "Download": "⬇️",
    "Upload": "⬆️",
    "Check": "✅",
}


def resolve_icon(name: Optional[str]) -> str:
    """Return the glyph for an icon name, or the fallback glyph."""
    if not name:
        return ICON_GLYPHS[FALLBACK_ICON]
    return ICON_GLYPHS.get(name, ICON_GLYPHS[FALLBACK_ICON])


def is_known_icon(name: str) -> bool:
    return name in ICON_GLYPHS
