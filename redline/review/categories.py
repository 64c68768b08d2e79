"""
Suggestion categories → display class and color.

Categories are free-form strings chosen by the correction backend;
they carry no engine semantics and only decide how a suggestion is
highlighted.
"""

from __future__ import annotations

from redline.schemas.preview import CategoryClass

CORRECTNESS_COLOR = "#d9534f"
STYLE_COLOR = "#0275d8"
DEFAULT_COLOR = "#6c757d"

CATEGORY_CLASSES: dict[str, CategoryClass] = {
    "Spelling": CategoryClass.CORRECTNESS,
    "Grammar": CategoryClass.CORRECTNESS,
    "Punctuation": CategoryClass.CORRECTNESS,
    "Gender Agreement": CategoryClass.CORRECTNESS,
    "Verb Mood": CategoryClass.CORRECTNESS,
    "Preposition Use": CategoryClass.CORRECTNESS,
    "Capitalization": CategoryClass.CORRECTNESS,
    "Double Negatives": CategoryClass.CORRECTNESS,
    "Subject-Verb Agreement": CategoryClass.CORRECTNESS,
    "Phrasing": CategoryClass.STYLE,
    "Sentence Structure": CategoryClass.STYLE,
    "Clarity": CategoryClass.STYLE,
    "Word Choice": CategoryClass.STYLE,
    "Formality": CategoryClass.STYLE,
    "Repetition": CategoryClass.STYLE,
}

_CLASS_COLORS = {
    CategoryClass.CORRECTNESS: CORRECTNESS_COLOR,
    CategoryClass.STYLE: STYLE_COLOR,
    CategoryClass.OTHER: DEFAULT_COLOR,
}

# Case-insensitive lookup table
_NORMALIZED = {name.lower(): cls for name, cls in CATEGORY_CLASSES.items()}


def classify_category(category: str | None) -> CategoryClass:
    """Map a backend category name to its display class."""
    if not category:
        return CategoryClass.OTHER
    return _NORMALIZED.get(category.strip().lower(), CategoryClass.OTHER)


def category_color(category: str | None) -> str:
    """Hex color used to underline suggestions of `category`."""
    return _CLASS_COLORS[classify_category(category)]
