"""
Centralized habit category definitions.
Every habit belongs to exactly one of these; the icon names follow the Ionicons set.
"""

HABIT_CATEGORIES = [
    "Health",
    "Fitness",
    "Productivity",
    "Learning",
    "Social",
    "Other",
]

CATEGORY_ICONS = {
    "Health": "heart",
    "Fitness": "barbell",
    "Productivity": "checkmark-circle",
    "Learning": "book",
    "Social": "people",
    "Other": "ellipsis-horizontal",
}

DEFAULT_CATEGORY = "Other"


def icon_for(category: str) -> str:
    """Return the icon name for ``category``, falling back to the default category's icon."""
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS[DEFAULT_CATEGORY])
