"""Domain constants and enumerations for validation."""

from typing import Dict, List, Set

CUSTOM_CATEGORY_PREFIX = "custom_"
FALLBACK_CATEGORY_ID = "other"

# Built-in categories in display order. Ids are stable and stored in rows.
BUILTIN_CATEGORIES: List[Dict[str, str]] = [
    {"id": "food", "name": "Food & Dining", "icon": "🍽️", "color": "#FF6B6B"},
    {"id": "transport", "name": "Transportation", "icon": "🚗", "color": "#4ECDC4"},
    {"id": "entertainment", "name": "Entertainment", "icon": "🎬", "color": "#45B7D1"},
    {"id": "shopping", "name": "Shopping", "icon": "🛍️", "color": "#96CEB4"},
    {"id": "bills", "name": "Bills & Utilities", "icon": "📋", "color": "#FECA57"},
    {"id": "healthcare", "name": "Healthcare", "icon": "⚕️", "color": "#FF9FF3"},
    {"id": "education", "name": "Education", "icon": "📚", "color": "#54A0FF"},
    {"id": "travel", "name": "Travel", "icon": "✈️", "color": "#5F27CD"},
    {"id": "income", "name": "Income", "icon": "💰", "color": "#00D2D3"},
    {"id": "other", "name": "Other", "icon": "📦", "color": "#747D8C"},
]

BUILTIN_CATEGORY_IDS: Set[str] = {c["id"] for c in BUILTIN_CATEGORIES}

MAX_DESCRIPTION_LENGTH = 100
