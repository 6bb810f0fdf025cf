"""
Filler vocabularies and punctuation sets used to normalize app titles.

These are hand-tuned lists. Bump VOCABULARY_VERSION whenever an entry is
added or removed so stored queries can be traced back to the table that
produced them.
"""

from types import MappingProxyType

VOCABULARY_VERSION = "v1"

# Stripped from every token before brand detection and from cleaned queries.
TITLE_PUNCTUATION = ",()[]:;!?'\"&-–—™®©"

# Lighter set for one/two-word titles: keeps "&" and dashes ("C&A", "Wi-Fi").
SHORT_TITLE_PUNCTUATION = ",()[]:;!?'\"™®©"

TRADEMARK_GLYPHS = "™®©"

# Safe to drop from any title. Multi-word phrases come first so that
# "for android" is removed as a unit. Order is significant.
UNIVERSAL_FILLER = (
    "for android", "for phone", "for mobile",
    "pro", "free", "app", "lite", "plus", "premium", "mod",
    "the", "a", "an", "new", "best", "top", "ultimate", "official",
)

# Dropped only when the app is listed under the matching Google Play category.
CATEGORY_FILLER = MappingProxyType({
    "Tools":                   frozenset({"tool", "tools", "utility", "utilities", "helper"}),
    "Communication":           frozenset({"messenger", "messaging", "chat", "call", "calling"}),
    "Photography":             frozenset({"photo", "camera", "picture", "pic", "image"}),
    "Music & Audio":           frozenset({"music", "player", "audio", "sound", "mp3"}),
    "Entertainment":           frozenset({"entertainment", "fun", "funny"}),
    "Education":               frozenset({"learn", "learning", "education", "study", "school"}),
    "Health & Fitness":        frozenset({"health", "fitness", "workout", "exercise"}),
    "Finance":                 frozenset({"finance", "money", "bank", "banking", "pay", "payment"}),
    "Productivity":            frozenset({"productivity", "organizer", "planner"}),
    "Shopping":                frozenset({"shopping", "shop", "store", "deals", "coupons", "sale"}),
    "Social":                  frozenset({"social", "network", "friends", "community"}),
    "Travel & Local":          frozenset({"travel", "hotel", "flights", "booking", "trip", "guide"}),
    "Weather":                 frozenset({"weather", "forecast", "radar", "climate"}),
    "Lifestyle":               frozenset({"lifestyle", "fashion", "style", "beauty"}),
    "Video Players & Editors": frozenset({"video", "player", "editor", "movie", "clip"}),
    "Maps & Navigation":       frozenset({"maps", "map", "navigation", "gps", "directions"}),
    "News & Magazines":        frozenset({"news", "magazine", "headlines", "daily"}),
    "Food & Drink":            frozenset({"food", "recipe", "restaurant", "cooking", "delivery"}),
    "Business":                frozenset({"business", "office", "corporate", "enterprise"}),
})
