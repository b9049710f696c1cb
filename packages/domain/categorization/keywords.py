"""
Keyword tables for automatic product categorization

Built once at import and read-only afterwards (MappingProxyType of tuples).
Tuple order is declaration order, which only matters for diagnostics; the
precedence between categories is GENDER_PRIORITY / SECONDARY_ORDER.

Lists are curated by hand. Under substring matching a short keyword fires
inside longer words ("cap" in "escape", "men" in "women"), so prefer whole
words when adding entries.
"""
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class CategoryTag(str, Enum):
    """Closed set of categories the categorizer can assign"""
    # Primary (gender)
    MEN = "men"
    WOMEN = "women"
    KIDS = "kids"
    UNISEX = "unisex"

    # Secondary (product type)
    ACCESSORIES = "accessories"
    FOOTWEAR = "footwear"
    BAGS = "bags"


# Explicit gender markers, tested first in GENDER_PRIORITY order
GENDER_PRIORITY: Tuple[CategoryTag, ...] = (
    CategoryTag.MEN,
    CategoryTag.WOMEN,
    CategoryTag.KIDS,
)

# Product-type categories, first match wins
SECONDARY_ORDER: Tuple[CategoryTag, ...] = (
    CategoryTag.ACCESSORIES,
    CategoryTag.FOOTWEAR,
    CategoryTag.BAGS,
)

CATEGORY_KEYWORDS: Mapping[CategoryTag, Tuple[str, ...]] = MappingProxyType({
    CategoryTag.MEN: (
        "men", "men's", "male", "guy", "gentleman", "mens", "man's", "mans",
        "shirt", "t-shirt", "tshirt", "polo", "formal", "casual", "jeans", "trousers",
        "pants", "shorts", "jacket", "blazer", "suit", "tie", "belt", "shoes",
        "sneakers", "boots", "loafers", "oxfords", "watch", "wallet", "bag",
        "backpack", "briefcase", "sweater", "hoodie", "sweatshirt", "vest",
        "waistcoat", "cardigan", "pullover", "jumper", "tank", "singlet",
    ),
    CategoryTag.WOMEN: (
        "women", "women's", "female", "lady", "ladies", "womens", "woman's", "womans",
        "dress", "skirt", "blouse", "top", "tank", "cami", "cardigan", "sweater",
        "jumper", "pullover", "hoodie", "sweatshirt", "jacket", "coat", "blazer",
        "jeans", "pants", "trousers", "leggings", "shorts", "shoes", "heels",
        "flats", "sneakers", "boots", "sandals", "pumps", "stilettos", "wedges",
        "bag", "purse", "handbag", "clutch", "tote", "backpack", "jewelry",
        "necklace", "earrings", "bracelet", "ring", "watch", "scarf", "shawl",
        "wrap", "kimono", "maxi", "mini", "midi", "bodycon", "a-line", "fit-and-flare",
    ),
    CategoryTag.KIDS: (
        "kids", "kid's", "children", "child", "baby", "infant", "toddler",
        "boys", "boy's", "girls", "girl's", "junior", "youth", "teen",
        "school", "uniform", "play", "toy", "diaper", "onesie", "romper",
    ),
    CategoryTag.ACCESSORIES: (
        "accessory", "accessories", "jewelry", "watch", "necklace", "earrings",
        "bracelet", "ring", "anklet", "brooch", "pin", "scarf", "shawl",
        "belt", "wallet", "bag", "purse", "handbag", "clutch", "tote",
        "backpack", "briefcase", "duffel", "luggage", "suitcase", "hat",
        "cap", "beanie", "sunglasses", "glasses", "umbrella", "tie",
        "bow tie", "cufflinks", "socks", "stockings", "tights", "gloves",
        "mittens", "mask", "bandana", "headband", "hair", "wig", "perfume",
        "cologne", "fragrance", "cosmetics", "makeup", "skincare",
    ),
    CategoryTag.FOOTWEAR: (
        "shoes", "footwear", "sneakers", "boots", "sandals", "flats",
        "heels", "pumps", "stilettos", "wedges", "loafers", "oxfords",
        "derby", "chelsea", "ankle", "knee-high", "thigh-high", "mules",
        "clogs", "espadrilles", "ballet", "jelly", "slides", "slippers",
        "athletic", "running", "training", "gym", "sports", "hiking",
        "work", "safety", "dress", "casual", "formal", "party", "wedding",
    ),
    CategoryTag.BAGS: (
        "bag", "bags", "purse", "handbag", "clutch", "tote", "backpack",
        "briefcase", "duffel", "luggage", "suitcase", "travel", "messenger",
        "crossbody", "shoulder", "hobo", "satchel", "bucket", "barrel",
        "doctor", "laptop", "gym", "beach", "picnic", "shopping", "grocery",
    ),
})

GENDER_KEYWORDS: Mapping[CategoryTag, Tuple[str, ...]] = MappingProxyType({
    CategoryTag.MEN: ("men", "men's", "male", "guy", "gentleman", "mens", "man's", "mans"),
    CategoryTag.WOMEN: ("women", "women's", "female", "lady", "ladies", "womens", "woman's", "womans"),
    CategoryTag.KIDS: (
        "kids", "kid's", "children", "child", "baby", "infant", "toddler",
        "boys", "boy's", "girls", "girl's",
    ),
})


def inference_keywords(tag: CategoryTag) -> Tuple[str, ...]:
    """Non-explicit keywords of a gender category (its markers removed)."""
    markers = set(GENDER_KEYWORDS.get(tag, ()))
    return tuple(kw for kw in CATEGORY_KEYWORDS[tag] if kw not in markers)
