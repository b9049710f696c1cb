"""
Categorization Module - keyword-driven product categorization

Two-stage process:
1. Classification (pure): product text → primary tag (men/women/kids/unisex)
   + optional secondary tag (accessories/footwear/bags)
2. Resolution (repository): tags → stored categories, created on first use

Example flow:
- "Men's Oxford Shoes" → marker "men's" → primary: men
                       → "shoes" → secondary: footwear
- "Floral Maxi Dress"  → no marker, women keywords 2 vs men 0 → primary: women
- "Blue Widget"        → nothing → primary: unisex (low), no secondary
"""

from packages.domain.categorization.classifier import MatchMode, classify
from packages.domain.categorization.keywords import (
    CATEGORY_KEYWORDS,
    GENDER_KEYWORDS,
    CategoryTag,
)
from packages.domain.categorization.schemas import (
    CategorizationResult,
    Confidence,
    DetectedTags,
    ProductText,
)
from packages.domain.categorization.slugs import slugify

__all__ = [
    'CATEGORY_KEYWORDS',
    'GENDER_KEYWORDS',
    'CategoryTag',
    'CategorizationResult',
    'Confidence',
    'DetectedTags',
    'MatchMode',
    'ProductText',
    'classify',
    'slugify',
]
