"""
Keyword Classifier - pure text → category tags

Stage 1 of categorization. NO database access: takes product text and
returns tags; CategorizationService resolves the tags to stored categories.

Algorithm:
1. Lowercase name + description + brand + tags into one blob
2. Gender pass: explicit markers in GENDER_PRIORITY order (men → women → kids),
   first category with any hit wins
3. Inference: if no marker, count non-marker men vs women keywords;
   strictly greater count wins, a tie (0-0 included) decides nothing
4. Still undecided → unisex (confidence low)
5. Secondary pass: SECONDARY_ORDER (accessories → footwear → bags),
   first category with any hit wins, at most one

Matching modes:
- word (default): keyword, optionally followed by a plural "s" or "es", must
  not touch a letter or digit on either side, so "blouse" fires on "Silk
  Blouses" while "men" does not fire inside "women" and "cap" not inside
  "escape"
- substring: plain containment, kept for parity with legacy categorizations
"""
import re
from enum import Enum
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence

import structlog

from packages.domain.categorization.keywords import (
    CATEGORY_KEYWORDS,
    GENDER_KEYWORDS,
    GENDER_PRIORITY,
    SECONDARY_ORDER,
    CategoryTag,
    inference_keywords,
)
from packages.domain.categorization.schemas import Confidence, DetectedTags

logger = structlog.get_logger()


class MatchMode(str, Enum):
    """How a keyword is located in the text blob"""
    WORD = "word"
    SUBSTRING = "substring"


@lru_cache(maxsize=None)
def _word_pattern(keyword: str) -> re.Pattern:
    # Optional "s"/"es" so table entries stay singular: "blouse" fires on "blouses"
    return re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?:e?s)?(?![a-z0-9])")


def keyword_in_text(keyword: str, text: str, mode: MatchMode = MatchMode.WORD) -> bool:
    if mode == MatchMode.SUBSTRING:
        return keyword in text
    return _word_pattern(keyword).search(text) is not None


def find_keywords(keywords: Iterable[str], text: str, mode: MatchMode = MatchMode.WORD) -> List[str]:
    """Keywords present in text, in table order."""
    return [kw for kw in keywords if keyword_in_text(kw, text, mode)]


def build_text(
    name: Optional[str] = "",
    description: Optional[str] = "",
    brand: Optional[str] = "",
    tags: Optional[Sequence[str]] = None,
) -> str:
    """Single lowercase blob of all product text (None treated as empty)."""
    parts = [name or "", description or "", brand or "", " ".join(tags or [])]
    # Typographic apostrophes ("Men’s") would otherwise miss the "men's" markers
    return " ".join(parts).lower().replace("’", "'")


def classify(
    name: Optional[str] = "",
    description: Optional[str] = "",
    brand: Optional[str] = "",
    tags: Optional[Sequence[str]] = None,
    match_mode: MatchMode = MatchMode.WORD,
) -> DetectedTags:
    """
    Classify product text into primary and secondary category tags.

    Args:
        name: Product name
        description: Product description
        brand: Brand name
        tags: Free-form tags
        match_mode: word-boundary (default) or substring matching

    Returns:
        DetectedTags; never raises for any string input
    """
    text = build_text(name, description, brand, tags)

    if not text.strip():
        return DetectedTags(primary=CategoryTag.UNISEX)

    matched = {}
    primary: Optional[CategoryTag] = None

    # Explicit gender markers (priority order, first hit wins)
    for gender in GENDER_PRIORITY:
        hits = find_keywords(GENDER_KEYWORDS[gender], text, match_mode)
        if hits:
            primary = gender
            matched[gender.value] = hits
            break

    # Inference from garment keywords
    if primary is None:
        men_hits = find_keywords(inference_keywords(CategoryTag.MEN), text, match_mode)
        women_hits = find_keywords(inference_keywords(CategoryTag.WOMEN), text, match_mode)

        logger.debug("gender_inference",
                     men_hits=len(men_hits),
                     women_hits=len(women_hits))

        if len(men_hits) > len(women_hits):
            primary = CategoryTag.MEN
            matched[CategoryTag.MEN.value] = men_hits
        elif len(women_hits) > len(men_hits):
            primary = CategoryTag.WOMEN
            matched[CategoryTag.WOMEN.value] = women_hits

    # Product type (declaration order, first hit wins)
    secondary: Optional[CategoryTag] = None
    for category in SECONDARY_ORDER:
        hits = find_keywords(CATEGORY_KEYWORDS[category], text, match_mode)
        if hits:
            secondary = category
            matched[category.value] = hits
            break

    return DetectedTags(
        primary=primary or CategoryTag.UNISEX,
        secondary=secondary,
        primary_confidence=Confidence.HIGH if primary else Confidence.LOW,
        secondary_confidence=Confidence.HIGH if secondary else Confidence.LOW,
        matched_keywords=matched,
    )
