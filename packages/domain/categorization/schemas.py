"""
Data schemas for categorization module
"""
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from packages.domain.categorization.keywords import CategoryTag


class Confidence(str, Enum):
    """Per-axis confidence label"""
    HIGH = "high"   # A keyword matched
    LOW = "low"     # Nothing matched (defaulted or absent)


class ProductText(BaseModel):
    """Free-text product attributes the categorizer reads"""
    name: str = ""
    description: str = ""
    brand: str = ""
    tags: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Men's Slim Fit Oxford Shirt",
                "description": "Cotton oxford shirt with button-down collar",
                "brand": "Thrifty",
                "tags": ["formal", "cotton"],
            }
        }


class DetectedTags(BaseModel):
    """
    Result of the pure classification pass (no database involved).

    primary is always set (unisex when nothing matched); secondary is None
    when no product-type keyword matched.
    """
    primary: CategoryTag
    secondary: Optional[CategoryTag] = None
    primary_confidence: Confidence = Confidence.LOW
    secondary_confidence: Confidence = Confidence.LOW
    matched_keywords: Dict[str, List[str]] = Field(default_factory=dict)


class ConfidenceLabels(BaseModel):
    primary: Confidence
    secondary: Confidence


class DetectedKeywords(BaseModel):
    primary: str
    secondary: Optional[str] = None
    matched: Dict[str, List[str]] = Field(default_factory=dict)


class CategorizationResult(BaseModel):
    """
    Categorization resolved to stored categories.

    Transient: produced per call, never persisted.
    """
    primary_category_id: UUID
    secondary_category_id: Optional[UUID] = None
    confidence: ConfidenceLabels
    detected_keywords: DetectedKeywords

    class Config:
        json_schema_extra = {
            "example": {
                "primary_category_id": "0b6f3c1e-5d0a-4d55-9c59-0d1f4e0b8a11",
                "secondary_category_id": None,
                "confidence": {"primary": "high", "secondary": "low"},
                "detected_keywords": {
                    "primary": "men",
                    "secondary": None,
                    "matched": {"men": ["men's"]},
                },
            }
        }
