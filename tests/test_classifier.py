import pytest

from packages.domain.categorization.classifier import (
    MatchMode,
    build_text,
    classify,
    find_keywords,
    keyword_in_text,
)
from packages.domain.categorization.keywords import (
    CATEGORY_KEYWORDS,
    GENDER_KEYWORDS,
    CategoryTag,
    inference_keywords,
)
from packages.domain.categorization.schemas import Confidence


class TestKeywordMatching:
    def test_word_mode_requires_boundaries(self):
        assert keyword_in_text("men", "men's shirt")
        assert not keyword_in_text("men", "women's shirt")
        assert not keyword_in_text("cap", "escape hoodie")

    def test_word_mode_accepts_plural_suffix(self):
        assert keyword_in_text("blouse", "silk blouses")
        assert keyword_in_text("dress", "floral dresses")
        assert keyword_in_text("belt", "leather belts")
        assert not keyword_in_text("belt", "beltway tote")

    def test_substring_mode_matches_inside_words(self):
        assert keyword_in_text("men", "women's shirt", MatchMode.SUBSTRING)
        assert keyword_in_text("cap", "escape hoodie", MatchMode.SUBSTRING)

    def test_hyphenated_and_multiword_keywords(self):
        assert keyword_in_text("t-shirt", "graphic t-shirt")
        assert keyword_in_text("bow tie", "silk bow tie")

    def test_find_keywords_keeps_table_order(self):
        assert find_keywords(["tote", "bag", "clutch"], "clutch bag") == ["bag", "clutch"]

    def test_build_text_treats_none_as_empty(self):
        assert build_text(None, None, None, None).strip() == ""

    def test_build_text_normalizes_typographic_apostrophe(self):
        assert "men's" in build_text("Men’s Watch")


class TestKeywordTables:
    def test_inference_keywords_exclude_gender_markers(self):
        for tag in (CategoryTag.MEN, CategoryTag.WOMEN):
            remaining = set(inference_keywords(tag))
            assert remaining.isdisjoint(GENDER_KEYWORDS[tag])
            assert remaining

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            CATEGORY_KEYWORDS[CategoryTag.MEN] = ("anything",)


class TestPrimaryCategory:
    def test_explicit_men_marker(self):
        result = classify(name="Men's Leather Belt")

        assert result.primary == CategoryTag.MEN
        assert result.primary_confidence == Confidence.HIGH
        assert "men's" in result.matched_keywords["men"]

    def test_explicit_women_marker(self):
        result = classify(name="Women's Floral Maxi Dress")

        assert result.primary == CategoryTag.WOMEN
        assert result.primary_confidence == Confidence.HIGH

    def test_explicit_kids_marker(self):
        result = classify(name="Baby Onesie")

        assert result.primary == CategoryTag.KIDS

    def test_men_marker_takes_priority_over_women(self):
        result = classify(name="Men and Women Hoodie")

        assert result.primary == CategoryTag.MEN

    def test_women_marker_takes_priority_over_kids(self):
        result = classify(name="Ladies Top", description="matching kids set")

        assert result.primary == CategoryTag.WOMEN

    @pytest.mark.parametrize("garment", ["Oxford Shirt", "Denim Jacket", "Wool Sweater", "Kurta"])
    def test_gender_markers_are_symmetric(self, garment):
        assert classify(name=f"Men's {garment}").primary == CategoryTag.MEN
        assert classify(name=f"Women's {garment}").primary == CategoryTag.WOMEN

    def test_inferred_from_garment_keywords(self):
        result = classify(name="dress heels blouse")

        assert result.primary == CategoryTag.WOMEN
        assert set(result.matched_keywords["women"]) == {"dress", "heels", "blouse"}

    def test_inference_tie_defaults_to_unisex(self):
        result = classify(name="Slim Jeans")

        assert result.primary == CategoryTag.UNISEX
        assert result.primary_confidence == Confidence.LOW

    def test_marker_found_in_tags(self):
        result = classify(name="Kurta", tags=["ladies", "cotton"])

        assert result.primary == CategoryTag.WOMEN

    def test_marker_found_in_brand(self):
        result = classify(name="Crew Neck", brand="Gentleman Co")

        assert result.primary == CategoryTag.MEN


class TestSecondaryCategory:
    def test_accessories_wins_over_footwear_and_bags(self):
        result = classify(name="Leather Belt Shoes Bag")

        assert result.secondary == CategoryTag.ACCESSORIES
        assert result.secondary_confidence == Confidence.HIGH

    def test_footwear(self):
        result = classify(name="Running Shoes")

        assert result.secondary == CategoryTag.FOOTWEAR

    def test_bags(self):
        result = classify(name="Laptop Messenger")

        assert result.secondary == CategoryTag.BAGS

    def test_at_most_one_secondary_is_reported(self):
        result = classify(name="Leather Belt Shoes Bag")

        secondary_keys = {key for key in result.matched_keywords if key in ("accessories", "footwear", "bags")}
        assert secondary_keys == {"accessories"}


class TestNoMatch:
    def test_plain_text_is_unisex_without_secondary(self):
        result = classify(name="Blue Widget")

        assert result.primary == CategoryTag.UNISEX
        assert result.secondary is None
        assert result.primary_confidence == Confidence.LOW
        assert result.secondary_confidence == Confidence.LOW
        assert result.matched_keywords == {}

    @pytest.mark.parametrize("kwargs", [
        {},
        {"name": "", "description": "", "brand": "", "tags": []},
        {"name": None, "description": None, "brand": None, "tags": None},
        {"name": "   "},
    ])
    def test_empty_input(self, kwargs):
        result = classify(**kwargs)

        assert result.primary == CategoryTag.UNISEX
        assert result.secondary is None

    def test_deterministic(self):
        first = classify(name="Women's Tote Bag", description="canvas")
        second = classify(name="Women's Tote Bag", description="canvas")

        assert first == second


class TestSubstringMode:
    def test_women_marker_triggers_men_under_substring_matching(self):
        result = classify(name="Women's Kurta", match_mode=MatchMode.SUBSTRING)

        assert result.primary == CategoryTag.MEN

    def test_short_keyword_fires_inside_longer_word(self):
        assert classify(name="Escape Hoodie", match_mode=MatchMode.SUBSTRING).secondary == CategoryTag.ACCESSORIES
        assert classify(name="Escape Hoodie").secondary is None


class TestPluralNames:
    def test_plural_garment_infers_women(self):
        result = classify(name="Silk Blouses")

        assert result.primary == CategoryTag.WOMEN
        assert result.matched_keywords["women"] == ["blouse"]

    def test_plural_dress_infers_women(self):
        assert classify(name="Floral Dresses").primary == CategoryTag.WOMEN

    def test_plural_accessory_sets_secondary(self):
        result = classify(name="Leather Belts")

        assert result.primary == CategoryTag.MEN
        assert result.secondary == CategoryTag.ACCESSORIES

    def test_plural_suffix_keeps_word_boundaries(self):
        assert classify(name="Women's Kurtas").primary == CategoryTag.WOMEN
