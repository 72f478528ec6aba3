"""
Unit tests for the ingredient reference table.

Tests:
- Record validation (ratings, required fields)
- Alias registration and conflicts
- Search filters, paging and autocomplete ranking
"""

import pytest
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from ingredient_reference import (
    BUILTIN_INGREDIENTS,
    IngredientFunction,
    IngredientRecord,
    ReferenceDataError,
    ReferenceTable,
)


class TestIngredientRecord:
    """Tests for IngredientRecord."""

    def test_lists_are_stored_as_tuples(self):
        """Test list arguments are stored as tuples."""
        record = IngredientRecord(slug="x", name="X", aliases=["A", "B"], benefits=["soft"])
        assert record.aliases == ("A", "B")
        assert record.benefits == ("soft",)

    @pytest.mark.parametrize("field", ["comedogenic_rating", "irritation_level"])
    @pytest.mark.parametrize("value", [-1, 6])
    def test_rating_out_of_range(self, field, value):
        """Test ratings outside 0-5 are rejected."""
        with pytest.raises(ReferenceDataError):
            IngredientRecord(slug="x", name="X", **{field: value})

    def test_slug_and_name_required(self):
        """Test a record needs a slug."""
        with pytest.raises(ReferenceDataError):
            IngredientRecord(slug="", name="X")

    def test_to_dict_uses_lists(self, small_table):
        """Test to_dict converts tuples to lists."""
        data = small_table.get("water").to_dict()
        assert data["aliases"] == ["Eau"]
        assert data["functions"] == ["solvent"]
        assert data["comedogenic_rating"] is None


class TestReferenceTableConstruction:
    """Tests for building a ReferenceTable."""

    def test_builtin_table_builds(self, reference_table):
        """Test the built-in records form a consistent table."""
        assert len(reference_table) == len(BUILTIN_INGREDIENTS)
        assert "water" in reference_table

    def test_duplicate_slug(self, small_records):
        """Test two records with one slug are rejected."""
        with pytest.raises(ReferenceDataError, match="Duplicate"):
            ReferenceTable(small_records + [IngredientRecord(slug="water", name="Other Water")])

    def test_conflicting_alias(self, small_records):
        """Test two records claiming one alias are rejected."""
        clash = IngredientRecord(slug="sea-water", name="Sea Water", aliases=("Aqua",))
        with pytest.raises(ReferenceDataError, match="aqua"):
            ReferenceTable(small_records + [clash])

    def test_extra_aliases(self, small_records):
        """Test extra aliases resolve to their target record."""
        table = ReferenceTable(small_records, extra_aliases={"Agua": "water"})
        assert table.resolve("AGUA").slug == "water"

    def test_extra_alias_to_unknown_slug(self, small_records):
        """Test an extra alias must point at a known slug."""
        with pytest.raises(ReferenceDataError):
            ReferenceTable(small_records, extra_aliases={"Agua": "missing"})

    def test_aliases_are_normalized_keys(self, small_table):
        """Test names, INCI names and aliases are registered as normalized keys."""
        assert small_table.aliases == {
            "water": "water",
            "aqua": "water",
            "eau": "water",
            "coconut oil": "coconut-oil",
            "cocos nucifera oil": "coconut-oil",
            "fragrance": "fragrance",
            "parfum": "fragrance",
        }


class TestLookup:
    """Tests for lookup, resolve and get."""

    def test_lookup_is_exact(self, small_table):
        """Test lookup needs the exact normalized key."""
        assert small_table.lookup("aqua").slug == "water"
        assert small_table.lookup("Aqua") is None
        assert small_table.lookup("aqu") is None

    def test_resolve_normalizes(self, small_table):
        """Test resolve normalizes display names first."""
        assert small_table.resolve("  AQUA (Water) ").slug == "water"

    def test_get_by_slug(self, small_table):
        """Test get returns the record or None."""
        assert small_table.get("fragrance").name == "Fragrance"
        assert small_table.get("missing") is None


class TestSearch:
    """Tests for ReferenceTable.search."""

    def test_results_sorted_by_name(self, reference_table):
        """Test results come back ordered by name."""
        page, total = reference_table.search(limit=100)
        names = [r.name.lower() for r in page]
        assert names == sorted(names)
        assert total == len(reference_table)

    def test_query_matches_name_and_inci(self, reference_table):
        """Test the query matches INCI names as substrings."""
        page, total = reference_table.search(query="nucifera")
        assert [r.slug for r in page] == ["coconut-oil"]
        assert total == 1

    def test_query_matches_alias_exactly(self, reference_table):
        """Test the query matches an alias exactly."""
        page, _ = reference_table.search(query="Vitamin E")
        assert [r.slug for r in page] == ["tocopherol"]

    def test_function_filter(self, reference_table):
        """Test filtering by function tag."""
        page, total = reference_table.search(functions=[IngredientFunction.UV_FILTER.value])
        assert [r.slug for r in page] == ["octinoxate", "oxybenzone"]
        assert total == 2

    def test_fungal_acne_safe_filter(self, reference_table):
        """Test fungal acne triggers are excluded."""
        page, total = reference_table.search(fungal_acne_safe=True, limit=100)
        assert not any(r.is_fungal_acne_trigger for r in page)
        assert total == len(reference_table) - 2

    def test_allergen_free_filter(self, reference_table):
        """Test allergens are excluded."""
        page, _ = reference_table.search(allergen_free=True, limit=100)
        assert not any(r.is_allergen for r in page)

    def test_max_comedogenic_filter(self, reference_table):
        """Test only records rated at or below the cap are returned."""
        page, _ = reference_table.search(max_comedogenic_rating=1, limit=100)
        assert page
        assert all(r.comedogenic_rating is not None and r.comedogenic_rating <= 1 for r in page)
        assert "tocopherol" not in [r.slug for r in page]

    def test_max_comedogenic_excludes_unrated(self, reference_table):
        """Test records without a comedogenic rating never pass the cap."""
        page, total = reference_table.search(max_comedogenic_rating=0, limit=100)
        slugs = [r.slug for r in page]

        assert "linalool" not in slugs
        assert "limonene" not in slugs
        assert total == sum(1 for r in reference_table if r.comedogenic_rating == 0)

    def test_paging(self, reference_table):
        """Test limit and offset page through the same ordering."""
        first, total = reference_table.search(limit=5)
        second, _ = reference_table.search(limit=5, offset=5)
        everything, _ = reference_table.search(limit=100)
        assert first + second == everything[:10]
        assert total == len(everything)


class TestSuggest:
    """Tests for ReferenceTable.suggest."""

    def test_short_query(self, reference_table):
        """Test queries under 2 characters return nothing."""
        assert reference_table.suggest("g") == []
        assert reference_table.suggest("") == []
        assert reference_table.suggest(None) == []

    def test_prefix_matches_first(self, reference_table):
        """Test prefix matches rank ahead of substring matches."""
        names = [r.name for r in reference_table.suggest("ce")]
        assert names[:3] == ["Centella Asiatica", "Ceramide NP", "Cetyl Alcohol"]

    def test_substring_matches(self, reference_table):
        """Test substring matches are found."""
        names = [r.name for r in reference_table.suggest("acid")]
        assert names == ["Hyaluronic Acid", "Salicylic Acid"]

    def test_limit(self, reference_table):
        """Test the number of suggestions is capped."""
        assert len(reference_table.suggest("in", limit=2)) == 2


class TestListings:
    """Tests for the listing helpers."""

    def test_list_by_function(self, reference_table):
        """Test records are listed by function tag in name order."""
        slugs = [r.slug for r in reference_table.list_by_function("fragrance")]
        assert slugs == ["fragrance", "limonene", "linalool"]

    def test_fungal_acne_triggers(self, reference_table):
        """Test the fungal acne trigger listing."""
        assert [r.name for r in reference_table.fungal_acne_triggers()] == [
            "Coconut Oil", "Isopropyl Palmitate",
        ]

    def test_allergens(self, reference_table):
        """Test the allergen listing."""
        assert {r.slug for r in reference_table.allergens()} == {
            "fragrance", "linalool", "limonene", "oxybenzone",
        }
