"""
Unit tests for the reference ingredient persistence layer.

Tests:
- Seeding the ingredients table (insert and idempotent upsert)
- Loading a ReferenceTable back from SQL
- JSON list columns
- Connectivity check
"""

import pytest
import sys
import os
from sqlalchemy import create_engine

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from database import (
    IngredientRow,
    check_database_connection,
    load_reference_table,
    seed_reference_ingredients,
)
from ingredient_reference import BUILTIN_INGREDIENTS, IngredientRecord


class TestSeedReferenceIngredients:
    """Tests for seed_reference_ingredients."""

    def test_seed_builtin(self, test_db):
        """Test seeding the built-in records inserts one row each."""
        count = seed_reference_ingredients(test_db)
        assert count == len(BUILTIN_INGREDIENTS)
        assert test_db.query(IngredientRow).count() == len(BUILTIN_INGREDIENTS)

    def test_seed_is_idempotent(self, test_db, small_records):
        """Test seeding twice does not duplicate rows."""
        seed_reference_ingredients(test_db, small_records)
        seed_reference_ingredients(test_db, small_records)
        assert test_db.query(IngredientRow).count() == len(small_records)

    def test_seed_updates_existing_rows(self, test_db, small_records):
        """Test seeding again overwrites changed fields."""
        seed_reference_ingredients(test_db, small_records)
        updated = IngredientRecord(slug="water", name="Water", aliases=("Agua",), comedogenic_rating=0)
        seed_reference_ingredients(test_db, [updated])

        row = test_db.query(IngredientRow).filter_by(slug="water").one()
        assert row.aliases == ["Agua"]
        assert row.comedogenic_rating == 0
        assert row.inci_name is None

    def test_json_columns_round_trip(self, test_db, small_records):
        """Test list columns are stored as JSON lists."""
        seed_reference_ingredients(test_db, small_records)
        row = test_db.query(IngredientRow).filter_by(slug="fragrance").one()
        assert row.functions == ["fragrance"]
        assert row.is_allergen is True


class TestLoadReferenceTable:
    """Tests for load_reference_table."""

    def test_load_matches_builtin(self, test_db, reference_table):
        """Test a seeded database loads back the built-in table."""
        seed_reference_ingredients(test_db)
        table = load_reference_table(test_db)

        assert len(table) == len(reference_table)
        assert table.aliases == reference_table.aliases
        assert table.get("coconut-oil") == reference_table.get("coconut-oil")

    def test_empty_table(self, test_db):
        """Test an empty database gives an empty table."""
        table = load_reference_table(test_db)
        assert len(table) == 0
        assert table.resolve("Water") is None


class TestSeedScript:
    """Tests for the seed_ingredients script."""

    def test_seed_ingredients_with_session(self, test_db, capsys):
        """Test the script seeds through a given session."""
        from seed_ingredients import seed_ingredients

        assert seed_ingredients(test_db) == len(BUILTIN_INGREDIENTS)
        assert "Seeded" in capsys.readouterr().out
        assert load_reference_table(test_db).resolve("Aqua").slug == "water"


class TestConnectivity:
    """Tests for check_database_connection."""

    def test_connected(self, test_engine):
        """Test a reachable database reports connected."""
        assert check_database_connection(test_engine) is True

    def test_unreachable_database(self, tmp_path):
        """Test an unreachable database reports False."""
        engine = create_engine(f"sqlite:///{tmp_path}/missing/dir/db.sqlite")
        assert check_database_connection(engine) is False
