"""
Seed the ingredients table with the built-in reference records.
Run once before starting the API with REFERENCE_SOURCE=database.
Safe to re-run: rows are upserted by slug.
"""
import os

from database import SessionLocal, create_tables, seed_reference_ingredients


def seed_ingredients(db=None) -> int:
    owns_session = db is None
    if owns_session:
        create_tables()
        db = SessionLocal()

    try:
        count = seed_reference_ingredients(db)
    except Exception:
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()

    print("=" * 50)
    print(f"Seeded {count} reference ingredients")
    print("=" * 50)
    return count


if __name__ == "__main__":
    os.chdir(os.path.dirname(os.path.abspath(__file__)))
    seed_ingredients()
