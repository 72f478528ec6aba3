"""
Shared module holding the ingredient reference table used by all routers.

The table is built once at startup (see main.py) and stored on app.state;
routers receive it through the get_reference_table dependency so tests can
swap in a fixture table with app.dependency_overrides.

Set REFERENCE_SOURCE=database to read reference ingredients from SQL instead
of the built-in records.
"""

from fastapi import Request

import config
from ingredient_reference import ReferenceTable, build_default_table
from structured_logging import get_logger

logger = get_logger("shared")


def load_reference_table(source: str = None) -> ReferenceTable:
    """Build the reference table from the configured source."""
    source = (source or config.REFERENCE_SOURCE).lower()

    if source == "database":
        from database import SessionLocal, create_tables, load_reference_table as load_from_db

        create_tables()
        db = SessionLocal()
        try:
            table = load_from_db(db)
        finally:
            db.close()
    elif source == "builtin":
        table = build_default_table()
    else:
        raise ValueError(f"Unknown REFERENCE_SOURCE: {source!r} (expected 'builtin' or 'database')")

    logger.info(
        "Reference table loaded",
        extra={"reference_source": source, "ingredient_count": len(table), "alias_count": len(table.aliases)},
    )
    return table


def get_reference_table(request: Request) -> ReferenceTable:
    """FastAPI dependency returning the table built at startup."""
    table = getattr(request.app.state, "reference_table", None)
    if table is None:
        table = load_reference_table()
        request.app.state.reference_table = table
    return table
