from sqlalchemy import create_engine, Column, Integer, String, DateTime, Boolean, Text, JSON, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from datetime import datetime
from typing import Iterable
import time

from config import DATABASE_URL
from ingredient_reference import IngredientRecord, ReferenceTable, BUILTIN_INGREDIENTS
from structured_logging import get_logger

logger = get_logger("db")

# Create engine with appropriate connection args
connect_args = {"check_same_thread": False} if "sqlite" in DATABASE_URL else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class IngredientRow(Base):
    """Reference ingredient as stored in SQL. Read by load_reference_table()."""
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    inci_name = Column(String)
    aliases = Column(JSON, default=list)  # ["Aqua", "Eau"]
    functions = Column(JSON, default=list)  # ["solvent"]

    # Ratings on a 0-5 scale, NULL when unknown
    comedogenic_rating = Column(Integer)
    irritation_level = Column(Integer)

    is_fungal_acne_trigger = Column(Boolean, default=False)
    is_allergen = Column(Boolean, default=False)
    is_reef_unsafe = Column(Boolean, default=False)

    description = Column(Text)
    benefits = Column(JSON, default=list)
    concerns = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_record(self) -> IngredientRecord:
        return IngredientRecord(
            slug=self.slug,
            name=self.name,
            inci_name=self.inci_name,
            aliases=self.aliases or [],
            functions=self.functions or [],
            comedogenic_rating=self.comedogenic_rating,
            irritation_level=self.irritation_level,
            is_fungal_acne_trigger=bool(self.is_fungal_acne_trigger),
            is_allergen=bool(self.is_allergen),
            is_reef_unsafe=bool(self.is_reef_unsafe),
            description=self.description,
            benefits=self.benefits or [],
            concerns=self.concerns or [],
        )


def create_tables(bind=None):
    Base.metadata.create_all(bind=bind or engine)


def seed_reference_ingredients(db: Session, records: Iterable[IngredientRecord] = None) -> int:
    """Upsert reference records by slug. Returns the number of rows written."""
    records = list(records if records is not None else BUILTIN_INGREDIENTS)
    existing = {row.slug: row for row in db.query(IngredientRow).all()}

    for record in records:
        row = existing.get(record.slug)
        if row is None:
            row = IngredientRow(slug=record.slug)
            db.add(row)
        row.name = record.name
        row.inci_name = record.inci_name
        row.aliases = list(record.aliases)
        row.functions = list(record.functions)
        row.comedogenic_rating = record.comedogenic_rating
        row.irritation_level = record.irritation_level
        row.is_fungal_acne_trigger = record.is_fungal_acne_trigger
        row.is_allergen = record.is_allergen
        row.is_reef_unsafe = record.is_reef_unsafe
        row.description = record.description
        row.benefits = list(record.benefits)
        row.concerns = list(record.concerns)

    db.commit()
    logger.info("Seeded reference ingredients", extra={"rows_affected": len(records)})
    return len(records)


def load_reference_table(db: Session) -> ReferenceTable:
    """Build the ingredient reference table from the ingredients table."""
    start_time = time.time()
    rows = db.query(IngredientRow).order_by(IngredientRow.id).all()
    table = ReferenceTable(row.to_record() for row in rows)
    logger.debug(
        "Loaded reference table",
        extra={
            "db_table": IngredientRow.__tablename__,
            "rows_affected": len(rows),
            "duration_ms": round((time.time() - start_time) * 1000, 2),
        },
    )
    return table


def check_database_connection(bind=None) -> bool:
    """Return True if a trivial query succeeds."""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Database connectivity check failed", extra={"error": str(e)})
        return False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
