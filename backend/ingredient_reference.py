"""
Ingredient Reference Table

Read-only reference data used by the ingredient analyzer and the
ingredient endpoints:
- IngredientRecord: one known ingredient (flags, ratings, benefits)
- ReferenceTable: explicit alias -> record index built once and injected
- BUILTIN_INGREDIENTS: the bundled reference records

Aliases are registered explicitly (name, INCI name and every listed alias),
so "aqua" resolves to Water because the Water record says so, not because
the two strings normalize alike.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ingredient_parser import normalize_ingredient_name


class IngredientFunction(Enum):
    MOISTURIZING = "moisturizing"
    HUMECTANT = "humectant"
    EMOLLIENT = "emollient"
    OCCLUSIVE = "occlusive"
    ANTIOXIDANT = "antioxidant"
    EXFOLIATING = "exfoliating"
    SOOTHING = "soothing"
    BRIGHTENING = "brightening"
    ACNE_FIGHTING = "acne-fighting"
    ANTI_AGING = "anti-aging"
    CLEANSING = "cleansing"
    PRESERVATIVE = "preservative"
    FRAGRANCE = "fragrance"
    EMULSIFIER = "emulsifier"
    SOLVENT = "solvent"
    UV_FILTER = "uv-filter"
    OTHER = "other"


RATING_RANGE = range(0, 6)  # comedogenic and irritation scales are 0-5


class ReferenceDataError(ValueError):
    """Raised when reference records are inconsistent."""


@dataclass(frozen=True)
class IngredientRecord:
    slug: str
    name: str
    inci_name: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    comedogenic_rating: Optional[int] = None
    irritation_level: Optional[int] = None
    is_fungal_acne_trigger: bool = False
    is_allergen: bool = False
    is_reef_unsafe: bool = False
    description: Optional[str] = None
    benefits: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.slug or not self.name:
            raise ReferenceDataError("Ingredient records need a slug and a name")
        for label, value in (
            ("comedogenic_rating", self.comedogenic_rating),
            ("irritation_level", self.irritation_level),
        ):
            if value is not None and value not in RATING_RANGE:
                raise ReferenceDataError(f"{self.slug}: {label} must be 0-5, got {value}")

        # Accept lists from callers but store tuples so records stay hashable
        for name in ("aliases", "functions", "benefits", "concerns"):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

    def lookup_names(self) -> List[str]:
        """Names this record should be found under, in registration order."""
        names = [self.name]
        if self.inci_name:
            names.append(self.inci_name)
        names.extend(self.aliases)
        return names

    def to_dict(self) -> Dict:
        data = asdict(self)
        for name in ("aliases", "functions", "benefits", "concerns"):
            data[name] = list(data[name])
        return data


class ReferenceTable:
    """Immutable alias -> IngredientRecord index."""

    def __init__(
        self,
        records: Iterable[IngredientRecord],
        extra_aliases: Optional[Dict[str, str]] = None,
    ):
        self._records: Dict[str, IngredientRecord] = {}
        self._aliases: Dict[str, str] = {}

        for record in records:
            if record.slug in self._records:
                raise ReferenceDataError(f"Duplicate ingredient slug: {record.slug}")
            self._records[record.slug] = record

        for record in self._records.values():
            for alias in record.lookup_names():
                self._register_alias(alias, record.slug)

        for alias, slug in (extra_aliases or {}).items():
            if slug not in self._records:
                raise ReferenceDataError(f"Alias {alias!r} points at unknown slug {slug!r}")
            self._register_alias(alias, slug)

    def _register_alias(self, alias: str, slug: str):
        key = normalize_ingredient_name(alias)
        if not key:
            return
        existing = self._aliases.get(key)
        if existing is not None and existing != slug:
            raise ReferenceDataError(
                f"Alias {key!r} maps to both {existing!r} and {slug!r}"
            )
        self._aliases[key] = slug

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup(self, key: str) -> Optional[IngredientRecord]:
        """Exact match of a canonical key. No fuzzy matching."""
        slug = self._aliases.get(key)
        return self._records[slug] if slug is not None else None

    def resolve(self, name: str) -> Optional[IngredientRecord]:
        """Normalize a display name and look it up."""
        return self.lookup(normalize_ingredient_name(name))

    def get(self, slug: str) -> Optional[IngredientRecord]:
        return self._records.get(slug)

    @property
    def aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[IngredientRecord]:
        return iter(self._records.values())

    def __contains__(self, slug: object) -> bool:
        return slug in self._records

    # -------------------------------------------------------------------------
    # Listing and search
    # -------------------------------------------------------------------------

    def _sorted(self, records: Iterable[IngredientRecord]) -> List[IngredientRecord]:
        return sorted(records, key=lambda r: r.name.lower())

    def search(
        self,
        query: Optional[str] = None,
        functions: Optional[List[str]] = None,
        fungal_acne_safe: Optional[bool] = None,
        allergen_free: Optional[bool] = None,
        max_comedogenic_rating: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[IngredientRecord], int]:
        """Filter records, ordered by name. Returns (page, total matches)."""
        matches = []
        needle = query.strip().lower() if query else ""
        alias_slug = self._aliases.get(normalize_ingredient_name(needle)) if needle else None

        for record in self._records.values():
            if needle:
                in_name = needle in record.name.lower()
                in_inci = bool(record.inci_name) and needle in record.inci_name.lower()
                if not (in_name or in_inci or alias_slug == record.slug):
                    continue
            if functions and not set(functions) & set(record.functions):
                continue
            if fungal_acne_safe and record.is_fungal_acne_trigger:
                continue
            if allergen_free and record.is_allergen:
                continue
            # Unrated records never satisfy a comedogenic cap
            if max_comedogenic_rating is not None and (
                record.comedogenic_rating is None
                or record.comedogenic_rating > max_comedogenic_rating
            ):
                continue
            matches.append(record)

        ordered = self._sorted(matches)
        return ordered[offset:offset + limit], len(ordered)

    def suggest(self, query: Optional[str], limit: int = 10) -> List[IngredientRecord]:
        """Autocomplete suggestions. Prefix matches rank ahead of substring matches."""
        if not query or len(query) < 2:
            return []

        needle = query[:100].lower()
        ranked = []
        for record in self._records.values():
            names = [record.name.lower()]
            if record.inci_name:
                names.append(record.inci_name.lower())
            if any(n.startswith(needle) for n in names):
                ranked.append((0, record.name.lower(), record))
            elif any(needle in n for n in names):
                ranked.append((1, record.name.lower(), record))

        ranked.sort(key=lambda item: (item[0], item[1]))
        return [record for _, _, record in ranked[:limit]]

    def list_by_function(self, function: str, limit: int = 50) -> List[IngredientRecord]:
        return self._sorted(r for r in self._records.values() if function in r.functions)[:limit]

    def fungal_acne_triggers(self) -> List[IngredientRecord]:
        return self._sorted(r for r in self._records.values() if r.is_fungal_acne_trigger)

    def allergens(self) -> List[IngredientRecord]:
        return self._sorted(r for r in self._records.values() if r.is_allergen)


# =============================================================================
# BUILT-IN REFERENCE DATA
# =============================================================================

F = IngredientFunction

BUILTIN_INGREDIENTS: List[IngredientRecord] = [
    # SOLVENTS & HUMECTANTS
    IngredientRecord(
        slug="water",
        name="Water",
        inci_name="Aqua",
        aliases=("Eau", "Purified Water", "Deionized Water"),
        functions=(F.SOLVENT.value,),
        comedogenic_rating=0,
        irritation_level=0,
        description="The most common cosmetic solvent; dissolves and carries other ingredients.",
    ),
    IngredientRecord(
        slug="glycerin",
        name="Glycerin",
        inci_name="Glycerin",
        aliases=("Glycerol", "Vegetable Glycerin"),
        functions=(F.MOISTURIZING.value, F.HUMECTANT.value),
        comedogenic_rating=0,
        irritation_level=0,
        description="A versatile humectant that attracts water to the skin and helps maintain moisture balance.",
        benefits=("Hydrates skin", "Strengthens barrier", "Non-comedogenic"),
    ),
    IngredientRecord(
        slug="hyaluronic-acid",
        name="Hyaluronic Acid",
        inci_name="Sodium Hyaluronate",
        aliases=("HA", "Hyaluronan"),
        functions=(F.MOISTURIZING.value, F.HUMECTANT.value, F.ANTI_AGING.value),
        comedogenic_rating=0,
        irritation_level=0,
        description="A humectant that can hold many times its weight in water.",
        benefits=("Deep hydration", "Plumps skin", "Reduces fine lines"),
    ),
    IngredientRecord(
        slug="snail-secretion-filtrate",
        name="Snail Secretion Filtrate",
        inci_name="Snail Secretion Filtrate",
        aliases=("Snail Mucin", "Snail Extract"),
        functions=(F.MOISTURIZING.value, F.SOOTHING.value, F.ANTI_AGING.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Promotes healing", "Deeply hydrating", "Smooths texture"),
    ),
    IngredientRecord(
        slug="betaine",
        name="Betaine",
        inci_name="Betaine",
        aliases=("Trimethylglycine",),
        functions=(F.MOISTURIZING.value, F.SOOTHING.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Retains moisture", "Soothes skin"),
    ),

    # ACTIVES
    IngredientRecord(
        slug="niacinamide",
        name="Niacinamide",
        inci_name="Niacinamide",
        aliases=("Vitamin B3", "Nicotinamide"),
        functions=(F.BRIGHTENING.value, F.ANTI_AGING.value, F.SOOTHING.value),
        comedogenic_rating=0,
        irritation_level=0,
        description="A form of vitamin B3 that strengthens the barrier and evens skin tone.",
        benefits=("Minimizes pores", "Evens skin tone", "Strengthens barrier", "Regulates oil"),
    ),
    IngredientRecord(
        slug="salicylic-acid",
        name="Salicylic Acid",
        inci_name="Salicylic Acid",
        aliases=("BHA", "Beta Hydroxy Acid"),
        functions=(F.EXFOLIATING.value, F.ACNE_FIGHTING.value),
        comedogenic_rating=0,
        irritation_level=2,
        description="An oil-soluble BHA that dissolves oil and dead skin inside pores.",
        benefits=("Unclogs pores", "Reduces breakouts", "Smooths texture"),
        concerns=("May cause dryness", "Increases sun sensitivity"),
    ),
    IngredientRecord(
        slug="retinol",
        name="Retinol",
        inci_name="Retinol",
        aliases=("Vitamin A",),
        functions=(F.ANTI_AGING.value,),
        comedogenic_rating=0,
        irritation_level=3,
        description="A vitamin A derivative that speeds up cell turnover.",
        benefits=("Reduces wrinkles", "Increases cell turnover", "Fades dark spots"),
        concerns=("Can cause irritation", "Sun sensitivity", "Not for pregnant women"),
    ),
    IngredientRecord(
        slug="centella-asiatica",
        name="Centella Asiatica",
        inci_name="Centella Asiatica Extract",
        aliases=("Cica", "Tiger Grass", "Gotu Kola"),
        functions=(F.SOOTHING.value, F.ANTI_AGING.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Calms irritation", "Promotes healing", "Strengthens barrier"),
    ),
    IngredientRecord(
        slug="allantoin",
        name="Allantoin",
        inci_name="Allantoin",
        functions=(F.SOOTHING.value, F.MOISTURIZING.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Soothes skin", "Promotes healing"),
    ),
    IngredientRecord(
        slug="green-tea-extract",
        name="Green Tea Extract",
        inci_name="Camellia Sinensis Leaf Extract",
        aliases=("EGCG", "Green Tea Polyphenols"),
        functions=(F.ANTIOXIDANT.value, F.SOOTHING.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Antioxidant protection", "Reduces inflammation"),
    ),
    IngredientRecord(
        slug="tocopherol",
        name="Tocopherol",
        inci_name="Tocopherol",
        aliases=("Vitamin E", "Tocopheryl Acetate"),
        functions=(F.ANTIOXIDANT.value,),
        comedogenic_rating=2,
        irritation_level=0,
        benefits=("Antioxidant", "Stabilizes formulas"),
    ),
    IngredientRecord(
        slug="ceramide-np",
        name="Ceramide NP",
        inci_name="Ceramide NP",
        aliases=("Ceramide 3",),
        functions=(F.MOISTURIZING.value, F.OCCLUSIVE.value),
        comedogenic_rating=0,
        irritation_level=0,
        benefits=("Restores barrier", "Locks in moisture"),
    ),
    IngredientRecord(
        slug="squalane",
        name="Squalane",
        inci_name="Squalane",
        functions=(F.EMOLLIENT.value, F.MOISTURIZING.value),
        comedogenic_rating=1,
        irritation_level=0,
        benefits=("Moisturizing", "Non-greasy"),
    ),

    # EMULSIFIERS, EMOLLIENTS & OILS
    IngredientRecord(
        slug="cetyl-alcohol",
        name="Cetyl Alcohol",
        inci_name="Cetyl Alcohol",
        functions=(F.EMULSIFIER.value, F.EMOLLIENT.value),
        comedogenic_rating=2,
        irritation_level=0,
    ),
    IngredientRecord(
        slug="isopropyl-palmitate",
        name="Isopropyl Palmitate",
        inci_name="Isopropyl Palmitate",
        functions=(F.EMOLLIENT.value, F.EMULSIFIER.value),
        comedogenic_rating=4,
        irritation_level=1,
        is_fungal_acne_trigger=True,
        description="An emollient that helps products spread but can clog pores and feed fungal acne.",
        benefits=("Smooths application", "Softens skin"),
        concerns=("Can clog pores", "May trigger fungal acne"),
    ),
    IngredientRecord(
        slug="coconut-oil",
        name="Coconut Oil",
        inci_name="Cocos Nucifera Oil",
        functions=(F.MOISTURIZING.value, F.EMOLLIENT.value),
        comedogenic_rating=4,
        irritation_level=0,
        is_fungal_acne_trigger=True,
        benefits=("Rich moisture",),
        concerns=("Highly comedogenic", "May trigger fungal acne"),
    ),

    # PRESERVATIVES & SOLVENTS
    IngredientRecord(
        slug="phenoxyethanol",
        name="Phenoxyethanol",
        inci_name="Phenoxyethanol",
        functions=(F.PRESERVATIVE.value,),
        comedogenic_rating=0,
        irritation_level=1,
    ),
    IngredientRecord(
        slug="alcohol-denat",
        name="Alcohol Denat",
        inci_name="Alcohol Denat.",
        aliases=("SD Alcohol", "Denatured Alcohol", "Ethanol"),
        functions=(F.SOLVENT.value,),
        comedogenic_rating=0,
        irritation_level=3,
        concerns=("Drying", "Can disrupt the skin barrier"),
    ),

    # FRAGRANCE & FRAGRANCE ALLERGENS
    IngredientRecord(
        slug="fragrance",
        name="Fragrance",
        inci_name="Parfum",
        aliases=("Aroma", "Perfume"),
        functions=(F.FRAGRANCE.value,),
        comedogenic_rating=0,
        irritation_level=3,
        is_allergen=True,
        description="Synthetic or natural scent additives that may irritate sensitive skin.",
        benefits=("Pleasant scent",),
        concerns=("May cause irritation", "Common allergen"),
    ),
    IngredientRecord(
        slug="linalool",
        name="Linalool",
        inci_name="Linalool",
        functions=(F.FRAGRANCE.value,),
        irritation_level=2,
        is_allergen=True,
        concerns=("Declared fragrance allergen",),
    ),
    IngredientRecord(
        slug="limonene",
        name="Limonene",
        inci_name="Limonene",
        aliases=("D-Limonene",),
        functions=(F.FRAGRANCE.value,),
        irritation_level=2,
        is_allergen=True,
        concerns=("Declared fragrance allergen",),
    ),

    # UV FILTERS
    IngredientRecord(
        slug="oxybenzone",
        name="Oxybenzone",
        inci_name="Benzophenone-3",
        functions=(F.UV_FILTER.value,),
        comedogenic_rating=0,
        irritation_level=2,
        is_allergen=True,
        is_reef_unsafe=True,
        concerns=("Linked to coral bleaching", "Possible contact allergen"),
    ),
    IngredientRecord(
        slug="octinoxate",
        name="Octinoxate",
        inci_name="Ethylhexyl Methoxycinnamate",
        aliases=("Octyl Methoxycinnamate",),
        functions=(F.UV_FILTER.value,),
        comedogenic_rating=0,
        irritation_level=1,
        is_reef_unsafe=True,
        concerns=("Linked to coral bleaching",),
    ),
]


def build_default_table() -> ReferenceTable:
    """Build the reference table from the bundled records."""
    return ReferenceTable(BUILTIN_INGREDIENTS)
