"""
Ingredient Parser - Label Text to Lookup Keys

Turns the free text pasted from a product label into ordered ingredient
tokens and canonical lookup keys:
- Strip one leading label ("Ingredients:", "May contain:", ...)
- Split on commas, semicolons and line breaks
- Remove noise (parentheticals, brackets, asterisks, percentages, trademarks)
- Lowercase and collapse whitespace

Every function here is pure and never raises on malformed text; bad tokens
are simply dropped.

Usage:
    from ingredient_parser import parse_ingredient_text

    parse_ingredient_text("INGREDIENTS: Water, Glycerin, Niacinamide (B3)")
    # ["water", "glycerin", "niacinamide"]
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from config import MAX_INGREDIENTS, MAX_INPUT_LENGTH


# =============================================================================
# PATTERNS
# =============================================================================

# Checked in order; only the first match is removed
INGREDIENT_PREFIXES = [
    re.compile(r"^ingredients?\s*:\s*", re.IGNORECASE),
    re.compile(r"^active\s+ingredients?\s*:\s*", re.IGNORECASE),
    re.compile(r"^inactive\s+ingredients?\s*:\s*", re.IGNORECASE),
    re.compile(r"^other\s+ingredients?\s*:\s*", re.IGNORECASE),
    re.compile(r"^may\s+contain\s*:\s*", re.IGNORECASE),
    re.compile(r"^contains?\s*:\s*", re.IGNORECASE),
]

DELIMITER_REGEX = re.compile(r"[,;\r\n]+")

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_BRACKETED = re.compile(r"\[[^\]]*\]")
_ASTERISKS = re.compile(r"\*+")
# Decimals too, otherwise "0.5%" would leave a stray "0"
_PERCENTAGE = re.compile(r"\d+(?:[.,]\d+)?\s*%")
_TRADEMARKS = re.compile(r"[®™©]")

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def remove_parentheticals(text: str) -> str:
    return _PARENTHETICAL.sub(" ", text)


def remove_bracketed(text: str) -> str:
    return _BRACKETED.sub(" ", text)


def remove_asterisks(text: str) -> str:
    return _ASTERISKS.sub(" ", text)


def remove_percentages(text: str) -> str:
    return _PERCENTAGE.sub(" ", text)


def remove_trademarks(text: str) -> str:
    return _TRADEMARKS.sub(" ", text)


# Independent noise passes, applied in this order
NOISE_RULES: List[Callable[[str], str]] = [
    remove_parentheticals,
    remove_bracketed,
    remove_asterisks,
    remove_percentages,
    remove_trademarks,
]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Token:
    """One ingredient as declared on the label."""
    original_text: str
    position: int  # 1-based declaration order
    key: str  # canonical lookup key


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None
    reason: Optional[str] = None


class IngredientInputError(ValueError):
    """Raised when pasted ingredient text fails the validation gate."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.message = message
        self.reason = reason


# =============================================================================
# PARSING FUNCTIONS
# =============================================================================

def strip_prefixes(text: str) -> str:
    """Remove at most one leading label such as 'Ingredients:'."""
    result = text.strip()

    for prefix in INGREDIENT_PREFIXES:
        stripped, count = prefix.subn("", result, count=1)
        if count:
            return stripped.strip()

    return result


def split_ingredients(text: str) -> List[str]:
    """Split text on commas, semicolons and line breaks, dropping empty pieces."""
    pieces = (piece.strip() for piece in DELIMITER_REGEX.split(text))
    return [piece for piece in pieces if piece]


def remove_noise(text: str) -> str:
    """Apply every noise rule, replacing matches with spaces."""
    result = text
    for rule in NOISE_RULES:
        result = rule(result)
    return result


def normalize_ingredient_name(name: str) -> str:
    """
    Normalize an ingredient name into its canonical lookup key.

    Idempotent: normalizing an already-normalized key returns it unchanged.

    >>> normalize_ingredient_name("Niacinamide (Vitamin B3)")
    'niacinamide'
    """
    result = remove_noise(name).lower()
    result = _DISALLOWED_CHARS.sub("", result)
    result = _WHITESPACE.sub(" ", result)
    return result.strip()


def prepare_ingredient(raw_ingredient: str) -> Tuple[str, str]:
    """Return (original text for display, normalized key for lookup)."""
    return raw_ingredient.strip(), normalize_ingredient_name(raw_ingredient)


def parse_tokens(text: str, max_ingredients: int = MAX_INGREDIENTS) -> List[Token]:
    """
    Parse label text into ordered tokens.

    Tokens that normalize to an empty key are dropped before positions are
    assigned, and the list is truncated to ``max_ingredients``.
    """
    if not text:
        return []

    tokens: List[Token] = []
    for raw in split_ingredients(strip_prefixes(text)):
        original, key = prepare_ingredient(raw)
        if not key:
            continue
        tokens.append(Token(original_text=original, position=len(tokens) + 1, key=key))
        if len(tokens) >= max_ingredients:
            break

    return tokens


def parse_ingredient_text(text: str, max_ingredients: int = MAX_INGREDIENTS) -> List[str]:
    """Parse label text into normalized ingredient keys."""
    return [token.key for token in parse_tokens(text, max_ingredients)]


# =============================================================================
# VALIDATION
# =============================================================================

EMPTY_INPUT_MESSAGE = "Please enter an ingredient list to analyze."
NO_INGREDIENTS_MESSAGE = "No valid ingredients found. Please check your input format."


def too_long_message(max_length: int = MAX_INPUT_LENGTH) -> str:
    return f"Input is too long. Please limit to {max_length:,} characters."


def validate_input(text: Optional[str], max_length: int = MAX_INPUT_LENGTH) -> ValidationResult:
    """Check pasted text before running the analysis pipeline."""
    if not text or not text.strip():
        return ValidationResult(False, EMPTY_INPUT_MESSAGE, "empty")

    if len(text) > max_length:
        return ValidationResult(False, too_long_message(max_length), "too_long")

    if not parse_tokens(text):
        return ValidationResult(False, NO_INGREDIENTS_MESSAGE, "no_ingredients")

    return ValidationResult(True)


def ensure_valid_input(text: Optional[str], max_length: int = MAX_INPUT_LENGTH) -> str:
    """Like validate_input, but raise IngredientInputError on rejection."""
    result = validate_input(text, max_length)
    if not result.is_valid:
        raise IngredientInputError(result.error, result.reason)
    return text
