"""
Application Configuration

Loads configuration from environment variables with sensible defaults.
All tunable limits and settings should be defined here.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists (override=True means .env takes precedence over system env vars)
load_dotenv(override=True)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


# =============================================================================
# BASE PATHS
# =============================================================================

# Base directory (where this config file is located)
BASE_DIR = Path(__file__).resolve().parent

# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./skintelect.db")

# Handle PostgreSQL URL format differences
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Where the ingredient reference table comes from: "builtin" or "database"
REFERENCE_SOURCE = os.getenv("REFERENCE_SOURCE", "builtin").lower()

# =============================================================================
# APPLICATION SETTINGS
# =============================================================================

SERVICE_NAME = os.getenv("SERVICE_NAME", "skintelect")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = _env_bool("DEBUG", "False")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# =============================================================================
# INGREDIENT ANALYSIS LIMITS
# =============================================================================

# Maximum length of pasted ingredient text (characters)
MAX_INPUT_LENGTH = int(os.getenv("MAX_INPUT_LENGTH", "10000"))

# Maximum number of ingredients kept from one analysis
MAX_INGREDIENTS = int(os.getenv("MAX_INGREDIENTS", "100"))

# =============================================================================
# RATE LIMITING
# =============================================================================

RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", "True")
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
# "memory://" keeps counters per process; use "redis://host:6379" to share them
RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
RATE_LIMIT_API_PER_MINUTE = int(os.getenv("RATE_LIMIT_API_PER_MINUTE", "60"))
RATE_LIMIT_SEARCH_PER_MINUTE = int(os.getenv("RATE_LIMIT_SEARCH_PER_MINUTE", "100"))
RATE_LIMIT_ANALYSIS_PER_MINUTE = int(os.getenv("RATE_LIMIT_ANALYSIS_PER_MINUTE", "10"))

# =============================================================================
# CORS SETTINGS
# =============================================================================

# Comma-separated list of allowed origins, or "*" for all
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
CORS_ALLOW_CREDENTIALS = _env_bool("CORS_ALLOW_CREDENTIALS", "True")

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_OUTPUT = os.getenv("LOG_OUTPUT", "stdout")
LOG_FILE = os.getenv("LOG_FILE", str(BASE_DIR / "logs" / "skintelect.json.log"))


# =============================================================================
# HELPER FUNCTION
# =============================================================================

def get_config_summary():
    """Returns a summary of current configuration (for debugging)."""
    return {
        "database_url": DATABASE_URL[:20] + "..." if len(DATABASE_URL) > 20 else DATABASE_URL,
        "reference_source": REFERENCE_SOURCE,
        "debug": DEBUG,
        "host": HOST,
        "port": PORT,
        "version": APP_VERSION,
        "max_input_length": MAX_INPUT_LENGTH,
        "max_ingredients": MAX_INGREDIENTS,
        "rate_limit_enabled": RATE_LIMIT_ENABLED,
        "log_format": LOG_FORMAT,
    }
