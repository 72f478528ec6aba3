"""
Integration tests conftest - re-exports the fixtures from backend/tests/conftest.py
(app, client, reference tables, rate limiter reset) for the HTTP tests.
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Import all fixtures from parent conftest
from conftest import *
