"""
Runtime configuration.
Environment variables (optionally from a .env file) with defaults matching the fixed demo dataset.
"""
import os
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# -----------------------------------------------------------------------------
# Synthetic dataset
# -----------------------------------------------------------------------------
# Changing any of these produces a different (but still deterministic) dataset.
SLEEP_SEED = int(os.getenv("SLEEP_SEED", "12345"))
SLEEP_EMPLOYEE_COUNT = int(os.getenv("SLEEP_EMPLOYEE_COUNT", "50"))
SLEEP_DAYS = int(os.getenv("SLEEP_DAYS", "30"))
SLEEP_REFERENCE_DATE = date.fromisoformat(os.getenv("SLEEP_REFERENCE_DATE", "2023-12-30"))

# -----------------------------------------------------------------------------
# API
# -----------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
