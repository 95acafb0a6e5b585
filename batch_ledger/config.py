"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
SEED_BATCHES_PATH = DATA_DIR / "seed_batches.csv"

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'batch_ledger.db'}")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
DB_BUSY_TIMEOUT_SECONDS = float(os.getenv("DB_BUSY_TIMEOUT_SECONDS", "5"))

# Seed the demo batches into an empty ledger on init-db / serve
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"

# Recall moves every affected batch here
QUARANTINE_LOCATION = os.getenv("QUARANTINE_LOCATION", "Quarantine")

# Logging
LOG_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "output" / "logs")))
LOG_FILE = LOG_DIR / "batch_ledger.jsonl"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() == "true"

# HTTP API
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "5000"))
