import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DATABASE_URL = os.getenv("LIGAIN_DATABASE_URL", f"sqlite:///{BASE_DIR}/ligain.db")

# Logging
LOG_LEVEL = os.getenv("LIGAIN_LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LIGAIN_LOG_DIR")  # file logging is off unless set

# Odds stop moving this many minutes before kickoff
ODDS_FREEZE_MINUTES = int(os.getenv("LIGAIN_ODDS_FREEZE_MINUTES", "6"))
