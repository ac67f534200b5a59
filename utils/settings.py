# utils/settings.py
from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# Dates further than this from today are rejected by range validity.
MAX_RANGE_YEARS = int(os.getenv("LEG_MAX_RANGE_YEARS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")
