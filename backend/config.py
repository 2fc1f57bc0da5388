"""Runtime settings read from the environment (and a local .env file)."""

import os

from dotenv import load_dotenv

load_dotenv()

FRONTEND_URL = os.getenv("FRONTEND_URL")
LOG_LEVEL = os.getenv("SMITHMATCH_LOG_LEVEL", "INFO").upper()
DEFAULT_Z0 = float(os.getenv("SMITHMATCH_DEFAULT_Z0", "50.0"))
ARC_POINTS = int(os.getenv("SMITHMATCH_ARC_POINTS", "50"))
