import os
import tempfile
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv

# Load .env from project root
_project_root = Path(__file__).parent.parent.parent
load_dotenv(_project_root / ".env")

APP_NAME = "clinrec"

# Backend endpoints
API_BASE_URL = os.getenv("CLINREC_API_BASE_URL", "http://localhost:3001/api")
HEALTH_PATH = "/health"

# Health polling (seconds)
HEALTH_TIMEOUT = float(os.getenv("CLINREC_HEALTH_TIMEOUT", "8"))
FAST_POLL_INTERVAL = float(os.getenv("CLINREC_FAST_INTERVAL", "5"))
SLOW_POLL_INTERVAL = float(os.getenv("CLINREC_SLOW_INTERVAL", "15"))

# Records API
REQUEST_TIMEOUT = float(os.getenv("CLINREC_REQUEST_TIMEOUT", "10"))
DEFAULT_PAGE_SIZE = int(os.getenv("CLINREC_PAGE_SIZE", "10"))

VALID_DEPARTMENTS = (
    "Cardiology",
    "Endocrinology",
    "General Surgery",
    "Pulmonology",
)

# Temporary directory for logs
TMPDIR = os.environ.get("CLINREC_TMPDIR", os.path.join(tempfile.gettempdir(), APP_NAME))
LOG_FILE = os.path.join(TMPDIR, "clinrec.log")
