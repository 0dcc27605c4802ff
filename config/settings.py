"""Configuration settings for Polar Flow Exporter."""

import os
import logging
import zipfile
from typing import Optional, Tuple
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Logger for this module
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Polar Flow service
BASE_URI = os.getenv("POLAR_FLOW_BASE_URI", "https://flow.polar.com").rstrip("/")
USER_AGENT = f"polar-flow-exporter/{VERSION}"

# Transport default (no timeout) unless explicitly configured
_timeout = os.getenv("POLAR_REQUEST_TIMEOUT")
REQUEST_TIMEOUT: Optional[float] = float(_timeout) if _timeout else None

# Polar Flow credentials
POLAR_EMAIL = os.getenv("POLAR_EMAIL")
POLAR_PASSWORD = os.getenv("POLAR_PASSWORD")

# Date handling
INPUT_DATE_FORMAT = "%d.%m.%Y"
DEFAULT_START_DATE = "01.01.1970"
DEFAULT_END_DATE = "31.12.2039"

# Only calendar events of this type carry downloadable training data
EXERCISE_RECORD_TYPE = "EXERCISE"

# Download streaming
DOWNLOAD_CHUNK_SIZE = 64 * 1024  # bytes

# Archive output
ARCHIVE_COMPRESSION_MODES = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}
ARCHIVE_COMPRESSION = ARCHIVE_COMPRESSION_MODES.get(
    os.getenv("POLAR_ARCHIVE_COMPRESSION", "deflated").lower(), zipfile.ZIP_DEFLATED
)

# Per-session failure policy
ON_ERROR_ABORT = "abort"
ON_ERROR_CONTINUE = "continue"
ON_ERROR_CHOICES = (ON_ERROR_ABORT, ON_ERROR_CONTINUE)
ON_DOWNLOAD_ERROR = os.getenv("POLAR_ON_ERROR", ON_ERROR_ABORT).lower()
if ON_DOWNLOAD_ERROR not in ON_ERROR_CHOICES:
    logger.warning(f"Unknown POLAR_ON_ERROR value '{ON_DOWNLOAD_ERROR}', using '{ON_ERROR_ABORT}'")
    ON_DOWNLOAD_ERROR = ON_ERROR_ABORT

# Remove partial output when a run aborts
DISCARD_PARTIAL = os.getenv("POLAR_DISCARD_PARTIAL", "0").lower() in ("1", "true", "yes")

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("POLAR_LOG_FILE")


def get_polar_credentials(email: Optional[str] = None, password: Optional[str] = None) -> Tuple[str, str]:
    """Get Polar Flow credentials.

    Explicitly passed values win; anything missing is read from the
    POLAR_EMAIL and POLAR_PASSWORD environment variables.

    Args:
        email: Polar Flow registration email
        password: Polar Flow registration password

    Returns:
        Tuple of (email, password)

    Raises:
        ValueError: If required credentials are not found
    """
    email = email or os.getenv("POLAR_EMAIL")
    password = password or os.getenv("POLAR_PASSWORD")

    if email and password:
        return email, password

    raise ValueError(
        "Polar Flow credentials not found. Pass --email/--password or set "
        "POLAR_EMAIL and POLAR_PASSWORD environment variables."
    )
