"""
Configuration defaults and environment overrides.

The CLI binds the same variables to its options (``envvar=``), so a value
can come from the environment or the command line.
"""

import os
from pathlib import Path

# =============================================================================
# ENVIRONMENT VARIABLE NAMES
# =============================================================================

ENV_DATA_DIR = "ADVISORCAL_DATA_DIR"
ENV_OUTPUT_DIR = "ADVISORCAL_OUTPUT_DIR"
ENV_API_URL = "ADVISORCAL_API_URL"
ENV_API_TOKEN = "ADVISORCAL_API_TOKEN"
ENV_API_TIMEOUT = "ADVISORCAL_API_TIMEOUT"
ENV_DEFAULT_VIEW = "ADVISORCAL_DEFAULT_VIEW"

# =============================================================================
# PATHS
# =============================================================================

DATA_DIR = Path(os.environ.get(ENV_DATA_DIR, "data"))
OUTPUT_DIR = Path(os.environ.get(ENV_OUTPUT_DIR, "output"))

# =============================================================================
# BACKEND API (unset URL means the local JSON store is used)
# =============================================================================

API_URL = os.environ.get(ENV_API_URL, "")
API_TOKEN = os.environ.get(ENV_API_TOKEN, "")
API_TIMEOUT = float(os.environ.get(ENV_API_TIMEOUT, "20"))

# =============================================================================
# VIEW
# =============================================================================

DEFAULT_VIEW = os.environ.get(ENV_DEFAULT_VIEW, "week").lower()

# =============================================================================
# LOGGING
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
