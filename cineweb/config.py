"""Runtime configuration and logging setup."""

import logging
import os
from pathlib import Path

# Backend REST API (json-server style, one collection per entity)
API_BASE_URL = os.environ.get("CINEWEB_API_URL", "http://localhost:3000")

HEADERS = {
    'Accept': 'application/json',
}

REQUEST_TIMEOUT = float(os.environ.get("CINEWEB_REQUEST_TIMEOUT", "15"))

# CSV exports
OUTPUT_DIR = Path("./cinema_data")

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def setup_logging(verbose: bool = False):
    """Configure the root logger once for CLI runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT
    )
