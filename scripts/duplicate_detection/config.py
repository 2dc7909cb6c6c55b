"""
Detection settings.

Defaults live here as named constants; DetectionConfig.from_env() lets a
deployment override them through the environment or a workspace .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

WORKSPACE = Path(__file__).resolve().parent.parent.parent

# Minimum word-overlap percentage for two base titles to count as one product
DEFAULT_SIMILARITY_THRESHOLD = 60

# Threshold used when checking a single new title against the catalog
DEFAULT_TITLE_CHECK_THRESHOLD = 70

# Plausible shoe sizes for the trailing-number heuristic (inclusive)
SHOE_SIZE_MIN = 4
SHOE_SIZE_MAX = 16

# Words shorter than this are ignored by the similarity scorer
MIN_TOKEN_LENGTH = 3

DEFAULT_OUTPUT_DIR = Path("outputs/duplicate_detection")

log = logging.getLogger(__name__)


def _env_number(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass
class DetectionConfig:
    """Runtime configuration for the duplicate scan runner."""
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    title_check_threshold: float = DEFAULT_TITLE_CHECK_THRESHOLD
    max_inventory_items: Optional[int] = None  # Pair evaluation is quadratic
    output_dir: Path = DEFAULT_OUTPUT_DIR
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "DetectionConfig":
        """Build config from DEDUPE_* environment variables."""
        load_dotenv(env_file or WORKSPACE / ".env")

        max_items = _env_number("DEDUPE_MAX_INVENTORY_ITEMS", None)
        return cls(
            similarity_threshold=_env_number(
                "DEDUPE_SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD
            ),
            title_check_threshold=_env_number(
                "DEDUPE_TITLE_CHECK_THRESHOLD", DEFAULT_TITLE_CHECK_THRESHOLD
            ),
            max_inventory_items=int(max_items) if max_items is not None else None,
            output_dir=Path(os.getenv("DEDUPE_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR),
            log_level=os.getenv("DEDUPE_LOG_LEVEL", "INFO").upper(),
        )
