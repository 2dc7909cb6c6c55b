"""
Duplicate Detection Module

Finds likely duplicate inventory items (same physical item entered twice,
or cross-listed under the same marketplace id) and sales logged twice,
without merging different sizes of the same product.

Usage:
    python scripts/run_duplicate_scan.py --inventory exports/inventory.csv --sales exports/sales.csv
"""

from .patterns import SizeExtractor, SIZE_PATTERNS, extract_size
from .similarity import word_overlap_similarity
from .records import InventoryItemRecord, SaleRecord
from .pairs import PairEvaluator, find_title_matches
from .analyzer import (
    DetectionOptions,
    DuplicateAnalyzer,
    DuplicateGroup,
    DuplicateResult,
    compute_duplicates,
)
from .merger import DuplicateMerger
from .generator import DuplicateReportGenerator

__version__ = "1.0.0"
__all__ = [
    "SizeExtractor",
    "SIZE_PATTERNS",
    "extract_size",
    "word_overlap_similarity",
    "InventoryItemRecord",
    "SaleRecord",
    "PairEvaluator",
    "find_title_matches",
    "DetectionOptions",
    "DuplicateAnalyzer",
    "DuplicateGroup",
    "DuplicateResult",
    "compute_duplicates",
    "DuplicateMerger",
    "DuplicateReportGenerator",
]
