"""
Size Extraction Engine for Duplicate Detection

Pulls an embedded garment/shoe size out of a free-text item title and
returns the cleaned base title, so that "Nike Hoodie M" and "Nike Hoodie L"
compare as the same product in different sizes rather than as duplicates.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .config import SHOE_SIZE_MAX, SHOE_SIZE_MIN


@dataclass(frozen=True)
class SizeMatch:
    """A matched size token: its span in the text and the captured value."""
    start: int
    end: int
    value: str


@dataclass(frozen=True)
class SizeExtraction:
    """Result of extracting a size from a title."""
    size_value: Optional[str]
    base_title: str

    @property
    def has_size(self) -> bool:
        return self.size_value is not None


# Characters that may surround a standalone size letter or trail a base title
SEPARATOR_CHARS = r"\s\-()/,"

_EXPLICIT_MARKER_RE = re.compile(
    r'\b(?:size|sz|us|eu)[:\-]?\s+(\d+(?:\.\d)?[a-z]?)\b',
    re.IGNORECASE,
)
_WAIST_INSEAM_RE = re.compile(r'\b(\d{2,}\s*[xX×]\s*\d{2,})\b')
_LETTER_SIZE_RE = re.compile(r'\b(X{1,3}[SL]|[234]XL)\b', re.IGNORECASE)
_SINGLE_LETTER_RE = re.compile(
    rf'(?<![^{SEPARATOR_CHARS}])([SML])(?![^{SEPARATOR_CHARS}])',
    re.IGNORECASE,
)
_TRAILING_NUMBER_RE = re.compile(r'(?<!\S)(\d+(?:\.5)?)\s*$')
_TRAILING_SEPARATORS_RE = re.compile(rf'[{SEPARATOR_CHARS}]+$')
_WHITESPACE_RE = re.compile(r'\s+')


# ============================================================================
# MATCHERS - each takes the title text and returns a SizeMatch or None
# ============================================================================

def match_explicit_marker(text: str) -> Optional[SizeMatch]:
    """'Size 10', 'sz: 9.5', 'US 10D', 'EU-42'."""
    m = _EXPLICIT_MARKER_RE.search(text)
    if not m:
        return None
    return SizeMatch(m.start(), m.end(), m.group(1).strip())


def match_waist_inseam(text: str) -> Optional[SizeMatch]:
    """'32x30', '34 X 32', '30×32'."""
    m = _WAIST_INSEAM_RE.search(text)
    if not m:
        return None
    return SizeMatch(m.start(), m.end(), _WHITESPACE_RE.sub('', m.group(1)))


def match_letter_size(text: str) -> Optional[SizeMatch]:
    """'XS', 'XL', 'XXL', 'XXXL', '2XL'..'4XL'."""
    m = _LETTER_SIZE_RE.search(text)
    if not m:
        return None
    return SizeMatch(m.start(), m.end(), m.group(1).upper())


def match_single_letter(text: str) -> Optional[SizeMatch]:
    """A lone S, M or L bounded by separators or the ends of the text.

    X is left out on purpose: lone X tokens are handled (or ignored) by
    match_letter_size, which always runs first.
    """
    m = _SINGLE_LETTER_RE.search(text)
    if not m:
        return None
    return SizeMatch(m.start(1), m.end(1), m.group(1).upper())


def match_trailing_shoe_size(text: str) -> Optional[SizeMatch]:
    """A final numeric token within the plausible shoe size range.

    Approximate: a trailing quantity or model number inside the range
    will be read as a size.
    """
    m = _TRAILING_NUMBER_RE.search(text)
    if not m:
        return None
    value = m.group(1)
    if not SHOE_SIZE_MIN <= float(value) <= SHOE_SIZE_MAX:
        return None
    return SizeMatch(m.start(1), m.end(1), value)


@dataclass(frozen=True)
class SizePattern:
    """A named size matcher. Higher priority is tried first."""
    name: str
    matcher: Callable[[str], Optional[SizeMatch]]
    priority: int = 100

    def match(self, text: str) -> Optional[SizeMatch]:
        return self.matcher(text)


# ============================================================================
# SIZE PATTERNS - explicit markers beat numeric heuristics
# ============================================================================

SIZE_PATTERNS: List[SizePattern] = [
    SizePattern(name="explicit_marker", matcher=match_explicit_marker, priority=500),
    SizePattern(name="waist_inseam", matcher=match_waist_inseam, priority=400),
    SizePattern(name="letter_size", matcher=match_letter_size, priority=300),
    # Must stay below letter_size
    SizePattern(name="single_letter", matcher=match_single_letter, priority=200),
    SizePattern(name="trailing_shoe_size", matcher=match_trailing_shoe_size, priority=100),
]


def clean_base_title(text: str) -> str:
    """Collapse whitespace and strip trailing separators."""
    cleaned = _WHITESPACE_RE.sub(' ', text)
    cleaned = _TRAILING_SEPARATORS_RE.sub('', cleaned)
    return cleaned.strip()


def extract_size(title, patterns: Optional[List[SizePattern]] = None) -> SizeExtraction:
    """
    Extract the size token and base title from one title.

    Patterns are tried in the order given (SIZE_PATTERNS by default). The
    first one that matches wins: its span is cut out of the title and no
    later pattern looks at the text. Never raises; empty or non-string
    input gives no size and an empty base title.
    """
    if not title or not isinstance(title, str):
        return SizeExtraction(size_value=None, base_title="")

    working = title
    size_value = None
    for pattern in patterns or SIZE_PATTERNS:
        match = pattern.match(working)
        if match:
            size_value = match.value
            working = working[:match.start] + ' ' + working[match.end:]
            break

    return SizeExtraction(size_value=size_value, base_title=clean_base_title(working))


class SizeExtractor:
    """
    Priority-ordered size extraction with a per-instance title cache.

    One extractor is created per detection pass, so each title is parsed
    once and the cache is dropped with the pass.
    """

    def __init__(self, patterns: Optional[List[SizePattern]] = None):
        self.patterns = sorted(
            patterns or SIZE_PATTERNS,
            key=lambda p: -p.priority,
        )
        self._cache: Dict[str, SizeExtraction] = {}

    def extract(self, title) -> SizeExtraction:
        if not isinstance(title, str):
            return extract_size(title)
        if title not in self._cache:
            self._cache[title] = extract_size(title, self.patterns)
        return self._cache[title]
