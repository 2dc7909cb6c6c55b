"""
Pairwise duplicate decisions for inventory items.

Each unordered pair goes through, in order:
1. Marketplace id fast path (same listing id on the same marketplace)
2. Size conflict on title-embedded sizes
3. Size conflict on the explicit size field (only when neither title had a size)
4. Base-title word overlap against the similarity threshold
"""

import logging
from dataclasses import dataclass
from typing import Collection, Dict, Iterator, List, Mapping, Optional, Tuple

from .config import DEFAULT_SIMILARITY_THRESHOLD, DEFAULT_TITLE_CHECK_THRESHOLD
from .patterns import SizeExtraction, SizeExtractor
from .records import InventoryItemRecord, MARKETPLACE_ID_FIELDS, pair_key
from .similarity import word_overlap_similarity

log = logging.getLogger(__name__)

REASON_SIZE_CONFLICT = "size_conflict"
REASON_EXPLICIT_SIZE_CONFLICT = "explicit_size_conflict"
REASON_SIMILAR_TITLE = "similar_title"
REASON_BELOW_THRESHOLD = "below_threshold"


def marketplace_reason(marketplace: str) -> str:
    return f"marketplace_id:{marketplace}"


@dataclass(frozen=True)
class PairDecision:
    """Outcome of comparing two items, with the rule that decided it."""
    is_duplicate: bool
    reason: str
    similarity: Optional[float] = None


def _sizes_conflict(a: Optional[str], b: Optional[str]) -> bool:
    return a is not None and b is not None and a.lower() != b.lower()


def _comparison_title(extraction: SizeExtraction, name: str) -> str:
    return extraction.base_title or name


def shared_marketplace(
    ids_a: Mapping[str, Optional[str]],
    ids_b: Mapping[str, Optional[str]],
) -> Optional[str]:
    """First marketplace where both sides carry the same non-empty item id."""
    for marketplace in MARKETPLACE_ID_FIELDS:
        id_a = ids_a.get(marketplace)
        if id_a and id_a == ids_b.get(marketplace):
            return marketplace
    return None


def evaluate_pair(
    item_a: InventoryItemRecord,
    item_b: InventoryItemRecord,
    extraction_a: SizeExtraction,
    extraction_b: SizeExtraction,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> PairDecision:
    """Decide whether two inventory items are duplicate candidates."""
    marketplace = shared_marketplace(item_a.marketplace_ids(), item_b.marketplace_ids())
    if marketplace:
        return PairDecision(True, marketplace_reason(marketplace))

    if _sizes_conflict(extraction_a.size_value, extraction_b.size_value):
        return PairDecision(False, REASON_SIZE_CONFLICT)

    if (
        not extraction_a.has_size
        and not extraction_b.has_size
        and _sizes_conflict(item_a.size, item_b.size)
    ):
        return PairDecision(False, REASON_EXPLICIT_SIZE_CONFLICT)

    score = word_overlap_similarity(
        _comparison_title(extraction_a, item_a.name),
        _comparison_title(extraction_b, item_b.name),
    )
    if score >= threshold:
        return PairDecision(True, REASON_SIMILAR_TITLE, score)
    return PairDecision(False, REASON_BELOW_THRESHOLD, score)


class PairEvaluator:
    """
    Evaluates every unordered pair of a fixed item list.

    Size extraction runs once per item when the evaluator is built and is
    reused for every pair that item takes part in.
    """

    def __init__(
        self,
        items: List[InventoryItemRecord],
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        extractor: Optional[SizeExtractor] = None,
    ):
        self.items = items
        self.threshold = threshold
        extractor = extractor or SizeExtractor()
        self.extractions: List[SizeExtraction] = [extractor.extract(item.name) for item in items]

    def explain(self, i: int, j: int) -> PairDecision:
        return evaluate_pair(
            self.items[i],
            self.items[j],
            self.extractions[i],
            self.extractions[j],
            self.threshold,
        )

    def is_edge(self, i: int, j: int) -> bool:
        return self.explain(i, j).is_duplicate

    def find_edges(
        self,
        linked_pairs: Collection[Tuple[str, str]] = (),
    ) -> Iterator[Tuple[int, int]]:
        """
        Yield (i, j), i < j, for every duplicate pair.

        Pairs whose ids appear in linked_pairs (either order) are skipped.
        """
        linked = {pair_key(a, b) for a, b in linked_pairs}
        count = len(self.items)
        for i in range(count):
            for j in range(i + 1, count):
                if linked and pair_key(self.items[i].id, self.items[j].id) in linked:
                    continue
                decision = self.explain(i, j)
                if decision.is_duplicate:
                    log.debug(
                        f"Edge {self.items[i].id} ~ {self.items[j].id}: {decision.reason}"
                        + (f" ({decision.similarity:.0f}%)" if decision.similarity is not None else "")
                    )
                    yield i, j


@dataclass
class TitleMatch:
    """An existing item that looks like a duplicate of a candidate title."""
    record: InventoryItemRecord
    similarity: float
    reason: str

    @property
    def is_marketplace_match(self) -> bool:
        return self.reason.startswith("marketplace_id:")

    def to_dict(self) -> Dict:
        data = self.record.to_dict()
        data.update({"similarity": round(self.similarity), "reason": self.reason})
        return data


def find_title_matches(
    title: str,
    items: List[InventoryItemRecord],
    marketplace_ids: Optional[Mapping[str, Optional[str]]] = None,
    threshold: float = DEFAULT_TITLE_CHECK_THRESHOLD,
    exclude_id: Optional[str] = None,
    size: Optional[str] = None,
) -> List[TitleMatch]:
    """
    Check one candidate title (e.g. an item about to be imported) against
    an existing catalog.

    Uses the same rules as pair evaluation. Marketplace id matches come
    first with similarity 100, then title matches by descending similarity.
    """
    candidate = InventoryItemRecord(id=exclude_id or "", name=title if isinstance(title, str) else "", size=size)
    for marketplace, value in (marketplace_ids or {}).items():
        attr = MARKETPLACE_ID_FIELDS.get(marketplace)
        if attr and isinstance(value, str) and value.strip():
            setattr(candidate, attr, value.strip())

    extractor = SizeExtractor()
    candidate_extraction = extractor.extract(candidate.name)

    matches: List[TitleMatch] = []
    for item in items:
        if exclude_id is not None and item.id == exclude_id:
            continue
        decision = evaluate_pair(
            candidate, item, candidate_extraction, extractor.extract(item.name), threshold
        )
        if not decision.is_duplicate:
            continue
        similarity = 100.0 if decision.similarity is None else decision.similarity
        matches.append(TitleMatch(record=item, similarity=similarity, reason=decision.reason))

    matches.sort(key=lambda m: (not m.is_marketplace_match, -m.similarity))
    log.info(f"Title check '{candidate.name[:50]}': {len(matches)} of {len(items)} items match")
    return matches
