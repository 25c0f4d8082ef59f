"""Partition a user's reviews and pair them by counterpart."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .constants import R4RConstants
from .models import Review, ReviewPair

logger = logging.getLogger(__name__)

PairKey = Tuple[str, str]


def pair_key(a: str, b: str) -> PairKey:
    """Unordered key for the two parties of a review."""
    return (a, b) if a <= b else (b, a)


@dataclass
class PairingResult:
    """Reviews of one subject grouped into per-counterpart pairs."""
    userkey: str
    given: List[Review] = field(default_factory=list)
    received: List[Review] = field(default_factory=list)
    pairs: List[ReviewPair] = field(default_factory=list)

    @property
    def reciprocal_pairs(self) -> List[ReviewPair]:
        return [p for p in self.pairs if p.is_reciprocal]

    @property
    def quick_pairs(self) -> List[ReviewPair]:
        return [p for p in self.pairs if p.is_quick]

    def pairs_by_counterpart(self) -> Dict[str, List[ReviewPair]]:
        grouped: Dict[str, List[ReviewPair]] = defaultdict(list)
        for p in self.pairs:
            grouped[p.counterpart].append(p)
        return dict(grouped)


def partition_reviews(userkey: str, reviews: Iterable[Review]) -> Tuple[List[Review], List[Review]]:
    """Split reviews into (given, received) for the subject.

    Duplicate ids are dropped, as are self-reviews and reviews that do not
    involve the subject at all.
    """
    given: List[Review] = []
    received: List[Review] = []
    seen_ids = set()

    for review in reviews:
        if review.id in seen_ids:
            continue
        seen_ids.add(review.id)

        if review.author == review.subject:
            continue
        if review.author == userkey:
            given.append(review)
        elif review.subject == userkey:
            received.append(review)
        else:
            logger.debug(f"Review {review.id} does not involve {userkey}; ignoring")

    return given, received


def pair_reviews(userkey: str, given: List[Review], received: List[Review],
                 quick_threshold_minutes: float = R4RConstants.QUICK_RECIPROCAL_MINUTES) -> List[ReviewPair]:
    """Group reviews by pair key and match opposite directions.

    Within each group both directions are sorted by time and matched in
    order, so a review belongs to at most one pair and a group yields
    min(#given, #received) reciprocal pairs. Leftovers become one-sided
    pairs.
    """
    groups: Dict[PairKey, Dict[str, List[Review]]] = defaultdict(lambda: {"given": [], "received": []})
    for review in given:
        groups[pair_key(userkey, review.subject)]["given"].append(review)
    for review in received:
        groups[pair_key(userkey, review.author)]["received"].append(review)

    pairs: List[ReviewPair] = []
    for key, group in groups.items():
        counterpart = key[1] if key[0] == userkey else key[0]
        out = sorted(group["given"], key=lambda r: r.timestamp)
        back = sorted(group["received"], key=lambda r: r.timestamp)

        for i in range(max(len(out), len(back))):
            pairs.append(ReviewPair(
                counterpart=counterpart,
                given=out[i] if i < len(out) else None,
                received=back[i] if i < len(back) else None,
                quick_threshold_minutes=quick_threshold_minutes,
            ))

    return pairs


def build_pairing(userkey: str, reviews: Iterable[Review],
                  quick_threshold_minutes: float = R4RConstants.QUICK_RECIPROCAL_MINUTES) -> PairingResult:
    """Partition and pair a subject's reviews in one pass."""
    given, received = partition_reviews(userkey, reviews)
    pairs = pair_reviews(userkey, given, received, quick_threshold_minutes)
    return PairingResult(userkey=userkey, given=given, received=received, pairs=pairs)
