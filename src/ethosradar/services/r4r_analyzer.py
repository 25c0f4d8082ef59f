"""Review-for-review (R4R) analysis service."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ..core.cache import BoundedTTLCache
from ..core.config import settings
from ..core.constants import NetworkConstants
from ..core.errors import InsufficientDataError, MalformedRecordError, UpstreamUnavailableError
from ..core.models import (
    CrossConnection,
    HighR4RReviewer,
    NetworkAnalysisResult,
    NetworkConnection,
    R4RAnalysisResult,
    R4RSummary,
    Review,
    ReviewDirection,
    ReviewItem,
    ReviewPair,
    UserProfile,
)
from ..core.pairing import PairingResult, build_pairing
from ..core.scoring import (
    classify_risk,
    compute_r4r_score,
    positive_percentage,
    reciprocal_percentage,
)
from .ethos_client import EthosClient, RawReview, normalize_userkey, parse_review

logger = logging.getLogger(__name__)


class ReviewSource(Protocol):
    """What the analyzer needs from the upstream API."""

    def fetch_reviews(self, userkey: str) -> List[RawReview]: ...

    def fetch_profile(self, userkey: str) -> Optional[UserProfile]: ...


class R4RAnalyzer:
    """Detects reciprocal review farming for a userkey."""

    def __init__(self, source: Optional[ReviewSource] = None,
                 cache: Optional[BoundedTTLCache] = None,
                 quick_threshold_minutes: Optional[float] = None,
                 high_r4r_threshold: Optional[float] = None,
                 max_counterpart_lookups: Optional[int] = None):
        self.source = source or EthosClient()
        self.cache = cache if cache is not None else BoundedTTLCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        )
        self.quick_threshold_minutes = (settings.quick_reciprocal_minutes
                                        if quick_threshold_minutes is None else quick_threshold_minutes)
        self.high_r4r_threshold = (settings.high_r4r_threshold
                                   if high_r4r_threshold is None else high_r4r_threshold)
        self.max_counterpart_lookups = (settings.max_counterpart_lookups
                                        if max_counterpart_lookups is None else max_counterpart_lookups)

    # --- Fetch + normalize ---

    def _load_reviews(self, userkey: str) -> Tuple[List[Review], int]:
        """Fetch and parse reviews, returning (reviews, skipped_count)."""
        raw_reviews = self.source.fetch_reviews(userkey)
        reviews: List[Review] = []
        skipped = 0
        for raw in raw_reviews:
            try:
                reviews.append(parse_review(raw))
            except MalformedRecordError as e:
                skipped += 1
                logger.warning(f"Skipping malformed review for {userkey}: {e}")
        return reviews, skipped

    def _pair(self, userkey: str) -> Tuple[PairingResult, int]:
        reviews, skipped = self._load_reviews(userkey)
        return build_pairing(userkey, reviews, self.quick_threshold_minutes), skipped

    # --- Scoring ---

    @staticmethod
    def _score(reciprocal: int, quick: int, given: int, received: int) -> Tuple[float, float]:
        """Return (reciprocal_percentage, r4r_score)."""
        pct = reciprocal_percentage(reciprocal, given, received)
        return pct, compute_r4r_score(pct, quick, reciprocal)

    def _build_connections(self, pairing: PairingResult) -> List[NetworkConnection]:
        connections = []
        for counterpart, pairs in pairing.pairs_by_counterpart().items():
            reciprocal = [p for p in pairs if p.is_reciprocal]
            if not reciprocal:
                continue
            given = sum(1 for p in pairs if p.given is not None)
            received = sum(1 for p in pairs if p.received is not None)
            quick = sum(1 for p in reciprocal if p.is_quick)
            _, score = self._score(len(reciprocal), quick, given, received)

            display_name = None
            for p in pairs:
                if p.received is not None and p.received.author_profile is not None:
                    display_name = p.received.author_profile.display_name
                    break

            connections.append(NetworkConnection(
                userkey=counterpart,
                reviews_given=given,
                reviews_received=received,
                reciprocal_pairs=len(reciprocal),
                quick_reciprocals=quick,
                suspicious_score=score,
                display_name=display_name,
            ))
        connections.sort(key=lambda c: (-c.suspicious_score, c.userkey))
        return connections

    @staticmethod
    def _build_review_items(pairing: PairingResult) -> List[ReviewItem]:
        items: List[ReviewItem] = []

        def item_for(pair: ReviewPair, direction: ReviewDirection) -> ReviewItem:
            review = pair.given if direction is ReviewDirection.GIVEN else pair.received
            other = pair.received if direction is ReviewDirection.GIVEN else pair.given
            return ReviewItem(
                id=review.id,
                direction=direction,
                other_user=pair.counterpart,
                sentiment=review.sentiment,
                comment=review.comment,
                timestamp=review.timestamp,
                is_reciprocal=pair.is_reciprocal,
                reciprocal_sentiment=other.sentiment if other is not None else None,
                time_gap_minutes=pair.time_gap_minutes,
                other_user_profile=pair.received.author_profile if pair.received else None,
            )

        for pair in pairing.pairs:
            if pair.received is not None:
                items.append(item_for(pair, ReviewDirection.RECEIVED))
            if pair.given is not None:
                items.append(item_for(pair, ReviewDirection.GIVEN))
        items.sort(key=lambda i: i.timestamp, reverse=True)
        return items

    # --- Counterparts (one level, uncached) ---

    def _score_counterpart(self, userkey: str) -> Optional[HighR4RReviewer]:
        try:
            pairing, _ = self._pair(userkey)
        except UpstreamUnavailableError as e:
            logger.warning(f"Counterpart {userkey} skipped: {e}")
            return None
        if not pairing.given and not pairing.received:
            return None

        reciprocal = len(pairing.reciprocal_pairs)
        _, score = self._score(reciprocal, len(pairing.quick_pairs),
                               len(pairing.given), len(pairing.received))
        if score < self.high_r4r_threshold:
            return None

        reviewer = HighR4RReviewer(
            userkey=userkey,
            r4r_score=score,
            risk_level=classify_risk(score),
            reciprocal_reviews=reciprocal,
        )
        profile = self.source.fetch_profile(userkey)
        if profile is not None:
            reviewer.display_name = profile.display_name
            reviewer.username = profile.username
            reviewer.avatar_url = profile.avatar_url
        return reviewer

    def _find_high_r4r_reviewers(self, connections: Sequence[NetworkConnection]) -> List[HighR4RReviewer]:
        candidates = [c.userkey for c in connections[:self.max_counterpart_lookups]]
        if not candidates:
            return []
        workers = min(len(candidates), NetworkConstants.MAX_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self._score_counterpart, candidates))
        flagged = [r for r in results if r is not None]
        flagged.sort(key=lambda r: (-r.r4r_score, r.userkey))
        return flagged

    # --- Public operations ---

    def analyze_user(self, userkey: str) -> R4RAnalysisResult:
        """Analyze one userkey, serving from cache when fresh.

        Raises:
            InsufficientDataError: no reviews given or received.
            UpstreamUnavailableError: the review source failed.
        """
        userkey = normalize_userkey(userkey) or userkey
        cached = self.cache.get(userkey)
        if cached is not None:
            logger.debug(f"R4R cache hit for {userkey}")
            return cached

        logger.info(f"Analyzing R4R patterns for {userkey}")
        start_time = time.time()

        pairing, skipped = self._pair(userkey)
        given, received = len(pairing.given), len(pairing.received)
        if given == 0 and received == 0:
            raise InsufficientDataError(userkey)

        reciprocal = len(pairing.reciprocal_pairs)
        quick = len(pairing.quick_pairs)
        pct, score = self._score(reciprocal, quick, given, received)
        connections = self._build_connections(pairing)

        result = R4RAnalysisResult(
            userkey=userkey,
            total_reviews_given=given,
            total_reviews_received=received,
            reciprocal_reviews=reciprocal,
            quick_reciprocal_count=quick,
            reciprocal_percentage=pct,
            r4r_score=score,
            risk_level=classify_risk(score),
            network_connections=connections,
            high_r4r_reviewers=self._find_high_r4r_reviewers(connections),
            all_reviews=self._build_review_items(pairing),
            skipped_records=skipped,
            analyzed_at=datetime.now(timezone.utc),
        )
        self.cache.put(userkey, result)

        logger.info(f"R4R analysis for {userkey}: score={score} risk={result.risk_level.value} "
                    f"in {time.time() - start_time:.1f}s")
        return result

    def is_cached(self, userkey: str) -> bool:
        return (normalize_userkey(userkey) or userkey) in self.cache

    def get_summary(self, userkey: str) -> R4RSummary:
        """Dashboard summary; neutral when there is no data."""
        userkey = normalize_userkey(userkey) or userkey
        try:
            analysis = self.analyze_user(userkey)
        except InsufficientDataError:
            return R4RSummary(userkey=userkey, available=False)

        received = [i.sentiment for i in analysis.all_reviews if i.direction is ReviewDirection.RECEIVED]
        return R4RSummary(
            userkey=userkey,
            available=True,
            total_reviews=analysis.total_reviews_received,
            positive_percentage=positive_percentage(received),
            reciprocal_reviews=analysis.reciprocal_reviews,
            quick_reciprocal_count=analysis.quick_reciprocal_count,
            r4r_score=analysis.r4r_score,
            risk_level=analysis.risk_level,
        )

    def _try_analyze(self, userkey: str) -> Optional[R4RAnalysisResult]:
        try:
            return self.analyze_user(userkey)
        except InsufficientDataError:
            logger.info(f"Network analysis: insufficient data for {userkey}")
            return None

    def analyze_network(self, userkeys: Sequence[str]) -> NetworkAnalysisResult:
        """Analyze several users and find reciprocal activity among them.

        Raises:
            ValueError: empty or oversized userkey list.
            UpstreamUnavailableError: any user's reviews could not be fetched.
        """
        keys = (normalize_userkey(k) for k in userkeys)
        unique: List[str] = list(dict.fromkeys(k for k in keys if k))
        limit = min(settings.max_network_userkeys, NetworkConstants.MAX_USERKEYS)
        if not (NetworkConstants.MIN_USERKEYS <= len(unique) <= limit):
            raise ValueError(f"expected between {NetworkConstants.MIN_USERKEYS} and {limit} userkeys")

        workers = min(len(unique), NetworkConstants.MAX_WORKERS)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            analyses: Dict[str, Optional[R4RAnalysisResult]] = dict(
                zip(unique, executor.map(self._try_analyze, unique))
            )

        cross: List[CrossConnection] = []
        for i, user1 in enumerate(unique):
            for user2 in unique[i + 1:]:
                a1, a2 = analyses[user1], analyses[user2]
                if a1 is None or a2 is None:
                    continue
                c12 = next((c for c in a1.network_connections if c.userkey == user2), None)
                c21 = next((c for c in a2.network_connections if c.userkey == user1), None)
                if c12 or c21:
                    cross.append(CrossConnection(user1, user2, c12, c21))

        return NetworkAnalysisResult(
            analyses=[a for a in analyses.values() if a is not None],
            cross_connections=cross,
            unavailable=[k for k, a in analyses.items() if a is None],
        )
