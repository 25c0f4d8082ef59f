"""Data models for R4R analysis."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Sentiment(Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class RiskLevel(Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"


class ReviewDirection(Enum):
    GIVEN = "given"
    RECEIVED = "received"


@dataclass(frozen=True)
class UserProfile:
    """Display information for a userkey. Never used for scoring."""
    userkey: str
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "displayName": self.display_name,
            "username": self.username,
            "avatarUrl": self.avatar_url,
        }


@dataclass(frozen=True)
class Review:
    """A single review from an author about a subject."""
    id: str
    author: str
    subject: str
    sentiment: Sentiment
    timestamp: datetime
    comment: str = ""
    author_profile: Optional[UserProfile] = None


@dataclass
class ReviewPair:
    """Reviews between the subject and one counterpart, one per direction."""
    counterpart: str
    given: Optional[Review] = None     # subject -> counterpart
    received: Optional[Review] = None  # counterpart -> subject
    quick_threshold_minutes: float = 30.0

    @property
    def is_reciprocal(self) -> bool:
        return self.given is not None and self.received is not None

    @property
    def time_gap_minutes(self) -> Optional[float]:
        if not self.is_reciprocal:
            return None
        delta = self.given.timestamp - self.received.timestamp
        return abs(delta.total_seconds()) / 60.0

    @property
    def is_quick(self) -> bool:
        gap = self.time_gap_minutes
        return gap is not None and gap <= self.quick_threshold_minutes


@dataclass
class NetworkConnection:
    """A counterpart the subject exchanged reviews with."""
    userkey: str
    reviews_given: int
    reviews_received: int
    reciprocal_pairs: int
    quick_reciprocals: int
    suspicious_score: float
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "displayName": self.display_name,
            "reviewsGiven": self.reviews_given,
            "reviewsReceived": self.reviews_received,
            "reciprocalPairs": self.reciprocal_pairs,
            "quickReciprocals": self.quick_reciprocals,
            "suspiciousScore": self.suspicious_score,
        }


@dataclass
class HighR4RReviewer:
    """A counterpart whose own review pattern scores as high risk."""
    userkey: str
    r4r_score: float
    risk_level: RiskLevel
    reciprocal_reviews: int
    display_name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "displayName": self.display_name,
            "username": self.username,
            "avatarUrl": self.avatar_url,
            "r4rScore": self.r4r_score,
            "riskLevel": self.risk_level.value,
            "reciprocalReviews": self.reciprocal_reviews,
        }


@dataclass
class ReviewItem:
    """One review of the subject as listed in the reviews-pattern view."""
    id: str
    direction: ReviewDirection
    other_user: str
    sentiment: Sentiment
    comment: str
    timestamp: datetime
    is_reciprocal: bool = False
    reciprocal_sentiment: Optional[Sentiment] = None
    time_gap_minutes: Optional[float] = None
    other_user_profile: Optional[UserProfile] = None

    def to_dict(self) -> Dict[str, Any]:
        reciprocal = None
        if self.is_reciprocal and self.reciprocal_sentiment is not None:
            reciprocal = {
                "sentiment": self.reciprocal_sentiment.value,
                "timeGap": self.time_gap_minutes,
            }
        return {
            "id": self.id,
            "type": self.direction.value,
            "otherUser": (self.other_user_profile.to_dict() if self.other_user_profile
                          else {"userkey": self.other_user}),
            "review": {
                "sentiment": self.sentiment.value,
                "comment": self.comment,
                "timestamp": self.timestamp.isoformat(),
            },
            "isReciprocal": self.is_reciprocal,
            "reciprocalReview": reciprocal,
        }


@dataclass
class R4RAnalysisResult:
    """Reciprocity and risk assessment for one subject."""
    userkey: str
    total_reviews_given: int
    total_reviews_received: int
    reciprocal_reviews: int
    quick_reciprocal_count: int
    reciprocal_percentage: float
    r4r_score: float
    risk_level: RiskLevel
    network_connections: List[NetworkConnection] = field(default_factory=list)
    high_r4r_reviewers: List[HighR4RReviewer] = field(default_factory=list)
    all_reviews: List[ReviewItem] = field(default_factory=list)
    skipped_records: int = 0
    analyzed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "totalReviewsGiven": self.total_reviews_given,
            "totalReviewsReceived": self.total_reviews_received,
            "reciprocalReviews": self.reciprocal_reviews,
            "quickReciprocalCount": self.quick_reciprocal_count,
            "reciprocalPercentage": self.reciprocal_percentage,
            "r4rScore": self.r4r_score,
            "riskLevel": self.risk_level.value,
            "networkConnections": [c.to_dict() for c in self.network_connections],
            "highR4RReviewers": [r.to_dict() for r in self.high_r4r_reviewers],
            "allReviews": [r.to_dict() for r in self.all_reviews],
            "skippedRecords": self.skipped_records,
            "analyzedAt": self.analyzed_at.isoformat() if self.analyzed_at else None,
        }


@dataclass
class R4RSummary:
    """Lightweight dashboard view of an analysis."""
    userkey: str
    available: bool
    total_reviews: int = 0
    positive_percentage: int = 0
    reciprocal_reviews: int = 0
    quick_reciprocal_count: int = 0
    r4r_score: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userkey": self.userkey,
            "available": self.available,
            "totalReviews": self.total_reviews,
            "positivePercentage": self.positive_percentage,
            "reciprocalReviews": self.reciprocal_reviews,
            "quickReciprocalCount": self.quick_reciprocal_count,
            "r4rScore": self.r4r_score,
            "riskLevel": self.risk_level.value,
        }


@dataclass
class CrossConnection:
    """Reciprocal activity found between two analyzed users."""
    user1: str
    user2: str
    connection_1_to_2: Optional[NetworkConnection]
    connection_2_to_1: Optional[NetworkConnection]

    @property
    def is_mutual(self) -> bool:
        return self.connection_1_to_2 is not None and self.connection_2_to_1 is not None

    @property
    def suspicious_score(self) -> float:
        scores = [c.suspicious_score for c in (self.connection_1_to_2, self.connection_2_to_1) if c]
        return max(scores) if scores else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user1": self.user1,
            "user2": self.user2,
            "connection1to2": self.connection_1_to_2.to_dict() if self.connection_1_to_2 else None,
            "connection2to1": self.connection_2_to_1.to_dict() if self.connection_2_to_1 else None,
            "isMutual": self.is_mutual,
            "suspiciousScore": self.suspicious_score,
        }


@dataclass
class NetworkAnalysisResult:
    """Per-user analyses plus cross-connections within the supplied set."""
    analyses: List[R4RAnalysisResult]
    cross_connections: List[CrossConnection]
    unavailable: List[str] = field(default_factory=list)

    @property
    def network_suspicious_score(self) -> float:
        if not self.cross_connections:
            return 0.0
        total = sum(c.suspicious_score for c in self.cross_connections)
        return round(total / len(self.cross_connections), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyses": [a.to_dict() for a in self.analyses],
            "crossConnections": [c.to_dict() for c in self.cross_connections],
            "networkSuspiciousScore": self.network_suspicious_score,
            "unavailable": self.unavailable,
        }
