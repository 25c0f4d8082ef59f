"""Shared fixtures for EthosRadar tests."""

from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from ethosradar.core.cache import BoundedTTLCache
from ethosradar.core.errors import UpstreamUnavailableError
from ethosradar.core.models import UserProfile
from ethosradar.core.scoring import set_weights
from ethosradar.services.ethos_client import normalize_userkey

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeReviewSource:
    """In-memory stand-in for the Ethos API over one shared review list."""

    def __init__(self, reviews=None, profiles=None, failing=()):
        self.reviews = list(reviews or [])
        self.profiles = dict(profiles or {})
        self.failing = set(failing)
        self.fetch_calls = Counter()
        self.profile_calls = Counter()

    def fetch_reviews(self, userkey):
        self.fetch_calls[userkey] += 1
        if userkey in self.failing:
            raise UpstreamUnavailableError(f"fetch failed for {userkey}")
        return [r for r in self.reviews
                if userkey in (normalize_userkey(r.get("author")), normalize_userkey(r.get("subject")))]

    def fetch_profile(self, userkey):
        self.profile_calls[userkey] += 1
        return self.profiles.get(userkey)


class ReviewFactory:
    """Builds raw review records shaped like the Ethos API."""

    def __init__(self):
        self._next_id = 0

    def __call__(self, author, subject, minutes=0, score="positive", comment=""):
        self._next_id += 1
        return {
            "id": self._next_id,
            "author": author,
            "subject": subject,
            "score": score,
            "comment": comment,
            "createdAt": int((BASE_TIME + timedelta(minutes=minutes)).timestamp()),
        }

    def exchange(self, a, b, gap_minutes, start=0):
        """a reviews b, then b reviews a back after ``gap_minutes``."""
        return [self(a, b, minutes=start), self(b, a, minutes=start + gap_minutes)]


@pytest.fixture(autouse=True)
def default_weights():
    set_weights(None)
    yield
    set_weights(None)


@pytest.fixture
def review():
    return ReviewFactory()


@pytest.fixture
def make_source():
    return FakeReviewSource


@pytest.fixture
def cache():
    return BoundedTTLCache(ttl_seconds=300, max_entries=100)


@pytest.fixture
def profile():
    def _profile(userkey, name):
        return UserProfile(userkey=userkey, display_name=name, username=name.lower(),
                           avatar_url=f"https://cdn.example/{name.lower()}.png")
    return _profile
