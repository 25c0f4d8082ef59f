"""Ethos API client: review data source and profile lookup."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.config import settings
from ..core.constants import NetworkConstants, R4RConstants
from ..core.errors import MalformedRecordError, UpstreamUnavailableError
from ..core.models import Review, UserProfile
from ..core.scoring import map_sentiment

logger = logging.getLogger(__name__)

RawReview = Dict[str, Any]


class TransientHTTPError(Exception):
    """5xx response worth retrying."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"upstream returned HTTP {status_code}")


TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout, TransientHTTPError)


# --- Record normalization ---

def normalize_userkey(value: Any) -> Optional[str]:
    """Return a userkey string; bare 0x addresses become address:0x..."""
    if value is None:
        return None
    key = str(value).strip()
    if not key:
        return None
    if key.lower().startswith("0x") and ":" not in key:
        return f"address:{key}"
    return key


def _party_userkey(raw: RawReview, role: str) -> Optional[str]:
    direct = raw.get(f"{role}Userkey")
    if direct:
        return normalize_userkey(direct)
    party = raw.get(role)
    if isinstance(party, dict):
        return normalize_userkey(party.get("userkey"))
    return normalize_userkey(party)


def _party_profile(raw: RawReview, role: str, userkey: str) -> Optional[UserProfile]:
    party = raw.get(role)
    if not isinstance(party, dict):
        return None
    display_name = party.get("displayName") or party.get("name")
    username = party.get("username")
    avatar_url = party.get("avatarUrl") or party.get("avatar")
    if not (display_name or username or avatar_url):
        return None
    return UserProfile(userkey=userkey, display_name=display_name,
                       username=username, avatar_url=avatar_url)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse epoch seconds, epoch milliseconds or ISO-8601 into aware UTC."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        seconds = float(value)
        if seconds > R4RConstants.EPOCH_MS_CUTOFF:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def parse_review(raw: RawReview) -> Review:
    """Normalize one upstream review record.

    Raises:
        MalformedRecordError: author, subject or timestamp is missing.
    """
    if not isinstance(raw, dict):
        raise MalformedRecordError("record")
    record_id = raw.get("id")

    author = _party_userkey(raw, "author")
    if not author:
        raise MalformedRecordError("author", record_id)
    subject = _party_userkey(raw, "subject")
    if not subject:
        raise MalformedRecordError("subject", record_id)

    timestamp = parse_timestamp(raw.get("createdAt", raw.get("timestamp")))
    if timestamp is None:
        raise MalformedRecordError("timestamp", record_id)

    sentiment_value = raw["score"] if "score" in raw else raw.get("sentiment")

    return Review(
        id=str(record_id) if record_id is not None else f"{author}_{subject}_{int(timestamp.timestamp())}",
        author=author,
        subject=subject,
        sentiment=map_sentiment(sentiment_value),
        timestamp=timestamp,
        comment=str(raw.get("comment") or ""),
        author_profile=_party_profile(raw, "author", author),
    )


def _extract_values(payload: Any) -> Tuple[List[RawReview], Optional[int]]:
    """Pull the review list and total out of the known response envelopes."""
    if isinstance(payload, list):
        return payload, None
    if not isinstance(payload, dict):
        raise UpstreamUnavailableError("Unexpected review payload")
    if payload.get("ok") is False:
        raise UpstreamUnavailableError(f"Ethos API error: {payload.get('error', 'unknown')}")
    body = payload.get("data", payload)
    if isinstance(body, list):
        return body, None
    if not isinstance(body, dict):
        raise UpstreamUnavailableError("Unexpected review payload")
    values = body.get("values") or []
    total = body.get("total")
    return list(values), int(total) if isinstance(total, (int, float)) else None


class EthosClient:
    """Review data source backed by the Ethos public API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 max_retries: Optional[int] = None, retry_delay: Optional[float] = None,
                 page_size: Optional[int] = None, max_reviews: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.ethos_api_base_url).rstrip("/")
        self.reviews_path = settings.ethos_reviews_path
        self.profile_path = settings.ethos_profile_path
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.page_size = page_size or settings.review_page_size
        self.max_reviews = max_reviews or settings.max_reviews

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=NetworkConstants.HTTP_POOL_SIZE,
                                  pool_maxsize=NetworkConstants.HTTP_POOL_SIZE)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": settings.ethos_user_agent,
        })

        attempts = settings.max_retries if max_retries is None else max_retries
        delay = settings.retry_delay if retry_delay is None else retry_delay
        self._retrying = Retrying(
            stop=stop_after_attempt(max(1, attempts)),
            wait=wait_exponential(multiplier=delay, max=settings.retry_backoff * 10),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code >= 500:
            raise TransientHTTPError(response.status_code)
        return response

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._retrying(self._send, method, url, **kwargs)
        except (requests.RequestException, TransientHTTPError) as e:
            logger.error(f"Ethos request failed: {method} {path}: {e}")
            raise UpstreamUnavailableError(f"Ethos request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Ethos request failed: {method} {path}: HTTP {response.status_code}")
            raise UpstreamUnavailableError(f"Ethos API returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Ethos API returned a non-JSON body") from e

    def _fetch_direction(self, userkey: str, role: str) -> List[RawReview]:
        """Page through reviews where ``userkey`` plays ``role`` (author or subject)."""
        collected: List[RawReview] = []
        offset = 0
        while len(collected) < self.max_reviews:
            limit = min(self.page_size, self.max_reviews - len(collected))
            payload = self._request("POST", self.reviews_path,
                                    json={role: [userkey], "limit": limit, "offset": offset})
            values, total = _extract_values(payload)
            collected.extend(values)
            offset += len(values)
            if len(values) < limit or (total is not None and offset >= total):
                break
        return collected

    def fetch_reviews(self, userkey: str) -> List[RawReview]:
        """All raw review records where ``userkey`` is the author or the subject.

        Raises:
            UpstreamUnavailableError: either direction could not be fetched.
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            given_future = executor.submit(self._fetch_direction, userkey, "author")
            received_future = executor.submit(self._fetch_direction, userkey, "subject")
            given = given_future.result()
            received = received_future.result()

        merged: List[RawReview] = []
        seen_ids = set()
        for record in given + received:
            record_id = record.get("id") if isinstance(record, dict) else None
            if record_id is not None:
                if record_id in seen_ids:
                    continue
                seen_ids.add(record_id)
            merged.append(record)

        logger.info(f"Fetched {len(merged)} reviews for {userkey} "
                    f"({len(given)} given, {len(received)} received)")
        return merged

    def fetch_profile(self, userkey: str) -> Optional[UserProfile]:
        """Best-effort display info; None when the lookup fails."""
        try:
            payload = self._request("GET", self.profile_path, params={"userkey": userkey})
        except UpstreamUnavailableError as e:
            logger.warning(f"Profile lookup failed for {userkey}: {e}")
            return None

        data = payload.get("data", payload) if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            return None
        return UserProfile(
            userkey=userkey,
            display_name=data.get("displayName") or data.get("name"),
            username=data.get("username"),
            avatar_url=data.get("avatarUrl") or data.get("avatar"),
        )
