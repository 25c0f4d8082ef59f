"""Error taxonomy for R4R analysis."""

from typing import Optional


class R4RError(Exception):
    """Base class for analysis errors."""


class InsufficientDataError(R4RError):
    """The subject has no usable reviews to analyze."""

    def __init__(self, userkey: str):
        self.userkey = userkey
        super().__init__(f"No reviews available for {userkey}")


class UpstreamUnavailableError(R4RError):
    """The review data source failed or timed out."""


class MalformedRecordError(R4RError):
    """A fetched review is missing a required field."""

    def __init__(self, field: str, record_id: Optional[str] = None):
        self.field = field
        self.record_id = record_id
        super().__init__(f"Review {record_id or '<unknown>'} is missing '{field}'")
