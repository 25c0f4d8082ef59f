"""Constants and configuration values for EthosRadar."""

# R4R Detection Constants
class R4RConstants:
    """Constants related to review-for-review scoring."""

    # Composite score weights (score = rw * reciprocal% + qw * quick%)
    RECIPROCITY_WEIGHT = 0.7
    QUICK_WEIGHT = 0.3

    # Risk tier lower bounds on r4rScore
    CRITICAL_THRESHOLD = 75.0
    HIGH_THRESHOLD = 50.0
    MODERATE_THRESHOLD = 25.0

    # Pairing
    QUICK_RECIPROCAL_MINUTES = 30.0  # gap at or under this is "quick"
    HIGH_R4R_REVIEWER_THRESHOLD = 70.0

    # Score bounds
    MIN_SCORE = 0.0
    MAX_SCORE = 100.0

    # Epoch values above this are milliseconds
    EPOCH_MS_CUTOFF = 1_000_000_000_000

# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_SECONDS = 5 * 60  # analysis time-to-live
    CACHE_MAX_ENTRIES = 100  # oldest entry evicted past this
    CACHE_KEY_LENGTH = 24  # length of cache key for logging

# Network Analysis Constants
class NetworkConstants:
    """Constants for multi-user analysis."""

    MIN_USERKEYS = 1
    MAX_USERKEYS = 20
    MAX_WORKERS = 8  # thread pool size for concurrent fetches
    HTTP_POOL_SIZE = MAX_WORKERS * 2  # each worker fetches author and subject pages at once

# Error Handling Constants
class ErrorConstants:
    """Constants for error handling and retries."""

    MAX_RETRY_ATTEMPTS = 3  # maximum retry attempts
    RETRY_BASE_DELAY = 1  # base delay for exponential backoff
    REQUEST_TIMEOUT = 10  # timeout for API requests
    UPSTREAM_ERROR_MESSAGE = "Review data source unavailable"
    INSUFFICIENT_DATA_MESSAGE = "Unable to analyze user - user not found or insufficient data"

# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    WEIGHTS_FILE = "config/r4r_weights.yaml"  # scoring policy file
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
