import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _env_number(env_var: str, default, cast=float):
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return cast(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid number (got %r); defaulting to %r",
            env_var,
            raw_value,
            default,
        )
        return default


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# Season defaults used when a create request leaves them out
DEFAULT_K_FACTOR = _env_number("DEFAULT_K_FACTOR", 32, int)
DEFAULT_INITIAL_SCORE = _env_number("DEFAULT_INITIAL_SCORE", 1200, int)

FORM_LENGTH = _env_number("FORM_LENGTH", 5, int)
STRUGGLING_MIN_MATCHES = _env_number("STRUGGLING_MIN_MATCHES", 1, int)
STANDINGS_CACHE_TTL = _env_number("STANDINGS_CACHE_TTL", 30.0)

MATCH_RATE_LIMIT = os.getenv("MATCH_RATE_LIMIT") or "30/minute"
