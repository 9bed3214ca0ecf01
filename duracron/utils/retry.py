"""Retry policy for durable store calls."""

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from duracron.core.common.exceptions import StoreConnectionError

STORE_RETRY_ATTEMPTS = 3

# Transient store failures are retried with jitter; anything else propagates at once
store_retry = retry(
    retry=retry_if_exception_type(StoreConnectionError),
    stop=stop_after_attempt(STORE_RETRY_ATTEMPTS),
    wait=wait_random_exponential(multiplier=0.1, min=0.1, max=1),
    reraise=True,
)
