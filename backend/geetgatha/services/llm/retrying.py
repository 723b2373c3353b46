"""Shared tenacity policy for adapter calls.

Every failure is retried with exponential backoff except credential
failures, which cannot succeed on a second attempt.
"""

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from geetgatha.errors import ErrorKind, classify_error


def _should_retry(error: BaseException) -> bool:
    return classify_error(error).kind is not ErrorKind.AUTH


def model_retry(max_retries: int):
    """Build the retry decorator used around a single model call."""
    return retry(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_should_retry),
        reraise=True,
    )
