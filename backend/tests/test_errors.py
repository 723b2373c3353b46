"""Error classification tests."""

import pytest

from geetgatha.errors import ErrorKind, MissingCredentialError, PipelineError, classify_error
from geetgatha.services.llm.retrying import _should_retry


@pytest.mark.parametrize(
    "raw,kind",
    [
        ("400 API key not valid. Please pass a valid API key.", ErrorKind.AUTH),
        ("403 PERMISSION_DENIED", ErrorKind.AUTH),
        ("Request had invalid authentication credentials: UNAUTHENTICATED", ErrorKind.AUTH),
        ("429 RESOURCE_EXHAUSTED", ErrorKind.QUOTA),
        ("You exceeded your current quota", ErrorKind.QUOTA),
        ("Rate limit reached for requests", ErrorKind.QUOTA),
        ("503 The model is overloaded", ErrorKind.SERVER),
        ("500 INTERNAL", ErrorKind.SERVER),
        ("Failed to fetch", ErrorKind.NETWORK),
        ("Connection reset by peer", ErrorKind.NETWORK),
        ("Response did not match GeneratedLyrics", ErrorKind.UNKNOWN),
    ],
)
def test_01_keyword_classification(raw, kind):
    assert classify_error(RuntimeError(raw)).kind is kind


def test_02_priority_order():
    """AUTH beats QUOTA beats SERVER beats NETWORK when keywords overlap."""
    assert classify_error(RuntimeError("403 quota")).kind is ErrorKind.AUTH
    assert classify_error(RuntimeError("429 from 503 upstream")).kind is ErrorKind.QUOTA
    assert classify_error(RuntimeError("503 network")).kind is ErrorKind.SERVER


def test_03_friendly_messages():
    assert classify_error(RuntimeError("403")).message == "Invalid API Key. Please check your settings."
    assert classify_error(RuntimeError("quota")).message == "Usage limit exceeded. Please try again later."
    assert classify_error(RuntimeError("503")).message == "AI Service is currently overloaded. Please retry."
    assert classify_error(RuntimeError("network")).message == "Network connection failed. Check your internet."
    assert classify_error(RuntimeError("odd")).message == "Something went wrong. Please try again."


def test_04_reads_message_attribute():
    class SdkError(Exception):
        def __init__(self):
            super().__init__("ClientError")
            self.message = "API key expired"

    assert classify_error(SdkError()).kind is ErrorKind.AUTH


def test_05_classified_errors_pass_through():
    original = PipelineError("already handled", ErrorKind.SERVER)
    assert classify_error(original) is original


def test_06_missing_credential_is_auth():
    error = MissingCredentialError()
    assert error.kind is ErrorKind.AUTH
    assert isinstance(error, PipelineError)


def test_07_auth_failures_are_not_retried():
    assert _should_retry(RuntimeError("403 forbidden")) is False
    assert _should_retry(RuntimeError("503 overloaded")) is True
    assert _should_retry(ValueError("Empty model response")) is True
