"""Tests for failure classification and error presentation."""

import unittest
from unittest.mock import Mock

import requests

from merchant_sync.errors import (
    ERROR_MESSAGES,
    APIError,
    AuthenticationError,
    FailureKind,
    FailureRecord,
    NetworkError,
    classify,
    show_error,
)


class TestClassify(unittest.TestCase):
    """Test classify() rules and their precedence."""

    def test_network_request_failed_message(self):
        """Messages containing 'Network request failed' are network failures."""
        for message in [
            "Network request failed",
            "TypeError: Network request failed while loading",
            "Network error",
        ]:
            record = classify(Exception(message))
            self.assertEqual(record.kind, FailureKind.NETWORK, message)
            self.assertTrue(record.retryable)
            self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.NETWORK])

    def test_connectivity_exception_types(self):
        """Connectivity exceptions are network failures whatever their message."""
        for error in [
            NetworkError("socket closed"),
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.Timeout("slow"),
            ConnectionResetError("reset"),
        ]:
            self.assertEqual(classify(error).kind, FailureKind.NETWORK, repr(error))

    def test_network_wins_over_status(self):
        """The network rule is checked before status codes."""
        record = classify(APIError("Network request failed", status_code=500))
        self.assertEqual(record.kind, FailureKind.NETWORK)

    def test_401_is_auth_regardless_of_message(self):
        """Status 401 always classifies as auth and is not retryable."""
        for message in ["", "bad token", "Validation failed", "Server exploded"]:
            record = classify(APIError(message, status_code=401))
            self.assertEqual(record.kind, FailureKind.AUTH)
            self.assertFalse(record.retryable)
            self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.AUTH])

    def test_unauthorized_message(self):
        """An 'Unauthorized' message without status is an auth failure."""
        record = classify(Exception("Unauthorized"))
        self.assertEqual(record.kind, FailureKind.AUTH)
        self.assertFalse(classify(AuthenticationError("token revoked")).retryable)

    def test_validation_keeps_original_message(self):
        """400/422 errors keep the server message and are not retryable."""
        record = classify(APIError("Name is required", status_code=422))
        self.assertEqual(record.kind, FailureKind.VALIDATION)
        self.assertFalse(record.retryable)
        self.assertEqual(record.message, "Name is required")

    def test_validation_default_message(self):
        """Validation errors without a message use the default one."""
        record = classify({"status": 400})
        self.assertEqual(record.kind, FailureKind.VALIDATION)
        self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.VALIDATION])

    def test_server_error(self):
        """5xx errors are retryable server failures with the generic message."""
        for status in [500, 502, 503]:
            record = classify(APIError("upstream exploded", status_code=status))
            self.assertEqual(record.kind, FailureKind.SERVER)
            self.assertTrue(record.retryable)
            self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.SERVER])

    def test_status_from_http_error_response(self):
        """Status codes are read from requests HTTPError responses."""
        error = requests.exceptions.HTTPError("boom", response=Mock(status_code=503))
        self.assertEqual(classify(error).kind, FailureKind.SERVER)

    def test_unknown_default(self):
        """Unmatched errors are unknown and optimistically retryable."""
        record = classify(ValueError("odd payload"))
        self.assertEqual(record.kind, FailureKind.UNKNOWN)
        self.assertTrue(record.retryable)
        self.assertEqual(record.message, "odd payload")

        record = classify(APIError("", status_code=404))
        self.assertEqual(record.kind, FailureKind.UNKNOWN)
        self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.UNKNOWN])

    def test_never_raises(self):
        """classify() is total over odd inputs."""
        for error in [None, "", 42, object(), {"status": "abc"}, RuntimeError()]:
            record = classify(error)
            self.assertIsInstance(record, FailureRecord)
        self.assertEqual(classify(None).kind, FailureKind.UNKNOWN)

    def test_unprintable_error(self):
        """Errors whose str() raises fall back to the default message."""

        class UnprintableError(Exception):
            def __str__(self):
                raise RuntimeError("cannot render")

        record = classify(UnprintableError())
        self.assertEqual(record.kind, FailureKind.UNKNOWN)
        self.assertEqual(record.message, ERROR_MESSAGES[FailureKind.UNKNOWN])

    def test_unconvertible_status(self):
        """Statuses int() cannot convert are ignored."""
        for status in [float("inf"), float("nan"), [401], object()]:
            record = classify({"status": status, "message": "odd status"})
            self.assertEqual(record.kind, FailureKind.UNKNOWN, repr(status))
            self.assertEqual(record.message, "odd status")

    def test_status_falls_back_when_status_code_is_none(self):
        """A None status_code key does not hide the status key."""
        record = classify({"status_code": None, "status": 401, "message": "x"})
        self.assertEqual(record.kind, FailureKind.AUTH)
        self.assertFalse(record.retryable)

        error = APIError("bad input", status_code=None)
        error.status = 422
        self.assertEqual(classify(error).kind, FailureKind.VALIDATION)

    def test_cause_is_kept_and_record_is_frozen(self):
        """The original error is kept and the record cannot be modified."""
        error = RuntimeError("boom")
        record = classify(error)
        self.assertIs(record.cause, error)
        with self.assertRaises(AttributeError):
            record.kind = FailureKind.SERVER


class TestShowError(unittest.TestCase):
    """Test show_error() button selection."""

    def setUp(self):
        self.alert = Mock()

    def test_retry_button_for_retryable_with_callback(self):
        """Retryable failures with a callback get a Retry button."""
        on_retry = Mock()
        failure = classify(Exception("Network request failed"))

        buttons = show_error(failure, self.alert, on_retry=on_retry)

        self.assertEqual([b.text for b in buttons], ["OK", "Retry"])
        self.assertIs(buttons[1].on_press, on_retry)
        self.alert.assert_called_once_with("Error", failure.message, buttons)

    def test_dismiss_only_without_callback(self):
        """Retryable failures without a callback only get OK."""
        failure = classify(APIError("oops", status_code=500))
        buttons = show_error(failure, self.alert)
        self.assertEqual([b.text for b in buttons], ["OK"])
        self.assertEqual(buttons[0].style, "cancel")

    def test_dismiss_only_when_not_retryable(self):
        """Non-retryable failures never offer Retry."""
        failure = classify(APIError("bad token", status_code=401))
        buttons = show_error(failure, self.alert, on_retry=Mock())
        self.assertEqual([b.text for b in buttons], ["OK"])


if __name__ == "__main__":
    unittest.main()
