"""Tests for custom exception hierarchy."""

from guarantee_tracker.exceptions import (
    ChangeFeedError,
    ConfigurationError,
    CsvFormatError,
    RecordNotFoundError,
    RemoteError,
    TrackerError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_tracker_error_is_exception(self) -> None:
        assert isinstance(TrackerError("test"), Exception)

    def test_configuration_error_is_tracker_error(self) -> None:
        assert isinstance(ConfigurationError("test"), TrackerError)

    def test_remote_error_is_tracker_error(self) -> None:
        assert isinstance(RemoteError("test"), TrackerError)

    def test_record_not_found_is_remote_error(self) -> None:
        err = RecordNotFoundError("test")
        assert isinstance(err, RemoteError)
        assert isinstance(err, TrackerError)

    def test_change_feed_error_is_remote_error(self) -> None:
        assert isinstance(ChangeFeedError("test"), RemoteError)

    def test_csv_format_error_is_not_remote(self) -> None:
        err = CsvFormatError("test")
        assert isinstance(err, TrackerError)
        assert not isinstance(err, RemoteError)

    def test_exception_message(self) -> None:
        err = RecordNotFoundError("Guarantee g-001 not found")
        assert str(err) == "Guarantee g-001 not found"
