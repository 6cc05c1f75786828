"""tests/unit/test_timing.py"""

from agentry.utils.timing import Timeout


class TestTimeout:
    """Tests for Timeout class."""

    def test_coerce_none(self):
        """Test Timeout.coerce() with None returns empty Timeout."""
        timeout = Timeout.coerce(None)

        assert isinstance(timeout, Timeout)
        assert timeout.connect is None
        assert timeout.read is None
        assert timeout.total is None

    def test_coerce_number(self):
        """Test Timeout.coerce() with a number of seconds."""
        timeout = Timeout.coerce(5.0)

        assert timeout.connect == 5.0
        assert timeout.read == 5.0
        assert timeout.total == 5.0

    def test_coerce_timeout(self):
        """Test that Timeout instances are returned unchanged."""
        timeout = Timeout(connect=1.0)
        assert Timeout.coerce(timeout) is timeout

    def test_total_fallback(self):
        """Test that total fills in unset phases."""
        timeout = Timeout(connect=2.0, total=10.0)
        assert timeout.connect_timeout == 2.0
        assert timeout.read_timeout == 10.0
