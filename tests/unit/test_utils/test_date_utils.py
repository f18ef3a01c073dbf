"""
Unit tests for date utilities
"""

import pytest
from datetime import datetime, timedelta, timezone

from utils.date_utils import utc_now, to_iso


@pytest.mark.unit
class TestDateUtils:
    """Test cases for date helpers"""

    def test_utc_now_is_aware(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_to_iso_aware(self):
        value = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        assert to_iso(value) == "2024-05-01T12:30:00+00:00"

    def test_to_iso_naive_treated_as_utc(self):
        """Test naive datetimes read back from the store are treated as UTC"""
        assert to_iso(datetime(2024, 5, 1, 12, 30)) == "2024-05-01T12:30:00+00:00"
