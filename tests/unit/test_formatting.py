import pytest

from clinic.domain.dates import Timeslot
from clinic.formatting import format_currency, time_to_12h


class TestTimeTo12h:
    """Converts a Timeslot → 12-hour string.

    No leading zero on the hour (e.g. ``2:30 PM`` not ``02:30 PM``).
    """

    @pytest.mark.parametrize(
        ("hour", "minute", "expected"),
        [
            (14, 30, "2:30 PM"),
            (9, 0, "9:00 AM"),
            (12, 0, "12:00 PM"),
            (0, 0, "12:00 AM"),
            (11, 59, "11:59 AM"),
            (13, 0, "1:00 PM"),
            (23, 59, "11:59 PM"),
        ],
        ids=["afternoon", "morning", "noon", "midnight", "before-noon", "1pm", "before-midnight"],
    )
    def test_formats_correctly(self, hour: int, minute: int, expected: str) -> None:
        assert time_to_12h(Timeslot(hour=hour, minute=minute)) == expected


class TestFormatCurrency:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [(0, "$0.00"), (90, "$90.00"), (1250, "$1,250.00"), (1234567.5, "$1,234,567.50")],
        ids=["zero", "small", "thousands", "millions-with-cents"],
    )
    def test_formats_correctly(self, amount: float, expected: str) -> None:
        assert format_currency(amount) == expected
