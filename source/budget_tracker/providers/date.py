"""This module provides centralized date-related utilities."""

from datetime import date, datetime, time, timedelta


class DateProvider:
    """Provides centralized constants and methods for date handling.

    Budget windows are inclusive calendar-day ranges, while transactions
    carry full timestamps. These helpers translate one into the other so the
    containment rule is the same in SQL filters and in Python.
    """

    DATE_FORMAT = "%Y-%m-%d"

    @staticmethod
    def window_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
        """Returns the half-open timestamp range covering an inclusive day window.

        Args:
            start_date: The first day of the window.
            end_date: The last day of the window (inclusive).

        Returns:
            A tuple with the first instant of `start_date` and the first
            instant of the day after `end_date`.
        """
        return (
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
        )

    @staticmethod
    def day_of(moment: datetime | date) -> date:
        """Returns the calendar day a timestamp is attributed to.

        Args:
            moment: A datetime or date.

        Returns:
            The calendar day.
        """
        if isinstance(moment, datetime):
            return moment.date()
        return moment

    @staticmethod
    def windows_overlap(first: tuple[date, date], second: tuple[date, date]) -> bool:
        """Checks whether two inclusive day windows share at least one day.

        Args:
            first: The (start, end) of the first window.
            second: The (start, end) of the second window.

        Returns:
            True if the windows overlap.
        """
        return first[0] <= second[1] and second[0] <= first[1]
