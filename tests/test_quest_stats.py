import pytest

from conftest import PARIS, ROME, TOKYO, make_stop
from travel_quest.geo import haversine_miles
from travel_quest.quest_stats import RPG_QUOTES, days_between, pick_quote, summarize, total_distance


class TestTotalDistance:
    def test_empty_and_single(self):
        assert total_distance([]) == 0
        assert total_distance([PARIS]) == 0

    def test_identical_coordinates(self):
        twin = make_stop("2", "Paris again", 48.8566, 2.3522)
        assert total_distance([PARIS, twin]) == 0

    def test_sums_consecutive_legs(self):
        expected = haversine_miles((48.8566, 2.3522), (41.9028, 12.4964)) + haversine_miles(
            (41.9028, 12.4964), (35.6762, 139.6503)
        )
        assert total_distance([PARIS, ROME, TOKYO]) == pytest.approx(expected)

    def test_reversed_route_is_the_same_length(self):
        assert total_distance([PARIS, ROME, TOKYO]) == pytest.approx(total_distance([TOKYO, ROME, PARIS]))


class TestDaysBetween:
    def test_fewer_than_two_dates(self):
        assert days_between([]) == 0
        assert days_between([PARIS, make_stop("2", "Rome", 1, 1, date="  ")]) == 0

    def test_first_to_last_dated_stop(self):
        assert days_between([PARIS, ROME, TOKYO]) == 9

    def test_skips_undated_stops(self):
        undated = make_stop("9", "Somewhere", 0, 0)
        assert days_between([undated, PARIS, undated, TOKYO, undated]) == 9

    def test_unparseable_date(self):
        bad = make_stop("9", "Bad", 0, 0, date="not a date")
        assert days_between([PARIS, bad]) == 0

    def test_list_order_not_date_order(self):
        # Known quirk: out-of-order itineraries use list position, clamped at zero.
        assert days_between([TOKYO, PARIS]) == 0
        assert days_between([TOKYO, PARIS, ROME]) == 0
        assert days_between([ROME, TOKYO, PARIS]) == 0
        assert days_between([PARIS, TOKYO, ROME]) == 3

    def test_time_of_day_is_ignored(self):
        a = make_stop("a", "A", 0, 0, date="2024-01-01T23:00")
        b = make_stop("b", "B", 0, 0, date="2024-01-02T01:00")
        assert days_between([a, b]) == 1


def test_quote_selection_wraps():
    assert pick_quote(0.0, 0) == RPG_QUOTES[0]
    assert pick_quote(3.9, 1) == RPG_QUOTES[4]
    assert pick_quote(7.2, 0) == RPG_QUOTES[2]


def test_summarize(trip):
    summary = summarize(trip)
    assert summary.days_elapsed == 9
    assert summary.total_miles == pytest.approx(total_distance(trip))
    assert summary.quote in RPG_QUOTES
