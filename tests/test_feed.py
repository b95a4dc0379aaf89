"""Tests for the viewer flight feed: supersession and last-known-good behavior."""

from unittest.mock import MagicMock

import pytest

from flightmap.exceptions import UpstreamRequestError
from flightmap.feed import FlightFeed
from flightmap.models import BoundingBox, FlightState

BOX_A = BoundingBox(min_lat=50, max_lat=60, min_lon=10, max_lon=20)
BOX_B = BoundingBox(min_lat=0, max_lat=10, min_lon=0, max_lon=10)


class ScriptedProvider:
    """Provider stand-in; each call pops the next scripted outcome."""

    name = 'Scripted'

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get_states(self, bbox):
        self.calls.append(bbox)
        outcome = self.outcomes.pop(0)
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def flight(icao24, lat=55, lon=15):
    return FlightState(icao24=icao24, latitude=lat, longitude=lon)


class TestRefresh:

    def test_applies_result(self):
        feed = FlightFeed(ScriptedProvider([flight('abc123')]))

        update = feed.refresh(BOX_A)

        assert update.applied
        assert [f.icao24 for f in feed.flights] == ['abc123']
        assert feed.error is None
        assert feed.loading is False
        assert feed.bbox == BOX_A

    def test_no_bbox_clears_feed_without_query(self):
        provider = ScriptedProvider([flight('abc123')])
        feed = FlightFeed(provider)
        feed.refresh(BOX_A)

        update = feed.refresh(None)

        assert update.applied
        assert feed.flights == []
        assert len(provider.calls) == 1

    def test_error_keeps_last_good_flights(self):
        error = UpstreamRequestError('OpenSky request failed', status_code=503)
        feed = FlightFeed(ScriptedProvider([flight('abc123')], error))
        feed.refresh(BOX_A)

        update = feed.refresh(BOX_A)

        assert update.error is error
        assert feed.error is error
        assert [f.icao24 for f in feed.flights] == ['abc123']
        assert feed.loading is False

    def test_success_after_error_clears_flag(self):
        feed = FlightFeed(ScriptedProvider(
            UpstreamRequestError('OpenSky request failed'),
            [flight('def456')],
        ))
        feed.refresh(BOX_A)

        feed.refresh(BOX_A)

        assert feed.error is None
        assert [f.icao24 for f in feed.flights] == ['def456']

    def test_unexpected_errors_propagate(self):
        feed = FlightFeed(ScriptedProvider(RuntimeError('bug')))

        with pytest.raises(RuntimeError):
            feed.refresh(BOX_A)


class TestSupersession:

    def test_superseded_result_is_discarded(self):
        feed = FlightFeed(None)

        def newer_refresh_lands_first():
            inner = feed.refresh(BOX_B)
            assert inner.applied
            return [flight('stale')]

        feed.provider = ScriptedProvider(newer_refresh_lands_first, [flight('fresh', 5, 5)])

        outer = feed.refresh(BOX_A)

        assert outer.applied is False
        assert [f.icao24 for f in feed.flights] == ['fresh']
        assert feed.bbox == BOX_B
        assert feed.stats['discarded_count'] == 1

    def test_superseded_error_is_discarded(self):
        feed = FlightFeed(None)

        def newer_refresh_then_fail():
            feed.refresh(BOX_B)
            return UpstreamRequestError('OpenSky request failed')

        feed.provider = ScriptedProvider(newer_refresh_then_fail, [flight('fresh', 5, 5)])

        outer = feed.refresh(BOX_A)

        assert outer.applied is False
        assert feed.error is None
        assert [f.icao24 for f in feed.flights] == ['fresh']

    def test_cancel_drops_in_flight_result(self):
        feed = FlightFeed(None)

        def cancelled_meanwhile():
            feed.cancel()
            return [flight('late')]

        feed.provider = ScriptedProvider(cancelled_meanwhile)

        update = feed.refresh(BOX_A)

        assert update.applied is False
        assert feed.flights == []
        assert feed.loading is False


class TestViews:

    def test_visible_flights_filters_current_box(self):
        feed = FlightFeed(ScriptedProvider([flight('inside'), flight('outside', 0, 0)]))
        feed.refresh(BOX_A)

        assert [f.icao24 for f in feed.visible_flights()] == ['inside']

    def test_find_is_case_insensitive(self):
        feed = FlightFeed(ScriptedProvider([flight('abc123')]))
        feed.refresh(BOX_A)

        assert feed.find('ABC123').icao24 == 'abc123'
        assert feed.find('zzz999') is None

    def test_callbacks_run_on_applied_refresh_only(self):
        callback = MagicMock()
        feed = FlightFeed(ScriptedProvider(
            [flight('abc123')],
            UpstreamRequestError('OpenSky request failed'),
        ))
        feed.add_update_callback(callback)

        feed.refresh(BOX_A)
        feed.refresh(BOX_A)

        callback.assert_called_once()
        assert [f.icao24 for f in callback.call_args.args[0]] == ['abc123']

    def test_failing_callback_does_not_break_refresh(self):
        feed = FlightFeed(ScriptedProvider([flight('abc123')]))
        feed.add_update_callback(MagicMock(side_effect=RuntimeError('boom')))

        assert feed.refresh(BOX_A).applied
