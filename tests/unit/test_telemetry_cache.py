"""
Unit tests for the telemetry cache: retention, expiry and derived UI state.
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from healthdial.core.cached_metric import CachedMetric, Metric
from healthdial.core.providers import (
    ActivitySample,
    HeartRateSample,
    ProfileSample,
    ProviderSet,
)
from healthdial.core.telemetry_cache import PLACEHOLDER, TelemetryCache
from healthdial.ui.icons import IconId
from healthdial.ui.layout import Anchor, LayoutEngine
from healthdial.ui.theme import Theme
from tests.conftest import StubProvider


@pytest.fixture
def cache():
    return TelemetryCache()


@pytest.fixture
def layout(device):
    return LayoutEngine().ensure(device)


class TestCachedMetric:
    """Tests for a single expiring cache cell."""

    @pytest.mark.unit
    def test_retained_until_expiration_then_cleared(self, now):
        cell = CachedMetric(expiration=timedelta(seconds=60))
        cell.refresh('sample', now)
        for seconds in (0, 1, 30, 59, 60):
            cell.refresh(None, now + timedelta(seconds=seconds))
            assert cell.value == 'sample'
            assert cell.last_update == now
        assert cell.refresh(None, now + timedelta(seconds=61)) is True
        assert cell.value is None
        assert cell.last_update is None

    @pytest.mark.unit
    def test_fresh_sample_resets_clock(self, now):
        cell = CachedMetric(expiration=timedelta(seconds=60))
        cell.refresh('old', now)
        cell.refresh('new', now + timedelta(seconds=50))
        cell.refresh(None, now + timedelta(seconds=100))
        assert cell.value == 'new'
        assert cell.age(now + timedelta(seconds=100)) == timedelta(seconds=50)

    @pytest.mark.unit
    def test_seeded_value_expires_after_refresh_cycles(self, now):
        cell = CachedMetric(expiration=timedelta(seconds=60))
        cell.seed('default')
        cell.refresh(None, now)
        assert cell.value == 'default'
        cell.refresh(None, now + timedelta(seconds=60))
        assert cell.value == 'default'
        cell.refresh(None, now + timedelta(days=2))
        assert cell.value is None

    @pytest.mark.unit
    def test_real_sample_replaces_seed(self, now):
        cell = CachedMetric(expiration=timedelta(seconds=60))
        cell.seed('default')
        cell.refresh('real', now)
        assert cell.value == 'real'
        assert cell.last_update == now

    @pytest.mark.unit
    def test_empty_cell(self, now):
        cell = CachedMetric(expiration=timedelta(seconds=1))
        assert not cell.available
        assert cell.age(now) is None
        assert cell.refresh(None, now) is False


class TestRefresh:
    """Tests for polling providers into the cache."""

    @pytest.mark.unit
    def test_populates_every_metric(self, cache, providers, now):
        cache.refresh(providers, now)
        assert cache.value(Metric.HEART_RATE).bpm == 150
        assert cache.value(Metric.BODY_BATTERY).percent == 64
        assert cache.value(Metric.STRESS) == 35
        assert cache.value(Metric.ACTIVITY).steps == 4000
        assert cache.value(Metric.WEATHER).condition == 'Partly cloudy'
        assert cache.value(Metric.PROFILE).age == 30
        assert cache.value(Metric.STATUS).do_not_disturb is True

    @pytest.mark.unit
    def test_absent_providers_leave_cache_empty(self, cache, now):
        cache.refresh(ProviderSet(), now)
        assert all(cache.value(metric) is None for metric in Metric)

    @pytest.mark.unit
    def test_provider_exception_keeps_previous_value(self, cache, now, later):
        providers = ProviderSet(heart_rate=StubProvider(HeartRateSample(bpm=72), RuntimeError("sensor busy")))
        cache.refresh(providers, now)
        cache.refresh(providers, later(5))
        assert cache.value(Metric.HEART_RATE).bpm == 72

    @pytest.mark.unit
    def test_sentinel_heart_rate_ignored(self, cache, now, later):
        providers = ProviderSet(heart_rate=StubProvider(HeartRateSample(bpm=80), HeartRateSample(bpm=255)))
        cache.refresh(providers, now)
        cache.refresh(providers, later(5))
        assert cache.value(Metric.HEART_RATE).bpm == 80

    @pytest.mark.unit
    def test_stale_heart_rate_disappears(self, cache, now, later):
        providers = ProviderSet(heart_rate=StubProvider(HeartRateSample(bpm=80), None))
        cache.refresh(providers, now)
        cache.refresh(providers, later(120))
        assert cache.value(Metric.HEART_RATE).bpm == 80
        cache.refresh(providers, later(121))
        assert cache.value(Metric.HEART_RATE) is None

    @pytest.mark.unit
    def test_configured_expirations_apply(self, cache, now, later):
        cache.configure({Metric.HEART_RATE: timedelta(seconds=10)})
        providers = ProviderSet(heart_rate=StubProvider(HeartRateSample(bpm=80), None))
        cache.refresh(providers, now)
        cache.refresh(providers, later(11))
        assert cache.value(Metric.HEART_RATE) is None

    @pytest.mark.unit
    def test_stress_expires_on_its_own_schedule(self, cache, activity, now, later):
        without_stress = replace(activity, stress_score=None)
        providers = ProviderSet(activity=StubProvider(activity, without_stress))
        cache.refresh(providers, now)
        cache.refresh(providers, later(600))
        assert cache.value(Metric.STRESS) == 35
        cache.refresh(providers, later(901))
        assert cache.value(Metric.STRESS) is None
        assert cache.value(Metric.ACTIVITY) is not None

    @pytest.mark.unit
    def test_negative_stress_is_not_a_sample(self, cache, activity, now):
        cache.refresh(ProviderSet(activity=StubProvider(replace(activity, stress_score=-1))), now)
        assert cache.value(Metric.STRESS) is None


class TestProgressEntries:
    """Tests for the ordered progress-ring list."""

    @pytest.mark.unit
    def test_fixed_order_and_values(self, cache, providers, now):
        cache.refresh(providers, now)
        entries = cache.progress_entries()
        assert [e.color for e in entries] == [
            Theme.BODY_BATTERY, Theme.STRESS, Theme.STEPS, Theme.CALORIES, Theme.ACTIVE_MINUTES,
        ]
        assert [e.percentage for e in entries] == pytest.approx([64, 35, 50, 1452 / 2904 * 100, 50])

    @pytest.mark.unit
    def test_zero_step_goal_omits_steps(self, cache, activity, profile, now):
        providers = ProviderSet(activity=StubProvider(replace(activity, step_goal=0)),
                                profile=StubProvider(profile))
        cache.refresh(providers, now)
        colors = [e.color for e in cache.progress_entries()]
        assert Theme.STEPS not in colors
        assert colors == [Theme.STRESS, Theme.CALORIES, Theme.ACTIVE_MINUTES]

    @pytest.mark.unit
    def test_missing_profile_omits_calories(self, cache, activity, now):
        cache.refresh(ProviderSet(activity=StubProvider(activity)), now)
        colors = [e.color for e in cache.progress_entries()]
        assert Theme.CALORIES not in colors

    @pytest.mark.unit
    def test_percentages_are_not_clamped(self, cache, activity, now):
        cache.refresh(ProviderSet(activity=StubProvider(replace(activity, steps=12000))), now)
        steps = [e for e in cache.progress_entries() if e.color == Theme.STEPS][0]
        assert steps.percentage == pytest.approx(150)

    @pytest.mark.unit
    def test_active_minutes_default_goal(self, cache, now):
        activity = ActivitySample(active_minutes=45)
        cache.refresh(ProviderSet(activity=StubProvider(activity)), now)
        assert cache.progress_entries()[-1].percentage == pytest.approx(150)

    @pytest.mark.unit
    def test_empty_cache_has_no_entries(self, cache):
        assert cache.progress_entries() == []


class TestDerivedState:
    """Tests for the per-frame derived UI state."""

    @pytest.mark.unit
    def test_heart_rate_color_from_zone_table(self, cache, now):
        providers = ProviderSet(
            heart_rate=StubProvider(HeartRateSample(bpm=150)),
            profile=StubProvider(ProfileSample(heart_rate_zones=[100, 120, 140, 160, 180, 200])),
        )
        cache.refresh(providers, now)
        assert cache.heart_rate_color() == Theme.HR_ZONES[3]

    @pytest.mark.unit
    def test_heart_rate_color_default(self, cache, now):
        cache.refresh(ProviderSet(heart_rate=StubProvider(HeartRateSample(bpm=150))), now)
        assert cache.heart_rate_color() == Theme.HR_DEFAULT

    @pytest.mark.unit
    def test_full_state(self, cache, providers, layout, device, now):
        cache.refresh(providers, now)
        state = cache.derive(layout, device.text_width, 0, 'MON 19', True)
        assert len(state.progress) == 5
        assert state.recovery_percentage == pytest.approx(25)
        assert state.do_not_disturb
        assert state.notifications
        assert state.is_day

        weather = {e.key: e for e in state.weather_cluster}
        assert weather['weather_icon'].icon is IconId.PARTLY_CLOUDY
        assert weather['temperature'].text == '17°'
        assert weather['weather_details'].text == '30% UV 4'

        standard = {e.key: e for e in state.standard_cluster}
        assert standard['date'].text == 'MON 19'
        assert standard['heart_rate'].text == '150'
        assert standard['steps'].text == '4000'

    @pytest.mark.unit
    def test_standard_cluster_right_aligned_to_anchor(self, cache, providers, layout, device, now):
        cache.refresh(providers, now)
        state = cache.derive(layout, device.text_width, 0, 'MON 19', True)
        anchor_x, anchor_y = layout.anchors[Anchor.STANDARD_GROUP]
        for element in state.standard_cluster:
            assert element.x + device.text_width(element.text, element.size) == pytest.approx(anchor_x)
        heart_rate = [e for e in state.standard_cluster if e.key == 'heart_rate'][0]
        assert heart_rate.y == pytest.approx(anchor_y)

    @pytest.mark.unit
    def test_burn_in_offset_moves_clusters_outward(self, cache, providers, layout, device, now):
        cache.refresh(providers, now)
        still = cache.derive(layout, device.text_width, 0, 'MON 19', True)
        shifted = cache.derive(layout, device.text_width, 1, 'MON 19', True)
        assert shifted.standard_cluster[0].x == pytest.approx(still.standard_cluster[0].x + 1)
        assert shifted.weather_cluster[0].x == pytest.approx(still.weather_cluster[0].x - 1)

    @pytest.mark.unit
    def test_missing_data_degrades_to_placeholders(self, cache, layout, device, now):
        cache.refresh(ProviderSet(), now)
        state = cache.derive(layout, device.text_width, 0, 'MON 19', False)
        assert state.progress == []
        assert state.recovery_percentage is None
        assert state.weather_cluster == []
        assert not state.do_not_disturb
        texts = {e.key: e.text for e in state.standard_cluster}
        assert texts['heart_rate'] == PLACEHOLDER
        assert texts['steps'] == PLACEHOLDER

    @pytest.mark.unit
    def test_night_swaps_clear_sky_icon(self, cache, weather, layout, device, now):
        cache.refresh(ProviderSet(weather=StubProvider(replace(weather, condition='Clear'))), now)
        state = cache.derive(layout, device.text_width, 0, 'MON 19', False)
        assert state.weather_cluster[0].icon is IconId.CLEAR_NIGHT
