from datetime import datetime, timedelta, timezone

from chimera_progression.activities import ActivityStatus, Expedition, ExpeditionService, ExpeditionType
from chimera_progression.events import ExpeditionCompleted, ResourceGained
from chimera_progression.models import ResourceKind
from chimera_progression.rewards import RewardResolver
from chimera_progression.state import new_player

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_forest_scout_becomes_ready_exactly_at_duration() -> None:
    expedition = Expedition(type=ExpeditionType.FOREST_SCOUT)
    assert expedition.start(T0) is True

    assert expedition.is_ready_to_complete(T0 + timedelta(seconds=899)) is False
    assert expedition.status(T0 + timedelta(seconds=899)) == ActivityStatus.ACTIVE
    assert expedition.is_ready_to_complete(T0 + timedelta(seconds=900)) is True
    assert expedition.status(T0 + timedelta(seconds=900)) == ActivityStatus.READY


def test_start_on_running_expedition_is_a_noop() -> None:
    expedition = Expedition(type=ExpeditionType.RIVER_RUN)
    expedition.start(T0)

    assert expedition.start(T0 + timedelta(minutes=5)) is False
    assert expedition.start_time == T0


def test_complete_before_end_time_is_a_noop() -> None:
    expedition = Expedition(type=ExpeditionType.MOUNTAIN_SURVEY)
    expedition.start(T0)

    assert expedition.complete(T0 + timedelta(minutes=29)) is False
    assert expedition.status(T0 + timedelta(minutes=29)) == ActivityStatus.ACTIVE
    assert expedition.complete(T0 + timedelta(minutes=30)) is True
    assert expedition.status() == ActivityStatus.COMPLETED


def test_progress_is_clamped_and_non_decreasing() -> None:
    expedition = Expedition(type=ExpeditionType.DESERT_CARAVAN)
    assert expedition.progress(T0) == 0.0
    expedition.start(T0)

    samples = [expedition.progress(T0 + timedelta(minutes=m)) for m in (-5, 0, 15, 30, 60, 90)]

    assert samples == sorted(samples)
    assert samples[0] == 0.0
    assert samples[2] == 0.25
    assert samples[-1] == 1.0
    assert expedition.remaining(T0 + timedelta(minutes=90)) == 0.0


def test_service_deducts_costs_and_pays_out_once() -> None:
    state = new_player("Scout", now=T0)
    service = ExpeditionService(RewardResolver())
    expedition = state.get_expedition(ExpeditionType.FOREST_SCOUT)

    assert service.start(expedition, state, now=T0) is True
    assert state.ledger.quantity(ResourceKind.RATIONS) == 8
    assert state.ledger.quantity(ResourceKind.TOOLS) == 4

    report, events = service.collect_rewards(expedition, state, now=T0 + timedelta(minutes=10))
    assert report is None and events == []

    report, events = service.collect_rewards(expedition, state, now=T0 + timedelta(minutes=15))
    assert report is not None
    assert state.ledger.quantity(ResourceKind.INTEL) == 5
    assert state.ledger.quantity(ResourceKind.RATIONS) == 10
    assert ResourceGained(ResourceKind.INTEL, 5) in events
    assert events[-1] == ExpeditionCompleted(expedition_id=expedition.id, expedition_type="Forest Scout")
    assert state.expedition_reports == [report]

    again, events = service.collect_rewards(expedition, state, now=T0 + timedelta(minutes=20))
    assert again is None and events == []
    assert state.ledger.quantity(ResourceKind.INTEL) == 5


def test_service_refuses_start_without_resources() -> None:
    state = new_player("Scout", now=T0)
    service = ExpeditionService(RewardResolver())
    expedition = state.get_expedition(ExpeditionType.RIVER_RUN)

    assert service.can_start(expedition, state.ledger) is False
    assert service.start(expedition, state, now=T0) is False
    assert expedition.status(T0) == ActivityStatus.IDLE
    assert state.ledger.quantity(ResourceKind.RATIONS) == 10
