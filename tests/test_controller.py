import pytest

from adaptive_signal.config import ControllerConfig, SessionConfig
from adaptive_signal.errors import InvalidConfiguration
from adaptive_signal.model.controller import SignalController
from adaptive_signal.model.lanes import Lane, SignalAspect, parse_lane

N, S, E, W = Lane.NORTH, Lane.SOUTH, Lane.EAST, Lane.WEST


def test_default_config_is_valid():
    ctrl = SignalController()
    assert ctrl.config == ControllerConfig(60, 10, 60, 3, 2)


@pytest.mark.parametrize("kwargs", [
    {"min_green": 30, "max_green": 30},
    {"min_green": 40, "max_green": 30},
    {"cycle_length": 59},
    {"yellow_time": 0},
    {"all_red_time": -1},
    {"cycle_length": "60"},
    {"min_green": True},
    {"max_green": float("inf")},
])
def test_invalid_configs_rejected(kwargs):
    with pytest.raises(InvalidConfiguration):
        ControllerConfig(**kwargs).validate(4)


def test_update_config_applies_partial_changes():
    ctrl = SignalController()
    cfg = ctrl.update_config(cycle_length=90, max_green=50)

    assert cfg is ctrl.config
    assert ctrl.config == ControllerConfig(90, 10, 50, 3, 2)


def test_failed_update_keeps_previous_config():
    ctrl = SignalController()
    ctrl.update_config(cycle_length=90)
    before = ctrl.config

    # the first change alone would be valid; the second breaks min < max
    with pytest.raises(InvalidConfiguration):
        ctrl.update_config(cycle_length=120, min_green=70)

    assert ctrl.config is before


def test_unknown_field_rejected():
    ctrl = SignalController()
    with pytest.raises(InvalidConfiguration):
        ctrl.update_config(cycleLength=90)
    assert ctrl.config == ControllerConfig()


def test_construction_validates():
    with pytest.raises(InvalidConfiguration):
        SignalController(ControllerConfig(cycle_length=10))


def test_signal_state_marks_largest_allocation():
    ctrl = SignalController()
    signals = ctrl.signal_state({N: 10, S: 12, E: 30, W: 8})

    assert signals[E] is SignalAspect.ACTIVE
    assert [l for l, a in signals.items() if a is SignalAspect.ACTIVE] == [E]


def test_signal_state_ties_go_to_first_lane():
    ctrl = SignalController()
    signals = ctrl.signal_state({N: 10, S: 20, E: 20, W: 20})

    assert signals == {
        N: SignalAspect.INACTIVE,
        S: SignalAspect.ACTIVE,
        E: SignalAspect.INACTIVE,
        W: SignalAspect.INACTIVE,
    }


def test_compute_green_times_uses_current_config():
    ctrl = SignalController()
    ctrl.update_config(cycle_length=100, min_green=5)

    assert ctrl.compute_green_times({N: 80, S: 20, E: 60, W: 40}) == {N: 32, S: 8, E: 24, W: 16}


@pytest.mark.parametrize("value, lane", [
    (Lane.EAST, E), ("west", W), (" South ", S), (0, N),
])
def test_parse_lane(value, lane):
    assert parse_lane(value) is lane


@pytest.mark.parametrize("value", ["up", 4, True, 1.0, None])
def test_parse_lane_rejects(value):
    with pytest.raises(ValueError):
        parse_lane(value)


def test_session_config_to_dict_nests_controller():
    cfg = SessionConfig(label="rush")
    d = cfg.to_dict()

    assert d["controller"]["cycle_length"] == 60.0
    assert d["label"] == "rush"
    assert d["timer"] == "thread"
