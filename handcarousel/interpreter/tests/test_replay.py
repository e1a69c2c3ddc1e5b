import math

import pytest

from handcarousel.core.services import TrackingUnavailable
from handcarousel.core.types import Classification, EventType, InputSource
from handcarousel.interpreter.selection import SelectionState
from handcarousel.interpreter.state_machine import CarouselEngine

from conftest import RecordingNavigator, closed, make_items, pt, sample


def of_type(events, kind):
    return [e for e in events if e.type == kind]


def replay(engine, samples):
    out = []
    for s in samples:
        out.extend(engine.on_gesture_sample(s))
    return out


@pytest.mark.parametrize("n", [2, 3, 5, 7])
def test_advance_index_wraps(make_engine, n):
    engine = make_engine(n=n, selectable=())
    assert engine.angle_step == pytest.approx(360.0 / n)
    t = 0
    for k in range(1, 2 * n + 2):
        engine.advance(t_ms=t)
        t += 10
        assert engine.current_index == k % n


def test_retreat_from_zero_wraps_to_last(make_engine):
    engine = make_engine()
    engine.retreat(t_ms=0)
    assert engine.current_index == 4
    engine.step(5000)
    assert engine.rotation_angle == pytest.approx(72.0)


def test_end_to_end_advance_swipe_pull_select(make_engine, nav, fx):
    engine = make_engine(n=5, selectable=(2,))
    assert engine.start_tracking()
    assert engine.rotation_angle == 0.0 and engine.current_index == 0

    engine.advance(t_ms=0)
    engine.step(3000)
    assert engine.rotation_angle == pytest.approx(-72.0)
    assert engine.current_index == 1

    swipes_before = fx.count("swipe")
    events = replay(engine, [sample(3000, x=0.5), sample(3016, x=0.8)])
    assert len(of_type(events, EventType.ADVANCE)) == 1
    assert engine.current_index == 2
    assert fx.count("swipe") == swipes_before + 1

    events = replay(engine, [
        closed(3100, x=0.8, y=0.5),
        closed(3150, x=0.8, y=0.6),
        closed(3200, x=0.8, y=0.7),
        closed(3250, x=0.8, y=0.72),
    ])
    selects = of_type(events, EventType.SELECT)
    assert len(selects) == 1
    assert selects[0].target == "/play/2"
    assert nav.calls == ["/play/2"]
    assert fx.count("drop") == 1


def test_tremor_below_threshold_never_swipes(make_engine):
    engine = make_engine()
    engine.start_tracking()
    samples = [sample(i * 16, x=0.5 + 0.1 * math.sin(i * 0.7)) for i in range(400)]
    events = replay(engine, samples)
    assert not of_type(events, EventType.ADVANCE)
    assert not of_type(events, EventType.RETREAT)
    assert engine.current_index == 0


def test_one_swipe_per_crossing_despite_continued_motion(make_engine, fx):
    engine = make_engine()
    engine.start_tracking()
    samples = [sample(0, x=0.5), sample(16, x=0.8)]
    # keep sweeping right for the next ~500ms and beyond
    samples += [sample(16 + 16 * i, x=min(1.0, 0.8 + 0.01 * i)) for i in range(1, 60)]
    events = replay(engine, samples)
    advances = of_type(events, EventType.ADVANCE)
    assert len(advances) == 1
    assert advances[0].t_ms == 16
    assert fx.count("swipe") == 1


def test_leftward_swipe_retreats(make_engine):
    engine = make_engine()
    engine.start_tracking()
    events = replay(engine, [sample(0, x=0.5), sample(16, x=0.2)])
    assert [e.type for e in events] == [EventType.RETREAT]
    assert engine.current_index == 4


def test_closed_fist_does_not_swipe(make_engine):
    engine = make_engine()
    engine.start_tracking()
    events = replay(engine, [closed(0, x=0.5), closed(16, x=0.9), closed(32, x=0.1)])
    assert not of_type(events, EventType.ADVANCE)
    assert not of_type(events, EventType.RETREAT)


def test_select_not_repeated_within_cooldown(make_engine, nav):
    engine = make_engine(selectable=(0,))
    engine.start_tracking()

    events = replay(engine, [closed(0, y=0.5), closed(50, y=0.7)])
    assert len(of_type(events, EventType.SELECT)) == 1

    # re-cross inside the 2s window
    events = replay(engine, [sample(100), closed(150, y=0.5), closed(200, y=0.7), closed(1500, y=0.8)])
    assert not of_type(events, EventType.SELECT)
    assert nav.calls == ["/play/0"]

    engine.step(700)
    assert engine.pull_distance == pytest.approx(1200.0)

    engine.step(2100)
    assert engine.pull_distance == 0.0

    events = replay(engine, [sample(2200), closed(2250, y=0.5), closed(2300, y=0.7)])
    assert len(of_type(events, EventType.SELECT)) == 1
    assert nav.calls == ["/play/0", "/play/0"]


def test_locked_item_pull_is_resisted_and_rejected(make_engine, nav, fx):
    engine = make_engine(selectable=())
    engine.start_tracking()

    events = replay(engine, [closed(0, y=0.5)])
    for k in range(1, 13):
        dy = 0.04 * k
        events += engine.on_gesture_sample(closed(16 * k, y=0.5 + dy))
        raw = dy * 1500.0
        assert engine.pull_distance <= 50.0 + 0.1 * max(0.0, raw - 50.0) + 1e-6
        assert engine.is_grabbing

    rejected = of_type(events, EventType.REJECTED)
    assert len(rejected) == 1
    assert fx.count("rejected") == 1
    assert engine.notice(rejected[0].t_ms + 100) == "coming_soon"

    engine.on_gesture_sample(sample(300, y=0.9))
    assert not engine.is_grabbing
    engine.step(3300)
    assert engine.pull_distance == 0.0
    assert engine.notice(3300) is None
    assert nav.calls == []


def test_pointer_horizontal_drag_snaps_to_nearest(make_engine, fx):
    engine = make_engine()
    events = engine.on_pointer_down(pt(500, 300, 0))
    assert [e.type for e in events] == [EventType.GRAB]
    assert fx.count("grab") == 1
    assert engine.input_source == InputSource.POINTER

    engine.on_pointer_move(pt(600, 310, 20))
    assert engine.rotation_angle == pytest.approx(30.0)
    engine.on_pointer_move(pt(300, 310, 40))
    assert engine.rotation_angle == pytest.approx(-60.0)
    assert engine.current_index == 0  # index follows on release

    events = engine.on_pointer_up(pt(300, 310, 60))
    assert [e.type for e in events] == [EventType.SNAP]
    assert engine.current_index == 1
    assert fx.count("swipe") == 1
    assert engine.input_source == InputSource.NONE

    engine.step(4000)
    assert engine.rotation_angle == pytest.approx(-72.0)
    rem = math.fmod(abs(engine.rotation_angle), engine.angle_step)
    assert min(rem, engine.angle_step - rem) < 1e-9


def test_pointer_drag_back_to_start_plays_no_swipe(make_engine, fx):
    engine = make_engine()
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(560, 300, 20))     # +18 deg
    engine.on_pointer_up(pt(560, 300, 40))
    assert engine.current_index == 0
    assert fx.count("swipe") == 0


def test_pointer_pull_past_threshold_selects(make_engine, nav, fx):
    engine = make_engine(selectable=(0,))
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(505, 450, 30))
    assert engine.pull_distance == pytest.approx(150.0)

    events = engine.on_pointer_up(pt(505, 450, 60))
    assert [e.type for e in events] == [EventType.SELECT, EventType.SNAP]
    assert nav.calls == ["/play/0"]
    assert fx.count("drop") == 1

    engine.step(600)
    assert engine.pull_distance == pytest.approx(1200.0)


def test_pointer_pull_on_locked_item_rejects_and_springs_back(make_engine, nav, fx):
    engine = make_engine(selectable=())
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(500, 600, 30))
    assert engine.pull_distance == pytest.approx(50.0 + 250.0 * 0.1)

    events = engine.on_pointer_up(pt(500, 600, 60))
    assert of_type(events, EventType.REJECTED)
    assert fx.count("rejected") == 1
    engine.step(3000)
    assert engine.pull_distance == 0.0
    assert nav.calls == []


def test_pointer_short_pull_just_springs_back(make_engine, nav):
    engine = make_engine(selectable=(0,))
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(500, 380, 30))
    events = engine.on_pointer_up(pt(500, 380, 60))
    assert [e.type for e in events] == [EventType.SNAP]
    engine.step(3000)
    assert engine.pull_distance == 0.0
    assert nav.calls == []


def test_pointer_upward_motion_never_pulls(make_engine):
    engine = make_engine()
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(505, 100, 30))
    assert engine.pull_distance == 0.0


def test_pointer_select_respects_global_cooldown(make_engine, nav):
    engine = make_engine(selectable=(0, 1))
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_up(pt(500, 450, 30))
    assert nav.calls == ["/play/0"]

    engine.on_pointer_down(pt(500, 300, 500))
    engine.on_pointer_up(pt(500, 450, 530))
    assert nav.calls == ["/play/0"]

    engine.on_pointer_down(pt(500, 300, 2100))
    engine.on_pointer_up(pt(500, 450, 2130))
    assert nav.calls == ["/play/0", "/play/0"]


def test_pointer_drag_silences_gesture_channel(make_engine):
    engine = make_engine()
    engine.start_tracking()
    engine.on_pointer_down(pt(500, 300, 0))

    events = replay(engine, [sample(100, x=0.5), sample(116, x=0.8)])
    assert events == []
    assert engine.current_index == 0

    engine.on_pointer_up(pt(500, 300, 200))
    assert engine.input_source == InputSource.NONE

    # filter kept running during the drag: anchor is already at 0.8
    events = replay(engine, [sample(1000, x=0.8)])
    assert events == []
    events = replay(engine, [sample(1100, x=0.45)])
    assert [e.type for e in events] == [EventType.RETREAT]
    assert engine.current_index == 4


def test_fist_held_through_pointer_drag_stays_muted(make_engine, nav):
    engine = make_engine(selectable=(0,))
    engine.start_tracking()
    replay(engine, [closed(0, y=0.3)])
    assert engine.input_source == InputSource.GESTURE

    engine.on_pointer_down(pt(500, 300, 10))
    engine.on_pointer_up(pt(500, 300, 20))

    # stale fist far below its anchor must not select
    events = replay(engine, [closed(40, y=0.7), closed(60, y=0.8)])
    assert events == []
    assert nav.calls == []

    # opening and closing again re-arms the channel
    events = replay(engine, [sample(80), closed(100, y=0.5), closed(120, y=0.7)])
    assert len(of_type(events, EventType.SELECT)) == 1


def test_stop_tracking_resets_anchor_and_pull_keeps_rotation(make_engine):
    engine = make_engine(selectable=(1,))
    engine.start_tracking()
    replay(engine, [sample(0, x=0.5), sample(16, x=0.8)])
    engine.step(2000)
    angle = engine.rotation_angle

    replay(engine, [closed(2100, x=0.8, y=0.5), closed(2150, x=0.8, y=0.58)])
    assert engine.pull_distance == pytest.approx(120.0)

    engine.stop_tracking(t_ms=2200)
    assert not engine.is_tracking
    assert not engine.is_grabbing
    engine.step(5000)
    assert engine.pull_distance == 0.0
    assert engine.rotation_angle == pytest.approx(angle)

    # samples after stop are ignored
    assert replay(engine, [sample(5100, x=0.1), sample(5116, x=0.9)]) == []


def test_stop_tracking_leaves_pointer_pull_alone(make_engine):
    engine = make_engine(selectable=(0,))
    engine.start_tracking()
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(500, 380, 20))
    assert engine.pull_distance == pytest.approx(80.0)

    engine.stop_tracking(t_ms=40)
    engine.step(1040)
    assert engine.pull_distance == pytest.approx(80.0)
    assert engine.input_source == InputSource.POINTER
    assert engine.is_grabbing

    engine.on_pointer_up(pt(500, 380, 1100))
    engine.step(4000)
    assert engine.pull_distance == 0.0


def test_selection_state_visible_until_next_step(make_engine):
    engine = make_engine(selectable=(0,))
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_up(pt(500, 450, 20))
    assert engine.selection_state == SelectionState.FIRED
    engine.step(40)
    assert engine.selection_state == SelectionState.COOLDOWN

    engine.advance(t_ms=2100)
    assert engine.selection_state == SelectionState.IDLE
    engine.on_pointer_down(pt(500, 300, 2200))
    engine.on_pointer_up(pt(500, 450, 2220))
    assert engine.selection_state == SelectionState.REJECTED
    engine.step(2240)
    assert engine.selection_state == SelectionState.IDLE


def test_tracking_unavailable_degrades_to_pointer_only(fx):
    class DeniedTracker:
        classification = Classification.UNKNOWN
        hand_x = 0.5
        hand_y = 0.5
        is_tracking = False

        def start(self):
            raise TrackingUnavailable("permission denied")

        def stop(self):
            pass

    nav = RecordingNavigator()
    engine = CarouselEngine(make_items(), navigation=nav, feedback=fx, tracker=DeniedTracker())
    assert engine.start_tracking() is False
    assert not engine.is_tracking
    assert engine.on_gesture_sample(sample(0, x=0.9)) == []

    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(200, 300, 10))
    engine.on_pointer_up(pt(200, 300, 20))
    assert engine.current_index == 1


def test_broken_feedback_does_not_break_navigation(nav):
    class LoudFeedback:
        def on_grab(self):
            raise RuntimeError("no audio device")

        on_swipe = on_drop = on_rejected = on_grab

    engine = CarouselEngine(make_items(selectable=(0,)), navigation=nav, feedback=LoudFeedback())
    assert [e.type for e in engine.advance(t_ms=0)] == [EventType.ADVANCE]
    engine.retreat(t_ms=10)
    engine.on_pointer_down(pt(0, 0, 20))
    engine.on_pointer_up(pt(0, 200, 40))
    assert nav.calls == ["/play/0"]


def test_advance_redirects_inflight_snap(make_engine):
    engine = make_engine()
    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(400, 300, 20))    # -30 deg
    engine.on_pointer_up(pt(400, 300, 40))      # snapping back to 0
    engine.step(60)
    assert engine.rotation_angle != 0.0

    engine.advance(t_ms=70)
    engine.advance(t_ms=80)
    assert engine.current_index == 2
    engine.step(5000)
    assert engine.rotation_angle == pytest.approx(-144.0)


def test_item_poses_follow_rotation_and_pull(make_engine):
    engine = make_engine(selectable=(0,))
    poses = engine.item_poses()
    assert poses[0].angle == 0.0 and poses[0].opacity == 1.0 and poses[0].z_order == 1000
    assert poses[1].angle == pytest.approx(72.0)
    assert poses[1].brightness == pytest.approx(0.65)
    assert poses[2].opacity == 0.0
    assert poses[3].angle == pytest.approx(-144.0)

    engine.on_pointer_down(pt(500, 300, 0))
    engine.on_pointer_move(pt(500, 380, 10))
    poses = engine.item_poses()
    assert poses[0].offset_y == pytest.approx(80.0)
    assert poses[1].offset_y == 0.0


def test_engine_rejects_empty_carousel(nav):
    with pytest.raises(ValueError):
        CarouselEngine([], navigation=nav)
