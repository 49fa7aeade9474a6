from travel_quest.config import TimelineConfig
from travel_quest.cues import CAMERA_CLICK, active_cues, click_frame, event_flags, schedule_cues
from travel_quest.timeline import resolve_phase, total_duration


def test_click_fires_when_transform_in_completes(config):
    assert click_frame(0, config) == 45 + 50 + 15
    assert click_frame(1, config) == 45 + 135 + 50 + 15


def test_schedule_has_one_cue_per_segment(config):
    cues = schedule_cues(3, config)
    assert [c.segment_index for c in cues] == [0, 1, 2]
    assert all(c.kind == CAMERA_CLICK for c in cues)
    assert all(c.duration_frames == config.click_cue_frames for c in cues)
    assert schedule_cues(0, config) == ()


def test_cue_fires_exactly_once_per_segment(config):
    segments = 2
    fired = [
        frame
        for frame in range(total_duration(segments, config))
        if event_flags(frame, resolve_phase(frame, segments, config), segments, config).click_fires
    ]
    assert fired == [click_frame(0, config), click_frame(1, config)]


def test_querying_the_same_frame_twice_is_idempotent(config):
    frame = click_frame(1, config)
    state = resolve_phase(frame, 2, config)
    first = event_flags(frame, state, 2, config)
    second = event_flags(frame, state, 2, config)
    assert first == second
    assert first.click_fires and first.click_playing and first.flash_visible and first.photo_visible


def test_click_window(config):
    frame = click_frame(0, config)
    assert [c.segment_index for c in active_cues(frame + 59, 2, config)] == [0]
    assert active_cues(frame + 60, 2, config) == []
    assert active_cues(frame - 1, 2, config) == []


def test_suppressed_arrival_has_no_effects(config):
    frame = click_frame(0, config)
    flags = event_flags(frame, resolve_phase(frame, 2, config), 2, config, suppressed={0})
    assert not any(vars(flags).values())


def test_suppressed_segments_are_left_out_of_the_schedule(config):
    cues = schedule_cues(3, config, suppressed={1})
    assert [c.segment_index for c in cues] == [0, 2]
    assert active_cues(click_frame(1, config), 3, config, suppressed={1}) == []


def test_suppressed_click_never_plays_in_later_phases():
    config = TimelineConfig(click_cue_frames=100)
    terminal = 45 + 2 * 135 + 5
    state = resolve_phase(terminal, 2, config)
    assert event_flags(terminal, state, 2, config).click_playing
    assert not event_flags(terminal, state, 2, config, suppressed={1}).click_playing


def test_shutter_flags_follow_phases(config):
    start = 45 + 50
    closing = event_flags(start, resolve_phase(start, 2, config), 2, config)
    assert closing.shutter_closing and not closing.photo_visible
    opening = event_flags(start + 80, resolve_phase(start + 80, 2, config), 2, config)
    assert opening.shutter_opening and opening.photo_visible and not opening.click_playing
