"""Tests for button decoding and run extraction."""

import math

from demoreel.analysis.buttons import (
    ButtonRun,
    TickSample,
    build_runs_for_clip,
    decode_buttons,
    tick_samples_from_records,
)
from demoreel.core.constants import TRACKED_BUTTONS, Button


def sample(tick, *buttons):
    return TickSample(tick, frozenset(buttons))


class TestButtonTable:
    """Tests for the static button bit table."""

    def test_twenty_four_buttons(self):
        """The table names 24 inputs."""
        assert len(list(Button)) == 24

    def test_bit_twelve_unused(self):
        """Bit 12 is the one gap in bits 0-24."""
        bits = {int(b).bit_length() - 1 for b in Button}
        assert bits == set(range(25)) - {12}

    def test_tracked_subset(self):
        """Tracked buttons are all in the table."""
        assert len(TRACKED_BUTTONS) == 11
        assert all(isinstance(b, Button) for b in TRACKED_BUTTONS)


class TestDecodeButtons:
    """Tests for decode_buttons."""

    def test_single_bit(self):
        """Bit 3 is IN_FORWARD."""
        assert decode_buttons(8) == {Button.IN_FORWARD}

    def test_multiple_bits(self):
        """All set bits are decoded."""
        raw = Button.IN_ATTACK | Button.IN_JUMP | Button.IN_RELOAD
        assert decode_buttons(int(raw)) == {Button.IN_ATTACK, Button.IN_JUMP, Button.IN_RELOAD}

    def test_numeric_string(self):
        """Parser values may arrive as strings."""
        assert decode_buttons("9") == {Button.IN_ATTACK, Button.IN_FORWARD}

    def test_unknown_bits_ignored(self):
        """Bit 12 and high bits (IN_SCORE) decode to nothing."""
        assert decode_buttons((1 << 12) | (1 << 33)) == frozenset()

    def test_empty_values(self):
        """None, empty string and zero are no buttons."""
        assert decode_buttons(None) == frozenset()
        assert decode_buttons("") == frozenset()
        assert decode_buttons(0) == frozenset()

    def test_from_raw(self):
        """TickSample.from_raw decodes the bitmask."""
        s = TickSample.from_raw(740, 1 << 16)
        assert s.tick == 740
        assert s.buttons == {Button.IN_SPEED}


class TestTickSamplesFromRecords:
    """Tests for building samples from parse_ticks rows."""

    def test_rows(self):
        """Rows become samples in input order."""
        rows = [{"tick": 1, "buttons": 8, "steamid": "1"}, {"tick": 2, "buttons": 0}]
        samples = tick_samples_from_records(rows)
        assert samples == [sample(1, Button.IN_FORWARD), sample(2)]

    def test_nan_buttons(self):
        """Missing button values decode to nothing."""
        samples = tick_samples_from_records([{"tick": 5, "buttons": math.nan}])
        assert samples == [sample(5)]


class TestBuildRunsForClip:
    """Tests for build_runs_for_clip."""

    def test_press_and_release(self):
        """Forward held from 740 to 800 in [740, 1000] is 0 to 0.9375s."""
        samples = [sample(740, Button.IN_FORWARD), sample(800)]
        runs = build_runs_for_clip(samples, 740, 1000, tick_rate=64)
        assert runs == [ButtonRun(Button.IN_FORWARD, 0.0, 0.9375)]

    def test_open_run_closed_at_clip_end(self):
        """A button still held closes at the clip duration."""
        runs = build_runs_for_clip([sample(740, Button.IN_DUCK)], 740, 1000, tick_rate=64)
        assert runs == [ButtonRun(Button.IN_DUCK, 0.0, (1000 - 740) / 64)]

    def test_no_samples_in_window(self):
        """Samples outside the clip yield no runs."""
        samples = [sample(10, Button.IN_FORWARD), sample(2000, Button.IN_FORWARD)]
        assert build_runs_for_clip(samples, 740, 1000) == []

    def test_empty_samples(self):
        """No samples, no runs."""
        assert build_runs_for_clip([], 740, 1000) == []

    def test_window_bounds_inclusive(self):
        """Samples on the start and end ticks are used."""
        samples = [sample(740, Button.IN_JUMP), sample(1000)]
        runs = build_runs_for_clip(samples, 740, 1000, tick_rate=64)
        assert runs == [ButtonRun(Button.IN_JUMP, 0.0, 4.0625)]

    def test_unsorted_samples(self):
        """Samples are sorted by tick before scanning."""
        samples = [sample(804), sample(772, Button.IN_BACK), sample(740)]
        runs = build_runs_for_clip(samples, 740, 1000, tick_rate=64)
        assert runs == [ButtonRun(Button.IN_BACK, 0.5, 1.0)]

    def test_untracked_buttons_ignored(self):
        """Buttons outside the tracked set never produce runs."""
        samples = [sample(740, Button.IN_WALK, Button.IN_ZOOM), sample(800)]
        assert build_runs_for_clip(samples, 740, 1000) == []

    def test_custom_tracked_set(self):
        """Only the requested buttons produce runs."""
        samples = [sample(740, Button.IN_WALK, Button.IN_FORWARD), sample(804)]
        runs = build_runs_for_clip(samples, 740, 1000, tracked=[Button.IN_WALK])
        assert runs == [ButtonRun(Button.IN_WALK, 0.0, 1.0)]

    def test_press_on_last_tick_dropped(self):
        """A press starting on the final tick has no length and is not emitted."""
        samples = [sample(990), sample(1000, Button.IN_ATTACK)]
        assert build_runs_for_clip(samples, 740, 1000) == []

    def test_repeated_presses(self):
        """Separate presses of one button are separate, ordered runs."""
        samples = [
            sample(740, Button.IN_ATTACK),
            sample(772),
            sample(804, Button.IN_ATTACK),
            sample(836),
        ]
        runs = build_runs_for_clip(samples, 740, 1000, tick_rate=64)
        assert runs == [
            ButtonRun(Button.IN_ATTACK, 0.0, 0.5),
            ButtonRun(Button.IN_ATTACK, 1.0, 1.5),
        ]

    def test_sparse_samples_hold_state(self):
        """A gap between samples keeps the button held."""
        samples = [sample(740, Button.IN_FORWARD), sample(868, Button.IN_FORWARD), sample(932)]
        runs = build_runs_for_clip(samples, 740, 1000, tick_rate=64)
        assert runs == [ButtonRun(Button.IN_FORWARD, 0.0, 3.0)]

    def test_run_validity(self):
        """Runs stay inside the clip and never overlap per button."""
        pattern = [Button.IN_FORWARD, Button.IN_MOVELEFT, Button.IN_JUMP, Button.IN_ATTACK]
        samples = [
            TickSample(t, frozenset(b for i, b in enumerate(pattern) if (t // 7 + i) % 3 == 0))
            for t in range(700, 1100, 3)
        ]
        start, end = 740, 1000
        duration = (end - start) / 64
        runs = build_runs_for_clip(samples, start, end, tick_rate=64)

        assert runs
        for run in runs:
            assert 0 <= run.t0 < run.t1 <= duration
        for button in pattern:
            own = sorted((r for r in runs if r.button == button), key=lambda r: r.t0)
            for a, b in zip(own, own[1:]):
                assert a.t1 <= b.t0

    def test_deterministic(self):
        """Same input, same runs."""
        samples = [sample(740, Button.IN_FORWARD, Button.IN_SPEED), sample(800, Button.IN_SPEED)]
        assert build_runs_for_clip(samples, 740, 1000) == build_runs_for_clip(samples, 740, 1000)

    def test_run_name(self):
        """ButtonRun.name is the input name."""
        assert ButtonRun(Button.IN_FORWARD, 0.0, 1.0).name == "IN_FORWARD"

    def test_duration_uses_tick_rate(self):
        """Local seconds use the given tick rate."""
        runs = build_runs_for_clip([sample(0, Button.IN_USE), sample(128)], 0, 256, tick_rate=128)
        assert runs == [ButtonRun(Button.IN_USE, 0.0, 1.0)]
