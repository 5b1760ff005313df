"""Tests for the sequence builder state machine."""

import pytest

from demoreel.analysis.events import GameEvent, MatchEndNotFoundError, normalize_events
from demoreel.analysis.sequences import Sequence, build_sequences, find_sequences
from demoreel.core.constants import EventKind

PLAYER = "76561198055776914"
OTHER = "76561198000000001"


def spawn(tick, steam_id=PLAYER, **kwargs):
    return GameEvent(EventKind.PLAYER_SPAWN, tick, steam_id, **kwargs)


def death(tick, steam_id=PLAYER, **kwargs):
    return GameEvent(EventKind.PLAYER_DEATH, tick, steam_id, **kwargs)


def round_end(tick, **kwargs):
    return GameEvent(EventKind.ROUND_OFFICIALLY_ENDED, tick, **kwargs)


def match_won(tick, **kwargs):
    return GameEvent(EventKind.MATCH_WON, tick, **kwargs)


def pairs(sequences):
    return [s.as_pair() for s in sequences]


@pytest.fixture
def full_match():
    """Three rounds: die in round 1, survive round 2, last round to match end."""
    return [
        spawn(50, is_warmup=True),
        death(80, is_warmup=True),
        spawn(100),
        spawn(100, OTHER),
        death(1000),
        death(1200, OTHER),
        round_end(2000),
        spawn(2100),
        round_end(4000),
        round_end(4000),
        spawn(4100),
        death(4900, OTHER),
        match_won(6000),
    ]


class TestSequence:
    """Tests for the Sequence dataclass."""

    def test_duration(self):
        """Durations in ticks and seconds."""
        seq = Sequence(740, 1192)
        assert seq.duration_ticks == 452
        assert seq.duration_seconds(64) == pytest.approx(7.0625)

    def test_as_pair(self):
        """as_pair returns (start, end)."""
        assert Sequence(1, 2).as_pair() == (1, 2)


class TestBuildSequences:
    """Tests for build_sequences on already-tagged events."""

    def test_empty_events(self):
        """No events, no sequences."""
        assert build_sequences([]) == []

    def test_death_closes_with_padding(self):
        """Spawn at 100 opens at 740, death at 1000 closes at 1192."""
        result = build_sequences([spawn(100), death(1000)], tick_rate=64)
        assert pairs(result) == [(740, 1192)]

    def test_round_end_closes_without_padding(self):
        """A surviving player's window ends on the adjusted round-end tick."""
        events = normalize_events([spawn(100), round_end(2000)], PLAYER)
        result = build_sequences(events, tick_rate=64)
        assert pairs(result) == [(740, 1999)]

    def test_last_round_runs_to_match_end(self):
        """A last-round event closes the window at the match-won tick."""
        events = [spawn(100, is_last_round=True), match_won(5000, is_last_round=True)]
        assert pairs(build_sequences(events)) == [(740, 5000)]

    def test_last_round_death_does_not_close_early(self):
        """In the last round a death extends to the match end instead."""
        events = [
            spawn(3100, is_last_round=True),
            death(4000, is_last_round=True),
            match_won(6000, is_last_round=True),
        ]
        assert pairs(build_sequences(events)) == [(3740, 6000)]

    def test_last_round_without_match_won_raises(self):
        """There is no valid end tick without a match-won event."""
        events = [spawn(100, is_last_round=True), death(1000, is_last_round=True)]
        with pytest.raises(MatchEndNotFoundError):
            build_sequences(events)

    def test_non_spawn_events_ignored_when_idle(self):
        """Deaths and round ends outside a window do nothing."""
        events = [death(500), round_end(999), spawn(1000), death(2000)]
        assert pairs(build_sequences(events)) == [(1640, 2192)]

    def test_respawn_while_open_restarts_window(self):
        """A second spawn before any close moves the window start."""
        result = build_sequences([spawn(100), spawn(200), death(2000)])
        assert pairs(result) == [(840, 2192)]

    def test_empty_window_dropped(self):
        """Dying inside the spawn delay yields no sequence."""
        result = build_sequences([spawn(100), death(300), spawn(2000), death(3000)])
        assert pairs(result) == [(2640, 3192)]

    def test_custom_timing(self):
        """Spawn delay and death padding are configurable."""
        result = build_sequences(
            [spawn(100), death(1000)], tick_rate=64, spawn_delay_seconds=5, death_padding_seconds=0
        )
        assert pairs(result) == [(420, 1000)]

    def test_tick_rate_scales_padding(self):
        """Padding is expressed in seconds of ticks."""
        result = build_sequences([spawn(0), death(5000)], tick_rate=128)
        assert pairs(result) == [(1280, 5384)]


class TestFindSequences:
    """Tests for the normalize -> tag -> build pipeline."""

    def test_empty_events(self):
        """An empty demo produces no sequences and no error."""
        assert find_sequences([], PLAYER) == []

    def test_single_round(self):
        """Spawn followed by match end spans to the match end."""
        result = find_sequences([spawn(100), match_won(5000)], PLAYER)
        assert pairs(result) == [(740, 5000)]

    def test_full_match(self, full_match):
        """Death, survival and last round are each handled."""
        result = find_sequences(full_match, PLAYER)
        assert pairs(result) == [(740, 1192), (2740, 3999), (4740, 6000)]

    def test_missing_match_won_raises(self):
        """A truncated demo fails loudly."""
        with pytest.raises(MatchEndNotFoundError):
            find_sequences([spawn(100), death(1000), round_end(2000)], PLAYER)

    def test_other_player_gets_own_windows(self, full_match):
        """Sequences depend on the target player."""
        result = find_sequences(full_match, OTHER)
        assert pairs(result) == [(740, 1392)]

    def test_deterministic(self, full_match):
        """Repeated runs produce identical windows."""
        assert find_sequences(full_match, PLAYER) == find_sequences(full_match, PLAYER)

    def test_windows_do_not_overlap(self, full_match):
        """Each window ends before the next one starts."""
        result = find_sequences(full_match, PLAYER)
        for current, following in zip(result, result[1:]):
            assert current.end_tick <= following.start_tick
        assert all(s.start_tick < s.end_tick for s in result)

    def test_events_after_final_window_ignored(self):
        """Appending events after the last-round close changes nothing."""
        base = [spawn(100), round_end(2000), spawn(2100), match_won(6000)]
        extended = base + [spawn(6100), death(7000), round_end(8000)]
        assert find_sequences(extended, PLAYER) == find_sequences(base, PLAYER)
