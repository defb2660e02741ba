from __future__ import annotations

import math

import numpy as np
import pytest

from survivor_sim.data import BalanceMetrics, DraftConfig, EventType, MonteCarloConfig, PinnedPicks, PointScheme
from survivor_sim.exceptions import DraftCapacityError
from survivor_sim.monte_carlo import (
    _chunk_sizes,
    _run_chunk,
    average_balance_metrics,
    run_monte_carlo,
    score_distribution,
)

from season_builders import make_season, varied_season


def _config(num_simulations: int = 50, **draft_kwargs) -> MonteCarloConfig:
    draft = DraftConfig(
        player_count=draft_kwargs.pop("player_count", 4),
        picks_per_player=draft_kwargs.pop("picks_per_player", 2),
        **draft_kwargs,
    )
    return MonteCarloConfig(num_simulations=num_simulations, draft_config=draft)


def test_score_distribution_uses_nearest_rank() -> None:
    dist = score_distribution([10, 1, 9, 2, 8, 3, 7, 4, 6, 5])

    assert dist.mean == 5.5
    assert dist.median == 6
    assert dist.p25 == 3
    assert dist.p75 == 8
    assert dist.min == 1
    assert dist.max == 10
    # population std of 1..10
    assert dist.std_dev == round(math.sqrt(8.25), 2)


def test_score_distribution_single_value() -> None:
    dist = score_distribution([7])
    assert (dist.mean, dist.median, dist.std_dev, dist.p25, dist.p75) == (7, 7, 0, 7, 7)


def test_score_distribution_raises_when_empty() -> None:
    with pytest.raises(ValueError):
        score_distribution([])


def test_chunk_sizes_spread_remainder_over_first_chunks() -> None:
    assert _chunk_sizes(10, 3) == [4, 3, 3]
    assert _chunk_sizes(4, 4) == [1, 1, 1, 1]


def test_run_monte_carlo_is_deterministic_for_a_seed() -> None:
    season = varied_season()
    config = _config(40)

    a = run_monte_carlo(season, config, rng=np.random.default_rng(7))
    b = run_monte_carlo(season, config, rng=np.random.default_rng(7))

    assert a == b


def test_run_monte_carlo_summary_fields() -> None:
    season = varied_season()
    result = run_monte_carlo(season, _config(30), rng=np.random.default_rng(1))

    assert result.season_number == 1
    assert result.num_simulations == 30
    assert (result.player_count, result.picks_per_player) == (4, 2)
    assert len(result.contestant_stats) == 8

    points = [s.total_points for s in result.contestant_stats]
    assert points == sorted(points, reverse=True)
    assert result.contestant_stats[0].contestant_id == "C1"

    assert math.isclose(sum(s.draft_rate for s in result.contestant_stats), 1.0, abs_tol=0.01)
    for s in result.contestant_stats:
        if s.draft_rate > 0:
            assert 1 <= s.avg_team_rank <= 4

    assert result.score_distribution.min <= result.score_distribution.median <= result.score_distribution.max


def test_undrafted_contestant_has_zero_rate_and_rank() -> None:
    season = varied_season()
    # one pick from eight contestants, always the pinned one
    config = MonteCarloConfig(
        num_simulations=10,
        draft_config=DraftConfig(player_count=1, picks_per_player=1),
        pinned_picks=PinnedPicks(0, ("C4",)),
    )
    result = run_monte_carlo(season, config, rng=np.random.default_rng(0))
    stats = {s.contestant_id: s for s in result.contestant_stats}

    assert stats["C4"].draft_rate == 1.0
    assert stats["C1"].draft_rate == 0
    assert stats["C1"].avg_team_rank == 0


def test_pinned_picks_are_on_the_pinned_roster_every_run() -> None:
    season = varied_season()
    config = MonteCarloConfig(
        num_simulations=25,
        draft_config=DraftConfig(player_count=3, picks_per_player=1, max_owners_per_contestant=1),
        pinned_picks=PinnedPicks(0, ("C8",)),
    )
    result = run_monte_carlo(season, config, rng=np.random.default_rng(11))
    stats = {s.contestant_id: s for s in result.contestant_stats}

    # drafted once per run out of three slots
    assert stats["C8"].draft_rate == 0.333
    # -10 is below anything the other teams can draft
    assert stats["C8"].avg_team_rank == 3


def test_scheme_is_used_for_stats_and_balance() -> None:
    season = varied_season()
    scheme = PointScheme.from_overrides({"QUIT": 100})
    config = MonteCarloConfig(num_simulations=5, draft_config=DraftConfig(2, 2), scheme=scheme)
    result = run_monte_carlo(season, config, rng=np.random.default_rng(2))

    assert result.contestant_stats[0].contestant_id == "C8"
    assert result.contestant_stats[0].total_points == 100
    assert EventType.QUIT in result.balance.event_contribution


def test_run_monte_carlo_checks_capacity_first() -> None:
    season = make_season(n=3)
    with pytest.raises(DraftCapacityError):
        run_monte_carlo(season, _config(5, max_owners_per_contestant=1), rng=np.random.default_rng(0))


def test_merging_chunks_matches_pooled_counts() -> None:
    season = varied_season()
    config = _config()
    a = _run_chunk(season, config, 10, 123)
    b = _run_chunk(season, config, 7, 456)

    expected_counts = dict(a.draft_counts)
    for cid, n in b.draft_counts.items():
        expected_counts[cid] = expected_counts.get(cid, 0) + n
    expected_totals = a.team_totals + b.team_totals
    last = b.last_result

    a.merge(b)

    assert a.draft_counts == expected_counts
    assert a.team_totals == expected_totals
    assert sum(a.draft_counts.values()) == 17 * 8
    assert a.last_result is last


def test_average_balance_metrics() -> None:
    m1 = BalanceMetrics(
        gini=0.2, spread=10, event_contribution={EventType.WINNER: 0.5}, winner_advantage=4, longevity_correlation=0.5
    )
    m2 = BalanceMetrics(
        gini=0.4, spread=20, event_contribution={EventType.QUIT: 1.0}, winner_advantage=8, longevity_correlation=-0.1
    )
    avg = average_balance_metrics([m1, m2])

    assert avg.gini == 0.3
    assert avg.spread == 15
    assert avg.winner_advantage == 6
    assert avg.longevity_correlation == 0.2
    assert avg.event_contribution == {EventType.WINNER: 0.25, EventType.QUIT: 0.5}


def test_average_balance_metrics_raises_when_empty() -> None:
    with pytest.raises(ValueError):
        average_balance_metrics([])
