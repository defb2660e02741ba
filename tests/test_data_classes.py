import pickle

import pytest

from survivor_sim.data import (
    BASE_EVENT_POINTS,
    DEFAULT_SCHEME,
    EVENT_CATEGORIES,
    Contestant,
    DraftConfig,
    DraftMode,
    EventType,
    MonteCarloConfig,
    PinnedPicks,
    PointScheme,
    ScoringEvent,
    Season,
    TeamScore,
    parse_event_type,
)

from season_builders import example_season, make_contestants


def test_base_event_points_cover_every_event_type() -> None:
    assert set(BASE_EVENT_POINTS) == set(EventType)
    assert BASE_EVENT_POINTS[EventType.WINNER] == 20
    assert BASE_EVENT_POINTS[EventType.QUIT] == -10


def test_event_categories_partition_event_types() -> None:
    listed = [t for types in EVENT_CATEGORIES.values() for t in types]
    assert sorted(listed) == sorted(EventType)
    assert len(listed) == len(set(listed))


def test_parse_event_type_is_case_insensitive() -> None:
    assert parse_event_type(" winner ") is EventType.WINNER


def test_parse_event_type_raises_with_bad_name() -> None:
    with pytest.raises(ValueError, match="NOT_AN_EVENT"):
        parse_event_type("NOT_AN_EVENT")


def test_contestant_raises_when_placement_is_less_than_1() -> None:
    with pytest.raises(ValueError):
        Contestant(contestant_id="C1", name="A", tribe="T", placement=0)


def test_contestant_raises_when_id_is_empty() -> None:
    with pytest.raises(ValueError):
        Contestant(contestant_id="", name="A", tribe="T", placement=1)


def test_scoring_event_raises_when_episode_is_negative() -> None:
    with pytest.raises(ValueError):
        ScoringEvent(event_type=EventType.WINNER, contestant_id="C1", episode=-1, base_points=20)


def test_season_raises_on_duplicate_contestant_ids() -> None:
    c = make_contestants(1)[0]
    with pytest.raises(ValueError):
        Season(season_number=1, name="S", contestant_count=2, episode_count=1, contestants=(c, c))


def test_season_lookups() -> None:
    season = example_season()
    assert season.contestant_ids == ("C1", "C2", "C3", "C4")
    assert season.winner is not None and season.winner.contestant_id == "C1"
    assert len(season.events_for("C1")) == 4
    assert season.events_for("C3") == ()
    assert season.contestant_name("C2") == "Contestant 2"
    assert season.contestant_name("UNKNOWN") == "UNKNOWN"


def test_point_scheme_from_overrides_lays_partial_overrides_over_base() -> None:
    scheme = PointScheme.from_overrides({"WINNER": 30, EventType.FINALIST: 15})
    assert scheme[EventType.WINNER] == 30
    assert scheme[EventType.FINALIST] == 15
    assert scheme[EventType.MADE_JURY] == BASE_EVENT_POINTS[EventType.MADE_JURY]
    assert scheme.overrides == {EventType.WINNER: 30, EventType.FINALIST: 15}


def test_point_scheme_with_points_does_not_mutate_original() -> None:
    changed = DEFAULT_SCHEME.with_points(EventType.WINNER, 50)
    assert changed[EventType.WINNER] == 50
    assert DEFAULT_SCHEME[EventType.WINNER] == 20
    assert BASE_EVENT_POINTS[EventType.WINNER] == 20


def test_point_scheme_rejects_partial_mapping() -> None:
    with pytest.raises(ValueError):
        PointScheme(points={EventType.WINNER: 1})


def test_point_scheme_equality_and_hash() -> None:
    a = PointScheme.from_overrides({"WINNER": 30})
    b = PointScheme().with_points(EventType.WINNER, 30)
    assert a == b
    assert hash(a) == hash(b)
    assert a != DEFAULT_SCHEME


def test_season_and_scheme_survive_pickling() -> None:
    season = example_season()
    _ = season.events_by_contestant
    restored = pickle.loads(pickle.dumps(season))
    assert restored.events_for("C1") == season.events_for("C1")

    scheme = PointScheme.from_overrides({"QUIT": -20})
    assert pickle.loads(pickle.dumps(scheme)) == scheme


def test_draft_config_raises_when_counts_are_not_positive() -> None:
    with pytest.raises(ValueError):
        DraftConfig(player_count=0, picks_per_player=2)
    with pytest.raises(ValueError):
        DraftConfig(player_count=2, picks_per_player=0)
    with pytest.raises(ValueError):
        DraftConfig(player_count=2, picks_per_player=2, max_owners_per_contestant=0)


def test_draft_config_raises_for_manual_picks_outside_player_range() -> None:
    with pytest.raises(ValueError):
        DraftConfig(player_count=2, picks_per_player=1, mode=DraftMode.MANUAL, manual_picks={2: ["C1"]})


def test_draft_config_total_picks() -> None:
    assert DraftConfig(player_count=8, picks_per_player=2).total_picks == 16


def test_monte_carlo_config_validation() -> None:
    draft = DraftConfig(player_count=2, picks_per_player=1)
    with pytest.raises(ValueError):
        MonteCarloConfig(num_simulations=0, draft_config=draft)
    with pytest.raises(ValueError):
        MonteCarloConfig(num_simulations=1, draft_config=draft, workers=0)
    with pytest.raises(ValueError):
        MonteCarloConfig(num_simulations=1, draft_config=draft, pinned_picks=PinnedPicks(5, ("C1",)))


def test_team_score_cumulative_by_episode() -> None:
    team = TeamScore(player_index=0, total_score=8, contestants=(), score_by_episode={3: 5, 1: 2, 7: 1})
    assert team.cumulative_by_episode == {1: 2, 3: 7, 7: 8}
