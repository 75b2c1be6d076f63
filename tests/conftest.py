"""
Shared pytest fixtures for the ladder engine tests.

Groups are plain dicts, built the same way round generation builds them.
"""
import pytest

from core.config import TournamentSettings
from tournaments.results import confirm_result, report_result
from tournaments.scheduling import new_group


def confirm(match, team1_games, team2_games, tiebreak=None):
    """Store a confirmed score directly on a set, bypassing the report flow."""
    match.update(
        team1_games=team1_games,
        team2_games=team2_games,
        tiebreak=tiebreak,
        reported_by=match["team1"][0],
        confirmed_by=match["team2"][0],
        confirmed=True,
    )
    return match


def play_group(group, scores):
    """Report and confirm every set of `group` with (team1, team2[, tiebreak]) tuples."""
    for m, score in zip(group["matches"], scores):
        report_result(m, m["team1"][0], *score)
        confirm_result(m, m["team2"][0], group["players"])
    return group


@pytest.fixture
def settings():
    return TournamentSettings()


@pytest.fixture
def group():
    """Level-2 group P1..P4 with no results yet."""
    return new_group(2, ["P1", "P2", "P3", "P4"])


@pytest.fixture
def played_group(group):
    """P1 wins all three sets: 4-2, 5-4 (TB 7-5) and 4-3."""
    return play_group(group, [(4, 2), (5, 4, "7-5"), (4, 3)])


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point persistence at a temporary directory."""
    monkeypatch.setenv("ESCALAPP_DATA_DIR", str(tmp_path))
    return tmp_path


def make_tournament(n_groups=2, total_rounds=3, tid="t1"):
    ids = [f"P{i}" for i in range(1, n_groups * 4 + 1)]
    groups = [new_group(g + 1, ids[g * 4:(g + 1) * 4]) for g in range(n_groups)]
    return {
        "id": tid,
        "name": "Liga test",
        "total_rounds": total_rounds,
        "settings": TournamentSettings().model_dump(),
        "rounds": [{"number": 1, "closed": False, "groups": groups}],
    }


@pytest.fixture
def tournament():
    return make_tournament()
