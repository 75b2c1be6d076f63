"""Tests for the 3-set rotation and group generation."""
import random
from itertools import combinations

import pytest

from core.errors import GroupValidationError
from tournaments.scheduling import (
    build_first_round_groups,
    build_rotation,
    check_rotation,
    new_group,
    validate_group,
)


class TestRotation:

    def test_fixed_pairings(self):
        sets = [(m["team1"], m["team2"]) for m in build_rotation(["A", "B", "C", "D"])]
        assert sets == [
            (["A", "D"], ["B", "C"]),
            (["A", "C"], ["B", "D"]),
            (["A", "B"], ["C", "D"]),
        ]

    def test_round_robin_coverage(self):
        """Every pair plays together once and against each other twice."""
        matches = build_rotation(["A", "B", "C", "D"])
        for a, b in combinations("ABCD", 2):
            together = sum(1 for m in matches if {a, b} <= set(m["team1"]) or {a, b} <= set(m["team2"]))
            against = sum(
                1 for m in matches
                if (a in m["team1"] and b in m["team2"]) or (a in m["team2"] and b in m["team1"])
            )
            assert (together, against) == (1, 2), (a, b)
        check_rotation(["A", "B", "C", "D"], matches)

    def test_new_sets_are_pending(self):
        for m in build_rotation(["A", "B", "C", "D"]):
            assert m["confirmed"] is False
            assert m["team1_games"] is None

    def test_needs_four_players(self):
        with pytest.raises(GroupValidationError, match="necesita 4 jugadores"):
            build_rotation(["A", "B", "C"])

    def test_check_rotation_rejects_repeated_pairing(self):
        matches = build_rotation(["A", "B", "C", "D"])
        matches[2].update(team1=["A", "D"], team2=["B", "C"])
        with pytest.raises(GroupValidationError):
            check_rotation(["A", "B", "C", "D"], matches)

    def test_check_rotation_rejects_missing_set(self):
        matches = build_rotation(["A", "B", "C", "D"])[:2]
        with pytest.raises(GroupValidationError, match="Se esperaban 3 sets"):
            check_rotation(["A", "B", "C", "D"], matches)


class TestValidateGroup:

    def test_valid(self, group):
        assert validate_group(group["players"], group["matches"]) == ["P1", "P2", "P3", "P4"]

    def test_wrong_size(self, group):
        with pytest.raises(GroupValidationError, match="debe tener 4 jugadores"):
            validate_group(group["players"][:3], group["matches"])

    def test_duplicated_player(self, group):
        group["players"][3]["id"] = "P1"
        with pytest.raises(GroupValidationError):
            validate_group(group["players"], group["matches"])

    def test_player_on_both_teams(self, group):
        group["matches"][0]["team2"] = ["P1", "P3"]
        with pytest.raises(GroupValidationError, match="las dos parejas"):
            validate_group(group["players"], group["matches"])

    def test_outsider(self, group):
        group["matches"][0]["team2"] = ["P2", "X9"]
        with pytest.raises(GroupValidationError, match="fuera del grupo"):
            validate_group(group["players"], group["matches"])

    def test_incomplete_team(self, group):
        group["matches"][1]["team1"] = ["P1"]
        with pytest.raises(GroupValidationError):
            validate_group(group["players"], group["matches"])


def test_new_group_carries_streaks():
    g = new_group(3, ["A", "B", "C", "D"], {"B": 2})
    assert g["id"] == "L3"
    assert [p["position"] for p in g["players"]] == [1, 2, 3, 4]
    assert [p["streak"] for p in g["players"]] == [0, 2, 0, 0]
    assert all(p["points"] == 0 for p in g["players"])


class TestFirstRound:

    def test_ranking_strategy_keeps_order(self):
        ids = [f"P{i}" for i in range(1, 11)]
        groups, skipped = build_first_round_groups(ids, strategy="ranking")
        assert [g["level"] for g in groups] == [1, 2]
        assert [p["id"] for p in groups[0]["players"]] == ["P1", "P2", "P3", "P4"]
        assert skipped == ["P9", "P10"]

    def test_random_strategy_is_seedable(self):
        ids = [f"P{i}" for i in range(1, 9)]
        a, _ = build_first_round_groups(ids, rng=random.Random(7))
        b, _ = build_first_round_groups(ids, rng=random.Random(7))
        assert a == b
        assert sorted(p["id"] for g in a for p in g["players"]) == sorted(ids)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Estrategia de agrupación desconocida"):
            build_first_round_groups(["A", "B", "C", "D"], strategy="elo")
