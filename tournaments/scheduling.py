import random
from collections import Counter
from itertools import combinations
from typing import Dict, List, Optional, Tuple

from core.constants import GROUP_SIZE, SET_ROTATION, SETS_PER_ROUND
from core.errors import GroupValidationError


def _pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a <= b else (b, a)


def build_rotation(player_ids: List[str]) -> List[Dict]:
    """The 3 sets of a group, players given in seed order (position 1..4)."""
    if len(player_ids) != GROUP_SIZE:
        raise GroupValidationError(f"La rotación necesita {GROUP_SIZE} jugadores, hay {len(player_ids)}")

    by_pos = {i: pid for i, pid in enumerate(player_ids, start=1)}
    matches = []
    for set_no, ((a1, a2), (b1, b2)) in enumerate(SET_ROTATION, start=1):
        matches.append(
            {
                "set": set_no,
                "team1": [by_pos[a1], by_pos[a2]],
                "team2": [by_pos[b1], by_pos[b2]],
                "team1_games": None,
                "team2_games": None,
                "tiebreak": None,
                "confirmed": False,
                "reported_by": None,
                "confirmed_by": None,
            }
        )
    return matches


def validate_group(players: List[Dict], matches: List[Dict]) -> List[str]:
    ids = [str(p.get("id", "")) for p in players]
    if len(ids) != GROUP_SIZE:
        raise GroupValidationError(f"El grupo debe tener {GROUP_SIZE} jugadores, tiene {len(ids)}")
    if "" in ids or len(set(ids)) != GROUP_SIZE:
        raise GroupValidationError(f"Los jugadores del grupo deben tener ids únicos: {ids}")

    members = set(ids)
    for m in matches:
        t1 = list(m.get("team1", []))
        t2 = list(m.get("team2", []))
        label = f"Set {m.get('set', '?')}"
        if len(t1) != 2 or len(t2) != 2 or len(set(t1)) != 2 or len(set(t2)) != 2:
            raise GroupValidationError(f"{label}: cada pareja necesita 2 jugadores distintos")
        if set(t1) & set(t2):
            raise GroupValidationError(f"{label}: un jugador no puede estar en las dos parejas")
        outsiders = (set(t1) | set(t2)) - members
        if outsiders:
            raise GroupValidationError(f"{label}: jugadores fuera del grupo: {sorted(outsiders)}")
    return ids


def check_rotation(player_ids: List[str], matches: List[Dict]) -> None:
    if len(matches) != SETS_PER_ROUND:
        raise GroupValidationError(f"Se esperaban {SETS_PER_ROUND} sets, hay {len(matches)}")

    members = set(player_ids)
    teammates: Counter = Counter()
    opponents: Counter = Counter()
    for m in matches:
        t1, t2 = list(m["team1"]), list(m["team2"])
        if set(t1) | set(t2) != members:
            raise GroupValidationError(f"El set {m.get('set', '?')} no usa a los 4 jugadores del grupo")
        teammates[_pair(*t1)] += 1
        teammates[_pair(*t2)] += 1
        for a in t1:
            for b in t2:
                opponents[_pair(a, b)] += 1

    for a, b in combinations(sorted(members), 2):
        if teammates[(a, b)] != 1 or opponents[(a, b)] != 2:
            raise GroupValidationError(
                f"Pareja {a}/{b}: {teammates[(a, b)]} veces juntos, {opponents[(a, b)]} veces rivales"
            )


def new_group(level: int, player_ids: List[str], streaks: Optional[Dict[str, int]] = None) -> Dict:
    streaks = streaks or {}
    players = [
        {
            "id": pid,
            "points": 0,
            "position": idx,
            "streak": int(streaks.get(pid, 0)),
            "used_comodin": False,
        }
        for idx, pid in enumerate(player_ids, start=1)
    ]
    return {
        "id": f"L{level}",
        "level": level,
        "players": players,
        "matches": build_rotation(player_ids),
    }


def build_first_round_groups(
    player_ids: List[str],
    strategy: str = "random",
    rng: Optional[random.Random] = None,
) -> Tuple[List[Dict], List[str]]:
    if strategy not in ("random", "ranking"):
        raise ValueError(f"Estrategia de agrupación desconocida: {strategy}")

    pool = list(player_ids)
    if strategy == "random":
        (rng or random.Random()).shuffle(pool)

    n_groups = len(pool) // GROUP_SIZE
    kept = n_groups * GROUP_SIZE
    skipped = pool[kept:]

    groups = [new_group(g + 1, pool[g * GROUP_SIZE:(g + 1) * GROUP_SIZE]) for g in range(n_groups)]
    return groups, skipped
