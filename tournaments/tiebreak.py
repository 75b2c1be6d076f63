from typing import Dict, List, Tuple

from core.errors import GroupValidationError
from tournaments.stats import set_winner, team_of

PRIMARY_GROUP = "provisional_points"
PRIMARY_OFFICIAL = "average_points"
PRIMARY_IRONMAN = "total_points"


def _criteria(row: Dict, primary: str) -> Tuple:
    return (
        -row[primary],
        -row["sets_won"],
        -row["games_difference"],
        -row["h2h_wins"],
        -row["games_won"],
    )


def tiebreak_key(row: Dict, primary: str = PRIMARY_GROUP, with_rounds: bool = False) -> Tuple:
    key = _criteria(row, primary)
    if with_rounds:
        key += (-row["rounds_played"],)
    return key + (str(row["player_id"]),)


def compare_players(a: Dict, b: Dict, primary: str = PRIMARY_GROUP, with_rounds: bool = False) -> int:
    ka = tiebreak_key(a, primary, with_rounds)
    kb = tiebreak_key(b, primary, with_rounds)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def order_players(rows: List[Dict], primary: str = PRIMARY_GROUP, with_rounds: bool = False) -> List[Dict]:
    ordered = sorted(rows, key=lambda r: tiebreak_key(r, primary, with_rounds))
    ids = [str(r["player_id"]) for r in ordered]
    # el desempate final por id sólo es estricto si los ids son únicos
    if len(set(ids)) != len(ids):
        raise GroupValidationError(f"Ids de jugador repetidos en la clasificación: {ids}")
    return ordered


def tied_blocks(ordered: List[Dict], primary: str = PRIMARY_GROUP) -> List[List[Dict]]:
    """Runs of consecutive players still level after the group criteria (1-5)."""
    blocks = []
    i = 0
    while i < len(ordered):
        j = i + 1
        ki = _criteria(ordered[i], primary)
        while j < len(ordered) and _criteria(ordered[j], primary) == ki:
            j += 1
        if j - i > 1:
            blocks.append(ordered[i:j])
        i = j
    return blocks


def direct_h2h(a: str, b: str, matches: List[Dict]) -> Tuple[int, int]:
    """Wins and losses of `a` against `b` in confirmed sets where they were opponents."""
    wins = losses = 0
    for m in matches:
        ta, tb = team_of(m, a), team_of(m, b)
        if ta is None or tb is None or ta == tb:
            continue
        winner = set_winner(m)
        if winner == ta:
            wins += 1
        elif winner == tb:
            losses += 1
    return wins, losses
