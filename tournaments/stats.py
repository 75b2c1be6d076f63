from typing import Dict, List, Optional, Tuple


def parse_score(score: Optional[str]) -> Tuple[int, int]:
    try:
        a, b = str(score).strip().split("-")
        return int(a), int(b)
    except ValueError:
        return 0, 0


def match_games(match: Dict) -> Tuple[int, int]:
    return int(match.get("team1_games") or 0), int(match.get("team2_games") or 0)


def team_of(match: Dict, player_id: str) -> Optional[int]:
    if player_id in match.get("team1", []):
        return 1
    if player_id in match.get("team2", []):
        return 2
    return None


def set_winner(match: Dict) -> Optional[int]:
    """1 or 2 for the team that won a confirmed set, None otherwise.

    A level score stored before the tie-break was folded into the games
    (4-4 + "7-5") is decided by the tie-break.
    """
    if not match.get("confirmed"):
        return None
    g1, g2 = match_games(match)
    if g1 == g2 and match.get("tiebreak"):
        g1, g2 = parse_score(match["tiebreak"])
    if g1 > g2:
        return 1
    if g2 > g1:
        return 2
    return None


def aggregate_player_stats(player_id: str, matches: List[Dict]) -> Dict[str, int]:
    sets_won = 0
    games_won = 0
    games_lost = 0
    h2h_wins = 0
    sets_played = 0

    for m in matches:
        team = team_of(m, player_id)
        if team is None:
            continue
        sets_played += 1
        if not m.get("confirmed"):
            continue

        g1, g2 = match_games(m)
        own, other = (g1, g2) if team == 1 else (g2, g1)
        games_won += own
        games_lost += other

        if set_winner(m) == team:
            sets_won += 1
            h2h_wins += 1

    return {
        "sets_won": sets_won,
        "games_won": games_won,
        "games_lost": games_lost,
        "games_difference": games_won - games_lost,
        "h2h_wins": h2h_wins,
        "sets_played": sets_played,
    }


def group_completion(matches: List[Dict]) -> Dict:
    total = len(matches)
    completed = sum(1 for m in matches if m.get("confirmed"))
    rate = round(completed / total * 100, 2) if total else 0.0
    return {
        "completed_sets": completed,
        "total_sets": total,
        "pending_sets": total - completed,
        "completion_rate": rate,
        "is_complete": total > 0 and completed == total,
    }
