from typing import Dict, List, Optional

import pandas as pd

from core.cache import Cache
from core.config import CACHE_TTL_SECONDS
from core.constants import RANKING_COLUMNS
from core.logging import get_logger
from tournaments.stats import aggregate_player_stats
from tournaments.tiebreak import PRIMARY_IRONMAN, PRIMARY_OFFICIAL, order_players

logger = get_logger(__name__)

RECORD_COLUMNS = [
    "player_id", "round", "points", "used_comodin",
    "sets_won", "games_won", "games_lost", "h2h_wins",
]


def round_records(t: Dict) -> pd.DataFrame:
    """One row per player and closed round."""
    reg = []
    for rnd in t.get("rounds", []):
        if not rnd.get("closed"):
            continue
        for g in rnd.get("groups", []):
            matches = g.get("matches", [])
            for p in g.get("players", []):
                stats = aggregate_player_stats(p["id"], matches)
                reg.append(
                    {
                        "player_id": str(p["id"]),
                        "round": int(rnd.get("number", 0)),
                        "points": float(p.get("points") or 0),
                        "used_comodin": bool(p.get("used_comodin", False)),
                        "sets_won": stats["sets_won"],
                        "games_won": stats["games_won"],
                        "games_lost": stats["games_lost"],
                        "h2h_wins": stats["h2h_wins"],
                    }
                )
    return pd.DataFrame(reg, columns=RECORD_COLUMNS)


def accumulate_totals(records: pd.DataFrame) -> pd.DataFrame:
    if records.empty:
        return pd.DataFrame(columns=RANKING_COLUMNS)

    df = records.copy()
    # una ronda con comodín suma puntos pero no cuenta como jugada
    df["played"] = (~df["used_comodin"].astype(bool)).astype(int)

    agg = (
        df.groupby("player_id", dropna=True)
        .agg(
            total_points=("points", "sum"),
            rounds_played=("played", "sum"),
            sets_won=("sets_won", "sum"),
            games_won=("games_won", "sum"),
            games_lost=("games_lost", "sum"),
            h2h_wins=("h2h_wins", "sum"),
        )
        .reset_index()
    )
    agg["games_difference"] = agg["games_won"] - agg["games_lost"]
    played = agg["rounds_played"].where(agg["rounds_played"] > 0)
    agg["average_points"] = (agg["total_points"] / played).round(2).fillna(0.0)
    return agg[RANKING_COLUMNS]


def _ranked(totals: pd.DataFrame, primary: str) -> pd.DataFrame:
    if totals.empty:
        return pd.DataFrame(columns=["position"] + RANKING_COLUMNS)

    ordered = order_players(totals.to_dict("records"), primary, with_rounds=True)
    out = pd.DataFrame(ordered, columns=RANKING_COLUMNS)
    out.insert(0, "position", range(1, len(out) + 1))
    out.index = out.index + 1
    return out


def compute_official_ranking(records: pd.DataFrame) -> pd.DataFrame:
    return _ranked(accumulate_totals(records), PRIMARY_OFFICIAL)


def compute_ironman_ranking(records: pd.DataFrame) -> pd.DataFrame:
    return _ranked(accumulate_totals(records), PRIMARY_IRONMAN)


def compute_rankings(records: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    return {
        "official": compute_official_ranking(records),
        "ironman": compute_ironman_ranking(records),
    }


def compute_ranking_with_movement(records: pd.DataFrame) -> pd.DataFrame:
    current = compute_official_ranking(records).copy()
    if current.empty:
        return current.assign(position_change=pd.Series(dtype="Int64"), trend=pd.Series(dtype="string"))

    rounds_all = sorted(records["round"].unique())
    if len(rounds_all) >= 2:
        prev = compute_official_ranking(records[records["round"] < rounds_all[-1]])
        prev_pos_map = {row["player_id"]: int(row["position"]) for _, row in prev.iterrows()}
    else:
        prev_pos_map = {}

    changes: List[Optional[int]] = []
    trends: List[str] = []
    for _, row in current.iterrows():
        pos_prev = prev_pos_map.get(row["player_id"])
        if pos_prev is None:
            changes.append(None)
            trends.append("")
            continue
        diff = pos_prev - int(row["position"])
        changes.append(diff)
        if diff > 0:
            trends.append(f"▲ +{diff}")
        elif diff < 0:
            trends.append(f"▼ {diff}")
        else:
            trends.append("")

    current["position_change"] = pd.array(changes, dtype="Int64")
    current["trend"] = trends
    return current


def cached_rankings(cache: Cache, tournament_id: str, records: pd.DataFrame,
                    ttl: float = CACHE_TTL_SECONDS) -> Dict[str, pd.DataFrame]:
    key = f"rankings:{tournament_id}"
    hit = cache.get(key)
    if hit is not None:
        return hit

    rankings = compute_rankings(records)
    cache.set(key, rankings, ttl)
    logger.debug("rankings_computed", tournament_id=tournament_id, players=len(rankings["official"]))
    return rankings
