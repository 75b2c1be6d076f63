from typing import Dict, List, Optional

from core.cache import Cache
from core.config import TournamentSettings, settings_from_tournament
from core.errors import MatchesIncompleteError, RoundAlreadyClosedError, RoundStateError
from core.logging import get_logger
from tournaments.groups import compute_group_preview
from tournaments.results import set_points
from tournaments.scheduling import check_rotation, new_group, validate_group
from tournaments.updown import level_delta, redistribute_players

logger = get_logger(__name__)


def rounds_map(t: Dict) -> Dict[int, Dict]:
    return {int(r.get("number", 0)): r for r in t.get("rounds", [])}


def _standing_in_round(rnd: Dict, player_id: str) -> Optional[Dict]:
    for g in rnd.get("groups", []):
        for p in g.get("players", []):
            if p.get("id") == player_id:
                return p
    return None


def continuity_streak(player_id: str, rounds: List[Dict], number: int) -> int:
    """Consecutive rounds up to `number` the player played without comodín."""
    by_number = {int(r.get("number", 0)): r for r in rounds}
    streak = 0
    for n in range(number, 0, -1):
        rnd = by_number.get(n)
        if rnd is None:
            break
        p = _standing_in_round(rnd, player_id)
        if p is None or p.get("used_comodin"):
            break
        streak += 1
    return streak


def _check_round(rnd: Dict) -> List[Dict]:
    if rnd.get("closed"):
        raise RoundAlreadyClosedError(f"La ronda {rnd.get('number')} ya está cerrada")

    groups = sorted(rnd.get("groups", []), key=lambda g: int(g.get("level") or 0))
    if not groups:
        raise RoundStateError(f"La ronda {rnd.get('number')} no tiene grupos")

    pending = 0
    for g in groups:
        ids = validate_group(g.get("players", []), g.get("matches", []))
        check_rotation(ids, g.get("matches", []))
        pending += sum(1 for m in g["matches"] if not m.get("confirmed"))
    if pending:
        raise MatchesIncompleteError(f"Hay {pending} sets sin confirmar en la ronda {rnd.get('number')}")
    return groups


def close_round(
    t: Dict,
    number: int,
    cache: Optional[Cache] = None,
    settings: Optional[TournamentSettings] = None,
) -> Dict:
    rnd = rounds_map(t).get(number)
    if rnd is None:
        raise RoundStateError(f"Ronda {number} no encontrada")

    log = logger.bind(tournament_id=t.get("id"), round=number)
    try:
        groups = _check_round(rnd)
    except RoundStateError as exc:
        log.warning("round_close_rejected", reason=str(exc))
        raise

    settings = settings or settings_from_tournament(t)
    total = len(groups)

    # todo se calcula antes de tocar ninguna clasificación
    tables = [(g, compute_group_preview(g, total, settings)[0]) for g in groups]

    movements: List[Dict] = []
    streaks: Dict[str, int] = {}
    for g, df in tables:
        by_id = df.set_index("player_id")
        for p in g["players"]:
            row = by_id.loc[p["id"]]
            p["points"] = float(row["provisional_points"])
            p["position"] = int(row["position"])
            streaks[p["id"]] = continuity_streak(p["id"], t.get("rounds", []), number)
            p["streak"] = streaks[p["id"]]

            decision = {"direction": row["movement"], "magnitude": int(row["movement_magnitude"])}
            movements.append(
                {
                    "player_id": p["id"],
                    "level": int(g["level"]),
                    "position": p["position"],
                    "points": p["points"],
                    "movement": row["movement"],
                    "magnitude": int(row["movement_magnitude"]),
                    "delta": level_delta(decision),
                }
            )

    rnd["closed"] = True

    next_generated = False
    total_rounds = int(t.get("total_rounds") or number)
    if number < total_rounds:
        next_groups = [
            new_group(level, [mv["player_id"] for mv in block], streaks)
            for level, block in enumerate(redistribute_players(movements), start=1)
        ]
        rmap = rounds_map(t)
        rmap[number + 1] = {"number": number + 1, "closed": False, "groups": next_groups}
        t["rounds"] = [rmap[k] for k in sorted(rmap)]
        next_generated = True

    if cache is not None:
        cache.invalidate(f"rankings:{t.get('id')}*")

    log.info(
        "round_closed",
        groups=total,
        up=sum(1 for mv in movements if mv["movement"] == "up"),
        down=sum(1 for mv in movements if mv["movement"] == "down"),
        next_round_generated=next_generated,
    )
    return {
        "round": number,
        "movements": movements,
        "next_round_generated": next_generated,
    }


def reopen_round(t: Dict, number: int, cache: Optional[Cache] = None) -> Dict:
    """Undo a round close.

    Points go back to the confirmed-set totals (no bonus), positions to the
    seed order, streaks to the previous round's, and the generated next
    round is dropped. Refused once that next round has confirmed results.
    """
    rnd = rounds_map(t).get(number)
    if rnd is None:
        raise RoundStateError(f"Ronda {number} no encontrada")

    log = logger.bind(tournament_id=t.get("id"), round=number)
    if not rnd.get("closed"):
        return {"round": number, "reopened": False, "players_recalculated": 0}

    later = [r for r in t.get("rounds", []) if int(r.get("number", 0)) > number]
    for r in later:
        if any(m.get("confirmed") for g in r.get("groups", []) for m in g.get("matches", [])):
            log.warning("round_reopen_rejected", next_round=r.get("number"))
            raise RoundStateError(f"La ronda {r.get('number')} ya tiene resultados confirmados")

    t["rounds"] = [r for r in t.get("rounds", []) if int(r.get("number", 0)) <= number]

    recalculated = 0
    for g in rnd.get("groups", []):
        matches = g.get("matches", [])
        for idx, p in enumerate(g.get("players", []), start=1):
            p["points"] = float(sum(set_points(m, p["id"]) for m in matches))
            p["position"] = idx
            p["streak"] = continuity_streak(p["id"], t["rounds"], number - 1)
            recalculated += 1

    rnd["closed"] = False
    if cache is not None:
        cache.invalidate(f"rankings:{t.get('id')}*")

    log.info("round_reopened", players_recalculated=recalculated, dropped_rounds=len(later))
    return {"round": number, "reopened": True, "players_recalculated": recalculated}
