import json
import random
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from filelock import FileLock

from core.cache import Cache
from core.config import LOCK_TIMEOUT_SECONDS, TournamentSettings, get_data_dir
from core.logging import get_logger
from tournaments.closing import close_round, reopen_round
from tournaments.scheduling import build_first_round_groups

logger = get_logger(__name__)


def _tournaments_dir() -> Path:
    d = get_data_dir() / "tournaments"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _history_dir() -> Path:
    d = _tournaments_dir() / "history"
    d.mkdir(exist_ok=True)
    return d


def _t_path(tid: str) -> Path:
    return _tournaments_dir() / f"{tid}.json"


def _lock_for(tid: str) -> FileLock:
    return FileLock(str(_t_path(tid)) + ".lock", timeout=LOCK_TIMEOUT_SECONDS)


def _snapshot_tournament(obj: Dict) -> None:
    ts = datetime.now().strftime("%Y%m%dT%H%M%S%f")
    snap_path = _history_dir() / f"{obj['id']}_{ts}.json"
    with snap_path.open("w", encoding="utf-8") as fh:
        json.dump(obj, fh, ensure_ascii=False, indent=2)


def save_tournament(obj: Dict) -> None:
    path = _t_path(obj["id"])
    with path.open("w", encoding="utf-8") as fh:
        json.dump(obj, fh, ensure_ascii=False, indent=2)
    _snapshot_tournament(obj)


def tournament_exists(tid: str) -> bool:
    return _t_path(tid).exists()


def load_tournament(tid: str) -> Dict:
    p = _t_path(tid)
    with p.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def create_tournament(
    tid: str,
    name: str,
    player_ids: List[str],
    total_rounds: int,
    settings: Optional[TournamentSettings] = None,
    strategy: str = "random",
    rng: Optional[random.Random] = None,
) -> Dict:
    with _lock_for(tid):
        if tournament_exists(tid):
            return load_tournament(tid)

        groups, skipped = build_first_round_groups(player_ids, strategy=strategy, rng=rng)
        obj = {
            "id": tid,
            "name": name,
            "created": datetime.now().isoformat(),
            "total_rounds": int(total_rounds),
            "settings": (settings or TournamentSettings()).model_dump(),
            "rounds": [{"number": 1, "closed": False, "groups": groups}],
            "skipped_players": skipped,
        }
        save_tournament(obj)
    logger.info("tournament_created", tournament_id=tid, groups=len(groups), skipped=len(skipped))
    return obj


def close_round_locked(tid: str, number: int, cache: Optional[Cache] = None) -> Dict:
    """Load, close and save under the tournament's file lock.

    A second caller waits for the first and then finds the round closed.
    """
    with _lock_for(tid):
        t = load_tournament(tid)
        summary = close_round(t, number, cache=cache)
        save_tournament(t)
    return summary


def reopen_round_locked(tid: str, number: int, cache: Optional[Cache] = None) -> Dict:
    with _lock_for(tid):
        t = load_tournament(tid)
        summary = reopen_round(t, number, cache=cache)
        save_tournament(t)
    return summary
