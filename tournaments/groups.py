from typing import Dict, List, Optional, Tuple

import pandas as pd

from core.config import TournamentSettings
from core.constants import PREVIEW_COLUMNS
from core.logging import get_logger
from tournaments.scheduling import validate_group
from tournaments.scoring import assemble_score
from tournaments.stats import aggregate_player_stats, group_completion
from tournaments.tiebreak import PRIMARY_GROUP, direct_h2h, order_players, tied_blocks
from tournaments.updown import assign_positions, resolve_movement

logger = get_logger(__name__)


def _player_rows(players: List[Dict], matches: List[Dict], settings: TournamentSettings) -> List[Dict]:
    rows = []
    for p in players:
        stats = aggregate_player_stats(p["id"], matches)
        row = {"player_id": p["id"], "previous_position": p.get("position")}
        row.update(assemble_score(p, stats, settings))
        row.update(stats)
        rows.append(row)
    return rows


def _mark_direct_h2h(ordered: List[Dict], matches: List[Dict]) -> None:
    for row in ordered:
        row["direct_h2h"] = ""

    # solo empates a dos que sobreviven a los criterios 1-5; no altera el orden
    for block in tied_blocks(ordered, PRIMARY_GROUP):
        if len(block) != 2:
            continue
        a, b = block
        wins, losses = direct_h2h(a["player_id"], b["player_id"], matches)
        a["direct_h2h"] = f"{wins}-{losses}"
        b["direct_h2h"] = f"{losses}-{wins}"


def compute_group_preview(
    group: Dict,
    total_groups: int,
    settings: Optional[TournamentSettings] = None,
) -> Tuple[pd.DataFrame, Dict]:
    settings = settings or TournamentSettings()
    players = group.get("players", [])
    matches = group.get("matches", [])
    level = int(group.get("level") or 0)

    validate_group(players, matches)

    ordered = order_players(_player_rows(players, matches, settings), PRIMARY_GROUP)
    assign_positions(ordered)
    _mark_direct_h2h(ordered, matches)

    for row in ordered:
        decision = resolve_movement(row["position"], level, total_groups)
        prev = row["previous_position"]
        row["position_change"] = (int(prev) - row["position"]) if prev else 0
        row["movement"] = decision["direction"]
        row["movement_magnitude"] = decision["magnitude"]
        row["movement_reason"] = decision["reason"]
        row["movement_description"] = decision["description"]

    completion = group_completion(matches)
    logger.debug(
        "group_preview",
        group_id=group.get("id"),
        level=level,
        total_groups=total_groups,
        completion_rate=completion["completion_rate"],
    )

    df = pd.DataFrame(ordered, columns=PREVIEW_COLUMNS)
    return df, completion


def preview_round(rnd: Dict, settings: Optional[TournamentSettings] = None) -> Dict[str, Tuple[pd.DataFrame, Dict]]:
    groups = sorted(rnd.get("groups", []), key=lambda g: int(g.get("level") or 0))
    total = len(groups)
    out: Dict[str, Tuple[pd.DataFrame, Dict]] = {}
    for g in groups:
        out[str(g.get("id", g.get("level")))] = compute_group_preview(g, total, settings)
    return out
