from typing import Dict, List

from core.constants import (
    GROUP_SIZE,
    MOVEMENT_DESCRIPTIONS,
    MOVEMENT_DOWN,
    MOVEMENT_SAME,
    MOVEMENT_UP,
)
from core.errors import GroupValidationError, LadderError


def _decision(direction: str, magnitude: int, reason: str) -> Dict:
    return {
        "direction": direction,
        "magnitude": magnitude,
        "reason": reason,
        "description": MOVEMENT_DESCRIPTIONS[reason],
    }


def resolve_movement(position: int, level: int, total_groups: int) -> Dict:
    """Ladder movement for a finishing position.

    Level 1 is the elite group and `total_groups` the floor. The elite
    keeps its 1st/2nd finishers and the floor keeps its 3rd/4th, and a
    two-level jump next to a boundary shrinks to one.
    """
    if total_groups < 1:
        raise LadderError(f"El número de grupos debe ser >= 1, hay {total_groups}")
    if not 1 <= level <= total_groups:
        raise LadderError(f"Nivel {level} fuera de la escalera 1..{total_groups}")
    if not 1 <= position <= GROUP_SIZE:
        raise LadderError(f"Posición {position} fuera de 1..{GROUP_SIZE}")

    if total_groups == 1:
        return _decision(MOVEMENT_SAME, 0, "single_group")

    is_top = level == 1
    is_bottom = level == total_groups

    if position == 1:
        if is_top:
            return _decision(MOVEMENT_SAME, 0, "elite_hold")
        if level == 2:
            return _decision(MOVEMENT_UP, 1, "elite_cap")
        return _decision(MOVEMENT_UP, 2, "up_two")

    if position == 2:
        if is_top:
            return _decision(MOVEMENT_SAME, 0, "elite_hold")
        return _decision(MOVEMENT_UP, 1, "up_one")

    if position == 3:
        if is_bottom:
            return _decision(MOVEMENT_SAME, 0, "floor_hold")
        return _decision(MOVEMENT_DOWN, 1, "down_one")

    if is_bottom:
        return _decision(MOVEMENT_SAME, 0, "floor_hold")
    if level == total_groups - 1:
        return _decision(MOVEMENT_DOWN, 1, "floor_cap")
    return _decision(MOVEMENT_DOWN, 2, "down_two")


def level_delta(decision: Dict) -> int:
    """Signed change of level: negative moves towards the elite group."""
    if decision["direction"] == MOVEMENT_UP:
        return -decision["magnitude"]
    if decision["direction"] == MOVEMENT_DOWN:
        return decision["magnitude"]
    return 0


def assign_positions(ordered: List[Dict]) -> List[Dict]:
    if len(ordered) != GROUP_SIZE:
        raise GroupValidationError(f"Se esperaban {GROUP_SIZE} jugadores para clasificar, hay {len(ordered)}")
    for idx, row in enumerate(ordered, start=1):
        row["position"] = idx
    return ordered


def redistribute_players(movements: List[Dict]) -> List[List[Dict]]:
    """Next-round groups from closed-round movements.

    Each movement needs `player_id`, `level`, `position`, `delta` and
    `points`. Players are ordered by target level, then points, and cut
    into blocks of 4; a short tail joins the last full block.
    """
    def _target(mv: Dict) -> int:
        return mv["level"] + mv["delta"]

    ordered = sorted(
        movements,
        key=lambda mv: (_target(mv), -float(mv.get("points") or 0), mv["position"], str(mv["player_id"])),
    )

    groups: List[List[Dict]] = []
    for i in range(0, len(ordered), GROUP_SIZE):
        block = ordered[i:i + GROUP_SIZE]
        if len(block) < GROUP_SIZE and groups:
            groups[-1].extend(block)
        else:
            groups.append(block)
    return groups
