from typing import Dict

from core.config import TournamentSettings


def streak_bonus(streak: int, settings: TournamentSettings) -> float:
    cfg = settings.continuity
    if not cfg.enabled or streak <= 0 or streak < cfg.min_rounds:
        return 0.0
    return min(streak * cfg.points_per_unit, cfg.max_bonus)


def assemble_score(player: Dict, stats: Dict, settings: TournamentSettings) -> Dict:
    carried = float(player.get("points") or 0)
    from_sets = stats["sets_won"] * settings.points_per_set_win

    # los sets de esta ronda son un mínimo, no se suman a lo ya acumulado
    provisional = max(carried, from_sets)
    provisional += streak_bonus(int(player.get("streak") or 0), settings)

    return {
        "carried_points": carried,
        "provisional_points": provisional,
        "delta_points": provisional - carried,
    }
