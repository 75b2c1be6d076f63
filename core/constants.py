from typing import Dict, List, Tuple

GROUP_SIZE = 4
SETS_PER_ROUND = 3

# jugadores por posición inicial (1..4): equipo 1 vs equipo 2
SET_ROTATION: List[Tuple[Tuple[int, int], Tuple[int, int]]] = [
    ((1, 4), (2, 3)),
    ((1, 3), (2, 4)),
    ((1, 2), (3, 4)),
]

# reglas de marcador de un set (formato a 4 juegos con tie-break en 4-4)
MIN_WINNING_GAMES = 4
MAX_SET_GAMES = 5
MIN_TIEBREAK_MARGIN = 2

DEFAULT_POINTS_PER_SET_WIN = 1.0

DEFAULT_CONTINUITY: Dict[str, object] = {
    "enabled": False,
    "points_per_unit": 1.0,
    "max_bonus": 10.0,
    "min_rounds": 2,
}

MOVEMENT_UP = "up"
MOVEMENT_DOWN = "down"
MOVEMENT_SAME = "same"

# reason tag -> descripción mostrada al jugador
MOVEMENT_DESCRIPTIONS: Dict[str, str] = {
    "single_group": "Sin escalera: grupo único",
    "elite_hold": "Se mantiene en grupo élite",
    "elite_cap": "Sube al grupo élite",
    "up_two": "Sube 2 grupos",
    "up_one": "Sube 1 grupo",
    "floor_hold": "Se mantiene en grupo inferior",
    "floor_cap": "Baja al grupo inferior",
    "down_one": "Baja 1 grupo",
    "down_two": "Baja 2 grupos",
}

PREVIEW_COLUMNS: List[str] = [
    "player_id",
    "carried_points",
    "provisional_points",
    "delta_points",
    "sets_won",
    "games_won",
    "games_lost",
    "games_difference",
    "h2h_wins",
    "sets_played",
    "previous_position",
    "position",
    "position_change",
    "movement",
    "movement_magnitude",
    "movement_reason",
    "movement_description",
    "direct_h2h",
]

RANKING_COLUMNS: List[str] = [
    "player_id",
    "total_points",
    "rounds_played",
    "average_points",
    "sets_won",
    "games_won",
    "games_lost",
    "games_difference",
    "h2h_wins",
]
