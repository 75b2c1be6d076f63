import re
from typing import Dict, List, Optional

from core.constants import MAX_SET_GAMES, MIN_TIEBREAK_MARGIN, MIN_WINNING_GAMES
from core.errors import ResultStateError, ScoreValidationError
from core.logging import get_logger
from tournaments.stats import match_games, parse_score, set_winner, team_of

logger = get_logger(__name__)

TIEBREAK_RE = re.compile(r"^\d+-\d+$")


def validate_set_score(team1_games: int, team2_games: int, tiebreak: Optional[str] = None) -> None:
    for g in (team1_games, team2_games):
        if not isinstance(g, int) or isinstance(g, bool):
            raise ScoreValidationError("Los juegos deben ser números enteros")
        if g < 0 or g > MAX_SET_GAMES:
            raise ScoreValidationError(f"Juegos deben estar entre 0 y {MAX_SET_GAMES}")

    if max(team1_games, team2_games) < MIN_WINNING_GAMES:
        raise ScoreValidationError(f"Al menos un equipo debe llegar a {MIN_WINNING_GAMES} juegos")
    if team1_games == team2_games == MIN_WINNING_GAMES:
        if not tiebreak:
            raise ScoreValidationError("Se requiere tie-break cuando hay 4-4")
    elif team1_games == team2_games:
        raise ScoreValidationError("Un set no puede terminar empatado")

    if tiebreak:
        if not TIEBREAK_RE.match(tiebreak):
            raise ScoreValidationError("Formato de tie-break inválido (usar: 7-5)")
        tb1, tb2 = parse_score(tiebreak)
        if abs(tb1 - tb2) < MIN_TIEBREAK_MARGIN:
            raise ScoreValidationError("Resultado de tie-break inválido: se gana por 2 puntos")


def _ensure_open(match: Dict, round_closed: bool) -> None:
    if round_closed:
        raise ResultStateError("No se pueden modificar partidos de rondas cerradas")


def _ensure_participant(match: Dict, player_id: str) -> None:
    if team_of(match, player_id) is None:
        raise ResultStateError("Sin permisos para modificar este partido")


def _apply_set_points(match: Dict, players: List[Dict], sign: int = 1) -> None:
    # suma (o descuenta) los puntos del set en la clasificación del grupo
    for p in players:
        pts = set_points(match, p["id"])
        if pts:
            p["points"] = float(p.get("points") or 0) + sign * pts


def report_result(match: Dict, reporter: str, team1_games: int, team2_games: int,
                  tiebreak: Optional[str] = None, round_closed: bool = False) -> Dict:
    _ensure_open(match, round_closed)
    _ensure_participant(match, reporter)
    if match.get("reported_by"):
        raise ResultStateError("Ya hay un resultado reportado")
    validate_set_score(team1_games, team2_games, tiebreak)

    match.update(
        team1_games=team1_games,
        team2_games=team2_games,
        tiebreak=tiebreak or None,
        reported_by=reporter,
        confirmed=False,
    )
    logger.info("result_reported", set=match.get("set"), reporter=reporter,
                score=f"{team1_games}-{team2_games}")
    return match


def confirm_result(match: Dict, confirmer: str, players: List[Dict], round_closed: bool = False) -> Dict:
    """Confirm a reported set and add its points to the group standings in `players`."""
    _ensure_open(match, round_closed)
    _ensure_participant(match, confirmer)
    if not match.get("reported_by"):
        raise ResultStateError("No hay resultado para confirmar")
    if match["reported_by"] == confirmer:
        raise ResultStateError("No puedes confirmar tu propio resultado")
    if match.get("confirmed"):
        raise ResultStateError("El resultado ya está confirmado")

    match.update(confirmed=True, confirmed_by=confirmer)
    _apply_set_points(match, players)
    logger.info("result_confirmed", set=match.get("set"), confirmer=confirmer)
    return match


def reject_result(match: Dict, player_id: str, round_closed: bool = False) -> Dict:
    """Dispute an unconfirmed report: the set goes back to pending."""
    _ensure_open(match, round_closed)
    _ensure_participant(match, player_id)
    if match.get("confirmed"):
        raise ResultStateError("No se puede rechazar un resultado confirmado")

    match.update(
        team1_games=None,
        team2_games=None,
        tiebreak=None,
        confirmed=False,
        reported_by=None,
        confirmed_by=None,
    )
    logger.warning("result_rejected", set=match.get("set"), player=player_id)
    return match


def admin_override(match: Dict, admin_id: str, players: List[Dict], team1_games: int, team2_games: int,
                   tiebreak: Optional[str] = None, round_closed: bool = False) -> Dict:
    _ensure_open(match, round_closed)
    validate_set_score(team1_games, team2_games, tiebreak)

    if match.get("confirmed"):
        _apply_set_points(match, players, sign=-1)
    match.update(
        team1_games=team1_games,
        team2_games=team2_games,
        tiebreak=tiebreak or None,
        confirmed=True,
        reported_by=match.get("reported_by") or admin_id,
        confirmed_by=match.get("confirmed_by") or admin_id,
    )
    _apply_set_points(match, players)
    logger.warning("result_overridden", set=match.get("set"), admin=admin_id,
                   score=f"{team1_games}-{team2_games}")
    return match


def set_points(match: Dict, player_id: str) -> int:
    """+1 per game won and +1 for winning the set; 0 while unconfirmed."""
    team = team_of(match, player_id)
    if team is None or not match.get("confirmed"):
        return 0
    g1, g2 = match_games(match)
    points = g1 if team == 1 else g2
    if set_winner(match) == team:
        points += 1
    return points
