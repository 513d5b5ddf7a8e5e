import logging
import secrets
from collections import defaultdict
from datetime import datetime, UTC
from typing import Iterable, Mapping, Optional

from sqlmodel import Session, select

from ..errors import MatchAlreadyScoredError, PlayerAlreadyInGameError, UnknownGameError
from ..game import Game
from ..models import (
    Bet,
    BetRecord,
    GamePlayer,
    GameRecord,
    GameStatus,
    Match,
    Player,
    PlayerRecord,
    ScoreRecord,
    SeasonMatch,
)
from ..scoring import Scorer

logger = logging.getLogger(__name__)


def get_game_record(db: Session, game_id: str) -> GameRecord:
    record = db.get(GameRecord, game_id)
    if record is None:
        raise UnknownGameError(game_id)
    return record


def ensure_player(db: Session, player: Player) -> PlayerRecord:
    """Get or create the player row, keeping the display name current."""
    record = db.get(PlayerRecord, player.id)
    if record is None:
        record = PlayerRecord(id=player.id, name=player.name)
    elif record.name != player.name:
        record.name = player.name
        record.updated_at = datetime.now(UTC)
    db.add(record)
    return record


def create_game(
    db: Session,
    name: str,
    season_code: str,
    competition_code: str,
    players: Iterable[Player] = (),
    game_id: Optional[str] = None,
) -> GameRecord:
    record = GameRecord(
        id=game_id or secrets.token_hex(8),
        name=name,
        season_code=season_code,
        competition_code=competition_code,
        status=GameStatus.IN_PROGRESS,
    )
    db.add(record)
    for player in players:
        ensure_player(db, player)
        db.add(GamePlayer(game_id=record.id, player_id=player.id))
    db.commit()
    db.refresh(record)
    logger.info("Created game %s (%s %s)", record.id, competition_code, season_code)
    return record


def join_game(db: Session, game_id: str, player: Player) -> None:
    get_game_record(db, game_id)
    if db.get(GamePlayer, (game_id, player.id)) is not None:
        raise PlayerAlreadyInGameError(player.id)
    ensure_player(db, player)
    db.add(GamePlayer(game_id=game_id, player_id=player.id))
    db.commit()
    logger.info("Player %s joined game %s", player.id, game_id)


def leave_game(db: Session, game_id: str, player_id: str, unscored_match_ids: Iterable[str]) -> None:
    """Drop a player from a game along with their bets on matches not scored yet."""
    membership = db.get(GamePlayer, (game_id, player_id))
    if membership is not None:
        db.delete(membership)
    match_ids = list(unscored_match_ids)
    if match_ids:
        statement = select(BetRecord).where(
            BetRecord.game_id == game_id,
            BetRecord.player_id == player_id,
            BetRecord.match_id.in_(match_ids)
        )
        for bet in db.exec(statement).all():
            db.delete(bet)
    db.commit()
    logger.info("Player %s left game %s", player_id, game_id)


def load_game(db: Session, game_id: str, scorer: Optional[Scorer] = None) -> Game:
    """Rebuild the in-memory game with its matches, bets and applied scores."""
    record = get_game_record(db, game_id)

    players_statement = (
        select(PlayerRecord)
        .join(GamePlayer, GamePlayer.player_id == PlayerRecord.id)
        .where(GamePlayer.game_id == game_id)
    )
    players = [p.to_simple_player() for p in db.exec(players_statement).all()]

    matches_statement = select(SeasonMatch).where(
        SeasonMatch.competition_code == record.competition_code,
        SeasonMatch.season_code == record.season_code
    )
    matches = db.exec(matches_statement).all()
    matches_by_id = {match.id: match for match in matches}

    bets: dict[str, dict[str, Bet]] = defaultdict(dict)
    for bet in db.exec(select(BetRecord).where(BetRecord.game_id == game_id)).all():
        match = matches_by_id.get(bet.match_id)
        if match is None:
            continue
        bets[bet.match_id][bet.player_id] = Bet(match, bet.predicted_home_goals, bet.predicted_away_goals)

    scores: dict[str, dict[str, int]] = defaultdict(dict)
    for score in db.exec(select(ScoreRecord).where(ScoreRecord.game_id == game_id)).all():
        scores[score.match_id][score.player_id] = score.points

    return Game.restore(
        record.season_code,
        record.competition_code,
        record.name,
        players,
        matches,
        bets,
        scores,
        scorer=scorer,
        status=record.status,
    )


def save_bet(db: Session, game_id: str, player_id: str, bet: Bet) -> BetRecord:
    """Insert or update the single bet of a player on a match."""
    statement = select(BetRecord).where(
        BetRecord.game_id == game_id,
        BetRecord.match_id == bet.match.id,
        BetRecord.player_id == player_id
    )
    record = db.exec(statement).first()

    if record:
        record.predicted_home_goals = bet.predicted_home_goals
        record.predicted_away_goals = bet.predicted_away_goals
        record.updated_at = datetime.now(UTC)
    else:
        record = BetRecord(
            game_id=game_id,
            match_id=bet.match.id,
            player_id=player_id,
            predicted_home_goals=bet.predicted_home_goals,
            predicted_away_goals=bet.predicted_away_goals
        )
        db.add(record)

    db.commit()
    db.refresh(record)
    return record


def save_scores(db: Session, game_id: str, match_id: str, scores: Mapping[str, int]) -> None:
    """Persist every score of a match in one commit."""
    statement = select(ScoreRecord).where(ScoreRecord.game_id == game_id, ScoreRecord.match_id == match_id)
    if db.exec(statement).first() is not None:
        raise MatchAlreadyScoredError(match_id)

    for player_id, points in scores.items():
        db.add(ScoreRecord(game_id=game_id, match_id=match_id, player_id=player_id, points=points))
    db.commit()


def save_game_status(db: Session, game_id: str, status: GameStatus) -> None:
    record = get_game_record(db, game_id)
    record.status = status
    record.updated_at = datetime.now(UTC)
    db.add(record)
    db.commit()


def games_for_match(db: Session, match: Match) -> list[GameRecord]:
    """Games played on the competition and season the match belongs to."""
    statement = select(GameRecord).where(
        GameRecord.competition_code == match.competition_code,
        GameRecord.season_code == match.season_code
    )
    return list(db.exec(statement).all())
