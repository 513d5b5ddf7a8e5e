from fastapi import HTTPException, status

from ..errors import (
    BetNotModifiableError,
    LigainError,
    PlayerAlreadyInGameError,
    UnknownEntityError,
)


def http_error(exc: LigainError) -> HTTPException:
    """Translate a game error into the HTTP response the client sees."""
    if isinstance(exc, UnknownEntityError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, BetNotModifiableError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, PlayerAlreadyInGameError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    # Invalid transitions, double scoring, scoring too early, finished games
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
