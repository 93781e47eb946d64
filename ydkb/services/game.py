# ydkb/services/game.py
"""Per-player guess sessions.

A session is the state of one user's attempts against one (date, player)
pairing. It is persisted as JSON under ``game-<date>-<playerId>`` in any
string key/value store (the HTTP layer uses the signed session cookie).
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, MutableMapping, Optional

from .hints import CORRECT_FEEDBACK, generate_hint, is_correct_guess

log = logging.getLogger(__name__)

STATUS_IDLE = "idle"
STATUS_PLAYING = "playing"
STATUS_WON = "won"
STATUS_LOST = "lost"


def storage_key(date_str: str, player_id: Any) -> str:
    return f"game-{date_str}-{player_id}"


@dataclass
class GameSession:
    date: str
    player_id: Any
    max_attempts: int = 3
    attempts: int = 0
    correct_guess: bool = False
    gave_up: bool = False
    guesses: List[str] = field(default_factory=list)
    game_complete: bool = False
    feedback: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return storage_key(self.date, self.player_id)

    @property
    def status(self) -> str:
        if not self.game_complete:
            return STATUS_PLAYING
        return STATUS_WON if self.correct_guess else STATUS_LOST

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)

    def make_guess(
        self,
        guess: str,
        answer: str,
        hint_fn: Callable[[str, str], str] = generate_hint,
    ) -> bool:
        """
        Record a guess. Finished games and repeated guesses are ignored and
        return False without using an attempt.
        """
        guess = (guess or "").strip()
        if self.game_complete or not guess or guess in self.guesses:
            return False

        correct = is_correct_guess(guess, answer)
        self.guesses.append(guess)
        self.attempts += 1
        self.feedback.append(CORRECT_FEEDBACK if correct else hint_fn(guess, answer))

        if correct:
            self.correct_guess = True
            self.game_complete = True
        elif self.attempts >= self.max_attempts:
            self.game_complete = True
        return correct

    def give_up(self) -> None:
        self.gave_up = True
        self.game_complete = True

    def reset(self) -> None:
        self.attempts = 0
        self.correct_guess = False
        self.gave_up = False
        self.guesses = []
        self.game_complete = False
        self.feedback = []

    def to_dict(self) -> dict:
        return {
            "attempts": self.attempts,
            "correctGuess": self.correct_guess,
            "gaveUp": self.gave_up,
            "guesses": list(self.guesses),
            "gameComplete": self.game_complete,
            "feedback": list(self.feedback),
        }

    @classmethod
    def from_dict(cls, date_str: str, player_id: Any, data: dict, max_attempts: int = 3) -> "GameSession":
        """
        Rebuild a stored session under this tier's budget. The same player can
        back two tiers with different budgets, so stored attempts are capped
        and a session at or past the budget comes back finished.
        """
        attempts = int(data.get("attempts") or 0)
        return cls(
            date=date_str,
            player_id=player_id,
            max_attempts=max_attempts,
            attempts=min(attempts, max_attempts),
            correct_guess=bool(data.get("correctGuess")),
            gave_up=bool(data.get("gaveUp")),
            guesses=[str(g) for g in (data.get("guesses") or [])],
            game_complete=bool(data.get("gameComplete")) or attempts >= max_attempts,
            feedback=[str(f) for f in (data.get("feedback") or [])],
        )


# --- Persistence -------------------------------------------------------------

def load_session(
    store: MutableMapping[str, Any],
    date_str: str,
    player_id: Any,
    max_attempts: int = 3,
) -> GameSession:
    """Rehydrate a session, or start a fresh one if nothing usable is stored."""
    key = storage_key(date_str, player_id)
    raw = store.get(key)
    if raw:
        try:
            return GameSession.from_dict(date_str, player_id, json.loads(raw), max_attempts)
        except (ValueError, TypeError, AttributeError):
            log.warning("discarding unreadable game state under %s", key)
    return GameSession(date=date_str, player_id=player_id, max_attempts=max_attempts)


def save_session(store: MutableMapping[str, Any], session: GameSession) -> None:
    store[session.key] = json.dumps(session.to_dict())


def clear_session(store: MutableMapping[str, Any], date_str: str, player_id: Any) -> None:
    store.pop(storage_key(date_str, player_id), None)


def describe(session: Optional[GameSession], difficulty: Optional[str] = None) -> dict:
    """API view of a session; 'idle' until a difficulty has been picked."""
    if session is None:
        return {"status": STATUS_IDLE, "difficulty": None}
    out = session.to_dict()
    out.update(
        status=session.status,
        difficulty=difficulty,
        date=session.date,
        playerId=session.player_id,
        maxAttempts=session.max_attempts,
        attemptsRemaining=session.attempts_remaining,
    )
    return out
