"""
Match Manager - Creates and manages hosted matches.

LIFECYCLE:
1. Host creates a match → seats, seed and bot seats fixed
2. During play:
   - Human seats submit actions
   - Engine validates and updates canonical state
   - Bot seats are driven by the game loop
3. Match ends → removed from memory

PERSISTENCE RULES:
- No database; matches live in memory only
- A match can always be rebuilt from (seats, seed, action log)

CONCURRENCY:
- Each match has its own lock
- Actions on one match are applied one at a time
- Different matches never block each other
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import threading
import time
from typing import Iterable

from ..engine_core.state import GameState, MatchConfig
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import apply_action
from ..engine_core.setup import initialize_match, SeatSpec
from ..bots import BotPolicy, SplendorBot
from .game_loop import GameLoop, TurnResult

logger = logging.getLogger(__name__)


class MatchNotFoundError(KeyError):
    """No hosted match with this id."""


class MatchStatus(Enum):
    """State of a hosted match."""
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Match:
    """
    A hosted match.

    Contains:
    - The canonical game state
    - Bots for bot seats
    - Match metadata

    Only the manager replaces `state`, under `lock`.
    """
    match_id: str
    state: GameState
    created_at: float
    bots: dict[str, BotPolicy] = field(default_factory=dict)
    status: MatchStatus = MatchStatus.ACTIVE
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def is_active(self) -> bool:
        return self.status == MatchStatus.ACTIVE

    def is_bot_turn(self) -> bool:
        """Check if a bot seat is up."""
        if self.state.is_finished:
            return False
        return self.state.current_player.player_id in self.bots


class MatchManager:
    """
    Manages hosted matches.

    Responsibilities:
    - Create matches and their bots
    - Serialize actions per match
    - Run bot seats
    - Clean up ended matches

    No persistence - matches are in-memory only.
    """

    def __init__(self, game_loop: GameLoop | None = None):
        self._matches: dict[str, Match] = {}
        self._registry_lock = threading.Lock()
        self.game_loop = game_loop or GameLoop()

    def create_match(
        self,
        seats: Iterable[SeatSpec],
        random_seed: int | None = None,
        config: MatchConfig | None = None,
        bots: dict[str, BotPolicy] | None = None,
    ) -> Match:
        """
        Create a new match.

        Args:
            seats: Ordered seats, (player_id, name) or (player_id, name, is_bot)
            random_seed: Seed for the shuffle (generated if omitted)
            config: Rule knobs
            bots: Policies for bot seats; seats marked is_bot without an
                entry here get a SplendorBot

        Returns:
            New Match, first seat to act
        """
        state = initialize_match(seats, random_seed=random_seed, config=config)

        match_bots = dict(bots or {})
        for player in state.ordered_players():
            if player.is_bot and player.player_id not in match_bots:
                match_bots[player.player_id] = SplendorBot()

        unknown = [seat for seat in match_bots if state.get_player(seat) is None]
        if unknown:
            raise ValueError(f"Bots given for unknown seats: {', '.join(unknown)}")

        match = Match(
            match_id=state.game_id,
            state=state,
            created_at=time.time(),
            bots=match_bots,
        )
        with self._registry_lock:
            self._matches[match.match_id] = match

        logger.info(
            "Created match %s with %d seats (%d bots)",
            match.match_id, state.num_players, len(match_bots),
        )
        return match

    def get_match(self, match_id: str) -> Match | None:
        """Get a match by ID."""
        with self._registry_lock:
            return self._matches.get(match_id)

    def _require(self, match_id: str) -> Match:
        match = self.get_match(match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    def submit_action(self, match_id: str, action: Action) -> ActionResult:
        """
        Apply an action to a match.

        Rule failures come back as a failed ActionResult and leave the
        match untouched. Raises MatchNotFoundError for an unknown match.
        """
        match = self._require(match_id)
        with match.lock:
            result = apply_action(match.state, action)
            if result.success:
                match.state = result.new_state
                if match.state.is_finished:
                    match.status = MatchStatus.GAME_OVER
                    logger.info(
                        "Match %s finished, winner %s", match_id, match.state.winner,
                    )
        return result

    def run_bot_turns(self, match_id: str) -> TurnResult:
        """
        Play bot seats until a human seat is up or the match ends.

        Raises MatchNotFoundError for an unknown match.
        """
        match = self._require(match_id)
        with match.lock:
            result = self.game_loop.run_bot_turns(match.state, match.bots)
            match.state = result.state
            if match.state.is_finished:
                match.status = MatchStatus.GAME_OVER
        return result

    def end_match(self, match_id: str, reason: str = "completed") -> bool:
        """
        End a match and drop it from memory.

        Returns False if there was no such match.
        """
        with self._registry_lock:
            match = self._matches.pop(match_id, None)
        if match is None:
            return False

        with match.lock:
            if reason == "completed" and match.state.is_finished:
                match.status = MatchStatus.GAME_OVER
            else:
                match.status = MatchStatus.ABANDONED
        logger.info("Ended match %s (%s)", match_id, reason)
        return True

    def list_active_matches(self) -> list[str]:
        """List IDs of active matches."""
        with self._registry_lock:
            return [mid for mid, match in self._matches.items() if match.is_active()]

    def cleanup_stale_matches(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished matches older than max_age.

        Returns the number removed.
        """
        now = time.time()
        with self._registry_lock:
            stale = [
                mid for mid, match in self._matches.items()
                if now - match.created_at > max_age_seconds and not match.is_active()
            ]
        for match_id in stale:
            self.end_match(match_id, reason="stale")
        return len(stale)
