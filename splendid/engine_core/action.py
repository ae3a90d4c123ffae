"""
Action System - Actions, payloads, and results.

Actions represent the four things a seat can do on its turn:
1. Take gems from the bank
2. Purchase a card (from the display or own reserve)
3. Reserve a card (visible, or blind from a tier deck)
4. Discard gems (only to resolve a pending discard)

All state changes flow through actions. Rule failures are reported as
ActionResult values carrying an ErrorCode, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..catalog import Gem
from .gems import GemPool


class ActionType(Enum):
    """Types of player actions."""
    TAKE_GEMS = "TAKE_GEMS"
    PURCHASE_CARD = "PURCHASE_CARD"
    RESERVE_CARD = "RESERVE_CARD"
    DISCARD_GEMS = "DISCARD_GEMS"


class ErrorCode(Enum):
    """Rule violations reported by the reducer."""
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    INVALID_GEM_SELECTION_SHAPE = "INVALID_GEM_SELECTION_SHAPE"
    RESERVE_LIMIT_REACHED = "RESERVE_LIMIT_REACHED"
    GEM_CAP_EXCEEDED = "GEM_CAP_EXCEEDED"
    NO_PENDING_DISCARD = "NO_PENDING_DISCARD"
    GAME_ALREADY_FINISHED = "GAME_ALREADY_FINISHED"
    UNKNOWN_ACTION_TYPE = "UNKNOWN_ACTION_TYPE"


@dataclass
class ActionPayload:
    """
    Payload for an action.

    Different action types use different fields; validation happens in
    the reducer.
    """
    player_id: str | None = None
    card_id: int | None = None
    tier: int | None = None  # blind reserve from this tier's deck
    gems: GemPool | None = None  # take / discard selection


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer

    action_type is a plain string when parsed from an unrecognised wire
    type, so the reducer can reject it.
    """
    action_type: ActionType | str
    payload: ActionPayload

    @classmethod
    def take_gems(cls, player_id: str, gems: dict[Gem | str, int] | GemPool) -> Action:
        """Factory for take gems action."""
        pool = gems if isinstance(gems, GemPool) else GemPool.from_mapping(gems)
        return cls(
            action_type=ActionType.TAKE_GEMS,
            payload=ActionPayload(player_id=player_id, gems=pool),
        )

    @classmethod
    def purchase(cls, player_id: str, card_id: int) -> Action:
        """Factory for purchase action."""
        return cls(
            action_type=ActionType.PURCHASE_CARD,
            payload=ActionPayload(player_id=player_id, card_id=card_id),
        )

    @classmethod
    def reserve(cls, player_id: str, card_id: int) -> Action:
        """Factory for reserving a visible card."""
        return cls(
            action_type=ActionType.RESERVE_CARD,
            payload=ActionPayload(player_id=player_id, card_id=card_id),
        )

    @classmethod
    def reserve_blind(cls, player_id: str, tier: int) -> Action:
        """Factory for reserving the top card of a tier deck."""
        return cls(
            action_type=ActionType.RESERVE_CARD,
            payload=ActionPayload(player_id=player_id, tier=tier),
        )

    @classmethod
    def discard(cls, player_id: str, gems: dict[Gem | str, int] | GemPool) -> Action:
        """Factory for discard action."""
        pool = gems if isinstance(gems, GemPool) else GemPool.from_mapping(gems)
        return cls(
            action_type=ActionType.DISCARD_GEMS,
            payload=ActionPayload(player_id=player_id, gems=pool),
        )

    @property
    def type_name(self) -> str:
        if isinstance(self.action_type, ActionType):
            return self.action_type.value
        return str(self.action_type)

    def to_dict(self) -> dict[str, Any]:
        """Wire form."""
        data: dict[str, Any] = {
            "type": self.type_name,
            "player_id": self.payload.player_id,
        }
        if self.payload.card_id is not None:
            data["card_id"] = self.payload.card_id
        if self.payload.tier is not None:
            data["tier"] = self.payload.tier
        if self.payload.gems is not None:
            data["gems"] = self.payload.gems.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """
        Parse the wire form.

        Unknown type strings are kept as-is. Malformed gem selections
        raise ValueError.
        """
        raw_type = str(data.get("type", ""))
        try:
            action_type: ActionType | str = ActionType(raw_type.upper())
        except ValueError:
            action_type = raw_type

        gems = data.get("gems")
        card_id = data.get("card_id")
        tier = data.get("tier")
        return cls(
            action_type=action_type,
            payload=ActionPayload(
                player_id=data.get("player_id"),
                card_id=int(card_id) if card_id is not None else None,
                tier=int(tier) if tier is not None else None,
                gems=GemPool.from_mapping(gems) if gems is not None else None,
            ),
        )

    def describe(self) -> str:
        """Short human-readable form for logs and explanations."""
        p = self.payload
        if self.action_type == ActionType.TAKE_GEMS or self.action_type == ActionType.DISCARD_GEMS:
            return f"{self.type_name} {p.gems.to_dict() if p.gems else {}}"
        if self.action_type == ActionType.RESERVE_CARD and p.card_id is None:
            return f"{self.type_name} tier {p.tier} (blind)"
        return f"{self.type_name} {p.card_id}"


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error code, message and context (if failed)
    - Human-readable changes and nobles awarded (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None
    context: dict[str, Any] = field(default_factory=dict)

    state_changes: list[str] = field(default_factory=list)
    nobles_awarded: list[int] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode, **context: Any) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code, context=context)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        nobles_awarded: list[int] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            nobles_awarded=nobles_awarded or [],
        )
