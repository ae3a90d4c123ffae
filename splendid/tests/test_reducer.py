"""
Tests for the reducer (state transitions).

Tests:
- Action application
- State mutation correctness
- Validation and error codes
- Pending discard and end of game
"""

import pytest

from ..catalog import Gem
from ..engine_core.gems import GemPool
from ..engine_core.state import GamePhase
from ..engine_core.action import Action, ActionType, ActionPayload, ErrorCode
from ..engine_core.reducer import Reducer, apply_action
from .conftest import QUIET_DISPLAYS, build_state, give_cards, give_gems


def take(player_id: str, *colors: str) -> Action:
    return Action.take_gems(player_id, {color: 1 for color in colors})


class TestTakeGems:
    """Tests for taking gems."""

    def test_take_three_distinct(self, quiet_state):
        """Bank 4/4/4/4/4 + 5 gold; taking ruby, sapphire, emerald."""
        result = apply_action(quiet_state, take("p1", "ruby", "sapphire", "emerald"))

        assert result.success
        state = result.new_state
        assert state.bank.to_dict(include_zero=True) == {
            "diamond": 4, "sapphire": 3, "emerald": 3, "ruby": 3, "onyx": 4, "gold": 5,
        }
        assert state.get_player("p1").gems.nonzero() == {
            Gem.SAPPHIRE: 1, Gem.EMERALD: 1, Gem.RUBY: 1,
        }
        assert state.current_player.player_id == "p2"
        assert state.turn_number == 1

    def test_input_state_untouched(self, quiet_state):
        bank_before = quiet_state.bank
        apply_action(quiet_state, take("p1", "ruby", "sapphire", "emerald"))
        assert quiet_state.bank == bank_before
        assert quiet_state.get_player("p1").gems.total() == 0
        assert quiet_state.action_history == []

    def test_take_double(self, quiet_state):
        result = apply_action(quiet_state, Action.take_gems("p1", {"onyx": 2}))
        assert result.success
        assert result.new_state.bank.get(Gem.ONYX) == 2

    def test_double_with_three_in_bank(self, quiet_state):
        quiet_state.bank = quiet_state.bank.with_count(Gem.ONYX, 3)
        result = apply_action(quiet_state, Action.take_gems("p1", {"onyx": 2}))
        assert not result.success
        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_two_plus_one_shape(self, quiet_state):
        result = apply_action(quiet_state, Action.take_gems("p1", {"onyx": 2, "ruby": 1}))
        assert result.error_code == ErrorCode.INVALID_GEM_SELECTION_SHAPE

    def test_gold_cannot_be_taken(self, quiet_state):
        result = apply_action(quiet_state, Action.take_gems("p1", {"gold": 1}))
        assert result.error_code == ErrorCode.INVALID_GEM_SELECTION_SHAPE

    def test_color_exhausted(self, quiet_state):
        quiet_state.bank = quiet_state.bank.with_count(Gem.RUBY, 0)
        result = apply_action(quiet_state, take("p1", "ruby", "onyx"))
        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_history_records_action(self, quiet_state):
        action = take("p1", "ruby")
        result = apply_action(quiet_state, action)
        assert result.new_state.action_history == [action]


class TestPurchase:
    """Tests for buying cards."""

    def test_bonus_discount(self, quiet_state):
        """Two sapphire bonuses pay half of card 108 (sapphire 4)."""
        give_cards(quiet_state, "p1", [109, 110])
        give_gems(quiet_state, "p1", sapphire=2)

        result = apply_action(quiet_state, Action.purchase("p1", 108))

        assert result.success
        state = result.new_state
        p1 = state.get_player("p1")
        assert p1.gems.total() == 0
        assert 108 in p1.cards
        assert p1.points == 1
        assert state.bank.get(Gem.SAPPHIRE) == 4

    def test_display_slot_refilled_from_deck(self, quiet_state):
        give_gems(quiet_state, "p1", sapphire=4)
        top = quiet_state.tiers[1].deck[0]
        deck_size = len(quiet_state.tiers[1].deck)

        result = apply_action(quiet_state, Action.purchase("p1", 108))

        row = result.new_state.tiers[1]
        assert row.display[0] == top
        assert len(row.deck) == deck_size - 1

    def test_empty_deck_leaves_empty_slot(self, quiet_state):
        give_gems(quiet_state, "p1", sapphire=4)
        quiet_state.tiers[1].deck = []

        result = apply_action(quiet_state, Action.purchase("p1", 108))

        assert result.success
        assert result.new_state.tiers[1].display[0] is None
        assert result.new_state.tiers[1].visible_cards == [115, 123, 131]

    def test_gold_is_wild(self, quiet_state):
        give_gems(quiet_state, "p1", sapphire=3, gold=1)
        result = apply_action(quiet_state, Action.purchase("p1", 108))
        assert result.success
        assert result.new_state.bank.get(Gem.GOLD) == 5
        assert result.new_state.get_player("p1").gems.total() == 0

    def test_insufficient_resources(self, quiet_state):
        give_gems(quiet_state, "p1", sapphire=2, gold=1)
        result = apply_action(quiet_state, Action.purchase("p1", 108))
        assert not result.success
        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert result.context["missing"] == {"sapphire": 2}

    def test_card_not_on_display(self, quiet_state):
        result = apply_action(quiet_state, Action.purchase("p1", 140))
        assert result.error_code == ErrorCode.CARD_NOT_FOUND

    def test_unknown_card_id(self, quiet_state):
        result = apply_action(quiet_state, Action.purchase("p1", 999))
        assert result.error_code == ErrorCode.CARD_NOT_FOUND

    def test_buy_from_reserve(self, quiet_state):
        quiet_state.tiers[1].deck.remove(140)
        quiet_state.get_player("p1").reserved.append(140)
        give_gems(quiet_state, "p1", diamond=4)

        result = apply_action(quiet_state, Action.purchase("p1", 140))

        assert result.success
        p1 = result.new_state.get_player("p1")
        assert p1.reserved == []
        assert p1.cards == [140]
        assert result.new_state.tiers[1].display == QUIET_DISPLAYS[1]

    def test_cannot_buy_opponents_reserve(self, quiet_state):
        quiet_state.tiers[1].deck.remove(140)
        quiet_state.get_player("p2").reserved.append(140)
        give_gems(quiet_state, "p1", diamond=4)
        result = apply_action(quiet_state, Action.purchase("p1", 140))
        assert result.error_code == ErrorCode.CARD_NOT_FOUND


class TestReserve:
    """Tests for reserving cards."""

    def test_reserve_visible_takes_gold(self, quiet_state):
        top = quiet_state.tiers[3].deck[0]
        result = apply_action(quiet_state, Action.reserve("p1", 305))

        assert result.success
        state = result.new_state
        p1 = state.get_player("p1")
        assert p1.reserved == [305]
        assert p1.gems.get(Gem.GOLD) == 1
        assert state.bank.get(Gem.GOLD) == 4
        assert state.tiers[3].display[1] == top

    def test_reserve_blind_takes_deck_top(self, quiet_state):
        top = quiet_state.tiers[2].deck[0]
        result = apply_action(quiet_state, Action.reserve_blind("p1", 2))

        assert result.success
        state = result.new_state
        assert state.get_player("p1").reserved == [top]
        assert state.tiers[2].display == QUIET_DISPLAYS[2]
        assert top not in state.tiers[2].deck

    def test_blind_reserve_stays_face_down(self, quiet_state):
        result = apply_action(quiet_state, Action.reserve_blind("p1", 1))

        p1 = result.new_state.get_player("p1")
        assert p1.reserved == [101]
        assert p1.blind_reserved == [101]
        assert quiet_state.get_player("p1").blind_reserved == []
        assert "101" not in " ".join(result.state_changes)

    def test_visible_reserve_is_face_up(self, quiet_state):
        result = apply_action(quiet_state, Action.reserve("p1", 305))
        assert result.new_state.get_player("p1").blind_reserved == []

    def test_buying_blind_reserve_clears_it(self, quiet_state):
        give_gems(quiet_state, "p1", diamond=1, sapphire=1, emerald=1, ruby=1)
        state = apply_action(quiet_state, Action.reserve_blind("p1", 1)).new_state
        state = apply_action(state, take("p2", "onyx")).new_state

        result = apply_action(state, Action.purchase("p1", 101))

        assert result.success
        p1 = result.new_state.get_player("p1")
        assert p1.cards == [101]
        assert p1.reserved == []
        assert p1.blind_reserved == []

    def test_reserve_without_gold_in_bank(self, quiet_state):
        quiet_state.bank = quiet_state.bank.with_count(Gem.GOLD, 0)
        result = apply_action(quiet_state, Action.reserve("p1", 305))
        assert result.success
        assert result.new_state.get_player("p1").gems.get(Gem.GOLD) == 0

    def test_reserve_limit(self, quiet_state):
        for card_id in (140, 139, 138):
            quiet_state.tiers[1].deck.remove(card_id)
            quiet_state.get_player("p1").reserved.append(card_id)
        result = apply_action(quiet_state, Action.reserve("p1", 305))
        assert result.error_code == ErrorCode.RESERVE_LIMIT_REACHED

    def test_blind_reserve_from_empty_deck(self, quiet_state):
        quiet_state.tiers[3].deck = []
        result = apply_action(quiet_state, Action.reserve_blind("p1", 3))
        assert result.error_code == ErrorCode.SLOT_UNAVAILABLE

    def test_blind_reserve_from_unknown_tier(self, quiet_state):
        result = apply_action(quiet_state, Action.reserve_blind("p1", 7))
        assert result.error_code == ErrorCode.SLOT_UNAVAILABLE

    def test_reserve_card_not_on_display(self, quiet_state):
        result = apply_action(quiet_state, Action.reserve("p1", 320))
        assert result.error_code == ErrorCode.CARD_NOT_FOUND

    def test_reserve_gold_can_push_over_cap(self, quiet_state):
        give_gems(quiet_state, "p1", diamond=2, sapphire=2, emerald=2, ruby=2, onyx=2)
        result = apply_action(quiet_state, Action.reserve("p1", 305))
        assert result.success
        assert result.new_state.pending_discard == "p1"
        assert result.new_state.current_player.player_id == "p1"


class TestNobles:
    """Noble visits after a purchase."""

    def test_noble_awarded_on_purchase(self):
        state = build_state(displays={1: [124, 108, 115, 123]}, nobles=[2, 1])
        # Charles Quint: onyx 3, ruby 3, diamond 3
        give_cards(state, "p1", [101, 102, 103, 133, 134, 135, 117, 118])
        give_gems(state, "p1", diamond=1)

        result = apply_action(state, Action.purchase("p1", 124))

        assert result.success
        assert result.nobles_awarded == [2]
        p1 = result.new_state.get_player("p1")
        assert p1.nobles == [2]
        assert p1.points == 3
        assert result.new_state.nobles == [1]

    def test_no_noble_without_requirements(self):
        state = build_state(displays={1: [124, 108, 115, 123]}, nobles=[2])
        give_cards(state, "p1", [101, 102, 133, 134, 135, 117, 118])
        give_gems(state, "p1", diamond=1)

        result = apply_action(state, Action.purchase("p1", 124))

        assert result.success
        assert result.nobles_awarded == []
        assert result.new_state.nobles == [2]

    def test_every_eligible_noble_is_awarded(self):
        state = build_state(displays={1: [124, 108, 115, 123]}, nobles=[2, 9])
        # Charles Quint (onyx, ruby, diamond) and Elisabeth (onyx, sapphire, diamond)
        give_cards(state, "p1", [101, 102, 103, 133, 134, 135, 109, 110, 111, 117, 118])
        give_gems(state, "p1", diamond=1)

        result = apply_action(state, Action.purchase("p1", 124))

        assert sorted(result.nobles_awarded) == [2, 9]
        assert result.new_state.get_player("p1").points == 6

    def test_reserve_never_awards_nobles(self):
        state = build_state(displays=QUIET_DISPLAYS, nobles=[2])
        give_cards(state, "p1", [101, 102, 103, 133, 134, 135, 117, 118, 119])
        result = apply_action(state, Action.reserve("p1", 305))
        assert result.nobles_awarded == []
        assert result.new_state.nobles == [2]


class TestPendingDiscard:
    """Gem cap and the discard step."""

    @pytest.fixture
    def over_cap(self, quiet_state):
        """p1 at 12 gems after taking three."""
        give_gems(quiet_state, "p1", diamond=3, sapphire=3, emerald=3)
        result = apply_action(quiet_state, take("p1", "ruby", "onyx", "diamond"))
        assert result.success
        return result.new_state

    def test_exactly_ten_is_fine(self, quiet_state):
        give_gems(quiet_state, "p1", diamond=3, sapphire=2, emerald=2)
        result = apply_action(quiet_state, take("p1", "ruby", "onyx", "diamond"))
        assert result.new_state.pending_discard is None
        assert result.new_state.current_player.player_id == "p2"

    def test_over_cap_parks_turn(self, over_cap):
        assert over_cap.pending_discard == "p1"
        assert over_cap.current_player.player_id == "p1"
        assert over_cap.turn_number == 0

    def test_other_actions_blocked(self, over_cap):
        result = apply_action(over_cap, take("p1", "ruby"))
        assert result.error_code == ErrorCode.GEM_CAP_EXCEEDED

    def test_other_seat_blocked(self, over_cap):
        result = apply_action(over_cap, take("p2", "ruby"))
        assert result.error_code == ErrorCode.NOT_YOUR_TURN

    def test_discard_too_few(self, over_cap):
        result = apply_action(over_cap, Action.discard("p1", {"diamond": 1}))
        assert result.error_code == ErrorCode.GEM_CAP_EXCEEDED
        assert over_cap.pending_discard == "p1"

    def test_discard_more_than_held(self, over_cap):
        result = apply_action(over_cap, Action.discard("p1", {"ruby": 2}))
        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES

    def test_empty_discard(self, over_cap):
        result = apply_action(over_cap, Action.discard("p1", {}))
        assert result.error_code == ErrorCode.INVALID_GEM_SELECTION_SHAPE

    def test_discard_resolves_and_advances(self, over_cap):
        result = apply_action(over_cap, Action.discard("p1", {"diamond": 2}))

        assert result.success
        state = result.new_state
        assert state.pending_discard is None
        assert state.get_player("p1").gem_count == 10
        assert state.bank.get(Gem.DIAMOND) == 2
        assert state.current_player.player_id == "p2"
        assert state.turn_number == 1

    def test_discard_below_cap_allowed(self, over_cap):
        result = apply_action(over_cap, Action.discard("p1", {"sapphire": 3}))
        assert result.success
        assert result.new_state.get_player("p1").gem_count == 9

    def test_discard_without_pending(self, quiet_state):
        give_gems(quiet_state, "p1", ruby=1)
        result = apply_action(quiet_state, Action.discard("p1", {"ruby": 1}))
        assert result.error_code == ErrorCode.NO_PENDING_DISCARD


class TestValidation:
    """Checks shared by every action type."""

    def test_not_your_turn(self, quiet_state):
        result = apply_action(quiet_state, take("p2", "ruby"))
        assert result.error_code == ErrorCode.NOT_YOUR_TURN
        assert result.context["current_player_id"] == "p1"

    def test_unknown_player(self, quiet_state):
        result = apply_action(quiet_state, take("ghost", "ruby"))
        assert result.error_code == ErrorCode.PLAYER_NOT_FOUND

    def test_unknown_action_type(self, quiet_state):
        action = Action(action_type="PASS", payload=ActionPayload(player_id="p1"))
        result = apply_action(quiet_state, action)
        assert result.error_code == ErrorCode.UNKNOWN_ACTION_TYPE

    def test_finished_game(self, quiet_state):
        quiet_state.phase = GamePhase.FINISHED
        result = apply_action(quiet_state, take("p1", "ruby"))
        assert result.error_code == ErrorCode.GAME_ALREADY_FINISHED

    def test_reducer_class_matches_helper(self, quiet_state):
        action = take("p1", "ruby")
        a = Reducer().apply(quiet_state, action)
        b = apply_action(quiet_state, action)
        assert a.new_state.bank == b.new_state.bank


class TestEndGame:
    """Last round and winner selection."""

    def test_last_round_runs_to_the_trigger_seat(self, four_player_state):
        state = four_player_state
        state.get_player("p2").points = 14
        give_gems(state, "p2", sapphire=4)

        state = apply_action(state, take("p1", "ruby")).new_state
        result = apply_action(state, Action.purchase("p2", 108))
        assert result.success
        state = result.new_state
        assert state.last_round
        assert state.phase == GamePhase.LAST_ROUND
        assert state.last_round_trigger_idx == 1

        state = apply_action(state, take("p3", "ruby")).new_state
        assert state.phase == GamePhase.LAST_ROUND
        state = apply_action(state, take("p4", "ruby")).new_state
        assert state.phase == GamePhase.LAST_ROUND
        assert state.current_player.player_id == "p1"

        state = apply_action(state, take("p1", "onyx")).new_state
        assert state.phase == GamePhase.FINISHED
        assert state.winner == "p2"
        assert state.co_leaders == ["p2"]

        result = apply_action(state, take("p2", "ruby"))
        assert result.error_code == ErrorCode.GAME_ALREADY_FINISHED

    def test_first_seat_trigger_gives_everyone_a_turn(self, quiet_state):
        state = quiet_state
        state.get_player("p1").points = 14
        give_gems(state, "p1", sapphire=4)

        state = apply_action(state, Action.purchase("p1", 108)).new_state
        assert state.last_round
        assert not state.is_finished

        state = apply_action(state, take("p2", "ruby")).new_state
        assert state.is_finished
        assert state.winner == "p1"

    def test_tie_broken_by_fewer_cards(self, quiet_state):
        state = quiet_state
        give_cards(state, "p1", [101, 102])
        state.get_player("p1").points = 14
        give_gems(state, "p1", sapphire=4)
        give_cards(state, "p2", [103, 104, 105, 106, 107])
        state.get_player("p2").points = 15

        state = apply_action(state, Action.purchase("p1", 108)).new_state
        state = apply_action(state, take("p2", "ruby")).new_state

        assert state.is_finished
        assert state.winner == "p1"

    def test_full_tie_has_no_single_winner(self, quiet_state):
        state = quiet_state
        give_cards(state, "p1", [101, 102])
        state.get_player("p1").points = 14
        give_gems(state, "p1", sapphire=4)
        give_cards(state, "p2", [103, 104, 105])
        state.get_player("p2").points = 15

        state = apply_action(state, Action.purchase("p1", 108)).new_state
        state = apply_action(state, take("p2", "ruby")).new_state

        assert state.is_finished
        assert state.winner is None
        assert sorted(state.co_leaders) == ["p1", "p2"]

    def test_pending_discard_delays_last_round(self, quiet_state):
        state = quiet_state
        state.get_player("p1").points = 15
        give_gems(state, "p1", diamond=3, sapphire=3, emerald=3)

        state = apply_action(state, take("p1", "ruby", "onyx")).new_state
        assert state.pending_discard == "p1"
        assert not state.last_round

        state = apply_action(state, Action.discard("p1", {"diamond": 1})).new_state
        assert state.last_round
        assert state.current_player.player_id == "p2"
