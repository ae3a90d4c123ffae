"""
Tests for gem pools and the read-only rule helpers.
"""

import pytest

from ..catalog import Gem, get_card
from ..engine_core.gems import GemPool
from ..engine_core.state import PlayerState
from ..engine_core.action import ErrorCode
from ..engine_core import rules


def pool(**counts) -> GemPool:
    return GemPool.from_mapping(counts)


class TestGemPool:
    """GemPool arithmetic and parsing."""

    def test_always_holds_every_kind(self):
        p = GemPool({Gem.RUBY: 2})
        assert p.get(Gem.DIAMOND) == 0
        assert p[Gem.RUBY] == 2
        assert p.total() == 2

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            GemPool({Gem.RUBY: -1})

    def test_minus_cannot_go_negative(self):
        with pytest.raises(ValueError):
            pool(ruby=1).minus(pool(ruby=2))

    def test_from_mapping_accepts_names(self):
        p = pool(ruby=1, ONYX=2)
        assert p.nonzero() == {Gem.RUBY: 1, Gem.ONYX: 2}

    def test_from_mapping_rejects_bad_values(self):
        with pytest.raises(ValueError):
            GemPool.from_mapping({"ruby": True})
        with pytest.raises(ValueError):
            GemPool.from_mapping({"ruby": "2"})
        with pytest.raises(ValueError):
            GemPool.from_mapping({"ruby": -1})
        with pytest.raises(ValueError):
            GemPool.from_mapping({"pearl": 1})

    def test_plus_and_covers(self):
        a = pool(ruby=1, gold=1)
        b = pool(ruby=2, onyx=1)
        total = a.plus(b)
        assert total.to_dict() == {"ruby": 3, "onyx": 1, "gold": 1}
        assert total.covers(a)
        assert not a.covers(b)

    def test_to_dict_with_zeros(self):
        assert len(GemPool().to_dict(include_zero=True)) == 6
        assert GemPool().to_dict() == {}

    def test_colored_total_ignores_gold(self):
        assert pool(ruby=2, gold=3).colored_total() == 2


class TestInitialBank:
    """Bank size by player count."""

    @pytest.mark.parametrize("players,colored", [(2, 4), (3, 5), (4, 7)])
    def test_bank_sizes(self, players, colored):
        bank = rules.initial_bank(players)
        for gem in (Gem.DIAMOND, Gem.SAPPHIRE, Gem.EMERALD, Gem.RUBY, Gem.ONYX):
            assert bank.get(gem) == colored
        assert bank.get(Gem.GOLD) == 5

    @pytest.mark.parametrize("players", [1, 5])
    def test_unsupported_player_count(self, players):
        with pytest.raises(ValueError):
            rules.initial_bank(players)


class TestGemSelection:
    """Shape checks for taking gems."""

    def test_three_distinct_is_legal(self):
        assert rules.check_gem_selection(pool(ruby=1, sapphire=1, emerald=1), rules.initial_bank(2)) is None

    def test_one_or_two_distinct_is_legal(self):
        bank = rules.initial_bank(2)
        assert rules.check_gem_selection(pool(ruby=1), bank) is None
        assert rules.check_gem_selection(pool(ruby=1, onyx=1), bank) is None

    def test_double_needs_four_in_bank(self):
        assert rules.check_gem_selection(pool(ruby=2), pool(ruby=4)) is None
        code, _ = rules.check_gem_selection(pool(ruby=2), pool(ruby=3))
        assert code == ErrorCode.INSUFFICIENT_RESOURCES

    @pytest.mark.parametrize("selection", [
        {"ruby": 2, "onyx": 1},
        {"ruby": 3},
        {"ruby": 1, "onyx": 1, "sapphire": 1, "diamond": 1},
        {"gold": 1},
        {},
    ])
    def test_bad_shapes(self, selection):
        code, _ = rules.check_gem_selection(GemPool.from_mapping(selection), rules.initial_bank(4))
        assert code == ErrorCode.INVALID_GEM_SELECTION_SHAPE

    def test_color_missing_from_bank(self):
        bank = rules.initial_bank(2).with_count(Gem.RUBY, 0)
        code, _ = rules.check_gem_selection(pool(ruby=1, onyx=1), bank)
        assert code == ErrorCode.INSUFFICIENT_RESOURCES


class TestPayment:
    """Bonuses first, then gems, then gold."""

    def test_bonus_reduces_cost(self):
        paid = rules.compute_payment(
            {Gem.SAPPHIRE: 4}, pool(sapphire=2), {Gem.SAPPHIRE: 2},
        )
        assert paid.nonzero() == {Gem.SAPPHIRE: 2}

    def test_gold_covers_shortfall(self):
        paid = rules.compute_payment({Gem.SAPPHIRE: 4}, pool(sapphire=3, gold=2), {})
        assert paid.nonzero() == {Gem.SAPPHIRE: 3, Gem.GOLD: 1}

    def test_bonuses_cover_most_of_cost(self):
        """Two onyx and one ruby bonus leave one ruby to pay."""
        cost = {Gem.ONYX: 2, Gem.RUBY: 2}
        bonuses = {Gem.ONYX: 2, Gem.RUBY: 1}
        assert rules.compute_payment(cost, pool(ruby=1), bonuses).nonzero() == {Gem.RUBY: 1}
        assert rules.compute_payment(cost, pool(gold=1), bonuses).nonzero() == {Gem.GOLD: 1}
        assert rules.compute_payment(cost, GemPool(), bonuses) is None

    def test_unaffordable(self):
        assert rules.compute_payment({Gem.SAPPHIRE: 4}, pool(sapphire=2, gold=1), {}) is None

    def test_bonus_beyond_cost_is_free(self):
        paid = rules.compute_payment({Gem.RUBY: 2}, GemPool(), {Gem.RUBY: 3})
        assert paid.total() == 0

    def test_missing_for_ignores_gold(self):
        player = PlayerState("p1", "Alice", gems=pool(sapphire=1, gold=3))
        assert rules.missing_for(player, get_card(108)) == {Gem.SAPPHIRE: 3}
        assert rules.can_afford(player, get_card(108))


class TestNobles:
    """Noble eligibility."""

    def test_eligible_when_bonuses_met(self):
        player = PlayerState("p1", "Alice", cards=[125, 126, 127, 128, 133, 134, 135, 136])
        assert rules.eligible_nobles(player, [1, 2]) == [1]

    def test_not_eligible_one_short(self):
        player = PlayerState("p1", "Alice", cards=[125, 126, 127, 128, 133, 134, 135])
        assert rules.eligible_nobles(player, [1]) == []


class TestWinner:
    """Most points, then fewest cards, else no winner."""

    def test_most_points_wins(self):
        a = PlayerState("a", "A", points=16)
        b = PlayerState("b", "B", points=15)
        assert rules.determine_winner([a, b]) == ("a", ["a"])

    def test_fewest_cards_breaks_tie(self):
        a = PlayerState("a", "A", points=15, cards=[101, 102, 103])
        b = PlayerState("b", "B", points=15, cards=[101, 102])
        assert rules.determine_winner([a, b]) == ("b", ["b"])

    def test_full_tie_has_no_winner(self):
        a = PlayerState("a", "A", points=15, cards=[101])
        b = PlayerState("b", "B", points=15, cards=[102])
        c = PlayerState("c", "C", points=3)
        assert rules.determine_winner([a, b, c]) == (None, ["a", "b"])

    def test_card_points(self):
        assert rules.card_points([108, 101, 306]) == 5
