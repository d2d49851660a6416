"""Tests for drill command generation."""

import logging
import random
from collections import Counter
from unittest.mock import MagicMock, patch

import pytest

from src.drill.generator import (
    MAX_GENERATION_ATTEMPTS,
    _CommandPool,
    generate,
    generate_drill,
    round_up_to_even,
)
from src.drill.types import Direction, GenerationConfig, GenerationFailure, Position
from tests.factories import make_commands, walk


def net_displacement(commands):
    traverse = elevation = 0
    for command in commands:
        if command.direction == Direction.UP:
            elevation += command.value
        elif command.direction == Direction.DOWN:
            elevation -= command.value
        elif command.direction == Direction.RIGHT:
            traverse += command.value
        else:
            traverse -= command.value
    return traverse, elevation


def within_bound(commands, max_t_and_e):
    return all(
        abs(p.traverse) <= max_t_and_e and abs(p.elevation) <= max_t_and_e
        for p in walk(commands)
    )


class TestRoundUpToEven:
    """Tests for round_up_to_even function."""

    @pytest.mark.parametrize("count,expected", [(0, 0), (1, 2), (2, 2), (5, 6), (10, 10)])
    def test_rounding(self, count, expected):
        """Odd counts go up by one, even counts stay."""
        assert round_up_to_even(count) == expected


class TestCommandPool:
    """Tests for the swap-remove command pool."""

    def test_take_shrinks_live_count(self):
        """Taking an entry removes exactly that entry from the live pool."""
        pool = _CommandPool(make_commands("UP 5, DOWN 5, RIGHT 10"))
        taken = pool.take(0)
        assert taken == make_commands("UP 5")[0]
        assert len(pool) == 2

    def test_taken_entries_are_never_offered_again(self):
        """Draining the pool yields every command exactly once."""
        commands = make_commands("UP 5, DOWN 5, RIGHT 10, LEFT 10")
        pool = _CommandPool(commands)
        drained = []
        while len(pool):
            drained.append(pool.take(len(pool) // 2))
        assert Counter(drained) == Counter(commands)

    def test_valid_indices_respects_bounds(self):
        """Only moves that stay in bounds are offered."""
        pool = _CommandPool(make_commands("UP 10, DOWN 10"))
        valid = pool.valid_indices(Position(elevation=20), 25)
        assert valid == [1]


class TestGenerateInvariants:
    """Balance, bound and length hold for every successful drill."""

    CONFIGS = [
        GenerationConfig(num_commands=10, click_values=(5, 10), max_t_and_e=25),
        GenerationConfig(num_commands=7, click_values=(5, 10, 15), max_t_and_e=25),
        GenerationConfig(num_commands=20, click_values=(25,), max_t_and_e=25),
        GenerationConfig(num_commands=30, click_values=(3, 7, 11), max_t_and_e=12),
    ]

    @pytest.mark.parametrize("config", CONFIGS)
    def test_invariants_across_seeds(self, config):
        """Every seed gives a zero-sum, bounded, even-length drill."""
        for seed in range(25):
            result = generate(config, random.Random(seed))
            assert result.success
            assert len(result.commands) == round_up_to_even(config.num_commands)
            assert net_displacement(result.commands) == (0, 0)
            assert within_bound(result.commands, config.max_t_and_e)

    def test_values_come_from_click_values(self):
        """Only configured click values are used."""
        config = GenerationConfig(num_commands=40, click_values=(5, 10), max_t_and_e=25)
        result = generate(config, random.Random(7))
        assert {c.value for c in result.commands} <= {5, 10}

    def test_every_move_has_its_mirror(self):
        """Each UP n is matched by a DOWN n, each RIGHT n by a LEFT n."""
        config = GenerationConfig(num_commands=30, click_values=(5, 10, 15), max_t_and_e=25)
        counts = Counter(generate(config, random.Random(3)).commands)
        for command, count in counts.items():
            assert counts[command.mirrored()] == count

    def test_scenario_four_fives(self):
        """4 commands of 5 within 25 always succeed."""
        config = GenerationConfig(num_commands=4, click_values=(5,), max_t_and_e=25)
        for seed in range(50):
            result = generate(config, random.Random(seed))
            assert len(result.commands) == 4
            assert all(c.value == 5 for c in result.commands)
            assert net_displacement(result.commands) == (0, 0)
            assert within_bound(result.commands, 25)

    def test_same_seed_same_drill(self):
        """Generation is reproducible with an injected random source."""
        config = GenerationConfig(num_commands=12, click_values=(5, 10), max_t_and_e=25)
        first = generate(config, random.Random(99))
        second = generate(config, random.Random(99))
        assert first.commands == second.commands


class TestGenerateCounts:
    """Tests for command count handling."""

    def test_odd_count_is_rounded_and_reported(self):
        """An odd request produces the next even count and says so."""
        config = GenerationConfig(num_commands=5, click_values=(5,), max_t_and_e=25)
        result = generate(config, random.Random(1))
        assert len(result.commands) == 6
        assert result.requested_count == 5
        assert result.total_count == 6
        assert result.was_adjusted

    def test_zero_count_is_empty_success(self):
        """A zero-length request is an empty but successful drill."""
        config = GenerationConfig(num_commands=0, click_values=(5,), max_t_and_e=25)
        result = generate(config, random.Random(1))
        assert result.success
        assert result.commands == ()


class TestGenerateInfeasible:
    """Infeasible configurations fail fast without using randomness."""

    @pytest.mark.parametrize(
        "click_values,max_t_and_e",
        [((), 25), ((5, 30), 25), ((26,), 25)],
    )
    def test_infeasible_returns_empty(self, click_values, max_t_and_e):
        """No click values, or one above the bound, gives an empty drill."""
        rng = MagicMock(spec=random.Random)
        config = GenerationConfig(num_commands=4, click_values=click_values, max_t_and_e=max_t_and_e)

        result = generate(config, rng)

        assert result.commands == ()
        assert result.failure == GenerationFailure.INFEASIBLE
        assert result.attempts == 0
        assert rng.method_calls == []

    def test_infeasible_is_logged(self, caplog):
        """Infeasible configurations are logged as warnings."""
        config = GenerationConfig(num_commands=4, click_values=(), max_t_and_e=25)
        with caplog.at_level(logging.WARNING, logger="src.drill.generator"):
            generate(config, random.Random(1))
        assert "Infeasible" in caplog.text


class TestGenerateExhausted:
    """Stuck attempts are retried up to the cap."""

    @patch("src.drill.generator._order_randomly", return_value=None)
    def test_exhausted_returns_empty_with_diagnostic(self, mock_order, caplog):
        """Every attempt stuck gives an empty drill and an error log."""
        config = GenerationConfig(num_commands=6, click_values=(5,), max_t_and_e=25)

        with caplog.at_level(logging.ERROR, logger="src.drill.generator"):
            result = generate(config, random.Random(1))

        assert result.commands == ()
        assert result.failure == GenerationFailure.EXHAUSTED
        assert result.attempts == MAX_GENERATION_ATTEMPTS
        assert mock_order.call_count == MAX_GENERATION_ATTEMPTS
        assert "after 10 attempts" in caplog.text

    @patch("src.drill.generator._order_randomly")
    def test_retry_succeeds_after_stuck_attempt(self, mock_order):
        """A later attempt can succeed after earlier ones got stuck."""
        good = make_commands("UP 5, DOWN 5")
        mock_order.side_effect = [None, None, good]
        config = GenerationConfig(num_commands=2, click_values=(5,), max_t_and_e=25)

        result = generate(config, random.Random(1))

        assert result.success
        assert result.attempts == 3
        assert list(result.commands) == good

    @patch("src.drill.generator._order_randomly", return_value=None)
    def test_constructive_fallback_pairs_moves(self, mock_order):
        """With fallback enabled, each move is followed by its mirror."""
        config = GenerationConfig(
            num_commands=10,
            click_values=(25, 20),
            max_t_and_e=25,
            constructive_fallback=True,
        )

        result = generate(config, random.Random(4))

        assert result.success
        assert result.used_fallback
        assert len(result.commands) == 10
        for first, second in zip(result.commands[::2], result.commands[1::2]):
            assert second == first.mirrored()
        assert net_displacement(result.commands) == (0, 0)
        assert within_bound(result.commands, 25)


class TestGenerateDrill:
    """Tests for the generate_drill convenience wrapper."""

    def test_returns_list(self):
        """Returns a plain list of commands."""
        commands = generate_drill(4, [5], 25, rng=random.Random(2))
        assert isinstance(commands, list)
        assert len(commands) == 4

    def test_empty_on_failure(self):
        """Returns an empty list when generation fails."""
        assert generate_drill(4, [], 25) == []
