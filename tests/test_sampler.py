# Copyright (c) Syntropy Systems
"""Tests for option sampling."""

import random

import pytest

from idemfuzz.models.run import FormatOptions
from idemfuzz.oracle import BlackOracle
from idemfuzz.sampler import OptionSampler, check_option_spec, draw_option, option_in_domain


class TestOptionSampler:
    """Tests for OptionSampler."""

    def test_samples_stay_in_domain(self) -> None:
        """Test every sampled value lies inside its declared domain."""
        space = BlackOracle().default_space()
        sampler = OptionSampler(space, random.Random(1))

        for _ in range(200):
            options = sampler.sample()
            assert set(options.keys()) == set(space)
            assert sampler.contains(options)
            assert 0 <= options["line_length"] < 200
            assert options["dialect"] in ("py", "pyi")

    def test_bounds_are_reachable(self) -> None:
        """Test both ends of an int range get drawn."""
        sampler = OptionSampler(
            {"n": {"distribution": "int_uniform", "min": 0, "max": 2}},
            random.Random(3),
        )

        seen = {sampler.sample()["n"] for _ in range(100)}

        assert seen == {0, 1, 2}

    def test_seeded_samples_repeat(self) -> None:
        """Test the same seed gives the same options."""
        space = BlackOracle().default_space()
        first = [OptionSampler(space, random.Random(7)).sample() for _ in range(3)]
        second = [OptionSampler(space, random.Random(7)).sample() for _ in range(3)]

        assert first == second

    def test_contains_rejects_out_of_domain(self) -> None:
        """Test contains() catches bad values and missing options."""
        sampler = OptionSampler(BlackOracle().default_space())

        bad_width = sampler.sample().values | {"line_length": 500}
        assert not sampler.contains(FormatOptions.model_validate(bad_width))
        assert not sampler.contains(FormatOptions.model_validate({"line_length": 5}))

    @pytest.mark.parametrize(
        "spec",
        [
            {"values": []},
            {"distribution": "int_uniform", "min": 5, "max": 1},
            {"distribution": "int_uniform", "min": "0", "max": 10},
            {"distribution": "normal"},
            {},
        ],
    )
    def test_rejects_bad_space_up_front(self, spec) -> None:
        """Test a malformed domain fails when the sampler is built."""
        with pytest.raises(ValueError, match="x|Unknown"):
            OptionSampler({"x": spec})

    def test_check_option_spec_accepts_defaults(self) -> None:
        """Test the builtin black space is well formed."""
        for name, spec in BlackOracle().default_space().items():
            check_option_spec(name, spec)


class TestDrawOption:
    """Tests for draw_option() and option_in_domain()."""

    def test_unknown_distribution(self) -> None:
        """Test unknown distributions raise."""
        with pytest.raises(ValueError, match="Unknown distribution"):
            draw_option("x", {"distribution": "normal"}, random.Random())

    def test_missing_domain(self) -> None:
        """Test a spec with neither values nor distribution raises."""
        with pytest.raises(ValueError, match="must have 'values' or 'distribution'"):
            draw_option("x", {}, random.Random())

    def test_empty_values(self) -> None:
        """Test an empty choice list raises."""
        with pytest.raises(ValueError, match="empty"):
            draw_option("x", {"values": []}, random.Random())

    def test_bool_is_not_an_int(self) -> None:
        """Test booleans do not satisfy integer domains and vice versa."""
        assert not option_in_domain({"distribution": "int_uniform", "min": 0, "max": 5}, True)
        assert not option_in_domain({"values": [True, False]}, 1)
        assert option_in_domain({"values": [True, False]}, False)
