# Copyright (c) Syntropy Systems
"""Random formatter option sampling."""
from __future__ import annotations

import random
from typing import TYPE_CHECKING, TypedDict

from idemfuzz.models.run import FormatOptions

if TYPE_CHECKING:
    from collections.abc import Mapping

    from idemfuzz.models.base import JSONPrimitive


class OptionSpec(TypedDict, total=False):
    """Domain of a single formatter option.

    Either a list of discrete values, or an int_uniform distribution
    over the inclusive range [min, max].
    """

    values: list[JSONPrimitive]
    distribution: str
    min: int
    max: int


def draw_option(name: str, spec: OptionSpec, rng: random.Random) -> JSONPrimitive:
    """Draw one value uniformly from an option's domain."""
    if "values" in spec:
        if not spec["values"]:
            msg = f"Option '{name}' has an empty 'values' list"
            raise ValueError(msg)
        return rng.choice(spec["values"])
    if "distribution" in spec:
        dist = spec["distribution"]
        if dist == "int_uniform":
            return rng.randint(int(spec.get("min", 0)), int(spec.get("max", 0)))
        msg = f"Unknown distribution: {dist}"
        raise ValueError(msg)
    msg = f"Option '{name}' must have 'values' or 'distribution'"
    raise ValueError(msg)


def check_option_spec(name: str, spec: OptionSpec) -> None:
    """Raise ValueError unless spec describes a non-empty domain."""
    if "values" in spec:
        if not isinstance(spec["values"], list) or not spec["values"]:
            msg = f"Option '{name}' needs a non-empty 'values' list"
            raise ValueError(msg)
        return
    if "distribution" not in spec:
        msg = f"Option '{name}' must have 'values' or 'distribution'"
        raise ValueError(msg)
    if spec["distribution"] != "int_uniform":
        msg = f"Unknown distribution: {spec['distribution']}"
        raise ValueError(msg)
    low, high = spec.get("min", 0), spec.get("max", 0)
    if isinstance(low, bool) or isinstance(high, bool) or not (
        isinstance(low, int) and isinstance(high, int)
    ):
        msg = f"Option '{name}' needs integer 'min' and 'max'"
        raise ValueError(msg)
    if low > high:
        msg = f"Option '{name}' has min {low} greater than max {high}"
        raise ValueError(msg)


def option_in_domain(spec: OptionSpec, value: JSONPrimitive) -> bool:
    """Check that a value lies inside an option's domain."""
    if "values" in spec:
        return any(
            value == candidate and type(value) is type(candidate)
            for candidate in spec["values"]
        )
    if spec.get("distribution") == "int_uniform":
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return int(spec.get("min", 0)) <= value <= int(spec.get("max", 0))
    return False


class OptionSampler:
    """Draws formatter options, each independently and uniformly.

    Options are deliberately not correlated: the point is to reach
    combinations nobody would configure by hand.
    """

    space: dict[str, OptionSpec]

    def __init__(
        self,
        space: Mapping[str, OptionSpec],
        rng: random.Random | None = None,
    ) -> None:
        for name, spec in space.items():
            check_option_spec(name, spec)
        self.space = dict(space)
        self._rng = rng or random.Random()  # noqa: S311

    def sample(self) -> FormatOptions:
        """Draw a fresh, valid set of options."""
        return FormatOptions.model_validate(
            {name: draw_option(name, spec, self._rng) for name, spec in self.space.items()}
        )

    def contains(self, options: FormatOptions) -> bool:
        """Check that every option in the space is present and in its domain."""
        return all(
            name in options.keys() and option_in_domain(spec, options[name])
            for name, spec in self.space.items()
        )
