#!/usr/bin/env python3
"""
Weight Profiles - named, validated weight sets for the aggregate score.

Two built-in profiles exist and callers choose one explicitly:
- five_dimension: skill 0.30, experience 0.20, location 0.20, salary 0.15,
  availability 0.15; availability is a hard gate.
- four_dimension: skill, experience, location, salary at 0.25 each.

A hard-gated dimension that scores 0 forces the aggregate to 0.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional
import logging
import math

from core.config_loader import MatchingConfig
from core.exceptions import InvalidWeightConfigurationError

logger = logging.getLogger(__name__)

SKILL = "skill"
EXPERIENCE = "experience"
LOCATION = "location"
SALARY = "salary"
AVAILABILITY = "availability"

DIMENSIONS = (SKILL, EXPERIENCE, LOCATION, SALARY, AVAILABILITY)

WEIGHT_SUM_TOLERANCE = 1e-6

FIVE_DIMENSION = "five_dimension"
FOUR_DIMENSION = "four_dimension"


@dataclass(frozen=True)
class WeightProfile:
    """A validated mapping of dimension name to weight."""
    name: str
    weights: Mapping[str, float]
    hard_gates: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        try:
            weights = {k: float(v) for k, v in dict(self.weights).items()}
        except (TypeError, ValueError) as e:
            raise InvalidWeightConfigurationError(
                f"Profile '{self.name}' has non-numeric weights: {e}"
            ) from e
        # a zero weight means the dimension is not part of the profile
        weights = {k: v for k, v in weights.items() if v != 0.0}
        gates = frozenset(self.hard_gates)

        unknown = (set(weights) | gates) - set(DIMENSIONS)
        if unknown:
            raise InvalidWeightConfigurationError(
                f"Profile '{self.name}' names unknown dimensions: {sorted(unknown)}"
            )
        negative = {k: v for k, v in weights.items() if v < 0 or not math.isfinite(v)}
        if negative:
            raise InvalidWeightConfigurationError(
                f"Profile '{self.name}' has invalid weights: {negative}"
            )
        total = sum(weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise InvalidWeightConfigurationError(
                f"Profile '{self.name}' weights sum to {total:.6f}, expected 1.0"
            )
        ungated = gates - set(weights)
        if ungated:
            raise InvalidWeightConfigurationError(
                f"Profile '{self.name}' gates dimensions it does not weight: {sorted(ungated)}"
            )

        object.__setattr__(self, 'weights', MappingProxyType(weights))
        object.__setattr__(self, 'hard_gates', gates)

    @property
    def dimensions(self) -> FrozenSet[str]:
        return frozenset(self.weights)

    def uses(self, dimension: str) -> bool:
        return dimension in self.weights


BUILTIN_PROFILES: Dict[str, WeightProfile] = {
    FIVE_DIMENSION: WeightProfile(
        name=FIVE_DIMENSION,
        weights={SKILL: 0.30, EXPERIENCE: 0.20, LOCATION: 0.20, SALARY: 0.15, AVAILABILITY: 0.15},
        hard_gates=frozenset({AVAILABILITY}),
    ),
    FOUR_DIMENSION: WeightProfile(
        name=FOUR_DIMENSION,
        weights={SKILL: 0.25, EXPERIENCE: 0.25, LOCATION: 0.25, SALARY: 0.25},
    ),
}


def resolve_weight_profiles(config: Optional[MatchingConfig] = None) -> Dict[str, WeightProfile]:
    """Built-in profiles overlaid with any defined in config.

    Raises:
        InvalidWeightConfigurationError: a configured profile is invalid, or the
            configured default profile does not exist
    """
    profiles = dict(BUILTIN_PROFILES)
    if config is None:
        return profiles

    for name, profile_cfg in config.weight_profiles.items():
        profiles[name] = WeightProfile(
            name=name,
            weights=profile_cfg.weights,
            hard_gates=frozenset(profile_cfg.hard_gates),
        )
        logger.info(f"Loaded weight profile '{name}': {dict(profiles[name].weights)}")

    if config.weight_profile not in profiles:
        raise InvalidWeightConfigurationError(
            f"Unknown weight profile '{config.weight_profile}'. "
            f"Available: {', '.join(sorted(profiles))}"
        )
    return profiles


def get_profile(name: str, profiles: Optional[Mapping[str, WeightProfile]] = None) -> WeightProfile:
    profiles = BUILTIN_PROFILES if profiles is None else profiles
    try:
        return profiles[name]
    except KeyError:
        raise InvalidWeightConfigurationError(
            f"Unknown weight profile '{name}'. Available: {', '.join(sorted(profiles))}"
        ) from None


def profile_from_weights(weights: Mapping[str, float], hard_gates: Iterable[str] = (),
                         name: str = "custom") -> WeightProfile:
    """Build an ad-hoc profile, e.g. from a request payload."""
    return WeightProfile(name=name, weights=dict(weights), hard_gates=frozenset(hard_gates))
