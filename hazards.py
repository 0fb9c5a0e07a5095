"""
hazards.py
==========
Environmental hazards and the probe-failure risk model.

Each orbital body may carry up to one hazard of each kind.  A hazard kind
maps to a fixed ``HazardProfile``; folding a body's hazards into a
``RiskChannels`` accumulator and calling ``failure_prob`` gives the single
risk figure reported for that body::

    P_fail = clip(base + Σ hull_damage + (1 − Π(1 − probe_fail)), 0, 0.95)

The last term is the noisy-or of the per-hazard probe-loss chances, i.e. the
probability that at least one independent hazard destroys the probe.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Iterable


BASE_PROBE_FAILURE = 0.05   # baseline mission risk with no hazards
MAX_FAILURE_PROB = 0.95     # cap applied regardless of inputs


class HazardKind(enum.Enum):
    """Closed set of hazard kinds; the value is the display label."""

    RADIATION = "Radiation"
    PIRATES = "Pirates"
    DEBRIS = "Debris"


@dataclasses.dataclass(frozen=True)
class HazardProfile:
    probe_fail: float     # chance a probe is lost
    hull_damage: float    # flat risk contribution
    yield_penalty: float  # multiplicative resource-yield reduction


@dataclasses.dataclass(frozen=True)
class Hazard:
    kind: HazardKind
    profile: HazardProfile

    @classmethod
    def of(cls, kind: HazardKind) -> "Hazard":
        return cls(kind=kind, profile=hazard_profile(kind))


_PROFILES = {
    HazardKind.RADIATION: HazardProfile(probe_fail=0.1, hull_damage=0.0, yield_penalty=0.4),
    HazardKind.PIRATES:   HazardProfile(probe_fail=0.4, hull_damage=0.5, yield_penalty=0.1),
    HazardKind.DEBRIS:    HazardProfile(probe_fail=0.2, hull_damage=0.1, yield_penalty=0.1),
}


def hazard_profile(kind: HazardKind) -> HazardProfile:
    """Return the fixed profile for *kind*."""
    return _PROFILES[kind]


def hazard_label(kind: HazardKind) -> str:
    return kind.value


# ---------------------------------------------------------------------------
# Risk accumulation
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class RiskChannels:
    """Mutable accumulator for the risk channels of one body.

    ``multiplier`` scales resource yield, not failure.  ``max`` is reserved;
    no hazard kind writes it yet.
    """

    additive: float = 0.0
    noisy_or_survival: float = 1.0   # Π(1 − probe_fail)
    multiplier: float = 1.0          # Π(1 − yield_penalty)
    max: float = 0.0


def _apply_shared(profile: HazardProfile, acc: RiskChannels) -> None:
    acc.additive += profile.hull_damage
    acc.noisy_or_survival *= 1.0 - profile.probe_fail
    acc.multiplier *= 1.0 - profile.yield_penalty


def _apply_radiation(profile: HazardProfile, acc: RiskChannels) -> None:
    _apply_shared(profile, acc)


def _apply_pirates(profile: HazardProfile, acc: RiskChannels) -> None:
    _apply_shared(profile, acc)


def _apply_debris(profile: HazardProfile, acc: RiskChannels) -> None:
    _apply_shared(profile, acc)


# One handler per kind so that a kind can diverge (e.g. start feeding the
# ``max`` channel) without touching the others.
_HANDLERS = {
    HazardKind.RADIATION: _apply_radiation,
    HazardKind.PIRATES: _apply_pirates,
    HazardKind.DEBRIS: _apply_debris,
}


def apply_hazard(hazard: Hazard, acc: RiskChannels) -> None:
    """Fold one hazard into *acc* in place."""
    _HANDLERS[hazard.kind](hazard.profile, acc)


def failure_prob(acc: RiskChannels, base: float) -> float:
    """Combine the channels of *acc* into a failure probability in [0, 0.95]."""
    noisy_or = 1.0 - acc.noisy_or_survival
    return min(max(base + acc.additive + noisy_or, 0.0), MAX_FAILURE_PROB)


def accumulate(hazards: Iterable[Hazard]) -> RiskChannels:
    acc = RiskChannels()
    for h in hazards:
        apply_hazard(h, acc)
    return acc


def probe_failure(hazards: Iterable[Hazard]) -> float:
    """Probe-failure probability for a body carrying *hazards*."""
    return failure_prob(accumulate(hazards), BASE_PROBE_FAILURE)


def yield_multiplier(hazards: Iterable[Hazard]) -> float:
    """Fraction of nominal resource yield left after *hazards*."""
    return accumulate(hazards).multiplier
