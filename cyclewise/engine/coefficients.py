"""Event coefficient resolver.

Turns a free-text event title into a signed energy-impact coefficient for a
given cycle phase, time of day and stress level.

Matched titles use the reference table row::

    stress_modifier = 1 + (stress_level - 3) * (stress_coefficient / 5)
    final_impact    = (base + base * phase_mod + base * time_mod) * stress_modifier

Unmatched titles use the estimator's coefficient directly (clamped to
[-1, 1]) with every modifier set to 0.  Any estimator failure falls back to
the configured coefficient; scoring never fails because the matcher is down.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Sequence

from cyclewise.engine.base import Phase, TimeOfDay, clamp, round_half_up
from cyclewise.engine.config_loader import EnergyConfig, get_energy_config
from cyclewise.engine.estimators import CoefficientEstimator, FuzzyCoefficientEstimator
from cyclewise.engine.reference_table import REFERENCE_TABLE, CoefficientTableRow

logger = logging.getLogger("cyclewise.engine.coefficients")


@dataclass(frozen=True)
class CoefficientResult:
    """Resolved coefficient for one event under one set of conditions.

    Attributes:
        base_coefficient:   Row base, or the estimate for unmatched titles.
        cycle_modifier:     Phase column of the matched row (0 when unmatched).
        time_modifier:      Time-of-day column of the matched row (0 when unmatched).
        stress_coefficient: Stress column of the matched row (0 when unmatched).
        final_impact:       Combined impact, roughly -1..+1 (3 decimals).
        is_estimate:        True when no table row was used.
        matched_event_type: Label of the matched row, if any.
    """

    base_coefficient: float
    cycle_modifier: float
    time_modifier: float
    stress_coefficient: float
    final_impact: float
    is_estimate: bool
    matched_event_type: str | None = None


def _round3(value: float) -> float:
    return round_half_up(value * 1000) / 1000


@dataclass(frozen=True)
class _Lookup:
    row: CoefficientTableRow | None
    estimate: float | None


class EventCoefficientResolver:
    """Resolve event titles to coefficients via an injected estimator.

    Successful lookups are memoised per title (case-insensitive) so a week
    forecast does not hit a remote estimator once per day for the same
    recurring event.  The memo is an LRU bounded by
    ``coefficients.memo_size``.  Failed lookups are not cached.
    """

    def __init__(
        self,
        estimator: CoefficientEstimator | None = None,
        config: EnergyConfig | None = None,
        table: Sequence[CoefficientTableRow] = REFERENCE_TABLE,
    ) -> None:
        self._config = config or get_energy_config()
        cc = self._config.coefficients
        self._estimator = estimator or FuzzyCoefficientEstimator(
            fallback_coefficient=cc.fallback_coefficient,
            score_cutoff=cc.fuzzy_score_cutoff,
        )
        self._table = tuple(table)
        self._memo: OrderedDict[str, _Lookup] = OrderedDict()
        self._memo_size = cc.memo_size
        self._lock = threading.Lock()

    @property
    def estimator(self) -> CoefficientEstimator:
        return self._estimator

    def clear_cache(self) -> None:
        with self._lock:
            self._memo.clear()

    def _fallback(self, title: str) -> CoefficientResult:
        fallback = self._config.coefficients.fallback_coefficient
        return CoefficientResult(
            base_coefficient=fallback,
            cycle_modifier=0.0,
            time_modifier=0.0,
            stress_coefficient=0.0,
            final_impact=fallback,
            is_estimate=True,
        )

    def _lookup(self, title: str) -> _Lookup:
        key = title.strip().lower()
        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                self._memo.move_to_end(key)
        if cached is not None:
            return cached

        threshold = self._config.coefficients.match_threshold
        match = self._estimator.match_reference_event(title, self._table)
        if match is not None and match.confidence >= threshold:
            lookup = _Lookup(row=match.row, estimate=None)
        else:
            if match is not None:
                logger.debug(
                    "Match %r for %r below threshold (%.2f < %.2f)",
                    match.row.event_type, title, match.confidence, threshold,
                )
            estimate = float(self._estimator.estimate_coefficient(title))
            if not math.isfinite(estimate):
                raise ValueError(f"Estimator returned non-finite coefficient for {title!r}")
            lookup = _Lookup(row=None, estimate=clamp(estimate, -1.0, 1.0))

        with self._lock:
            self._memo[key] = lookup
            self._memo.move_to_end(key)
            while len(self._memo) > self._memo_size:
                self._memo.popitem(last=False)
        return lookup

    def resolve(
        self,
        title: str,
        phase: Phase,
        time_of_day: TimeOfDay,
        stress_level: int = 3,
    ) -> CoefficientResult:
        """Return the coefficient breakdown for one event."""
        try:
            lookup = self._lookup(title)
        except Exception as exc:
            logger.warning(
                "Coefficient lookup failed for %r (%s); using fallback %.2f",
                title, exc, self._config.coefficients.fallback_coefficient,
            )
            return self._fallback(title)

        if lookup.row is None:
            return CoefficientResult(
                base_coefficient=lookup.estimate,
                cycle_modifier=0.0,
                time_modifier=0.0,
                stress_coefficient=0.0,
                final_impact=lookup.estimate,
                is_estimate=True,
            )

        row = lookup.row
        neutral = self._config.modifiers.neutral_level
        divisor = self._config.coefficients.stress_divisor

        cycle_mod = row.phase_modifier(phase)
        time_mod = row.time_modifier(time_of_day)
        stress_modifier = 1 + (stress_level - neutral) * (row.stress_coefficient / divisor)
        final = (row.base + row.base * cycle_mod + row.base * time_mod) * stress_modifier

        return CoefficientResult(
            base_coefficient=row.base,
            cycle_modifier=cycle_mod,
            time_modifier=time_mod,
            stress_coefficient=row.stress_coefficient,
            final_impact=_round3(final),
            is_estimate=False,
            matched_event_type=row.event_type,
        )
