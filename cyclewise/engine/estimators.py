"""Text matching and estimation for free-text calendar event titles.

The coefficient resolver never interprets titles itself.  It asks a
``CoefficientEstimator`` two questions:

1. Which reference table row, if any, does this title describe, and how
   confident is that match?
2. For a title with no acceptable match, what base coefficient in
   ``[-1, +1]`` should it get?

Implementations:

``FuzzyCoefficientEstimator``
    Offline.  Exact label/alias lookup, then word-boundary alias search, then
    ``rapidfuzz`` token-sort similarity against labels and aliases of four or
    more characters (short aliases like "run" only match as whole words).
    Cannot estimate; returns the configured fallback coefficient.

``AnthropicCoefficientEstimator``
    Fuzzy matching first, then Claude for both row selection and estimation.
    Network and parsing failures raise ``CoefficientLookupError``; the
    resolver turns those into the fallback coefficient.

``StaticCoefficientEstimator``
    Deterministic stub for tests and local runs.
"""

from __future__ import annotations

import json
import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from rapidfuzz import fuzz, process as rfprocess

from cyclewise.engine.base import CoefficientLookupError
from cyclewise.engine.reference_table import EVENT_ALIASES, CoefficientTableRow

logger = logging.getLogger("cyclewise.engine.estimators")

_DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass(frozen=True)
class ReferenceMatch:
    """A reference row chosen for a title, with 0.0–1.0 confidence."""

    row: CoefficientTableRow
    confidence: float


class CoefficientEstimator(ABC):
    """Capability interface used by the coefficient resolver on table lookups."""

    @abstractmethod
    def match_reference_event(
        self, title: str, table: Sequence[CoefficientTableRow]
    ) -> ReferenceMatch | None:
        """Return the best matching row for ``title`` or None."""

    @abstractmethod
    def estimate_coefficient(self, title: str) -> float:
        """Return a base coefficient in [-1, 1] for an unmatched title."""


# ---------------------------------------------------------------------------
# Fuzzy (offline) matching
# ---------------------------------------------------------------------------


def _normalise_title(title: str) -> str:
    return re.sub(r"\s+", " ", title.strip().lower())


class FuzzyCoefficientEstimator(CoefficientEstimator):
    """Match titles against table labels and aliases without any network calls."""

    def __init__(
        self,
        fallback_coefficient: float = -0.2,
        score_cutoff: float = 85.0,
        aliases: dict[str, list[str]] | None = None,
        min_fuzzy_length: int = 4,
    ) -> None:
        self._fallback = fallback_coefficient
        self._score_cutoff = score_cutoff
        self._min_fuzzy_length = min_fuzzy_length
        self._aliases = EVENT_ALIASES if aliases is None else aliases

    def _lookup(self, table: Sequence[CoefficientTableRow]) -> dict[str, CoefficientTableRow]:
        by_label = {row.event_type: row for row in table}
        lookup: dict[str, CoefficientTableRow] = {}
        for row in table:
            lookup[row.event_type.lower()] = row
        for label, aliases in self._aliases.items():
            row = by_label.get(label)
            if row is None:
                continue
            for alias in aliases:
                lookup.setdefault(alias.lower(), row)
        return lookup

    def match_reference_event(
        self, title: str, table: Sequence[CoefficientTableRow]
    ) -> ReferenceMatch | None:
        if not title or not title.strip():
            return None

        key = _normalise_title(title)
        lookup = self._lookup(table)

        # 1. Exact label or alias
        if key in lookup:
            return ReferenceMatch(row=lookup[key], confidence=1.0)

        # 2. Longest alias appearing as whole words ("Team meeting w/ Sam")
        contained = [
            alias for alias in lookup
            if len(alias) >= 3 and re.search(rf"(?<!\w){re.escape(alias)}(?!\w)", key)
        ]
        if contained:
            alias = max(contained, key=len)
            return ReferenceMatch(row=lookup[alias], confidence=0.9)

        # 3. Typo-level similarity; no partial or substring scoring
        candidates = [c for c in lookup if len(c) >= self._min_fuzzy_length]
        result = rfprocess.extractOne(
            key,
            candidates,
            scorer=fuzz.token_sort_ratio,
            score_cutoff=self._score_cutoff,
        )
        if result is not None:
            matched, score, _ = result
            logger.debug("Fuzzy match: %r → %r (score=%.1f)", title, matched, score)
            return ReferenceMatch(row=lookup[matched], confidence=score / 100.0)

        logger.debug("No reference match for event title %r", title)
        return None

    def estimate_coefficient(self, title: str) -> float:
        return self._fallback


# ---------------------------------------------------------------------------
# LLM-backed matching and estimation
# ---------------------------------------------------------------------------

_MATCH_PROMPT = """You classify calendar events for an energy planner.

Event title: "{title}"

Reference activities (index: label [category]):
{options}

Pick the single reference activity that best describes the event.
Respond with ONLY a JSON object: {{"index": <number or null>, "confidence": <0.0-1.0>}}
Use null when nothing fits."""

_ESTIMATE_PROMPT = """Estimate the base energy impact of this calendar event on a scale
from -1.0 (heavy energy drain) to +1.0 (strong restoration).

Guide:
- Intense work or conflict: -0.7 to -1.0
- Moderate work: -0.3 to -0.5
- Light chores: -0.1 to -0.2
- Rest and recovery: +0.3 to +0.8
- Full night of sleep: +0.8 to +1.0

Event: "{title}"

Respond with ONLY a number between -1.0 and 1.0, no explanation."""


def _parse_number(text: str) -> float:
    """Pull a single float out of a model reply."""
    match = re.search(r"[-+]?\d*\.?\d+", text)
    if not match:
        raise CoefficientLookupError(f"LLM reply contained no number: {text!r}")
    value = float(match.group())
    if not math.isfinite(value):
        raise CoefficientLookupError(f"LLM estimate is not finite: {text!r}")
    return max(-1.0, min(1.0, value))


def _parse_json_object(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        json_match = re.search(r"\{.*\}", text, re.DOTALL)
        if not json_match:
            raise CoefficientLookupError("LLM response did not contain valid JSON")
        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as exc:
            raise CoefficientLookupError("LLM returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise CoefficientLookupError("LLM returned JSON that is not an object")
    return data


class AnthropicCoefficientEstimator(CoefficientEstimator):
    """Claude-backed matcher/estimator with an offline fuzzy first pass.

    Usage::

        estimator = AnthropicCoefficientEstimator(api_key=settings.anthropic_api_key)
        estimator.estimate_coefficient("Wedding rehearsal")   # e.g. -0.35
    """

    def __init__(
        self,
        client: Any | None = None,
        *,
        api_key: str | None = None,
        model: str = _DEFAULT_MODEL,
        timeout_seconds: float = 10.0,
        fuzzy: FuzzyCoefficientEstimator | None = None,
    ) -> None:
        if client is None:
            import anthropic

            client = anthropic.Anthropic(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            )
        self._client = client
        self._model = model
        self._fuzzy = fuzzy or FuzzyCoefficientEstimator()

    def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content[0].text.strip()
        except Exception as exc:
            raise CoefficientLookupError(f"LLM call failed: {exc}") from exc

    def match_reference_event(
        self, title: str, table: Sequence[CoefficientTableRow]
    ) -> ReferenceMatch | None:
        local = self._fuzzy.match_reference_event(title, table)
        if local is not None:
            return local

        options = "\n".join(
            f"{i}: {row.event_type} [{row.category}]" for i, row in enumerate(table)
        )
        reply = self._complete(_MATCH_PROMPT.format(title=title, options=options), 50)
        data = _parse_json_object(reply)

        index = data.get("index")
        if index is None:
            return None
        try:
            index = int(index)
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError) as exc:
            raise CoefficientLookupError(f"Malformed match reply: {data!r}") from exc
        if not (0 <= index < len(table)):
            raise CoefficientLookupError(f"Match index {index} out of range")

        logger.info(
            "LLM matched %r → %r (confidence=%.2f)", title, table[index].event_type, confidence
        )
        return ReferenceMatch(row=table[index], confidence=confidence)

    def estimate_coefficient(self, title: str) -> float:
        reply = self._complete(_ESTIMATE_PROMPT.format(title=title), 10)
        value = _parse_number(reply)
        logger.info("LLM estimated coefficient for %r: %.2f", title, value)
        return value


# ---------------------------------------------------------------------------
# Test stub
# ---------------------------------------------------------------------------


class StaticCoefficientEstimator(CoefficientEstimator):
    """Return fixed matches and estimates.

    Args:
        matches:   title (case-insensitive) → (row label, confidence).
        estimates: title (case-insensitive) → coefficient.
        default:   Coefficient for titles missing from ``estimates``.
    """

    def __init__(
        self,
        matches: dict[str, tuple[str, float]] | None = None,
        estimates: dict[str, float] | None = None,
        default: float = -0.2,
    ) -> None:
        self._matches = {k.lower(): v for k, v in (matches or {}).items()}
        self._estimates = {k.lower(): v for k, v in (estimates or {}).items()}
        self._default = default
        self.estimate_calls: list[str] = []

    def match_reference_event(
        self, title: str, table: Sequence[CoefficientTableRow]
    ) -> ReferenceMatch | None:
        entry = self._matches.get(title.lower())
        if entry is None:
            return None
        label, confidence = entry
        for row in table:
            if row.event_type == label:
                return ReferenceMatch(row=row, confidence=confidence)
        return None

    def estimate_coefficient(self, title: str) -> float:
        self.estimate_calls.append(title)
        return self._estimates.get(title.lower(), self._default)
