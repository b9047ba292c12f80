"""Usage counters and pattern learning over the history."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Dict, List, Tuple

from ..models import History, UsageMetrics, UsagePattern, utc_timestamp

DEFAULT_TOP_PATTERNS = 10


def record_usage(
    history: History,
    identifier: str,
    *,
    success: bool,
    pattern: str | None = None,
    now: str | None = None,
) -> Tuple[History, UsageMetrics]:
    """Count one invocation of ``identifier`` and return the updated history."""
    timestamp = now or utc_timestamp()
    current = history.usage.get(identifier, UsageMetrics())
    patterns = current.patterns
    if pattern:
        patterns = patterns + (UsagePattern(pattern=pattern, timestamp=timestamp, success=success),)
    metrics = UsageMetrics(
        invocations=current.invocations + 1,
        successes=current.successes + (1 if success else 0),
        failures=current.failures + (0 if success else 1),
        last_used=timestamp,
        patterns=patterns,
    )
    usage = dict(history.usage)
    usage[identifier] = metrics
    return replace(history, usage=usage), metrics


def learn_patterns(
    history: History, *, top_n: int = DEFAULT_TOP_PATTERNS
) -> Dict[str, List[Tuple[str, int]]]:
    """Rank the words of successful usage patterns per document."""
    learned: Dict[str, List[Tuple[str, int]]] = {}
    for identifier in sorted(history.usage):
        metrics = history.usage[identifier]
        if not metrics.patterns:
            continue
        frequency: Counter[str] = Counter()
        for observation in metrics.patterns:
            if observation.success:
                frequency.update(observation.pattern.lower().split())
        ranked = sorted(frequency.items(), key=lambda item: (-item[1], item[0]))
        learned[identifier] = ranked[:top_n]
    return learned


__all__ = ["DEFAULT_TOP_PATTERNS", "learn_patterns", "record_usage"]
