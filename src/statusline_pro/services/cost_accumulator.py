"""Fold successive host cost reports into current/accumulated/total buckets.

The host reports figures cumulative since its process started. When that
process restarts the counters drop back towards zero; a drop in any field is
treated as the end of a cycle for that field, and the previous value is
carried into `accumulated` so the reported total never goes backwards.
"""

import logging
from dataclasses import fields

from statusline_pro.types.snapshots import CostHistory, CostMetrics

logger = logging.getLogger(__name__)


def apply_cost(previous: CostHistory, incoming: CostMetrics) -> CostHistory:
    """Return the history after observing `incoming`.

    Each field is checked on its own: a field folds only when its previous
    current value was positive and the incoming value is strictly lower.
    """
    folded = {}
    for f in fields(CostMetrics):
        current = getattr(previous.current, f.name)
        accumulated = getattr(previous.accumulated, f.name)
        new_value = getattr(incoming, f.name)
        if current > 0 and new_value < current:
            logger.debug("Cost counter %s reset (%s -> %s), folding", f.name, current, new_value)
            accumulated += current
        folded[f.name] = accumulated

    accumulated = CostMetrics(**folded)
    return CostHistory(
        current=incoming,
        accumulated=accumulated,
        total=incoming.plus(accumulated),
    )
