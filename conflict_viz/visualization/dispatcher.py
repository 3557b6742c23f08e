"""
Chart dispatcher.

Routes a ``ChartRequest`` to its registered renderer and draws the outcome
into a ``ChartContainer``.

Flow per dispatch:
  1. Look up the ChartSpec (unknown kind -> UnknownChartError).
  2. Clear the target container.
  3. Select records: subset, then year filter, then focus filter.
  4. Empty selection -> write the ChartSpec's "no data" message and return.
  5. Call the renderer; a Figure is drawn, an EmptySubset is written as a
     message, and an exception is logged and written as an error message in
     this container only.

A dispatch never depends on what the container held before, so repeating a
dispatch with the same inputs leaves the container in the same state.
"""

import dataclasses
import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import plotly.graph_objects as go

from ..core.config import SNAPSHOT_YEAR
from ..models.data_models import CanonicalRecord, ChartRequest, EmptySubset
from ..pipeline.classifier import country_records, aggregate_records, world_records
from .containers import ChartContainer, ERROR, INFO
from .registry import ChartSpec, get_spec
from .theme import RenderContext

logger = logging.getLogger(__name__)

DispatchResult = Union[go.Figure, EmptySubset, None]


def resolve_request(spec: ChartSpec, request: ChartRequest) -> ChartRequest:
    """Fill in the snapshot year and default focus the ChartSpec implies."""
    changes = {}
    if request.year is None and spec.year_scope == 'snapshot':
        changes['year'] = SNAPSHOT_YEAR
    if spec.uses_focus and not request.focus and spec.default_focus:
        changes['focus'] = spec.default_focus
    if not spec.uses_focus and request.focus:
        changes['focus'] = ()
    return dataclasses.replace(request, **changes) if changes else request


def _subset(records: Sequence[CanonicalRecord], subset: str) -> List[CanonicalRecord]:
    if subset == 'countries':
        return country_records(records)
    if subset == 'aggregates':
        return aggregate_records(records)
    if subset == 'world':
        return world_records(records)
    return list(records)


def select_records(records: Sequence[CanonicalRecord], spec: ChartSpec,
                   request: ChartRequest) -> List[CanonicalRecord]:
    """Apply subset, year and focus filters for a resolved request."""
    selected = _subset(records, spec.subset)

    if spec.year_scope == 'snapshot':
        selected = [r for r in selected if r.year == request.year]
    elif spec.year_scope == 'range' and request.year_range is not None:
        start, end = request.year_range
        selected = [r for r in selected if r.year is not None and start <= r.year <= end]
    else:
        selected = [r for r in selected if r.year is not None]

    if spec.uses_focus and request.focus:
        focus = set(request.focus)
        selected = [r for r in selected if r.entity in focus]
    return selected


def empty_message(spec: ChartSpec, request: ChartRequest) -> str:
    """Deterministic "no data" text for an empty selection."""
    if request.focus and spec.uses_focus and spec.year_scope != 'snapshot':
        message = "No data for selected countries."
    else:
        message = spec.empty_message.format(year=request.year)
    if spec.year_scope == 'range' and request.year_range is not None:
        start, end = request.year_range
        message = f"{message.rstrip('.')} between {start} and {end}."
    return message


def dispatch(records: Sequence[CanonicalRecord], request: ChartRequest,
             container: ChartContainer, context: Optional[RenderContext] = None) -> DispatchResult:
    """Draw one chart into *container*.

    Returns:
        The drawn figure, the EmptySubset that was reported, or None when the
        renderer failed (the error is shown in the container).

    Raises:
        UnknownChartError: If ``request.kind`` is not registered.
    """
    spec = get_spec(request.kind)
    context = context or RenderContext()
    container.clear()

    request = resolve_request(spec, request)
    selected = select_records(records, spec, request)
    logger.debug(f"[Dispatch] {spec.kind}: {len(selected)} records selected")

    if not selected:
        empty = EmptySubset(empty_message(spec, request))
        container.show_message(empty.message, INFO)
        logger.info(f"[Dispatch] {spec.kind}: {empty.message}")
        return empty

    try:
        outcome = spec.renderer(selected, request, context)
    except Exception as e:
        logger.error(f"[Dispatch] {spec.kind} renderer failed: {e}", exc_info=True)
        container.show_message(f"Could not render {spec.title}: {e}", ERROR)
        return None

    if isinstance(outcome, EmptySubset):
        container.show_message(outcome.message, INFO)
        logger.info(f"[Dispatch] {spec.kind}: {outcome.message}")
    else:
        container.render_figure(outcome)
    return outcome


def render_failure(containers: Iterable[ChartContainer], message: str) -> int:
    """Write the same failure message into every container; returns how many."""
    count = 0
    for container in containers:
        container.show_message(message, ERROR)
        count += 1
    logger.error(f"[Dispatch] Pipeline failure shown in {count} containers: {message}")
    return count


def dispatch_all(records: Sequence[CanonicalRecord], requests: Iterable[ChartRequest],
                 page, context: Optional[RenderContext] = None) -> List[Tuple[str, DispatchResult]]:
    """Dispatch several requests into the page container of the same kind."""
    results = []
    for request in requests:
        spec = get_spec(request.kind)
        container = page.add(spec.kind, spec.title)
        results.append((spec.kind, dispatch(records, request, container, context)))
    return results
