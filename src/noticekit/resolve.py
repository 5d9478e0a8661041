# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0


r"""Two-pass condition resolution over a license graph.

The bottom-up pass asks "what does each target see from the things it
incorporates?". The top-down pass then asks "once a target is obligated,
what else is bundled into the same combined unit?" and spreads the
obligation down into those targets.

Example (``bin`` statically links ``gpl`` and ``mit``)::

    bin ──static──▶ gpl (restricted-strong)
     │
     └──static──▶ mit (notice)

    bottom-up, subject bin:
        (bin, bin, notice)          own condition
        (gpl, gpl, restricted)      surfaced from gpl
        (bin, gpl, restricted)      bin infected by gpl
        (mit, mit, notice)          surfaced from mit

    top-down adds, for subjects bin and mit:
        (mit, gpl, restricted)      mit is bundled with infected bin

Both passes walk a precomputed topological order with explicit loops,
so deep graphs cannot exhaust the interpreter stack, and both collect
into per-subject sets, so revisits and diamonds never double-count.
"""

from __future__ import annotations

from noticekit.graph import LicenseGraph, Target
from noticekit.logging import get_logger
from noticekit.policy import Transfer, permit_edge
from noticekit.resolution import ResolutionSet, ResolutionSetBuilder, ResolutionTriple

__all__ = [
    'resolve',
    'resolve_bottom_up',
    'resolve_top_down',
]

logger = get_logger(__name__)


def _spreads_down(target: Target, as_aggregate: bool) -> bool:
    """Whether infections held by *target* travel to its dependencies.

    A pure aggregate bundles its dependencies without combining them,
    so it only pushes restrictions down when its own license is one.
    """
    if not as_aggregate:
        return True
    return any(c.category.infects for c in target.conditions)


def resolve_bottom_up(graph: LicenseGraph) -> ResolutionSet:
    """Propagate conditions from dependencies up to their dependents.

    Every target gets its own conditions as self-triples. Across each
    edge, a dependency's triples are surfaced unless the transfer policy
    blocks them; a dependency's *own* restricted condition that may
    infect across the edge additionally obligates the dependent.

    Args:
        graph: A validated, acyclic license graph.

    Returns:
        A resolution set with an entry for every target of the graph,
        empty for targets that neither declare nor see a condition.
    """
    builder = ResolutionSetBuilder()
    for name in reversed(graph.topological_order()):
        target = graph.target(name)
        found = {ResolutionTriple(name, name, c) for c in target.conditions}
        for edge in graph.dependencies(name):
            for triple in builder.triples_for(edge.dependency):
                transfer = permit_edge(
                    triple.condition.category,
                    edge.annotations,
                    dependent_module=target.dependent_module,
                )
                if transfer is Transfer.BLOCKED:
                    continue
                found.add(triple)
                if transfer is Transfer.SURFACE_AND_INFECT and triple.is_self:
                    found.add(ResolutionTriple(name, triple.origin, triple.condition))
        builder.add_all(name, found)

    result = builder.build()
    logger.debug('bottom_up_resolved', targets=len(graph), subjects=len(result), triples=result.triple_count)
    return result


def resolve_top_down(graph: LicenseGraph, bottom_up: ResolutionSet) -> ResolutionSet:
    """Spread infections down into everything bundled with them.

    Starting from *bottom_up*, walks from the declared roots toward the
    leaves. Any restricted condition a target is itself obligated by is
    handed to each dependency the transfer policy lets it reach. A final
    upward sweep surfaces those new obligations to every subject that
    incorporates the newly obligated targets.

    Args:
        graph: The graph *bottom_up* was computed from.
        bottom_up: Result of :func:`resolve_bottom_up` for *graph*.

    Returns:
        A new resolution set; every subject's triples are a superset of
        its bottom-up triples.

    Raises:
        ResolutionInvariantError: If *bottom_up* does not cover *graph*.
    """
    bottom_up.check_invariants(graph)
    builder = ResolutionSetBuilder(bottom_up)
    order = graph.topological_order()

    # A target is walked as an aggregate only when it is a container and
    # every walked dependent reaching it was walked as an aggregate too.
    aggregate: dict[str, bool] = {r: graph.target(r).is_container for r in graph.roots}
    spread = 0
    for name in order:
        if name not in aggregate:
            continue
        target = graph.target(name)
        held = [
            t for t in builder.triples_for(name) if t.acts_on == name and t.condition.category.infects
        ]
        if not _spreads_down(target, aggregate[name]):
            held = []
        for edge in graph.dependencies(name):
            dep = edge.dependency
            aggregate[dep] = aggregate.get(dep, True) and aggregate[name] and graph.target(dep).is_container
            for triple in held:
                transfer = permit_edge(
                    triple.condition.category,
                    edge.annotations,
                    dependent_module=target.dependent_module,
                )
                if transfer is not Transfer.BLOCKED and builder.add(
                    dep, ResolutionTriple(dep, triple.origin, triple.condition)
                ):
                    spread += 1

    for name in reversed(order):
        target = graph.target(name)
        for edge in graph.dependencies(name):
            surfaced = [
                t
                for t in builder.triples_for(edge.dependency)
                if permit_edge(t.condition.category, edge.annotations, dependent_module=target.dependent_module)
                is not Transfer.BLOCKED
            ]
            builder.add_all(name, surfaced)

    result = builder.build()
    logger.debug(
        'top_down_resolved',
        roots=list(graph.roots),
        spread=spread,
        subjects=len(result),
        triples=result.triple_count,
    )
    return result


def resolve(graph: LicenseGraph) -> ResolutionSet:
    """Run both passes and verify the final result.

    Returns:
        The top-down resolution set, the complete answer for
        distribution-time compliance.
    """
    bottom_up = resolve_bottom_up(graph)
    bottom_up.check_invariants(graph)
    top_down = resolve_top_down(graph, bottom_up)
    top_down.check_invariants(graph)
    return top_down
