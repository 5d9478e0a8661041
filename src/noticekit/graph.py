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


r"""License graph: targets, annotated dependency edges, and construction.

The graph is built once and is read-only afterwards. Each node is a
:class:`Target` carrying its inherent conditions; each :class:`Edge`
points from a dependent target to one of its dependencies and records
how the dependency is incorporated.

Key Concepts (ELI5)::

    ┌─────────────────────┬──────────────────────────────────────────────┐
    │ Concept             │ Plain-English                                │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ Target              │ A binary, library or bundle with its own    │
    │                     │ license conditions.                          │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ Edge A → B          │ A incorporates B (static/dynamic) or uses B │
    │                     │ only to build (toolchain).                   │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ Root                │ A target the compliance query starts from.  │
    ├─────────────────────┼──────────────────────────────────────────────┤
    │ Container           │ A pure aggregate (e.g. a disk image) that   │
    │                     │ bundles targets without combining them.      │
    └─────────────────────┴──────────────────────────────────────────────┘

Usage::

    from noticekit.graph import TargetMetadata, build_graph
    from noticekit.license_policy import ConditionPolicy

    graph = build_graph(
        roots=['bin'],
        edges=[('bin', 'lib', ['static'])],
        targets={
            'bin': TargetMetadata(('SPDX-license-identifier-Apache-2.0',)),
            'lib': TargetMetadata(('SPDX-license-identifier-GPL-2.0',)),
        },
        policy=ConditionPolicy.load(),
    )
    graph.topological_order()  # ('bin', 'lib')
"""

from __future__ import annotations

import heapq
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from noticekit.conditions import Condition
from noticekit.errors import GraphError
from noticekit.license_policy import ConditionPolicy
from noticekit.logging import get_logger
from noticekit.policy import Annotation

__all__ = [
    'Edge',
    'EdgeSpec',
    'LicenseGraph',
    'Target',
    'TargetMetadata',
    'build_graph',
]

logger = get_logger(__name__)

EdgeSpec = tuple[str, str, Iterable['Annotation | str']]


@dataclass(frozen=True)
class Target:
    """One node of the license graph.

    Attributes:
        name: Stable identifier; targets compare by value.
        conditions: Inherent license conditions, in declaration order.
        is_root: Whether the target is a declared root of the query.
        is_container: Whether the target is a pure aggregate.
        dependent_module: Whether the target derives from its
            linking-exception dependencies instead of being an
            independent module.
    """

    name: str
    conditions: tuple[Condition, ...] = ()
    is_root: bool = False
    is_container: bool = False
    dependent_module: bool = False


@dataclass(frozen=True)
class Edge:
    """A directed dependency from ``target`` to ``dependency``.

    Attributes:
        target: Name of the dependent target.
        dependency: Name of the target being depended on.
        annotations: Non-empty set of :class:`Annotation` values.
    """

    target: str
    dependency: str
    annotations: frozenset[Annotation]

    def __post_init__(self) -> None:
        """Reject edges without annotations."""
        if not self.annotations:
            raise GraphError(
                f'Edge {self.target!r} -> {self.dependency!r} has no annotations',
                edge=(self.target, self.dependency),
            )

    def __str__(self) -> str:
        """Return ``target -[a,b]-> dependency``."""
        return f'{self.target} -[{",".join(self.annotation_names)}]-> {self.dependency}'

    @property
    def annotation_names(self) -> tuple[str, ...]:
        """Sorted annotation values, for display and serialization."""
        return tuple(sorted(a.value for a in self.annotations))


@dataclass(frozen=True)
class TargetMetadata:
    """Unresolved description of a target, as read from metadata.

    Attributes:
        license_kinds: License kinds, resolved through a
            :class:`~noticekit.license_policy.ConditionPolicy`.
        is_container: See :attr:`Target.is_container`.
        dependent_module: See :attr:`Target.dependent_module`.
    """

    license_kinds: tuple[str, ...] = ()
    is_container: bool = False
    dependent_module: bool = False


@dataclass(frozen=True, eq=False)
class LicenseGraph:
    """Immutable, validated, acyclic license graph.

    Construct through :func:`build_graph` or directly from resolved
    :class:`Target` and :class:`Edge` objects; construction validates
    edge endpoints and rejects dependency cycles.

    Attributes:
        targets: Read-only mapping from name to :class:`Target`.
        edges: All edges, sorted, parallel edges merged.
        roots: Sorted names of the declared roots.
    """

    targets: Mapping[str, Target]
    edges: tuple[Edge, ...]
    roots: tuple[str, ...]
    _deps: Mapping[str, tuple[Edge, ...]] = field(repr=False)
    _rdeps: Mapping[str, tuple[Edge, ...]] = field(repr=False)
    _order: tuple[str, ...] = field(repr=False)

    @classmethod
    def create(cls, targets: Iterable[Target], edges: Iterable[Edge]) -> LicenseGraph:
        """Validate *targets* and *edges* and return the graph.

        Raises:
            GraphError: On duplicate targets, dangling or self edges, or
                a dependency cycle.
        """
        by_name: dict[str, Target] = {}
        for t in targets:
            if t.name in by_name and by_name[t.name] != t:
                raise GraphError(f'Target {t.name!r} defined twice with different attributes', target=t.name)
            by_name[t.name] = t

        merged: dict[tuple[str, str], set[Annotation]] = {}
        for e in edges:
            for end in (e.target, e.dependency):
                if end not in by_name:
                    raise GraphError(
                        f'Edge {e} references unknown target {end!r}',
                        target=end,
                        edge=(e.target, e.dependency),
                    )
            if e.target == e.dependency:
                raise GraphError(f'Target {e.target!r} depends on itself', target=e.target, edge=(e.target, e.dependency))
            merged.setdefault((e.target, e.dependency), set()).update(e.annotations)

        all_edges = tuple(Edge(t, d, frozenset(a)) for (t, d), a in sorted(merged.items()))
        deps: dict[str, list[Edge]] = {name: [] for name in by_name}
        rdeps: dict[str, list[Edge]] = {name: [] for name in by_name}
        for e in all_edges:
            deps[e.target].append(e)
            rdeps[e.dependency].append(e)

        order = _topological_order(sorted(by_name), deps, rdeps)
        return cls(
            targets=MappingProxyType(dict(sorted(by_name.items()))),
            edges=all_edges,
            roots=tuple(sorted(n for n, t in by_name.items() if t.is_root)),
            _deps=MappingProxyType({n: tuple(v) for n, v in deps.items()}),
            _rdeps=MappingProxyType({n: tuple(v) for n, v in rdeps.items()}),
            _order=order,
        )

    def __contains__(self, name: object) -> bool:
        """Return ``True`` if *name* is a target of the graph."""
        return name in self.targets

    def __len__(self) -> int:
        """Return the number of targets."""
        return len(self.targets)

    def target(self, name: str) -> Target:
        """Return the target called *name*.

        Raises:
            GraphError: If the graph has no such target.
        """
        try:
            return self.targets[name]
        except KeyError:
            raise GraphError(f'Unknown target {name!r}', target=name) from None

    def dependencies(self, name: str) -> tuple[Edge, ...]:
        """Return the outgoing edges of *name*, sorted by dependency."""
        self.target(name)
        return self._deps[name]

    def dependents(self, name: str) -> tuple[Edge, ...]:
        """Return the incoming edges of *name*, sorted by dependent."""
        self.target(name)
        return self._rdeps[name]

    def topological_order(self) -> tuple[str, ...]:
        """Return every target name, dependents before dependencies.

        Ties are broken by name so the order is fully deterministic.
        """
        return self._order


def _topological_order(
    names: list[str],
    deps: Mapping[str, list[Edge]],
    rdeps: Mapping[str, list[Edge]],
) -> tuple[str, ...]:
    """Kahn's algorithm over the dependency relation."""
    pending = {n: len(rdeps[n]) for n in names}
    ready = [n for n in names if pending[n] == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for e in deps[name]:
            pending[e.dependency] -= 1
            if pending[e.dependency] == 0:
                heapq.heappush(ready, e.dependency)
    if len(order) != len(names):
        cycle = _find_cycle({n for n, count in pending.items() if count > 0}, rdeps)
        raise GraphError(
            f'Dependency cycle: {" -> ".join(cycle)}',
            target=cycle[0],
            edge=(cycle[0], cycle[1]),
        )
    return tuple(order)


def _find_cycle(remaining: set[str], rdeps: Mapping[str, list[Edge]]) -> list[str]:
    """Return one cycle among *remaining*, first node repeated at the end.

    Every node left over by Kahn's algorithm still has a leftover
    dependent, so walking from dependency to dependent always closes a
    loop. The walk runs against the edges and is reversed at the end.
    """
    path: list[str] = []
    index: dict[str, int] = {}
    node = min(remaining)
    while node not in index:
        index[node] = len(path)
        path.append(node)
        node = next(e.target for e in rdeps[node] if e.target in remaining)
    return [*path[index[node] :], node][::-1]


def _parse_annotations(spec: Iterable[Annotation | str], *, edge: tuple[str, str]) -> frozenset[Annotation]:
    if isinstance(spec, str):
        spec = [spec]
    result: set[Annotation] = set()
    for a in spec:
        if isinstance(a, Annotation):
            result.add(a)
            continue
        try:
            result.add(Annotation.parse(a))
        except GraphError as exc:
            raise GraphError(f'Edge {edge[0]!r} -> {edge[1]!r}: {exc}', edge=edge) from None
    if not result:
        raise GraphError(f'Edge {edge[0]!r} -> {edge[1]!r} has no annotations', edge=edge)
    return frozenset(result)


def build_graph(
    roots: Iterable[str],
    edges: Iterable[EdgeSpec],
    targets: Mapping[str, TargetMetadata | Target],
    *,
    policy: ConditionPolicy | None = None,
) -> LicenseGraph:
    """Build a validated graph from roots, annotated edges and metadata.

    Only targets reachable from *roots* are kept.

    Args:
        roots: Names of the query roots.
        edges: ``(target, dependency, annotations)`` tuples; annotations
            may be strings or :class:`Annotation` members.
        targets: Metadata per target name. :class:`TargetMetadata`
            entries are resolved through *policy*; :class:`Target`
            entries are used as-is (their ``is_root`` is recomputed).
        policy: Condition policy; defaults to the built-in one.

    Returns:
        The finished :class:`LicenseGraph`.

    Raises:
        GraphError: Unknown root or endpoint, bad annotation, self edge,
            or dependency cycle.
        UnmappedConditionError: A license kind has no mapping.
    """
    root_names = sorted(set(roots))
    if not root_names:
        raise GraphError('At least one root target is required')
    for r in root_names:
        if r not in targets:
            raise GraphError(f'Root {r!r} has no target metadata', target=r)

    adjacency: dict[str, list[tuple[str, frozenset[Annotation]]]] = {}
    for tgt, dep, spec in edges:
        key = (tgt, dep)
        for end in key:
            if end not in targets:
                raise GraphError(f'Edge {tgt!r} -> {dep!r} references unknown target {end!r}', target=end, edge=key)
        adjacency.setdefault(tgt, []).append((dep, _parse_annotations(spec, edge=key)))

    reachable: set[str] = set(root_names)
    queue = deque(root_names)
    while queue:
        name = queue.popleft()
        for dep, _ in adjacency.get(name, ()):
            if dep not in reachable:
                reachable.add(dep)
                queue.append(dep)

    nodes: list[Target] = []
    for name in sorted(reachable):
        meta = targets[name]
        if isinstance(meta, Target):
            if meta.name != name:
                raise GraphError(f'Target metadata keyed {name!r} is named {meta.name!r}', target=name)
            conditions = meta.conditions
        else:
            if policy is None:
                policy = ConditionPolicy.load()
            conditions = policy.conditions_for(meta.license_kinds, target=name)
        nodes.append(
            Target(
                name=name,
                conditions=conditions,
                is_root=name in root_names,
                is_container=meta.is_container,
                dependent_module=meta.dependent_module,
            )
        )

    graph = LicenseGraph.create(
        nodes,
        (Edge(tgt, dep, ann) for tgt in sorted(reachable) for dep, ann in adjacency.get(tgt, ())),
    )
    logger.debug('graph_built', roots=list(graph.roots), targets=len(graph), edges=len(graph.edges))
    return graph
