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


r"""Resolution sets: which conditions apply to what, and why.

A :class:`ResolutionSet` maps every *subject* target to the set of
:class:`ResolutionTriple` values that hold when that subject is the
thing being shipped. A triple ``(acts_on, origin, condition)`` says
"``acts_on`` is subject to ``condition``, which originated at
``origin``".

Key Concepts (ELI5)::

    ┌────────────────────────────┬─────────────────────────────────────────┐
    │ Triple                     │ Plain-English                           │
    ├────────────────────────────┼─────────────────────────────────────────┤
    │ (lib, lib, notice)         │ lib's own notice is visible here.      │
    ├────────────────────────────┼─────────────────────────────────────────┤
    │ (bin, gpl, restricted)     │ bin is itself obligated by gpl's       │
    │                            │ restricted condition (infection).       │
    └────────────────────────────┴─────────────────────────────────────────┘

Sets are values: they are compared per subject, independent of
insertion order and duplicates, and every transformation returns a new
set. The resolvers build results with :class:`ResolutionSetBuilder` and
freeze them once.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from noticekit.conditions import Condition, ConditionCategory
from noticekit.errors import ResolutionInvariantError
from noticekit.graph import LicenseGraph

__all__ = [
    'ResolutionDiff',
    'ResolutionSet',
    'ResolutionSetBuilder',
    'ResolutionTriple',
    'union',
]


@dataclass(frozen=True)
class ResolutionTriple:
    """One applicable condition.

    Attributes:
        acts_on: Target subject to the condition.
        origin: Target the condition originated at.
        condition: The condition itself.
    """

    acts_on: str
    origin: str
    condition: Condition

    def __str__(self) -> str:
        """Return ``(acts_on, origin, condition)``."""
        return f'({self.acts_on}, {self.origin}, {self.condition})'

    @property
    def is_self(self) -> bool:
        """``True`` when the triple is the origin's own condition."""
        return self.acts_on == self.origin

    @property
    def sort_key(self) -> tuple[str, str, str, str]:
        """Stable ordering key used for deterministic output."""
        return (self.acts_on, self.origin, *self.condition.sort_key)

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-ready mapping."""
        return {
            'acts_on': self.acts_on,
            'origin': self.origin,
            'condition': self.condition.name,
            'category': self.condition.category.value,
        }


def _sorted(triples: Iterable[ResolutionTriple]) -> list[ResolutionTriple]:
    return sorted(triples, key=lambda t: t.sort_key)


@dataclass(frozen=True)
class ResolutionDiff:
    """Per-subject difference between two resolution sets.

    Attributes:
        missing: Triples in the expected set but not the actual one.
        extra: Triples in the actual set but not the expected one.
    """

    missing: Mapping[str, frozenset[ResolutionTriple]] = field(default_factory=dict)
    extra: Mapping[str, frozenset[ResolutionTriple]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """``True`` if the sets differ."""
        return bool(self.missing or self.extra)

    @property
    def subjects(self) -> tuple[str, ...]:
        """Sorted subjects with at least one difference."""
        return tuple(sorted(set(self.missing) | set(self.extra)))


class ResolutionSet:
    """Immutable mapping from subject target to its resolution triples.

    A subject may hold no triples (a target without licenses that sees
    nothing across its edges). Such a subject is still known, but it
    compares equal to an absent one.
    """

    __slots__ = ('_resolutions',)

    def __init__(self, resolutions: Mapping[str, Iterable[ResolutionTriple]] | None = None) -> None:
        """Freeze *resolutions* into a new set."""
        frozen = {subject: frozenset(triples) for subject, triples in (resolutions or {}).items()}
        self._resolutions: Mapping[str, frozenset[ResolutionTriple]] = MappingProxyType(frozen)

    def _nonempty(self) -> dict[str, frozenset[ResolutionTriple]]:
        return {s: v for s, v in self._resolutions.items() if v}

    # ── Container protocol ──────────────────────────────────────────

    def __contains__(self, subject: object) -> bool:
        """Return ``True`` if *subject* is a subject of the set."""
        return subject in self._resolutions

    def __iter__(self) -> Iterator[str]:
        """Iterate over subjects in sorted order."""
        return iter(self.subjects)

    def __len__(self) -> int:
        """Return the number of subjects."""
        return len(self._resolutions)

    def __eq__(self, other: object) -> bool:
        """Compare per subject by triple-set equality, ignoring empty subjects."""
        if not isinstance(other, ResolutionSet):
            return NotImplemented
        return self._nonempty() == other._nonempty()

    __hash__ = None  # type: ignore[assignment]

    def __or__(self, other: ResolutionSet) -> ResolutionSet:
        """Return the per-subject union of both sets."""
        return union(self, other)

    def __repr__(self) -> str:
        """Return a compact summary."""
        return f'ResolutionSet(subjects={len(self)}, triples={self.triple_count})'

    # ── Queries ─────────────────────────────────────────────────────

    @property
    def subjects(self) -> tuple[str, ...]:
        """Sorted subject names."""
        return tuple(sorted(self._resolutions))

    @property
    def triple_count(self) -> int:
        """Total number of triples across all subjects."""
        return sum(len(v) for v in self._resolutions.values())

    def triples_for(self, subject: str) -> frozenset[ResolutionTriple]:
        """Return the triples that hold when *subject* is shipped.

        Raises:
            ResolutionInvariantError: If *subject* is not in the set.
                The resolvers emit every graph target as a subject,
                possibly with no triples, so a missing subject is a
                caller or resolver bug rather than an empty answer.
        """
        try:
            return self._resolutions[subject]
        except KeyError:
            raise ResolutionInvariantError([f'subject {subject!r} is not in the resolution set']) from None

    def acting_on(self, subject: str, target: str) -> frozenset[ResolutionTriple]:
        """Return the triples under *subject* that act on *target*."""
        return frozenset(t for t in self.triples_for(subject) if t.acts_on == target)

    def origins(self, subject: str) -> dict[str, frozenset[Condition]]:
        """Group the conditions under *subject* by originating target.

        This is the view a notice generator needs: which targets'
        licenses must be reproduced, and with which conditions.
        """
        grouped: dict[str, set[Condition]] = {}
        for t in self.triples_for(subject):
            grouped.setdefault(t.origin, set()).add(t.condition)
        return {k: frozenset(v) for k, v in sorted(grouped.items())}

    def infections(self, subject: str) -> frozenset[ResolutionTriple]:
        """Return the triples under *subject* where a target is infected."""
        return frozenset(t for t in self.triples_for(subject) if not t.is_self)

    # ── Transformations ─────────────────────────────────────────────

    def add(self, subject: str, triple: ResolutionTriple) -> ResolutionSet:
        """Return a new set with *triple* added under *subject*."""
        if triple in self._resolutions.get(subject, frozenset()):
            return self
        resolutions = dict(self._resolutions)
        resolutions[subject] = resolutions.get(subject, frozenset()) | {triple}
        return ResolutionSet(resolutions)

    def restrict(self, subjects: Iterable[str]) -> ResolutionSet:
        """Return a new set with only the given subjects."""
        wanted = set(subjects)
        return ResolutionSet({s: v for s, v in self._resolutions.items() if s in wanted})

    def diff(self, expected: ResolutionSet) -> ResolutionDiff:
        """Compare this (actual) set against *expected*, per subject."""
        missing: dict[str, frozenset[ResolutionTriple]] = {}
        extra: dict[str, frozenset[ResolutionTriple]] = {}
        for subject in sorted(set(self._resolutions) | set(expected._resolutions)):
            have = self._resolutions.get(subject, frozenset())
            want = expected._resolutions.get(subject, frozenset())
            if want - have:
                missing[subject] = want - have
            if have - want:
                extra[subject] = have - want
        return ResolutionDiff(missing=missing, extra=extra)

    def check_invariants(self, graph: LicenseGraph) -> None:
        """Verify the set against *graph*.

        Checks:
            1. Every target of the graph is a subject.
            2. Every inherent condition of every target appears as its
               self-triple under that target.
            3. No subject or triple names a target outside the graph.

        Raises:
            ResolutionInvariantError: With every problem found.
        """
        problems: list[str] = []
        for name, target in graph.targets.items():
            if name not in self._resolutions:
                problems.append(f'subject {name!r} is missing')
                continue
            have = self._resolutions[name]
            for c in target.conditions:
                if ResolutionTriple(name, name, c) not in have:
                    problems.append(f'subject {name!r} lacks its own condition {c}')
        for subject, triples in self._resolutions.items():
            if subject not in graph:
                problems.append(f'subject {subject!r} is not a graph target')
            for t in triples:
                for end in (t.acts_on, t.origin):
                    if end not in graph:
                        problems.append(f'subject {subject!r} has triple {t} naming unknown target {end!r}')
        if problems:
            raise ResolutionInvariantError(problems)

    # ── Serialization ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        """Return a JSON-ready mapping with deterministic ordering."""
        return {s: [t.to_dict() for t in _sorted(self._resolutions[s])] for s in self.subjects}

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize to JSON; equal sets produce identical text."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> ResolutionSet:
        """Inverse of :meth:`to_dict`."""
        return cls({
            subject: [
                ResolutionTriple(
                    acts_on=row['acts_on'],
                    origin=row['origin'],
                    condition=Condition(row['condition'], ConditionCategory.parse(row['category'])),
                )
                for row in rows
            ]
            for subject, rows in data.items()
        })


def union(a: ResolutionSet, b: ResolutionSet) -> ResolutionSet:
    """Return the per-subject union of *a* and *b*."""
    builder = ResolutionSetBuilder()
    for rs in (a, b):
        for subject in rs.subjects:
            builder.add_all(subject, rs.triples_for(subject))
    return builder.build()


class ResolutionSetBuilder:
    """Mutable accumulator for a :class:`ResolutionSet`.

    Adding is idempotent: the same triple reached through several paths
    is stored once.
    """

    def __init__(self, base: ResolutionSet | None = None) -> None:
        """Start empty, or from a copy of *base*."""
        self._resolutions: dict[str, set[ResolutionTriple]] = {}
        if base is not None:
            for subject in base.subjects:
                self._resolutions[subject] = set(base.triples_for(subject))

    def add(self, subject: str, triple: ResolutionTriple) -> bool:
        """Add *triple* under *subject*; return ``True`` if it was new."""
        bucket = self._resolutions.setdefault(subject, set())
        if triple in bucket:
            return False
        bucket.add(triple)
        return True

    def add_all(self, subject: str, triples: Iterable[ResolutionTriple]) -> None:
        """Add every triple in *triples* under *subject*."""
        self._resolutions.setdefault(subject, set()).update(triples)

    def triples_for(self, subject: str) -> frozenset[ResolutionTriple]:
        """Snapshot of what *subject* holds so far."""
        return frozenset(self._resolutions.get(subject, ()))

    def build(self) -> ResolutionSet:
        """Freeze the accumulated triples."""
        return ResolutionSet(self._resolutions)
