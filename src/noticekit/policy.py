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


r"""Transfer policy: how a condition crosses a dependency edge.

Every decision the resolvers make about an edge goes through
:func:`permit_edge`, which consults one closed table keyed by
``(ConditionCategory, Annotation)``.

The table::

    ┌───────────────────────────┬──────────────────┬──────────────────┬───────────┐
    │ category                  │ static           │ dynamic          │ toolchain │
    ├───────────────────────────┼──────────────────┼──────────────────┼───────────┤
    │ notice                    │ SURFACE_ONLY     │ BLOCKED          │ BLOCKED   │
    │ reciprocal                │ SURFACE_ONLY     │ BLOCKED          │ BLOCKED   │
    │ restricted-strong         │ SURFACE_AND_INF. │ SURFACE_AND_INF. │ BLOCKED   │
    │ restricted-weak           │ SURFACE_AND_INF. │ BLOCKED          │ BLOCKED   │
    │ restricted-weak-exception │ SURFACE_AND_INF. │ BLOCKED          │ BLOCKED   │
    └───────────────────────────┴──────────────────┴──────────────────┴───────────┘

An edge carrying several annotations transfers as its most permissive
annotation does, so ``{static, toolchain}`` behaves like ``static``.

Usage::

    from noticekit.policy import Annotation, Transfer, permit_edge
    from noticekit.conditions import ConditionCategory

    permit_edge(ConditionCategory.RESTRICTED_WEAK, {Annotation.DYNAMIC})
    # Transfer.BLOCKED
"""

from __future__ import annotations

import enum
import itertools
from collections.abc import Iterable

from noticekit.conditions import ConditionCategory
from noticekit.errors import GraphError

__all__ = [
    'Annotation',
    'Transfer',
    'permit',
    'permit_edge',
]


class Annotation(str, enum.Enum):
    """How a dependency is incorporated into its dependent."""

    STATIC = 'static'
    DYNAMIC = 'dynamic'
    TOOLCHAIN = 'toolchain'

    @classmethod
    def parse(cls, text: str) -> Annotation:
        """Return the annotation named *text*.

        Raises:
            GraphError: If *text* is not a known annotation.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            valid = ', '.join(a.value for a in cls)
            raise GraphError(f'Unknown edge annotation {text!r}. Must be one of: {valid}') from None


class Transfer(enum.IntEnum):
    """What happens to a condition at an edge, least to most permissive."""

    BLOCKED = 0
    SURFACE_ONLY = 1
    SURFACE_AND_INFECT = 2


_B = Transfer.BLOCKED
_S = Transfer.SURFACE_ONLY
_I = Transfer.SURFACE_AND_INFECT

_TRANSFER_TABLE: dict[tuple[ConditionCategory, Annotation], Transfer] = {
    (ConditionCategory.NOTICE, Annotation.STATIC): _S,
    (ConditionCategory.NOTICE, Annotation.DYNAMIC): _B,
    (ConditionCategory.NOTICE, Annotation.TOOLCHAIN): _B,
    (ConditionCategory.RECIPROCAL, Annotation.STATIC): _S,
    (ConditionCategory.RECIPROCAL, Annotation.DYNAMIC): _B,
    (ConditionCategory.RECIPROCAL, Annotation.TOOLCHAIN): _B,
    (ConditionCategory.RESTRICTED_STRONG, Annotation.STATIC): _I,
    (ConditionCategory.RESTRICTED_STRONG, Annotation.DYNAMIC): _I,
    (ConditionCategory.RESTRICTED_STRONG, Annotation.TOOLCHAIN): _B,
    (ConditionCategory.RESTRICTED_WEAK, Annotation.STATIC): _I,
    (ConditionCategory.RESTRICTED_WEAK, Annotation.DYNAMIC): _B,
    (ConditionCategory.RESTRICTED_WEAK, Annotation.TOOLCHAIN): _B,
    (ConditionCategory.RESTRICTED_WEAK_EXCEPTION, Annotation.STATIC): _I,
    (ConditionCategory.RESTRICTED_WEAK_EXCEPTION, Annotation.DYNAMIC): _B,
    (ConditionCategory.RESTRICTED_WEAK_EXCEPTION, Annotation.TOOLCHAIN): _B,
}

_missing = [
    f'{c.value}/{a.value}'
    for c, a in itertools.product(ConditionCategory, Annotation)
    if (c, a) not in _TRANSFER_TABLE
]
if _missing:
    raise RuntimeError(f'Transfer table has no rule for: {", ".join(_missing)}')
del _missing


def permit(category: ConditionCategory, annotation: Annotation) -> Transfer:
    """Return the transfer for one category across one annotation."""
    return _TRANSFER_TABLE[category, annotation]


def permit_edge(
    category: ConditionCategory,
    annotations: Iterable[Annotation],
    *,
    dependent_module: bool = False,
) -> Transfer:
    """Return the transfer for *category* across an annotated edge.

    Args:
        category: Category of the condition trying to cross.
        annotations: Annotations on the edge. Must not be empty.
        dependent_module: ``True`` when the dependent target derives from
            the dependency rather than being an independent module. A
            linking exception does not cover such targets, so
            ``restricted-weak-exception`` transfers as ``restricted-strong``.

    Returns:
        The most permissive :class:`Transfer` among the annotations.
    """
    if dependent_module and category is ConditionCategory.RESTRICTED_WEAK_EXCEPTION:
        category = ConditionCategory.RESTRICTED_STRONG
    return max((_TRANSFER_TABLE[category, a] for a in annotations), default=Transfer.BLOCKED)
