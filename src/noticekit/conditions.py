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


r"""License conditions and their propagation categories.

A *condition* is a named license obligation. Its *category* is the only
thing the resolvers look at when deciding how the condition travels
along dependency edges; the name is carried for display.

Key Concepts (ELI5)::

    ┌───────────────────────────┬──────────────────────────────────────────┐
    │ Category                  │ Plain-English                            │
    ├───────────────────────────┼──────────────────────────────────────────┤
    │ notice                    │ Give credit. Never makes anyone else     │
    │                           │ obligated.                               │
    ├───────────────────────────┼──────────────────────────────────────────┤
    │ reciprocal                │ Share changes to *this* code. Still      │
    │                           │ never makes anyone else obligated.       │
    ├───────────────────────────┼──────────────────────────────────────────┤
    │ restricted-strong         │ Anything combined with it, statically    │
    │                           │ or dynamically, is obligated too.        │
    ├───────────────────────────┼──────────────────────────────────────────┤
    │ restricted-weak           │ Only static combination obligates.       │
    ├───────────────────────────┼──────────────────────────────────────────┤
    │ restricted-weak-exception │ A strong license carrying a linking      │
    │                           │ exception; propagates like weak.         │
    └───────────────────────────┴──────────────────────────────────────────┘
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from noticekit.errors import UnmappedConditionError

__all__ = [
    'Condition',
    'ConditionCategory',
]


class ConditionCategory(str, enum.Enum):
    """Propagation category of a license condition."""

    NOTICE = 'notice'
    RECIPROCAL = 'reciprocal'
    RESTRICTED_STRONG = 'restricted-strong'
    RESTRICTED_WEAK = 'restricted-weak'
    RESTRICTED_WEAK_EXCEPTION = 'restricted-weak-exception'

    @classmethod
    def parse(cls, text: str) -> ConditionCategory:
        """Return the category named *text*.

        Raises:
            UnmappedConditionError: If *text* is not a known category.
        """
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise UnmappedConditionError(text) from None

    @property
    def infects(self) -> bool:
        """``True`` if the category can make other targets obligated."""
        return self in _INFECTING


_INFECTING: frozenset[ConditionCategory] = frozenset({
    ConditionCategory.RESTRICTED_STRONG,
    ConditionCategory.RESTRICTED_WEAK,
    ConditionCategory.RESTRICTED_WEAK_EXCEPTION,
})


@dataclass(frozen=True)
class Condition:
    """A license obligation attached to a target.

    Attributes:
        name: Display name (e.g. ``"notice"``, ``"restricted"``).
        category: How the condition propagates.
    """

    name: str
    category: ConditionCategory

    def __str__(self) -> str:
        """Return ``name`` or ``name[category]`` when they differ."""
        if self.name == self.category.value:
            return self.name
        return f'{self.name}[{self.category.value}]'

    @property
    def sort_key(self) -> tuple[str, str]:
        """Stable ordering key used for deterministic output."""
        return (self.name, self.category.value)
