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


r"""Condition policy: maps license kinds to license conditions.

The resolvers never look at license names. Instead, graph construction
asks a :class:`ConditionPolicy` to turn each license kind declared by a
target into a :class:`~noticekit.conditions.Condition`, whose category
drives propagation. The mapping must be total for the kinds actually
used: an unmapped kind is a fatal input error, never a default.

Data format::

    ["SPDX-license-identifier-LGPL-2.1"]
    condition = "restricted"
    category = "restricted-weak"

Usage::

    from noticekit.license_policy import ConditionPolicy

    policy = ConditionPolicy.load()  # built-in data
    policy = ConditionPolicy.load(user_toml=Path(...))  # + user overrides

    policy.condition_for('SPDX-license-identifier-MIT')
    # Condition(name='notice', category=ConditionCategory.NOTICE)
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from noticekit.conditions import Condition, ConditionCategory
from noticekit.errors import PolicyDataError, UnmappedConditionError
from noticekit.logging import get_logger

__all__ = [
    'ConditionPolicy',
]

logger = get_logger(__name__)

_DATA_DIR = Path(__file__).resolve().parent / 'data'
_CONDITIONS_TOML = _DATA_DIR / 'conditions.toml'

_VALID_CATEGORIES = frozenset(c.value for c in ConditionCategory)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open('rb') as f:
            return tomllib.load(f)
    except OSError as exc:
        raise PolicyDataError([f'{path}: cannot read ({exc.strerror})']) from exc
    except tomllib.TOMLDecodeError as exc:
        raise PolicyDataError([f'{path}: invalid TOML ({exc})']) from exc


def _parse_entries(data: Mapping[str, Any], *, origin: str) -> dict[str, Condition]:
    """Validate raw TOML tables and turn them into conditions.

    Every problem is collected before raising so a broken data file can
    be fixed in one pass.
    """
    errors: list[str] = []
    result: dict[str, Condition] = {}
    for kind, info in data.items():
        if not isinstance(info, dict):
            errors.append(f'{origin}: [{kind}]: expected a table, got {type(info).__name__}')
            continue
        cat = info.get('category', '')
        if not cat:
            errors.append(f'{origin}: [{kind}]: missing required field "category"')
            continue
        if not isinstance(cat, str) or cat not in _VALID_CATEGORIES:
            errors.append(
                f'{origin}: [{kind}].category: {cat!r} is not a valid category. '
                f'Must be one of: {", ".join(sorted(_VALID_CATEGORIES))}'
            )
            continue
        name = info.get('condition', cat)
        if not isinstance(name, str) or not name:
            errors.append(f'{origin}: [{kind}].condition: expected non-empty string, got {name!r}')
            continue
        result[kind] = Condition(name=name, category=ConditionCategory(cat))
    if errors:
        raise PolicyDataError(errors)
    return result


@dataclass
class ConditionPolicy:
    """Lookup table from license kind to condition.

    Attributes:
        conditions: Mapping from license kind to its condition.
    """

    conditions: dict[str, Condition] = field(default_factory=dict)

    @classmethod
    def load(
        cls,
        *,
        policy_toml: Path | None = None,
        user_toml: Path | None = None,
    ) -> ConditionPolicy:
        """Load the policy from TOML data files.

        Args:
            policy_toml: Path to the base mapping. Defaults to the
                built-in ``data/conditions.toml``.
            user_toml: Optional extra mapping merged on top; its entries
                replace base entries with the same kind.

        Returns:
            A validated :class:`ConditionPolicy`.

        Raises:
            PolicyDataError: If any file is unreadable or invalid.
        """
        path = policy_toml or _CONDITIONS_TOML
        policy = cls(_parse_entries(_read_toml(path), origin=str(path)))
        if user_toml is not None:
            overrides = _parse_entries(_read_toml(user_toml), origin=str(user_toml))
            policy.conditions.update(overrides)
            logger.debug('policy_overrides_merged', path=str(user_toml), count=len(overrides))
        logger.debug('policy_loaded', path=str(path), kinds=len(policy.conditions))
        return policy

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ConditionPolicy:
        """Build a policy from an in-memory mapping in the TOML layout."""
        return cls(_parse_entries(data, origin='<mapping>'))

    def known(self, kind: str) -> bool:
        """Return ``True`` if *kind* has a mapping."""
        return kind in self.conditions

    def condition_for(self, kind: str, *, target: str | None = None) -> Condition:
        """Return the condition for license *kind*.

        Raises:
            UnmappedConditionError: If *kind* has no mapping.
        """
        try:
            return self.conditions[kind]
        except KeyError:
            raise UnmappedConditionError(kind, target=target) from None

    def conditions_for(self, kinds: Iterable[str], *, target: str | None = None) -> tuple[Condition, ...]:
        """Map every kind in *kinds*, dropping duplicates, keeping order."""
        seen: dict[Condition, None] = {}
        for kind in kinds:
            seen.setdefault(self.condition_for(kind, target=target))
        return tuple(seen)
