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


"""Exception hierarchy for noticekit.

Two families of failure exist and neither is retryable:

- **Input errors** (:class:`GraphError`, :class:`UnmappedConditionError`,
  :class:`PolicyDataError`, :class:`ConfigError`) reject bad input
  before any resolution runs. Each carries enough context (target,
  edge, license kind) to fix the input.
- **Invariant violations** (:class:`ResolutionInvariantError`) mean a
  resolver produced an incomplete result. They are raised instead of
  returning a partial compliance answer.
"""

from __future__ import annotations

__all__ = [
    'ConfigError',
    'GraphError',
    'NoticekitError',
    'PolicyDataError',
    'ResolutionInvariantError',
    'UnmappedConditionError',
]


class NoticekitError(Exception):
    """Base class for every error raised by noticekit."""


def _bullets(errors: list[str]) -> str:
    return '\n'.join(f'  - {e}' for e in errors)


class GraphError(NoticekitError):
    """Raised when a license graph cannot be constructed.

    Attributes:
        target: Name of the offending target, if any.
        edge: ``(target, dependency)`` pair of the offending edge, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        target: str | None = None,
        edge: tuple[str, str] | None = None,
    ) -> None:
        self.target = target
        self.edge = edge
        super().__init__(message)


class UnmappedConditionError(NoticekitError):
    """Raised when a license kind or category has no known classification.

    Attributes:
        kind: The unmapped license kind or category string.
        target: The target that declared it, when known.
    """

    def __init__(self, kind: str, *, target: str | None = None) -> None:
        self.kind = kind
        self.target = target
        where = f' (declared by {target!r})' if target else ''
        super().__init__(f'No condition mapping for {kind!r}{where}')


class PolicyDataError(NoticekitError):
    """Raised when condition policy TOML data fails validation.

    Attributes:
        errors: List of human-readable error strings.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f'Condition policy has {len(errors)} validation error(s):\n{_bullets(errors)}')


class ConfigError(NoticekitError):
    """Raised for unreadable or invalid noticekit configuration."""


class ResolutionInvariantError(NoticekitError):
    """Raised when a resolution set violates a structural invariant.

    Attributes:
        problems: Every violation found, not just the first.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(f'Resolution set is inconsistent ({len(problems)} problem(s)):\n{_bullets(problems)}')
