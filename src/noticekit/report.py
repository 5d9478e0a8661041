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


"""Rich rendering and JSON export for resolution sets.

Tables are for people reading a terminal; :func:`format_diff` exists so
that a failing comparison between two resolution sets shows exactly
which triples are missing or extra under which subject.

Usage::

    from noticekit.report import format_resolution_table, print_resolution_table

    print_resolution_table(rs, subject='apacheBin')
    text = format_resolution_table(rs, color=False)
"""

from __future__ import annotations

import json
from io import StringIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from noticekit.conditions import ConditionCategory
from noticekit.resolution import ResolutionDiff, ResolutionSet, ResolutionTriple

__all__ = [
    'format_diff',
    'format_resolution_table',
    'print_resolution_table',
    'resolution_to_json',
]

_CATEGORY_STYLE: dict[ConditionCategory, str] = {
    ConditionCategory.NOTICE: 'green',
    ConditionCategory.RECIPROCAL: 'cyan',
    ConditionCategory.RESTRICTED_STRONG: 'bold red',
    ConditionCategory.RESTRICTED_WEAK: 'yellow',
    ConditionCategory.RESTRICTED_WEAK_EXCEPTION: 'yellow',
}


def _subjects(rs: ResolutionSet, subject: str | None) -> tuple[str, ...]:
    if subject is None:
        return rs.subjects
    rs.triples_for(subject)
    return (subject,)


def _rows(rs: ResolutionSet, subject: str) -> list[ResolutionTriple]:
    return sorted(rs.triples_for(subject), key=lambda t: t.sort_key)


def print_resolution_table(
    rs: ResolutionSet,
    subject: str | None = None,
    console: Console | None = None,
) -> None:
    """Print a resolution set as a Rich table.

    Args:
        rs: The resolution set to show.
        subject: Only show this subject. ``None`` shows all of them.
        console: Rich :class:`Console` to print to. When ``None``,
            a default ``Console()`` is created (auto-detects TTY).

    Raises:
        ResolutionInvariantError: If *subject* is not in *rs*.
    """
    if console is None:
        console = Console()

    table = Table(
        show_header=True,
        header_style='bold',
        show_edge=False,
        pad_edge=False,
    )
    table.add_column('Subject', style='bold')
    table.add_column('Acts on')
    table.add_column('Origin')
    table.add_column('Condition')
    table.add_column('Category')

    subjects = _subjects(rs, subject)
    infected = 0
    for s in subjects:
        for t in _rows(rs, s):
            style = _CATEGORY_STYLE[t.condition.category]
            acts_on = Text(t.acts_on, style='bold' if not t.is_self else '')
            infected += not t.is_self
            table.add_row(s, acts_on, t.origin, t.condition.name, Text(t.condition.category.value, style=style))

    console.print(table)
    total = sum(len(rs.triples_for(s)) for s in subjects)
    console.print(f'\n{total} condition(s) across {len(subjects)} subject(s), {infected} infection(s).')


def format_resolution_table(
    rs: ResolutionSet,
    subject: str | None = None,
    *,
    color: bool = False,
) -> str:
    """Format a resolution set as a string.

    Thin wrapper around :func:`print_resolution_table` that captures
    the Rich output. Useful for tests and non-interactive callers.
    """
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, width=120)
    print_resolution_table(rs, subject, console=console)
    return buf.getvalue().rstrip('\n')


def format_diff(diff: ResolutionDiff) -> str:
    """Render a :class:`ResolutionDiff` as plain text.

    Each differing subject gets a header line followed by ``- triple``
    for missing and ``+ triple`` for extra entries, sorted.
    """
    if not diff:
        return 'resolution sets are identical'
    lines: list[str] = []
    for subject in diff.subjects:
        lines.append(f'subject {subject}:')
        for t in sorted(diff.missing.get(subject, ()), key=lambda t: t.sort_key):
            lines.append(f'  - {t}')
        for t in sorted(diff.extra.get(subject, ()), key=lambda t: t.sort_key):
            lines.append(f'  + {t}')
    return '\n'.join(lines)


def resolution_to_json(rs: ResolutionSet, subject: str | None = None, *, indent: int = 2) -> str:
    """Serialize a resolution set, or one subject of it, to JSON."""
    if subject is None:
        return rs.to_json(indent=indent)
    return json.dumps({subject: [t.to_dict() for t in _rows(rs, subject)]}, indent=indent, sort_keys=True)
