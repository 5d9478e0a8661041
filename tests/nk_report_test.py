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


"""Tests for resolution reporting."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from fixture_graphs import make_graph
from noticekit.errors import ResolutionInvariantError
from noticekit.report import format_diff, format_resolution_table, print_resolution_table, resolution_to_json
from noticekit.resolution import ResolutionSet
from noticekit.resolve import resolve
from rich.console import Console


@pytest.fixture()
def result() -> ResolutionSet:
    """Top-down resolution of apacheBin statically linking gplLib and mitLib."""
    graph = make_graph(
        ['apacheBin'],
        [('apacheBin', 'gplLib', ['static']), ('apacheBin', 'mitLib', ['static'])],
    )
    return resolve(graph)


class TestTable:
    """Tests for the Rich table."""

    def test_headers_and_rows(self, result: ResolutionSet) -> None:
        """The table has the expected columns and subjects."""
        text = format_resolution_table(result)
        for header in ('Subject', 'Acts on', 'Origin', 'Condition', 'Category'):
            assert header in text
        assert 'restricted-strong' in text
        assert 'mitLib' in text

    def test_summary_all(self, result: ResolutionSet) -> None:
        """The summary counts triples, subjects and infections."""
        text = format_resolution_table(result)
        # apacheBin: 3 self + 2 infections, gplLib: 1, mitLib: 1 self + 1 infection.
        assert text.endswith('8 condition(s) across 3 subject(s), 3 infection(s).')

    def test_summary_one_subject(self, result: ResolutionSet) -> None:
        """Restricting to one subject restricts the summary."""
        text = format_resolution_table(result, 'mitLib')
        assert text.endswith('2 condition(s) across 1 subject(s), 1 infection(s).')
        assert 'apacheBin' not in text

    def test_unknown_subject(self, result: ResolutionSet) -> None:
        """An unknown subject is an error, not an empty table."""
        with pytest.raises(ResolutionInvariantError):
            format_resolution_table(result, 'nope')

    def test_no_color_by_default(self, result: ResolutionSet) -> None:
        """Formatted output has no ANSI escapes unless asked."""
        assert '\x1b[' not in format_resolution_table(result)
        assert '\x1b[' in format_resolution_table(result, color=True)

    def test_print_to_console(self, result: ResolutionSet) -> None:
        """print_resolution_table writes to the given console."""
        buf = StringIO()
        print_resolution_table(result, console=Console(file=buf, width=120))
        assert 'gplLib' in buf.getvalue()


class TestJson:
    """Tests for resolution_to_json."""

    def test_all_subjects(self, result: ResolutionSet) -> None:
        """Without a subject the whole set is exported."""
        assert json.loads(resolution_to_json(result)) == result.to_dict()

    def test_one_subject(self, result: ResolutionSet) -> None:
        """With a subject only that subject is exported."""
        data = json.loads(resolution_to_json(result, 'gplLib'))
        assert data == {
            'gplLib': [
                {'acts_on': 'gplLib', 'origin': 'gplLib', 'condition': 'restricted', 'category': 'restricted-strong'},
            ],
        }


class TestFormatDiff:
    """Tests for format_diff."""

    def test_identical(self, result: ResolutionSet) -> None:
        """Equal sets say so."""
        assert format_diff(result.diff(result)) == 'resolution sets are identical'

    def test_lists_missing_and_extra(self, result: ResolutionSet) -> None:
        """Missing triples get '-', extra ones '+', grouped by subject."""
        expected = result.restrict(['apacheBin', 'gplLib'])
        text = format_diff(result.diff(expected))
        assert text.splitlines() == [
            'subject mitLib:',
            '  + (mitLib, gplLib, restricted[restricted-strong])',
            '  + (mitLib, mitLib, notice)',
        ]
        reverse = format_diff(expected.diff(result))
        assert '  - (mitLib, mitLib, notice)' in reverse
