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


"""Tests for the noticekit command line."""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path

import pytest
from noticekit.cli import build_parser, main
from rich.console import Console

GRAPH_TOML = """\
roots = ["apacheBin"]

[targets.apacheBin]
licenses = ["SPDX-license-identifier-Apache-2.0"]

[targets.gplLib]
licenses = ["SPDX-license-identifier-GPL-2.0"]

[targets.mitLib]
licenses = ["SPDX-license-identifier-MIT"]

[[edge]]
from = "apacheBin"
to = "gplLib"
annotations = ["static"]

[[edge]]
from = "apacheBin"
to = "mitLib"
annotations = ["static"]
"""


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An isolated working directory holding graph.toml."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('NOTICEKIT_JSON_LOG', raising=False)
    (tmp_path / 'graph.toml').write_text(GRAPH_TOML)
    return tmp_path


def _run(*argv: str) -> tuple[int, str]:
    buf = StringIO()
    code = main(list(argv), console=Console(file=buf, width=200))
    return code, buf.getvalue()


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        """Unset options stay None so config values apply."""
        args = build_parser().parse_args(['g.toml'])
        assert args.graph == Path('g.toml')
        assert args.pass_name is None
        assert args.output_format is None
        assert args.color is None

    def test_verbose_and_quiet_exclusive(self) -> None:
        """-v and -q cannot be combined."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(['g.toml', '-v', '-q'])
        assert exc_info.value.code == 2

    def test_bad_pass(self) -> None:
        """Unknown pass names are usage errors."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(['g.toml', '--pass', 'sideways'])


class TestMain:
    """Tests for main()."""

    def test_table(self, workdir: Path) -> None:
        """The default output is a table of the top-down result."""
        code, out = _run('graph.toml')
        assert code == 0
        assert 'Subject' in out
        assert '8 condition(s) across 3 subject(s), 3 infection(s).' in out

    def test_json_top_down(self, workdir: Path) -> None:
        """JSON output includes the sibling infection."""
        code, out = _run('graph.toml', '--format', 'json', '--subject', 'mitLib')
        assert code == 0
        rows = json.loads(out)['mitLib']
        assert {'acts_on': 'mitLib', 'origin': 'gplLib', 'condition': 'restricted', 'category': 'restricted-strong'} in rows

    def test_json_bottom_up(self, workdir: Path) -> None:
        """The bottom-up pass leaves the sibling alone."""
        code, out = _run('graph.toml', '--format', 'json', '--pass', 'bottom-up', '--subject', 'mitLib')
        assert code == 0
        assert json.loads(out) == {
            'mitLib': [{'acts_on': 'mitLib', 'origin': 'mitLib', 'condition': 'notice', 'category': 'notice'}],
        }

    def test_config_file_applies(self, workdir: Path) -> None:
        """noticekit.toml in the working directory sets defaults."""
        (workdir / 'noticekit.toml').write_text('format = "json"\npass = "bottom-up"\n')
        code, out = _run('graph.toml')
        assert code == 0
        assert set(json.loads(out)) == {'apacheBin', 'gplLib', 'mitLib'}

    def test_flags_override_config(self, workdir: Path) -> None:
        """Command-line flags win over the config file."""
        (workdir / 'noticekit.toml').write_text('format = "json"\n')
        code, out = _run('graph.toml', '--format', 'table')
        assert code == 0
        assert 'Subject' in out

    def test_policy_override(self, workdir: Path) -> None:
        """An extra policy file can reclassify a license kind."""
        (workdir / 'extra.toml').write_text(
            '["SPDX-license-identifier-GPL-2.0"]\ncondition = "notice"\ncategory = "notice"\n'
        )
        code, out = _run('graph.toml', '--policy', 'extra.toml', '--format', 'json', '--subject', 'mitLib')
        assert code == 0
        assert len(json.loads(out)['mitLib']) == 1

    def test_unmapped_license_fails(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """An unmapped license kind exits 1 with a message."""
        (workdir / 'bad.toml').write_text('roots = ["a"]\n[targets.a]\nlicenses = ["Custom-EULA"]\n')
        code, out = _run('bad.toml')
        assert code == 1
        assert out == ''
        assert "noticekit: error: No condition mapping for 'Custom-EULA'" in capsys.readouterr().err

    def test_missing_graph_fails(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A missing graph file exits 1."""
        code, _ = _run('absent.toml')
        assert code == 1
        assert 'cannot read graph description' in capsys.readouterr().err

    def test_unknown_subject_fails(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Asking for a subject outside the graph exits 1."""
        code, out = _run('graph.toml', '--subject', 'nope')
        assert code == 1
        assert out == ''
        err = capsys.readouterr().err
        assert "noticekit: error: Unknown target 'nope'" in err
        assert 'inconsistent' not in err

    def test_unreachable_subject_fails(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A target outside the roots' reach is reported as unknown."""
        (workdir / 'extra.toml').write_text(
            GRAPH_TOML + '\n[targets.orphan]\nlicenses = ["SPDX-license-identifier-MIT"]\n'
        )
        code, _ = _run('extra.toml', '--subject', 'orphan')
        assert code == 1
        assert "Unknown target 'orphan'" in capsys.readouterr().err

    def test_unlicensed_subject(self, workdir: Path) -> None:
        """A target with no licenses is a valid subject with no rows."""
        (workdir / 'bare.toml').write_text(
            'roots = ["bin"]\n'
            '[targets.bin]\nlicenses = []\n'
            '[targets.lib]\nlicenses = ["SPDX-license-identifier-MIT"]\n'
            '[[edge]]\nfrom = "bin"\nto = "lib"\nannotations = ["dynamic"]\n'
        )
        code, out = _run('bare.toml', '--subject', 'bin', '--format', 'json')
        assert code == 0
        assert json.loads(out) == {'bin': []}

    def test_bad_config_fails(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """An invalid config file exits 1."""
        (workdir / 'noticekit.toml').write_text('format = "xml"\n')
        code, _ = _run('graph.toml')
        assert code == 1
        assert '"format" must be one of' in capsys.readouterr().err
