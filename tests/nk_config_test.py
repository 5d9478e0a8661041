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


"""Tests for noticekit configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from noticekit.config import CONFIG_FILENAME, NoticekitConfig, load_config
from noticekit.errors import ConfigError


class TestFromMapping:
    """Tests for NoticekitConfig.from_mapping."""

    def test_defaults(self) -> None:
        """An empty mapping gives the defaults."""
        config = NoticekitConfig.from_mapping({})
        assert config == NoticekitConfig()
        assert config.pass_name == 'top-down'
        assert config.output_format == 'table'
        assert config.policy is None

    def test_all_keys(self, tmp_path: Path) -> None:
        """Every key is read, and the policy path is made relative to the file."""
        source = tmp_path / CONFIG_FILENAME
        config = NoticekitConfig.from_mapping(
            {'policy': 'extra.toml', 'pass': 'bottom-up', 'format': 'json', 'color': False},
            source=source,
        )
        assert config.policy == tmp_path / 'extra.toml'
        assert config.pass_name == 'bottom-up'
        assert config.output_format == 'json'
        assert config.color is False

    def test_absolute_policy_kept(self, tmp_path: Path) -> None:
        """Absolute policy paths are not rebased."""
        policy = tmp_path / 'abs.toml'
        config = NoticekitConfig.from_mapping({'policy': str(policy)}, source=Path('/elsewhere/noticekit.toml'))
        assert config.policy == policy

    @pytest.mark.parametrize(
        'data,match',
        [
            ({'passes': 'top-down'}, 'unknown key'),
            ({'pass': 'sideways'}, '"pass" must be one of'),
            ({'format': 'xml'}, '"format" must be one of'),
            ({'color': 'yes'}, '"color" must be true or false'),
            ({'policy': ''}, '"policy" must be a non-empty'),
            ({'policy': 3}, '"policy" must be a non-empty'),
        ],
    )
    def test_rejects(self, data: dict, match: str) -> None:
        """Invalid settings raise ConfigError."""
        with pytest.raises(ConfigError, match=match):
            NoticekitConfig.from_mapping(data)


class TestLoadConfig:
    """Tests for load_config."""

    def test_nothing_found(self, tmp_path: Path) -> None:
        """No config file gives defaults."""
        assert load_config(cwd=tmp_path) == NoticekitConfig()

    def test_standalone_file(self, tmp_path: Path) -> None:
        """noticekit.toml is read from the directory."""
        (tmp_path / CONFIG_FILENAME).write_text('format = "json"\n')
        config = load_config(cwd=tmp_path)
        assert config.output_format == 'json'
        assert config.source == tmp_path / CONFIG_FILENAME

    def test_pyproject_table(self, tmp_path: Path) -> None:
        """[tool.noticekit] in pyproject.toml is used as a fallback."""
        (tmp_path / 'pyproject.toml').write_text('[project]\nname = "x"\n\n[tool.noticekit]\npass = "bottom-up"\n')
        assert load_config(cwd=tmp_path).pass_name == 'bottom-up'

    def test_pyproject_without_table(self, tmp_path: Path) -> None:
        """A pyproject.toml without the table gives defaults."""
        (tmp_path / 'pyproject.toml').write_text('[project]\nname = "x"\n')
        assert load_config(cwd=tmp_path) == NoticekitConfig()

    def test_standalone_wins(self, tmp_path: Path) -> None:
        """noticekit.toml takes precedence over pyproject.toml."""
        (tmp_path / CONFIG_FILENAME).write_text('format = "json"\n')
        (tmp_path / 'pyproject.toml').write_text('[tool.noticekit]\nformat = "table"\n')
        assert load_config(cwd=tmp_path).output_format == 'json'

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit file is read from its top level."""
        path = tmp_path / 'custom.toml'
        path.write_text('color = true\n')
        assert load_config(path).color is True

    def test_explicit_pyproject(self, tmp_path: Path) -> None:
        """An explicit pyproject.toml is read from its tool table."""
        path = tmp_path / 'pyproject.toml'
        path.write_text('[tool.noticekit]\nformat = "json"\n')
        assert load_config(path).output_format == 'json'

    def test_explicit_missing(self, tmp_path: Path) -> None:
        """A missing explicit file is an error."""
        with pytest.raises(ConfigError, match='not found'):
            load_config(tmp_path / 'absent.toml')

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML is a ConfigError."""
        (tmp_path / CONFIG_FILENAME).write_text('format = \n')
        with pytest.raises(ConfigError, match='invalid TOML'):
            load_config(cwd=tmp_path)

    def test_tool_entry_not_a_table(self, tmp_path: Path) -> None:
        """A scalar tool.noticekit entry is rejected."""
        (tmp_path / 'pyproject.toml').write_text('[tool]\nnoticekit = 1\n')
        with pytest.raises(ConfigError, match='must be a table'):
            load_config(cwd=tmp_path)
