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


"""Configuration for the noticekit command line.

Settings are read from, in order of preference:

1. The file passed with ``--config``.
2. ``noticekit.toml`` in the working directory (top-level keys).
3. The ``[tool.noticekit]`` table of ``pyproject.toml`` in the working
   directory.

Command-line flags override whatever the file says.

Example ``noticekit.toml``::

    policy = "licenses/conditions.toml"   # extra license-kind mappings
    pass = "top-down"                     # or "bottom-up"
    format = "table"                      # or "json"
    color = false
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from noticekit.errors import ConfigError

__all__ = [
    'CONFIG_FILENAME',
    'NoticekitConfig',
    'load_config',
]

CONFIG_FILENAME = 'noticekit.toml'

PASS_NAMES = ('bottom-up', 'top-down')
OUTPUT_FORMATS = ('table', 'json')

_KNOWN_KEYS = frozenset({'policy', 'pass', 'format', 'color'})


@dataclass(frozen=True)
class NoticekitConfig:
    """Resolved noticekit settings.

    Attributes:
        policy: Extra condition policy TOML merged over the built-in
            mapping, or ``None``.
        pass_name: Which resolution to report: ``'bottom-up'`` or
            ``'top-down'``.
        output_format: ``'table'`` or ``'json'``.
        color: Force color on or off; ``None`` auto-detects.
        source: File the settings came from, ``None`` for defaults.
    """

    policy: Path | None = None
    pass_name: str = 'top-down'
    output_format: str = 'table'
    color: bool | None = None
    source: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: Path | None = None) -> NoticekitConfig:
        """Validate *data* and build a config.

        Relative ``policy`` paths resolve against the directory of
        *source*.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        where = str(source) if source else '<config>'
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ConfigError(f'{where}: unknown key(s) {", ".join(sorted(unknown))}')

        policy: Path | None = None
        if 'policy' in data:
            if not isinstance(data['policy'], str) or not data['policy']:
                raise ConfigError(f'{where}: "policy" must be a non-empty path string')
            policy = Path(data['policy'])
            if not policy.is_absolute() and source is not None:
                policy = source.parent / policy

        pass_name = data.get('pass', 'top-down')
        if pass_name not in PASS_NAMES:
            raise ConfigError(f'{where}: "pass" must be one of {", ".join(PASS_NAMES)}, got {pass_name!r}')

        output_format = data.get('format', 'table')
        if output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f'{where}: "format" must be one of {", ".join(OUTPUT_FORMATS)}, got {output_format!r}'
            )

        color = data.get('color')
        if color is not None and not isinstance(color, bool):
            raise ConfigError(f'{where}: "color" must be true or false')

        return cls(
            policy=policy,
            pass_name=pass_name,
            output_format=output_format,
            color=color,
            source=source,
        )


def _read(path: Path) -> dict[str, Any]:
    try:
        with path.open('rb') as f:
            return tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f'{path}: cannot read config ({exc.strerror})') from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f'{path}: invalid TOML ({exc})') from exc


def _tool_table(data: Mapping[str, Any], path: Path) -> Mapping[str, Any]:
    table = data.get('tool', {}).get('noticekit', {})
    if not isinstance(table, dict):
        raise ConfigError(f'{path}: [tool.noticekit] must be a table')
    return table


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> NoticekitConfig:
    """Find and load noticekit settings.

    Args:
        path: Explicit config file. A file named ``pyproject.toml`` is
            read from its ``[tool.noticekit]`` table; anything else is
            read from its top level.
        cwd: Directory searched when *path* is ``None``. Defaults to
            the process working directory.

    Returns:
        The loaded config, or defaults when no file is found.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f'{path}: config file not found')
        data = _read(path)
        if path.name == 'pyproject.toml':
            data = dict(_tool_table(data, path))
        return NoticekitConfig.from_mapping(data, source=path)

    base = cwd or Path.cwd()
    standalone = base / CONFIG_FILENAME
    if standalone.is_file():
        return NoticekitConfig.from_mapping(_read(standalone), source=standalone)
    pyproject = base / 'pyproject.toml'
    if pyproject.is_file():
        table = _tool_table(_read(pyproject), pyproject)
        if table:
            return NoticekitConfig.from_mapping(table, source=pyproject)
    return NoticekitConfig()
