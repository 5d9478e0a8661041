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


r"""Read a license graph description from TOML.

This is the thin input layer the command line uses; library callers with
their own metadata source call :func:`noticekit.graph.build_graph`
directly.

Expected format::

    roots = ["apacheBin"]

    [targets.apacheBin]
    licenses = ["SPDX-license-identifier-Apache-2.0"]

    [targets.gplLib]
    licenses = ["SPDX-license-identifier-GPL-2.0"]

    [targets.image]
    licenses = ["SPDX-license-identifier-Apache-2.0"]
    container = true          # pure aggregate, default false
    dependent_module = false  # default false

    [[edge]]
    from = "apacheBin"
    to = "gplLib"
    annotations = ["static"]
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from noticekit.errors import GraphError
from noticekit.graph import EdgeSpec, LicenseGraph, TargetMetadata, build_graph
from noticekit.license_policy import ConditionPolicy
from noticekit.logging import get_logger

__all__ = [
    'graph_from_mapping',
    'load_graph',
]

logger = get_logger(__name__)


def _string_list(value: Any, where: str, errors: list[str]) -> list[str]:  # noqa: ANN401
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        errors.append(f'{where}: expected a list of strings, got {value!r}')
        return []
    return value


def _bool(value: Any, where: str, errors: list[str]) -> bool:  # noqa: ANN401
    if not isinstance(value, bool):
        errors.append(f'{where}: expected bool, got {type(value).__name__}')
        return False
    return value


def graph_from_mapping(
    data: Mapping[str, Any],
    *,
    policy: ConditionPolicy | None = None,
    origin: str = '<mapping>',
) -> LicenseGraph:
    """Build a graph from parsed TOML data.

    Structural problems are gathered and reported together; semantic
    problems (cycles, unmapped licenses) come from :func:`build_graph`.

    Raises:
        GraphError: Malformed description or invalid graph.
        UnmappedConditionError: A license kind has no mapping.
    """
    errors: list[str] = []
    roots = _string_list(data.get('roots', []), f'{origin}: roots', errors)

    raw_targets = data.get('targets', {})
    targets: dict[str, TargetMetadata] = {}
    if not isinstance(raw_targets, dict):
        errors.append(f'{origin}: targets: expected a table, got {type(raw_targets).__name__}')
        raw_targets = {}
    for name, info in raw_targets.items():
        where = f'{origin}: [targets.{name}]'
        if not isinstance(info, dict):
            errors.append(f'{where}: expected a table, got {type(info).__name__}')
            continue
        unknown = set(info) - {'licenses', 'container', 'dependent_module'}
        if unknown:
            errors.append(f'{where}: unknown field(s) {", ".join(sorted(unknown))}')
        targets[name] = TargetMetadata(
            license_kinds=tuple(_string_list(info.get('licenses', []), f'{where}.licenses', errors)),
            is_container=_bool(info.get('container', False), f'{where}.container', errors),
            dependent_module=_bool(info.get('dependent_module', False), f'{where}.dependent_module', errors),
        )

    raw_edges = data.get('edge', [])
    edges: list[EdgeSpec] = []
    if not isinstance(raw_edges, list):
        errors.append(f'{origin}: "edge" must be an array of tables ([[edge]])')
        raw_edges = []
    for i, edge in enumerate(raw_edges):
        where = f'{origin}: edge[{i}]'
        if not isinstance(edge, dict):
            errors.append(f'{where}: expected a table, got {type(edge).__name__}')
            continue
        missing = [k for k in ('from', 'to', 'annotations') if k not in edge]
        if missing:
            errors.append(f'{where}: missing required field(s) {", ".join(missing)}')
            continue
        if not isinstance(edge['from'], str) or not isinstance(edge['to'], str):
            errors.append(f'{where}: "from" and "to" must be strings')
            continue
        edges.append((edge['from'], edge['to'], _string_list(edge['annotations'], f'{where}.annotations', errors)))

    if errors:
        raise GraphError('Invalid graph description:\n' + '\n'.join(f'  - {e}' for e in errors))
    return build_graph(roots, edges, targets, policy=policy)


def load_graph(path: Path, *, policy: ConditionPolicy | None = None) -> LicenseGraph:
    """Read and build the graph described by the TOML file at *path*.

    Raises:
        GraphError: Unreadable file, invalid TOML, or invalid graph.
        UnmappedConditionError: A license kind has no mapping.
    """
    try:
        with path.open('rb') as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise GraphError(f'{path}: cannot read graph description ({exc.strerror})') from exc
    except tomllib.TOMLDecodeError as exc:
        raise GraphError(f'{path}: invalid TOML ({exc})') from exc
    graph = graph_from_mapping(data, policy=policy, origin=str(path))
    logger.info('graph_loaded', path=str(path), targets=len(graph), edges=len(graph.edges))
    return graph
