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


"""noticekit: license condition resolution over build dependency graphs.

Given a graph of targets whose dependency edges are annotated ``static``,
``dynamic`` or ``toolchain``, noticekit computes which license
conditions apply to which target, and why, as input for legal-notice
generation.

Usage::

    from noticekit import build_graph, resolve_bottom_up, resolve_top_down

    graph = build_graph(roots, edges, targets)
    bottom_up = resolve_bottom_up(graph)
    top_down = resolve_top_down(graph, bottom_up)
    top_down.triples_for('apacheBin')
"""

from noticekit.conditions import Condition, ConditionCategory
from noticekit.errors import (
    ConfigError,
    GraphError,
    NoticekitError,
    PolicyDataError,
    ResolutionInvariantError,
    UnmappedConditionError,
)
from noticekit.graph import Edge, LicenseGraph, Target, TargetMetadata, build_graph
from noticekit.license_policy import ConditionPolicy
from noticekit.policy import Annotation, Transfer, permit, permit_edge
from noticekit.resolution import ResolutionDiff, ResolutionSet, ResolutionTriple, union
from noticekit.resolve import resolve, resolve_bottom_up, resolve_top_down

__all__ = [
    'Annotation',
    'Condition',
    'ConditionCategory',
    'ConditionPolicy',
    'ConfigError',
    'Edge',
    'GraphError',
    'LicenseGraph',
    'NoticekitError',
    'PolicyDataError',
    'ResolutionDiff',
    'ResolutionInvariantError',
    'ResolutionSet',
    'ResolutionTriple',
    'Target',
    'TargetMetadata',
    'Transfer',
    'UnmappedConditionError',
    'build_graph',
    'permit',
    'permit_edge',
    'resolve',
    'resolve_bottom_up',
    'resolve_top_down',
    'union',
]
