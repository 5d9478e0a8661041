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


"""Command-line entry point: resolve a graph and show the conditions.

Usage::

    noticekit graph.toml                        # top-down, all subjects
    noticekit graph.toml --subject apacheBin    # one subject
    noticekit graph.toml --pass bottom-up --format json
    noticekit graph.toml --policy extra_conditions.toml -v

Exit status is 0 on success and 1 when the input is rejected.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from rich.console import Console

from noticekit.config import OUTPUT_FORMATS, PASS_NAMES, NoticekitConfig, load_config
from noticekit.errors import NoticekitError
from noticekit.license_policy import ConditionPolicy
from noticekit.logging import configure_logging, get_logger
from noticekit.metadata import load_graph
from noticekit.report import print_resolution_table, resolution_to_json
from noticekit.resolve import resolve_bottom_up, resolve_top_down

__all__ = [
    'build_parser',
    'main',
]

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``noticekit``."""
    parser = argparse.ArgumentParser(
        prog='noticekit',
        description='Resolve which license conditions apply to which target.',
    )
    parser.add_argument('graph', type=Path, help='TOML graph description.')
    parser.add_argument('--subject', help='Only report this subject target.')
    parser.add_argument(
        '--pass',
        dest='pass_name',
        choices=PASS_NAMES,
        default=None,
        help='Which resolution to report (default: top-down).',
    )
    parser.add_argument(
        '--format',
        dest='output_format',
        choices=OUTPUT_FORMATS,
        default=None,
        help='Output format (default: table).',
    )
    parser.add_argument('--policy', type=Path, default=None, help='Extra license-kind mappings (TOML).')
    parser.add_argument('--config', type=Path, default=None, help='Config file (default: auto-detect).')
    parser.add_argument('--color', action=argparse.BooleanOptionalAction, default=None, help='Force color on/off.')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Emit logs as JSON lines.')
    return parser


def _effective_config(args: argparse.Namespace) -> NoticekitConfig:
    config = load_config(args.config)
    overrides = {
        'policy': args.policy,
        'pass_name': args.pass_name,
        'output_format': args.output_format,
        'color': args.color,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Sequence[str] | None = None, *, console: Console | None = None) -> int:
    """Run the command line and return the exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        config = _effective_config(args)
        policy = ConditionPolicy.load(user_toml=config.policy)
        graph = load_graph(args.graph, policy=policy)
        if args.subject is not None:
            graph.target(args.subject)
        result = resolve_bottom_up(graph)
        result.check_invariants(graph)
        if config.pass_name == 'top-down':
            result = resolve_top_down(graph, result)
            result.check_invariants(graph)
        if console is None:
            console = Console(no_color=config.color is False, force_terminal=config.color or None)
        if config.output_format == 'json':
            console.print_json(resolution_to_json(result, args.subject))
        else:
            print_resolution_table(result, args.subject, console=console)
    except NoticekitError as exc:
        logger.error('resolution_failed', error=str(exc), graph=str(args.graph))
        print(f'noticekit: error: {exc}', file=sys.stderr)
        return 1
    return 0
