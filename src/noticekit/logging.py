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

"""Structured logging for noticekit.

noticekit logs few events, all through `structlog
<https://www.structlog.org/>`_ on stderr so stdout stays clean for
``--format json`` output:

    ┌──────────────────────────┬───────┬──────────────────────────────────┐
    │ Event                    │ Level │ Fields                           │
    ├──────────────────────────┼───────┼──────────────────────────────────┤
    │ policy_loaded            │ debug │ path, kinds                      │
    │ policy_overrides_merged  │ debug │ path, count                      │
    │ graph_built              │ debug │ roots, targets, edges            │
    │ graph_loaded             │ info  │ path, targets, edges             │
    │ bottom_up_resolved       │ debug │ targets, subjects, triples       │
    │ top_down_resolved        │ debug │ roots, spread, subjects, triples │
    │ resolution_failed        │ error │ error, graph                     │
    └──────────────────────────┴───────┴──────────────────────────────────┘

Two renderers:

- **Console** (default): short ``level [logger] event key=value`` lines,
  colored when stderr is a TTY. No timestamps; a run takes milliseconds.
- **JSON** (``--json-log`` or ``NOTICEKIT_JSON_LOG=1``): one object per
  line with an ISO-8601 UTC ``timestamp``, for CI log collectors.

Usage::

    from noticekit.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
    log.debug('bottom_up_resolved', targets=12, subjects=12, triples=40)
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

__all__ = [
    'configure_logging',
    'get_logger',
    'json_log_requested',
]

_JSON_LOG_ENV = 'NOTICEKIT_JSON_LOG'


def json_log_requested() -> bool:
    """Return ``True`` if the environment asks for JSON log output."""
    return os.environ.get(_JSON_LOG_ENV, '0') not in ('', '0', 'false', 'no')


def _renderer_chain(json_log: bool) -> list[structlog.types.Processor]:
    if json_log:
        return [
            structlog.processors.TimeStamper(fmt='iso', utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), pad_event=24)]


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Route noticekit's structlog events to stderr.

    Safe to call more than once; the last call wins. Library callers
    that never call it get structlog's defaults.

    Args:
        verbose: Show debug events (policy, graph and per-pass counts).
        quiet: Only show warnings and errors.
        json_log: Emit JSON lines. Also enabled by
            ``NOTICEKIT_JSON_LOG=1``.
    """
    level = logging.WARNING if quiet else logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level, force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_renderer_chain(json_log or json_log_requested()),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'noticekit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named *name*."""
    return structlog.get_logger(name)
