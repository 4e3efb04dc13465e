"""Logging setup for nclctl.

Every record, whether from stdlib ``logging`` or structlog, ends up on
stderr through one structlog ``ProcessorFormatter``: coloured console lines
by default, JSON lines with ``--log-json``.

Levels are set per layer. The loader reports skipped entries at WARNING,
which users see unless ``--quiet`` is given (quiet output repeats those
warnings itself). Compiler steps, rejected moves and telemetry spans are
DEBUG records and only show with ``--verbose``.
"""

from __future__ import annotations

import logging
import sys

import structlog

LOADER_LOGGER = "nclctl.infrastructure.loader"
LAYER_LOGGERS = ("nclctl.infrastructure", "nclctl.services", "nclctl.telemetry")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and set the per-layer levels.

    Safe to call repeatedly: the root handler is replaced, not added.

    Args:
        verbose: DEBUG for every nclctl layer.
        quiet: Silence loader warnings below ERROR. Ignored with *verbose*.
        log_json: Render JSON lines instead of console lines.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    layer_level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("nclctl").setLevel(layer_level)
    for name in LAYER_LOGGERS:
        logging.getLogger(name).setLevel(layer_level)

    if verbose:
        loader_level = logging.DEBUG
    elif quiet:
        loader_level = logging.ERROR
    else:
        loader_level = logging.WARNING
    logging.getLogger(LOADER_LOGGER).setLevel(loader_level)
