"""Logging setup for the command line entry points."""

from __future__ import annotations

import logging

DIAGNOSTICS_LOGGER = "goodsreceipt.reconciliation"


def configure_logging(
    *,
    level: int = logging.INFO,
    diagnostics_level: int | None = None,
    force: bool = False,
) -> None:
    """Initialise the root logger with a terse CLI format.

    Reconciliation stages log their diagnostic events below ``DIAGNOSTICS_LOGGER``.
    ``diagnostics_level`` tunes that subtree alone, so per-batch debug events can be
    shown without turning on debug output from the HTTP and database libraries.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if diagnostics_level is not None:
        logging.getLogger(DIAGNOSTICS_LOGGER).setLevel(diagnostics_level)
