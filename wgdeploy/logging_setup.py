"""CLI logging setup: simple %(message)s format for the deploy/install commands."""

import logging
import sys

from wgdeploy.redact import SecretRedactingFilter


def setup_cli_logging(level=logging.INFO):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(), with known secrets masked. The
    filter sits on the handler so it also covers records propagated from
    module loggers.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
