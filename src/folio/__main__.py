"""Allow ``python -m folio``."""

from folio.cli import app

app()
