"""Allow ``python -m shipyard.cli``."""

from shipyard.cli.app import app

app(prog_name="shipyard")
