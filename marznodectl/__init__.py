"""marznodectl: install and manage a MarzNode proxy node."""

__version__ = "0.1.0"
