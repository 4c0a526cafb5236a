"""prmonitor: watch your GitHub pull requests from the command line."""

__version__ = "0.1.0"
