"""sshmgr - fzf-driven SSH launcher with keystroke conveniences."""

__version__ = "0.1.0"
