"""Images Transcoder: per-directory image re-encoding into zip archives."""

__version__ = "0.1.0"
