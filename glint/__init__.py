"""Building blocks for a web vulnerability scanner: URL and request models,
de-duplication filters, HTTP helpers, path discovery, socket framing,
payload loading, error-message detection and logging."""

__version__ = "0.1.2"