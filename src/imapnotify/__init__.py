"""Watch an IMAP folder and announce messages that have never been seen before."""

__version__ = "0.1.0"
