"""End-to-end checks for a Solana transaction relay."""

__version__ = "0.1.0"
