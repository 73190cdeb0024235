"""Relays new Earnings Whispers results to a Discord webhook."""

__version__ = "0.1.0"
