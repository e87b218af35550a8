"""Telegram bot that delivers a daily weather forecast at a chosen time."""

__version__ = "0.1.0"
