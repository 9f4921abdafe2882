"""Relay that announces new YouTube uploads in Telegram chats."""

__version__ = "1.0.0"
