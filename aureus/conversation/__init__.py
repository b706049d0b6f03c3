"""Conversation domain: turns, message stores and feed subscriptions."""
