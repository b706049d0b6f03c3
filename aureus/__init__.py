"""Aureus chat core.

Streams model output into a live conversation while hiding reasoning
segments, builds the context for each generation request, and keeps
exactly one message feed subscribed per active conversation.
"""

__version__ = "0.1.0"
