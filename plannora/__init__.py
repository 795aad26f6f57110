"""Plannora event planning API.

This package provides REST and WebSocket endpoints for planning events
within a budget, matching clients with planners, and collaborating on
an event through chat, vendor notes and a shared vendor list.
"""

__version__ = "1.0.0"
