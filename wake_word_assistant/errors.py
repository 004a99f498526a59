#!/usr/bin/env python3
"""
Exceptions raised by the Wake Word Assistant.

Only initialization errors leave the poll loop; everything raised while the
loop is running is caught and printed at the cycle boundary.
"""


class AssistantError(Exception):
    """Base class for assistant errors."""


class AudioInitError(AssistantError):
    """The capture device could not be opened."""


class TranscriberInitError(AssistantError):
    """The speech-to-text model could not be loaded."""
