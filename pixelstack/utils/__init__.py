"""
PixelStack utilities module.

Provides logging helpers and composite run statistics.
"""

from .logging import (
    StructuredLogger,
    CompositeStats,
    setup_console_logging
)

__all__ = [
    'StructuredLogger',
    'CompositeStats',
    'setup_console_logging'
]
