"""
Logging utilities for PixelStack
Provides structured logging and composite run statistics
"""

import logging
import sys
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

logger = logging.getLogger(__name__)


class StructuredLogger:
    """
    Logger that appends edit context as JSON metadata.

    Composite runs bind the edit being replayed so every message carries
    its ``edit_id`` and ``kind`` without repeating them at each call site.
    """

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def bind(self, **metadata) -> 'StructuredLogger':
        """Return a logger for the same name with extra default metadata."""
        child = StructuredLogger(self.logger.name, {**self.metadata, **metadata})
        child.logger = self.logger
        return child

    def for_edit(self, edit_id: str, kind: str) -> 'StructuredLogger':
        """Bind the id and kind of the edit being replayed."""
        return self.bind(edit_id=edit_id, kind=kind)

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata, dropping unset values"""
        data = {key: value for key, value in {**self.metadata, **kwargs}.items()
                if value is not None}
        if data:
            return f"{message} | {json.dumps(data, default=str, sort_keys=True)}"
        return message

    def debug(self, message: str, **kwargs):
        """Log debug message with metadata"""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        """Log info message with metadata"""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message with metadata"""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        """Log error message with metadata"""
        self.logger.error(self._format_message(message, **kwargs))


class CompositeStats:
    """Tracks which edits a composite run applied or skipped"""

    def __init__(self, mode: str = "full"):
        """
        Initialize composite statistics

        Args:
            mode: "full" for history replay, "incremental" for single-edit application
        """
        self.mode = mode
        self.start_time = datetime.now()
        self.total_edits = 0
        self.applied_edits: List[str] = []
        self.skipped_edits: List[Dict[str, Any]] = []
        self.degenerate_edits: List[str] = []
        self.edit_times: Dict[str, float] = {}

    def set_total(self, total: int):
        """Set total number of edits to replay"""
        self.total_edits = total

    def add_applied(self, edit_id: str, elapsed: Optional[float] = None):
        """Record an edit that was applied to the working buffer"""
        self.applied_edits.append(edit_id)
        if elapsed is not None:
            self.edit_times[edit_id] = elapsed

    def add_skipped(self, edit_id: str, reason: str):
        """Record an edit that was skipped during replay"""
        self.skipped_edits.append({
            'edit_id': edit_id,
            'reason': reason,
            'time': datetime.now(),
        })

    def add_degenerate(self, edit_id: str):
        """Record a geometry edit that collapsed to a minimal buffer"""
        self.degenerate_edits.append(edit_id)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_edits)

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        """Get composite run summary"""
        return {
            'mode': self.mode,
            'total_edits': self.total_edits,
            'applied_edits': len(self.applied_edits),
            'skipped_edits': self.skipped_count,
            'degenerate_edits': len(self.degenerate_edits),
            'skip_reasons': {s['edit_id']: s['reason'] for s in self.skipped_edits},
            'elapsed_time': self.get_elapsed_time(),
        }


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level
        color: Whether to use colored output
        fmt: Log record format
    """
    console_handler = logging.StreamHandler(sys.stderr)

    if color and sys.stderr.isatty():
        # Use colored formatter if supported
        try:
            import colorlog
            formatter = colorlog.ColoredFormatter(
                '%(log_color)s' + fmt.replace('%(message)s', '%(reset)s%(message)s'),
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        except ImportError:
            formatter = logging.Formatter(fmt)
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)
