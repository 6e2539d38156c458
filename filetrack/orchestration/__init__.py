"""Session orchestration package for filetrack.

This package contains the components that run watch sessions:
- ScanLogger: Structured logging of rescans to a session log file.
- WatchOrchestrator: Polling loop coordinating Tracker, display and logging.
"""

from filetrack.orchestration.scan_logger import ScanLogger
from filetrack.orchestration.watch_orchestrator import WatchOrchestrator

__all__ = ["ScanLogger", "WatchOrchestrator"]
