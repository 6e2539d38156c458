"""Console output package for filetrack.

Provides ChangeDisplay, the Rich-based renderer used by the CLI.
"""

from filetrack.ui.change_display import ChangeDisplay

__all__ = ["ChangeDisplay"]
