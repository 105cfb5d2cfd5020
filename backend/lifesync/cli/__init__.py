"""
CLI Module - Interactive command-line chat with the LifeSync assistant.

Features:
- Colorful output using Rich
- Yes/no confirmation of proposed actions
- History and reset commands
"""

from lifesync.cli.app import LifeSyncCLI
from lifesync.cli.display import LifeSyncDisplay

__all__ = ["LifeSyncCLI", "LifeSyncDisplay"]
