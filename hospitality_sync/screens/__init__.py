"""Operational screens combining snapshots, projections and workflows."""

from hospitality_sync.screens.base_screen import BaseScreen
from hospitality_sync.screens.front_desk_screen import FrontDeskScreen
from hospitality_sync.screens.housekeeping_screen import HousekeepingScreen

__all__ = [
    "BaseScreen",
    "FrontDeskScreen",
    "HousekeepingScreen",
]
