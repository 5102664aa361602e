from .roadmaps import (
    create_or_replace,
    toggle_step,
    progress_percent,
    delete_roadmap,
    load_owned_roadmap,
)
from .streaks import compute_streaks, Streaks
from .badges import assign_badge

__all__ = [
    "create_or_replace",
    "toggle_step",
    "progress_percent",
    "delete_roadmap",
    "load_owned_roadmap",
    "compute_streaks",
    "Streaks",
    "assign_badge",
]
