"""Release metadata synchronizer.

Keeps a single release record (version, build, release date, milestones)
in step with the git history and the calendar.
"""

__version__ = "0.3.0"
