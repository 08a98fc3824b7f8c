"""
Idea Board – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them through a single
``from ideaboard.models import *`` import.
"""

from ideaboard.models.user import User                   # noqa: F401
from ideaboard.models.idea import Idea, IdeaStatus       # noqa: F401
from ideaboard.models.idea_vote import IdeaVote          # noqa: F401
from ideaboard.models.task import Task, TaskPriority, TaskStatus  # noqa: F401
from ideaboard.models.team_message import TeamMessage    # noqa: F401
from ideaboard.models.point_award import PointAward      # noqa: F401
