from wkpoule import db  # noqa: F401 - imported for model imports

from .actual_group_standing import ActualGroupStanding
from .global_setting import GlobalSetting
from .group_standings_prediction import GroupStandingsPrediction
from .match import Match
from .player import Player
from .poule import Poule
from .poule_member import PouleMember
from .prediction import Prediction
from .scoring_run import ScoringRun
from .topscorer_prediction import TopscorerPrediction
from .user import User
from .winner_prediction import WinnerPrediction

__all__ = [
    "User",
    "Poule",
    "PouleMember",
    "Match",
    "Prediction",
    "Player",
    "TopscorerPrediction",
    "GroupStandingsPrediction",
    "WinnerPrediction",
    "ActualGroupStanding",
    "GlobalSetting",
    "ScoringRun",
]
