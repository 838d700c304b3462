"""Trading decision persistence layer.

Provides the SQLite database manager and the typed decision store that
serves recorded outcomes to the confidence scorer.
"""

from agent.data.database import DecisionDatabase
from agent.data.store import DecisionStore, OutcomeStore, percent_change

__all__ = [
    "DecisionDatabase",
    "DecisionStore",
    "OutcomeStore",
    "percent_change",
]
