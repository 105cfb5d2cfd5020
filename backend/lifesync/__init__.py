"""
LifeSync assistant backend.

Conversational mediation between free-text user input and the personal
stores (tasks, calendar, goals, mood): the assistant proposes actions,
the user confirms them one at a time.
"""

__version__ = "0.1.0"
