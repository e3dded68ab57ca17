"""
errors.py — Exception types shared by the engines and the garden store.

Two families:
- InvalidTransitionError: a session was driven out of sequence
  (completing or interrupting a session that is not active). This is a
  programming error; callers let it propagate.
- GardenActionError: an expected, user-facing rejection (watering a dead
  plant, planting into an occupied slot, ...). The garden store turns
  these into (None, message) results for the UI.
"""


class InvalidTransitionError(RuntimeError):
    """Session state machine was asked for a transition it does not allow."""


class GardenActionError(ValueError):
    """A user action was rejected; nothing was changed."""


class CareActionError(GardenActionError):
    """A care action (water, fertilize, cure) was rejected."""
