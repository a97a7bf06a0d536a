"""Pure care-scheduling computations.

Nothing in this package touches the database or the wall clock; callers pass
snapshots, the current time and the calendar timezone explicitly.
"""

from scalekeeper.engine import brumation, cleaning, dates, doses, hunger, recurrence

__all__ = ["brumation", "cleaning", "dates", "doses", "hunger", "recurrence"]
