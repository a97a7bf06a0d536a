"""SQLAlchemy models for the ScaleKeeper domain."""

from scalekeeper.models.animal import Animal, WeightRecord
from scalekeeper.models.brumation import BrumationCycle
from scalekeeper.models.enclosure import CleaningEvent, CleaningSchedule, Enclosure
from scalekeeper.models.feeding import FeedingEvent, FeedingRoutine, feeding_routine_animals
from scalekeeper.models.reminder import Reminder, ReminderCategory
from scalekeeper.models.treatment import MedicationDose, TreatmentPlan

__all__ = [
    "Animal",
    "BrumationCycle",
    "CleaningEvent",
    "CleaningSchedule",
    "Enclosure",
    "FeedingEvent",
    "FeedingRoutine",
    "MedicationDose",
    "Reminder",
    "ReminderCategory",
    "TreatmentPlan",
    "WeightRecord",
    "feeding_routine_animals",
]
