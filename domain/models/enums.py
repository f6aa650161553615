"""
Enumerations shared by the source and destination workout schemas.
"""

from enum import Enum


class SportType(str, Enum):
    """Destination sport types."""

    CYCLING = "cycling"
    RUNNING = "running"
    SWIMMING = "swimming"


class WorkoutType(str, Enum):
    """Destination workout type vocabulary."""

    VO2MAX = "vo2max"
    THRESHOLD = "threshold"
    SWEET_SPOT = "sweet_spot"
    TEMPO = "tempo"
    ENDURANCE = "endurance"
    RECOVERY = "recovery"
    EASY = "easy"
    INTERVAL = "interval"
    LONG_RUN = "long_run"
    FARTLEK = "fartlek"
    PROGRESSION = "progression"
    HILL_REPEATS = "hill_repeats"
    TECHNIQUE = "technique"
    SPRINT = "sprint"
    MIXED = "mixed"


class IntensityLevel(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    VERY_HARD = "very_hard"


class TrainingPhase(str, Enum):
    FOUNDATION = "Foundation"
    BASE = "Base"
    BUILD = "Build"
    PEAK = "Peak"
    TAPER = "Taper"
    RECOVERY = "Recovery"


class StepIntensity(str, Enum):
    """Intensity class of a single leaf step."""

    ACTIVE = "active"
    WARM_UP = "warmUp"
    COOL_DOWN = "coolDown"
    RECOVERY = "recovery"
    REST = "rest"


class TargetType(str, Enum):
    POWER = "power"
    HEART_RATE = "heartRate"
    PACE = "pace"
    SPEED = "speed"
    CADENCE = "cadence"


class LengthUnit(str, Enum):
    """Length units the destination accepts."""

    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    METER = "meter"
    KILOMETER = "kilometer"
    MILE = "mile"
    REPETITION = "repetition"


class PrimaryIntensityMetric(str, Enum):
    """Destination structure-level primary intensity metric."""

    PERCENT_OF_FTP = "percentOfFtp"
    HEART_RATE = "heartRate"
    PERCENT_OF_THRESHOLD_PACE = "percentOfThresholdPace"
    PACE = "pace"
    SPEED = "speed"
    WATTS = "watts"
    RESISTANCE = "resistance"
