# Tracking: objectives, indicators, observations and reviews.

from focusfive.tracking.models import (
    Decision,
    IndicatorDef,
    IndicatorDirection,
    IndicatorKind,
    IndicatorUnit,
    Objective,
    ObjectiveStatus,
    Observation,
    ObservationSource,
    Review,
    ReviewPeriod,
    UnitType,
)
from focusfive.tracking.registry import IndicatorsData, ObjectivesData

__all__ = [
    "Decision",
    "IndicatorDef",
    "IndicatorDirection",
    "IndicatorKind",
    "IndicatorUnit",
    "IndicatorsData",
    "Objective",
    "ObjectiveStatus",
    "ObjectivesData",
    "Observation",
    "ObservationSource",
    "Review",
    "ReviewPeriod",
    "UnitType",
]
