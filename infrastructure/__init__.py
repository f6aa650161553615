"""
Infrastructure Layer for the training plan mapper.

This package contains concrete implementations of the application ports:
- planmypeak_client: HTTP implementation of RemotePlatform for PlanMyPeak
- intervals_icu_client: HTTP implementation of RemotePlatform for Intervals.icu
  (workout libraries only)
"""

from infrastructure.intervals_icu_client import IntervalsIcuClient
from infrastructure.planmypeak_client import PlanMyPeakClient

__all__ = [
    "IntervalsIcuClient",
    "PlanMyPeakClient",
]
