"""Timed and step-gated activities."""

from .eggs import EggService, HatchableEgg
from .expeditions import (
    EXPEDITION_TABLE,
    ActivityStatus,
    Expedition,
    ExpeditionReport,
    ExpeditionService,
    ExpeditionSpec,
    ExpeditionType,
)

__all__ = [
    "EXPEDITION_TABLE",
    "ActivityStatus",
    "EggService",
    "Expedition",
    "ExpeditionReport",
    "ExpeditionService",
    "ExpeditionSpec",
    "ExpeditionType",
    "HatchableEgg",
]
