"""
Common utilities and infrastructure for the geodetic foot-point system.

This package provides foundational components used across all modules:
- Geodetic constants for the reference ellipsoids
- Cartesian and geodetic value types
- Unit registry for length and angle quantities
- Logging and audit trail infrastructure
"""

from common.constants import GeodeticConstants
from common.units import ureg, Q_, to_meters, to_radians
from common.types import XYZ, LPA, magnitude, unit
from common.logging_config import get_logger, AuditLogger

__all__ = [
    "GeodeticConstants",
    "ureg",
    "Q_",
    "to_meters",
    "to_radians",
    "XYZ",
    "LPA",
    "magnitude",
    "unit",
    "get_logger",
    "AuditLogger",
]
