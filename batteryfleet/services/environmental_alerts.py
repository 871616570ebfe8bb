# File: batteryfleet/services/environmental_alerts.py
"""
Safe ranges for environmental readings taken during transport.

A reading is an alert when it falls strictly outside its safe range;
values exactly on a bound are safe.
"""

from typing import Dict, Optional, Tuple

from batteryfleet.db.models.enums import ReadingType

# (lower bound, upper bound); None means unbounded on that side
SAFE_RANGES: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    ReadingType.TEMPERATURE.value: (-10.0, 45.0),  # degrees C
    ReadingType.HUMIDITY.value: (20.0, 80.0),  # %RH
    ReadingType.SHOCK.value: (None, 5.0),  # g
}


def is_alert(reading_type: str, value: float) -> bool:
    """
    Decide whether a reading is out of range.

    Args:
        reading_type: One of the ReadingType values
        value: The measured value

    Returns:
        True if the value lies outside the safe range for its type

    Raises:
        ValueError: If the reading type is unknown
    """
    reading_type = ReadingType(reading_type).value
    lower, upper = SAFE_RANGES[reading_type]
    if lower is not None and value < lower:
        return True
    if upper is not None and value > upper:
        return True
    return False
