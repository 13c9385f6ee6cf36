from __future__ import annotations

import logging

from ..models.entities import AutoEvent, Device
from .validation import ValidationAggregator

"""AutoEvent -> Device correlation.

An AutoEvents row names the devices it belongs to. A valid auto-event is
attached to each of them; a failing one takes every referenced device out of
the results (cascading invalidation). Devices must be fully decoded and
validated first.
"""

logger = logging.getLogger(__name__)


def correlate(
    auto_event: AutoEvent | None,
    device_names: list[str],
    aggregator: ValidationAggregator[Device],
    error: Exception | None = None,
) -> bool:
    """Join one auto-event onto the accepted devices.

    Args:
        auto_event: The decoded auto-event; None when its row failed to decode
            (``error`` is then required)
        device_names: Device names referenced by the row (exact match)
        aggregator: Device aggregator holding accepted devices and errors
        error: Validation or decode failure of the auto-event, if any

    Returns:
        True when at least one referenced name matched an accepted device.

    A device that already failed keeps its first error. Names that match no
    accepted device are skipped.
    """
    matched = False
    if error is not None:
        for name in device_names:
            if aggregator.find(name):
                logger.debug("Invalidating device %s: %s", name, error)
                aggregator.record(name, error)
                matched = True
        return matched

    if auto_event is None:
        raise ValueError("auto_event is required when no error is given")

    for name in device_names:
        matches = aggregator.find(name)
        if not matches:
            logger.debug("AutoEvent %s references unknown device %s", auto_event.source_name, name)
        for device in matches:
            device.auto_events.append(auto_event)
            matched = True
    return matched
