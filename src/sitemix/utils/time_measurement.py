"""Wall-clock and CPU time measurement for pipeline stages."""

import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class TimeMeasurement:
    """Timing of a single named span."""

    span_name: str
    wall_time: float
    process_user_time: float
    process_system_time: float
    children_user_time: float
    children_system_time: float


@dataclass
class TimeRecorder:
    """Collects :class:`TimeMeasurement` records for named spans."""

    measurements: list[TimeMeasurement] = field(default_factory=list)

    @contextmanager
    def measure(self, span_name: str):
        start_wall = time.perf_counter()
        start_times = os.times()
        try:
            yield
        finally:
            end_wall = time.perf_counter()
            end_times = os.times()
            self.measurements.append(
                TimeMeasurement(
                    span_name=span_name,
                    wall_time=end_wall - start_wall,
                    process_user_time=end_times.user - start_times.user,
                    process_system_time=end_times.system - start_times.system,
                    children_user_time=end_times.children_user
                    - start_times.children_user,
                    children_system_time=end_times.children_system
                    - start_times.children_system,
                )
            )

    def get(self, span_name: str) -> TimeMeasurement | None:
        """Return the latest measurement recorded for ``span_name``."""
        for measurement in reversed(self.measurements):
            if measurement.span_name == span_name:
                return measurement
        return None
