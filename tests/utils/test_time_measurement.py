"""Unit tests for the time_measurement module."""

import time
import unittest
from dataclasses import asdict
from pathlib import Path

from sitemix.api import run_heuristic
from sitemix.config.params import AlgorithmParams, SitemixParams
from sitemix.utils.data_processing import load_instance
from sitemix.utils.time_measurement import TimeMeasurement, TimeRecorder

ASSETS = Path(__file__).parent.parent / "_assets"


class TestTimeRecorder(unittest.TestCase):
    def test_measurement_fields(self):
        measurement = TimeMeasurement(
            span_name="assignment",
            wall_time=1.5,
            process_user_time=0.1,
            process_system_time=0.05,
            children_user_time=0.0,
            children_system_time=0.0,
        )
        self.assertEqual(
            list(asdict(measurement)),
            [
                "span_name",
                "wall_time",
                "process_user_time",
                "process_system_time",
                "children_user_time",
                "children_system_time",
            ],
        )

    def test_sleep_counts_as_wall_time_only(self):
        recorder = TimeRecorder()
        with recorder.measure("idle"):
            time.sleep(0.2)

        (measurement,) = recorder.measurements
        self.assertEqual(measurement.span_name, "idle")
        self.assertGreaterEqual(measurement.wall_time, 0.2)
        self.assertLess(measurement.process_user_time, 0.1)

    def test_span_is_recorded_when_block_raises(self):
        recorder = TimeRecorder()
        with self.assertRaises(ValueError):
            with recorder.measure("load_instance"):
                raise ValueError("bad instance")

        self.assertEqual([m.span_name for m in recorder.measurements], ["load_instance"])

    def test_inner_spans_finish_first(self):
        recorder = TimeRecorder()
        with recorder.measure("global"):
            time.sleep(0.02)
            with recorder.measure("assignment"):
                time.sleep(0.02)

        inner, outer = recorder.measurements
        self.assertEqual((inner.span_name, outer.span_name), ("assignment", "global"))
        self.assertGreater(outer.wall_time, inner.wall_time)

    def test_get_returns_latest_span(self):
        recorder = TimeRecorder()
        with recorder.measure("stage"):
            pass
        with recorder.measure("stage"):
            time.sleep(0.01)

        self.assertIs(recorder.get("stage"), recorder.measurements[-1])
        self.assertIsNone(recorder.get("missing"))

    def test_heuristic_records_both_phases(self):
        problem = load_instance(ASSETS / "small_instance.json")
        params = SitemixParams(algorithm=AlgorithmParams(selector="dp"))
        recorder = TimeRecorder()

        run_heuristic(problem, params, recorder)

        self.assertEqual(
            [m.span_name for m in recorder.measurements], ["assignment", "clustering"]
        )
        self.assertTrue(all(m.wall_time >= 0 for m in recorder.measurements))


if __name__ == "__main__":
    unittest.main()
