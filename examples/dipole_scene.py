"""
Dipole walkthrough for the field engine

Builds the lab's opening +5/-5 dipole, reads the sensor probe at the
midpoint, then drags the positive charge and traces the lines again, the
way the lab recomputes after every drag.
"""

import logging

from fieldlab.physics import ElectrostaticFieldEngine, PointCharge, TraceConfig
from fieldlab.data import ChargeScene, probe_reading

# Scene constants
LEFT_CHARGE = ('1', (35.0, 50.0), 5.0)
RIGHT_CHARGE = ('2', (65.0, 50.0), -5.0)
PROBE_POSITION = (50.0, 50.0)
DRAG_TARGET = (35.0, 30.0)

logger = logging.getLogger(__name__)


def build_scene():
    return ChargeScene([PointCharge(charge_id, position[0], position[1], magnitude)
                        for charge_id, position, magnitude in (LEFT_CHARGE, RIGHT_CHARGE)])


def line_summary(lines):
    summary = {}
    for line in lines:
        key = (line.origin_charge, line.stop_reason.value)
        summary[key] = summary.get(key, 0) + 1
    return summary


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    engine = ElectrostaticFieldEngine()
    scene = build_scene()
    config = TraceConfig()

    reading = probe_reading(engine.sample_field(PROBE_POSITION, scene.charges))
    logger.info(f"Probe {PROBE_POSITION}: {reading.field_label}, {reading.potential_label}, "
                f"arrow at {reading.angle_degrees:.1f} deg")

    logger.info(f"Lines before drag: {line_summary(engine.trace_field_lines(scene.charges, config))}")

    scene.move(LEFT_CHARGE[0], DRAG_TARGET)
    logger.info(f"Lines after drag: {line_summary(engine.trace_field_lines(scene.charges, config))}")


if __name__ == "__main__":
    main()
