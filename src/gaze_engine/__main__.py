import argparse
import asyncio
import logging
import sys

from gaze_engine.acquisition import DummyLandmarkSource
from gaze_engine.calibration import points_from_normalized
from gaze_engine.configs import EngineSettings
from gaze_engine.core.tracker import EyeTracker
from gaze_engine.factories import create_landmark_source, create_viewport
from gaze_engine.utils.logging import setup_logging
from gaze_engine.utils.types import _END

logger = logging.getLogger("main")


async def _calibrate(tracker: EyeTracker, source: DummyLandmarkSource) -> None:
    width, height = tracker.refresh_viewport()
    points = points_from_normalized(tracker.settings.calibration.points_to_calibrate, width, height)
    window_s = tracker.calibration.window_duration_s
    scale = tracker.settings.estimation.scale_factor

    tracker.start_calibration(points)
    for point in points:
        source.fixate(point.x / width, point.y / height, scale_factor=scale)
        tracker.add_calibration_point(point)
        # Let the watchdog close the window.
        await asyncio.sleep(window_s + 0.2)
    source.release()

    if tracker.finish_calibration():
        logger.info("Calibration accuracy: %.3f", tracker.get_calibration_accuracy())
    else:
        logger.warning("Calibration failed; continuing uncalibrated.")


async def _log_gaze(tracker: EyeTracker) -> None:
    queue = tracker.gaze.subscribe()
    count = 0
    while True:
        sample = await queue.get()
        if sample is _END:
            break
        count += 1
        if count % tracker.target_fps == 0:
            logger.info("Gaze (%.0f, %.0f) confidence %.2f", sample.x, sample.y, sample.confidence)


async def _run(settings: EngineSettings, duration_s: float, mode: str, calibrate: bool) -> None:
    tracker = EyeTracker(settings, viewport=create_viewport(settings))
    if not tracker.initialize():
        logger.error("Engine failed to initialize.")
        return
    tracker.set_accuracy_mode(mode)

    source = create_landmark_source(settings, frequency=tracker.target_fps)
    printer = asyncio.create_task(_log_gaze(tracker))
    try:
        await tracker.start_tracking(source)
        if calibrate and isinstance(source, DummyLandmarkSource):
            await _calibrate(tracker, source)
        await asyncio.sleep(duration_s)
    finally:
        stats = tracker.get_tracking_statistics()
        await tracker.dispose()
        await printer
        logger.info(
            "Processed %d frames (%.1f fps), dropped %d.",
            stats.frames_processed,
            stats.average_fps,
            stats.dropped_frames,
        )


def main():
    parser = argparse.ArgumentParser(description="Gaze estimation engine demo (simulated landmarks)")
    parser.add_argument("--duration", type=float, default=5.0, help="Seconds to track after startup.")
    parser.add_argument("--mode", choices=["fast", "medium", "high"], default=None, help="Accuracy mode.")
    parser.add_argument("--calibrate", action="store_true", help="Run a calibration session first.")
    args = parser.parse_args()

    # 1. Load Configuration
    try:
        settings = EngineSettings()
    except Exception as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    # 2. Setup Logging
    setup_logging(settings.logging)
    logger.info("Starting gaze engine demo.")

    # 3. Run
    try:
        asyncio.run(_run(settings, args.duration, args.mode or settings.estimation.processing_mode, args.calibrate))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    except Exception:
        logger.exception("Fatal engine error")
        sys.exit(1)


if __name__ == "__main__":
    main()
