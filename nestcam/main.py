import time
import signal
import sys
from datetime import datetime
from nestcam.camera import NestCamera
from nestcam.config.settings import Settings
from nestcam.processing.snapshot_writer import SnapshotWriter
from nestcam.utils.logger import setup_application_logging

# Global flag for graceful shutdown
running = True

def signal_handler(signum, frame):
    """Handle shutdown signals gracefully"""
    global running
    print(f"\n🛑 Received signal {signum}, shutting down gracefully...")
    running = False

def main():
    global running

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    settings = Settings()
    config = settings.config
    logger = setup_application_logging(config)

    if not settings.is_complete():
        logger.error("API_KEY, CLIENT_ID, REFRESH_TOKEN and CAMERA_ID must be configured")
        return 1

    camera = NestCamera.from_settings(settings)
    writer = SnapshotWriter(config['output']['snapshot_dir'])
    stats = {'snapshots': 0, 'events': 0}

    def on_snapshot(data: bytes):
        stats['snapshots'] += 1
        path = writer.write_bytes(data)
        frame = writer.decode(data)
        if frame is not None:
            logger.debug(f"Snapshot {path}: {writer.get_frame_info(frame)}")

    def on_event(event: dict):
        stats['events'] += 1
        logger.info(f"📣 New camera event: {event}")
        snapshot_id = event.get('id') if isinstance(event, dict) else None
        if snapshot_id:
            camera.save_snapshot(str(snapshot_id), writer)

    def on_error(e: Exception):
        logger.warning(f"⚠️ Feed error: {e}")

    try:
        camera.init()
        if not camera.credentials.session_token:
            logger.error("Failed to authenticate with the Nest API")
            return 1

        snapshot_subscription = camera.subscribe_to_latest_snapshot(on_snapshot, on_error)
        event_subscription = camera.subscribe_to_events(on_event, on_error)

        logger.info("✅ Polling snapshots and events")
        logger.info("ℹ️ Press Ctrl+C to stop")

        ticks = 0
        while running and not (snapshot_subscription.closed and event_subscription.closed):
            time.sleep(5)
            ticks += 1
            if ticks % 12 == 0:  # Every minute
                timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
                logger.info(f"📊 [{timestamp}] {stats['snapshots']} snapshots, {stats['events']} events received")

        if not running:
            logger.info("🛑 Shutdown requested by user")
        else:
            logger.warning("⚠️ Feeds stopped unexpectedly")

    except KeyboardInterrupt:
        logger.info("🛑 Interrupted by user")
        running = False
    except Exception as e:
        logger.error(f"💥 Unexpected error: {e}")
        return 1
    finally:
        logger.info("🔄 Cleaning up...")
        camera.close()
        logger.info("✅ Cleanup complete")

    return 0

if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
