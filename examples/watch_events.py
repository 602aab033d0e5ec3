"""
Example of how to follow camera events and save their snapshots
"""

import time
from nestcam.camera import NestCamera
from nestcam.config.settings import Settings
from nestcam.processing.snapshot_writer import SnapshotWriter

def main():
    settings = Settings()
    if not settings.is_complete():
        print("Set API_KEY, CLIENT_ID, REFRESH_TOKEN and CAMERA_ID first")
        return

    writer = SnapshotWriter("./output/snapshots")

    with NestCamera.from_settings(settings).init() as camera:
        if not camera.credentials.session_token:
            print("Failed to authenticate")
            return

        def on_event(event):
            print(f"New event: {event}")
            if event.get('id'):
                path = camera.save_snapshot(str(event['id']), writer)
                print(f"Saved event snapshot to {path}")

        def on_snapshot(data):
            print(f"Latest snapshot: {len(data)} bytes")

        # Two subscribers to the same feed still cost one request per tick
        events = camera.subscribe_to_events(on_event, lambda e: print(f"Event error: {e}"))
        camera.subscribe_to_events(lambda event: print(f"Audit: {event.get('id')}"))
        snapshots = camera.subscribe_to_latest_snapshot(on_snapshot)

        print("Watching for 60 seconds...")
        time.sleep(60)

        snapshots.unsubscribe()
        events.unsubscribe()

    print("Done")

if __name__ == "__main__":
    main()
