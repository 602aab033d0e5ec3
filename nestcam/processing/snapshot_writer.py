import cv2
import numpy as np
import os
from datetime import datetime
from typing import Iterable, Optional
import logging

class SnapshotWriter:
    """Write camera snapshots to disk and decode them for inspection"""

    def __init__(self, output_dir: str = "./assets"):
        self.output_dir = output_dir
        self.logger = logging.getLogger(__name__)

    def build_path(self, snapshot_id: Optional[str] = None) -> str:
        """Timestamp based file name, suffixed with the snapshot id when known"""
        name = datetime.now().strftime("%Y-%m-%d_%H-%M-%S.%f")
        if snapshot_id:
            name = f"{name}_{snapshot_id}"
        return os.path.join(self.output_dir, f"{name}.jpeg")

    def write_stream(self, chunks: Iterable[bytes], snapshot_id: Optional[str] = None) -> str:
        """Write a chunked image stream to a new file and return its path

        The image only appears under its final name once the stream is
        complete; a stream that fails partway leaves nothing behind.
        """
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.build_path(snapshot_id)
        part_path = path + ".part"
        written = 0
        try:
            with open(part_path, "wb") as file:
                for chunk in chunks:
                    file.write(chunk)
                    written += len(chunk)
            os.replace(part_path, path)
        except BaseException:
            if os.path.exists(part_path):
                os.remove(part_path)
            self.logger.error(f"Discarded partial image {path} after {written} bytes")
            raise
        self.logger.info(f"Done writing image {path} ({written} bytes)")
        return path

    def write_bytes(self, data: bytes, snapshot_id: Optional[str] = None) -> str:
        return self.write_stream([data], snapshot_id)

    def decode(self, data: bytes) -> Optional[np.ndarray]:
        """Decode JPEG/PNG bytes into a BGR frame, None if they are not an image"""
        if not data:
            return None
        try:
            frame = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        except cv2.error as e:
            self.logger.error(f"Snapshot decode error: {e}")
            return None
        if frame is None:
            self.logger.warning("Snapshot payload is not a decodable image")
        return frame

    def get_frame_info(self, frame: np.ndarray) -> dict:
        """Get basic information about a frame"""
        return {
            'shape': frame.shape,
            'dtype': str(frame.dtype),
            'size_mb': frame.nbytes / (1024 * 1024),
            'channels': frame.shape[2] if len(frame.shape) == 3 else 1
        }
