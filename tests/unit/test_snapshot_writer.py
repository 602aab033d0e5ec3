"""
Unit tests for snapshot processing components.
"""

import unittest
import numpy as np
import cv2
import tempfile
import os

from nestcam.errors import FetchError
from nestcam.processing.snapshot_writer import SnapshotWriter


class TestSnapshotWriter(unittest.TestCase):
    """Test cases for SnapshotWriter class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.writer = SnapshotWriter(os.path.join(self.temp_dir, "assets"))

        # Encode a test image the way the camera would send it
        self.test_frame = np.random.randint(0, 255, (48, 64, 3), dtype=np.uint8)
        ok, encoded = cv2.imencode(".jpg", self.test_frame)
        self.assertTrue(ok)
        self.jpeg_bytes = encoded.tobytes()

    def tearDown(self):
        """Clean up after tests."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_build_path_is_timestamped(self):
        path = self.writer.build_path("1698000000-labs")

        self.assertEqual(os.path.dirname(path), self.writer.output_dir)
        self.assertTrue(path.endswith("_1698000000-labs.jpeg"))
        self.assertRegex(os.path.basename(path), r"^\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.\d{6}")

    def test_write_stream_creates_directory(self):
        """Test chunked writes land in a freshly created output directory."""
        path = self.writer.write_stream(iter([b"ab", b"cd"]))

        self.assertTrue(os.path.exists(path))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"abcd")

    def test_failed_stream_leaves_no_file(self):
        """Test a stream that breaks partway does not leave a truncated image."""
        def broken_stream():
            yield b"abc"
            raise FetchError("connection dropped")

        with self.assertRaises(FetchError):
            self.writer.write_stream(broken_stream(), "id-1")

        self.assertEqual(os.listdir(self.writer.output_dir), [])

    def test_write_bytes(self):
        path = self.writer.write_bytes(self.jpeg_bytes, "snap")

        self.assertEqual(os.path.getsize(path), len(self.jpeg_bytes))

    def test_decode_image(self):
        frame = self.writer.decode(self.jpeg_bytes)

        self.assertIsNotNone(frame)
        self.assertEqual(frame.shape, (48, 64, 3))

    def test_decode_garbage_returns_none(self):
        self.assertIsNone(self.writer.decode(b""))
        self.assertIsNone(self.writer.decode(b"not an image"))

    def test_get_frame_info(self):
        """Test getting frame information."""
        info = self.writer.get_frame_info(self.test_frame)

        self.assertEqual(info['shape'], (48, 64, 3))
        self.assertEqual(info['dtype'], 'uint8')
        self.assertEqual(info['channels'], 3)
        self.assertAlmostEqual(info['size_mb'], self.test_frame.nbytes / (1024 * 1024))


if __name__ == '__main__':
    unittest.main()
