"""Tests for screencap.catalog - device mode catalog."""

from unittest.mock import patch

from screencap import catalog, tools
from screencap.types import CaptureConfig, CaptureDevice, VideoMode


class TestScreenReferenceModes:
    """Tests for screen_reference_modes function."""

    def test_default_table(self):
        modes = catalog.screen_reference_modes(CaptureConfig())
        assert modes[0] == VideoMode(3420, 2224, 60.0)
        assert VideoMode(1920, 1080, 30.0) in modes
        assert VideoMode(1280, 720, 60.0) in modes
        assert len(modes) == 6

    def test_detected_native_size_first(self):
        modes = catalog.screen_reference_modes(CaptureConfig(), native=(3024, 1964))
        assert (modes[0].width, modes[0].height) == (3024, 1964)

    def test_native_equal_to_reference_not_duplicated(self):
        modes = catalog.screen_reference_modes(CaptureConfig(), native=(1920, 1080))
        assert len(modes) == 4


class TestListModes:
    """Tests for list_modes function."""

    def test_screen_device_uses_reference_table(self):
        """Device 5 (>= threshold 4) never queries ffmpeg."""
        config = CaptureConfig()
        device = CaptureDevice.classify(5, config.screen_threshold)
        with patch.object(tools, "query_device_modes") as mock_query:
            result = catalog.list_modes(device, config)
        mock_query.assert_not_called()
        assert list(result) == catalog.screen_reference_modes(config)
        assert not result.fallback

    def test_threshold_is_configurable(self):
        config = CaptureConfig(screen_threshold=8)
        device = CaptureDevice.classify(5, config.screen_threshold)
        with patch.object(tools, "query_device_modes",
                          return_value=[VideoMode(640, 480, 30.0)]) as mock_query:
            result = catalog.list_modes(device, config)
        mock_query.assert_called_once_with("5")
        assert list(result) == [VideoMode(640, 480, 30.0)]

    def test_camera_parses_query(self, mode_listing):
        config = CaptureConfig()
        device = CaptureDevice.classify(0, config.screen_threshold)
        with patch.object(tools, "_ffmpeg_diagnostics", return_value=mode_listing):
            result = catalog.list_modes(device, config)
        assert len(result) == 4
        assert result.modes[0] == VideoMode(1280, 720, 30.000030)
        assert result.warning is None

    def test_empty_query_falls_back(self):
        """No parsable modes substitutes 1920x1080@30 and flags the fallback."""
        config = CaptureConfig()
        device = CaptureDevice.classify(1, config.screen_threshold)
        with patch.object(tools, "_ffmpeg_diagnostics", return_value="nothing useful"):
            result = catalog.list_modes(device, config)
        assert result.fallback is True
        assert list(result) == [VideoMode(1920, 1080, 30.0)]
        assert "did not list modes for device 1" in result.warning


class TestCaptureDevice:
    """Tests for CaptureDevice.classify."""

    def test_screen_at_threshold(self):
        assert CaptureDevice.classify(4, 4).is_screen

    def test_camera_below_threshold(self):
        assert not CaptureDevice.classify("3", 4).is_screen

    def test_named_device_is_camera(self):
        assert not CaptureDevice.classify("FaceTime HD Camera", 4).is_screen
