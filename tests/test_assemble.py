"""Tests for screencap.assemble - job descriptor and encoder command."""

from unittest.mock import MagicMock, patch

import pytest

from screencap.assemble import (
    assemble,
    build_command,
    codec_tag,
    even_region,
    fit_region,
    run_encoder,
    summary,
)
from screencap.types import (
    CaptureConfig,
    CaptureDevice,
    EncodingParams,
    Region,
    VideoMode,
)

CONFIG = CaptureConfig()
SCREEN = CaptureDevice.classify(4, 4)
HD = VideoMode(1920, 1080, 30.0)


def option(cmd, flag):
    """Value following ``flag`` in an argument list."""
    return cmd[cmd.index(flag) + 1]


class TestCodecTag:
    """Tests for codec_tag function."""

    @pytest.mark.parametrize("codec, tag", [
        ("libx264", "avc1"),
        ("h264_videotoolbox", "avc1"),
        ("hevc_videotoolbox", "hvc1"),
        ("h265", "hvc1"),
        ("av1", "av01"),
        ("AV1_nvenc", "av01"),
        ("libsvtav1", "av01"),
        ("libaom-av1", "av01"),
        ("librav1e", "av01"),
        ("libx265", "hvc1"),
        ("prores", "avc1"),
    ])
    def test_mapping(self, codec, tag):
        assert codec_tag(codec) == tag


class TestAssemble:
    """Tests for assemble function."""

    def test_default_codec_uses_crf_and_preset(self):
        params = EncodingParams(output="out.mp4", crf=20, preset="slow", quality="9")
        job = assemble(SCREEN, None, HD, params, CONFIG)
        assert (job.crf, job.preset, job.quality) == (20, "slow", None)
        assert job.codec_tag == "avc1"

    def test_other_codec_uses_quality(self):
        params = EncodingParams(output="out.mp4", codec="hevc_videotoolbox", quality="65")
        job = assemble(SCREEN, None, HD, params, CONFIG)
        assert (job.crf, job.preset, job.quality) == (None, None, "65")
        assert job.codec_tag == "hvc1"

    def test_other_codec_without_quality(self):
        params = EncodingParams(output="out.mp4", codec="hevc_videotoolbox")
        job = assemble(SCREEN, None, HD, params, CONFIG)
        assert job.quality is None

    def test_region_made_even(self):
        params = EncodingParams(output="out.mp4")
        job = assemble(SCREEN, Region(801, 601, 11, 13), HD, params, CONFIG)
        assert job.region == Region(800, 600, 11, 13)

    def test_descriptor_is_frozen(self):
        job = assemble(SCREEN, None, HD, EncodingParams(output="out.mp4"), CONFIG)
        with pytest.raises(AttributeError):
            job.output = "other.mp4"


class TestEvenRegion:
    """Tests for even_region function."""

    def test_already_even(self):
        assert even_region(Region(640, 480)) == Region(640, 480)


class TestFitRegion:
    """Tests for fit_region function."""

    def test_inside_frame_unchanged(self):
        region = Region(400, 300, 800, 350)
        assert fit_region(region, HD) == (region, None)

    def test_shifted_into_frame(self):
        region, warning = fit_region(Region(400, 300, 1000, 600), VideoMode(1280, 720, 30.0))
        assert region == Region(400, 300, 880, 420)
        assert "exceeds the 1280x720 frame" in warning

    def test_shrunk_to_frame(self):
        region, warning = fit_region(Region(2000, 900, 50, 50), VideoMode(1280, 720, 30.0))
        assert region == Region(1280, 720, 0, 0)
        assert warning is not None


class TestBuildCommand:
    """Tests for build_command function."""

    def test_default_job(self):
        job = assemble(SCREEN, None, HD, EncodingParams(output="out.mp4"), CONFIG)
        assert build_command(job, CONFIG) == [
            "ffmpeg", "-hide_banner",
            "-thread_queue_size", "4096",
            "-f", "avfoundation",
            "-framerate", "30",
            "-video_size", "1920x1080",
            "-capture_cursor", "1", "-capture_mouse_clicks", "1",
            "-i", "4:none",
            "-c:v", "libx264",
            "-crf", "23",
            "-preset", "medium", "-pix_fmt", "yuv420p",
            "-tag:v", "avc1",
            "-movflags", "+faststart", "out.mp4",
        ]

    def test_crop_duration_audio(self):
        params = EncodingParams(output="o.mp4", duration=90.0, audio_device="0")
        job = assemble(SCREEN, Region(400, 300, 800, 350), HD, params, CONFIG)
        cmd = build_command(job, CONFIG)
        assert option(cmd, "-vf") == "crop=400:300:800:350"
        assert option(cmd, "-t") == "90"
        assert option(cmd, "-i") == "4:0"
        assert option(cmd, "-c:a") == "aac"
        assert option(cmd, "-b:a") == "128k"
        assert cmd.index("-t") > cmd.index("-i")

    def test_sck_flags(self):
        params = EncodingParams(output="o.mp4", use_sck=True)
        job = assemble(SCREEN, None, HD, params, CONFIG)
        cmd = build_command(job, CONFIG)
        assert option(cmd, "-capture_screen") == "4"
        assert option(cmd, "-pix_fmt") == "0rgb"
        assert cmd.index("-capture_screen") < cmd.index("-i")

    def test_quality_codec(self):
        params = EncodingParams(output="o.mp4", codec="hevc_videotoolbox", quality="65")
        job = assemble(SCREEN, None, VideoMode(1280, 720, 60.0), params, CONFIG)
        cmd = build_command(job, CONFIG)
        assert option(cmd, "-q:v") == "65"
        assert "-crf" not in cmd
        assert "-preset" not in cmd
        assert option(cmd, "-framerate") == "60"
        assert option(cmd, "-tag:v") == "hvc1"

    def test_fractional_rate_passed_exactly(self):
        """ffmpeg gets the device rate, not a rounded one."""
        job = assemble(SCREEN, None, VideoMode(1920, 1080, 29.97),
                       EncodingParams(output="o.mp4"), CONFIG)
        assert option(build_command(job, CONFIG), "-framerate") == "29.97"

    def test_no_audio_flags_without_audio(self):
        job = assemble(SCREEN, None, HD, EncodingParams(output="o.mp4"), CONFIG)
        assert "-c:a" not in build_command(job, CONFIG)


class TestSummary:
    """Tests for summary function."""

    def test_high_resolution_note(self):
        job = assemble(SCREEN, None, VideoMode(3420, 2224, 30.0),
                       EncodingParams(output="o.mp4"), CONFIG)
        text = "\n".join(summary(job))
        assert "3420x2224@30fps" in text
        assert "high resolution" in text

    def test_plain_summary(self):
        params = EncodingParams(output="o.mp4", duration=5.0, use_sck=True)
        job = assemble(SCREEN, Region(100, 100, 2, 2), HD, params, CONFIG)
        lines = summary(job)
        assert lines[0] == "Recording device 4 -> o.mp4"
        assert "(SCK)" in lines[1]
        assert "  Crop: 100x100 at (2, 2)" in lines
        assert "  Duration: 5s" in lines
        assert not any("high resolution" in line for line in lines)


class TestRunEncoder:
    """Tests for run_encoder function."""

    def test_returns_exit_status(self):
        proc = MagicMock()
        proc.wait.return_value = 183
        with patch("subprocess.Popen", return_value=proc) as popen:
            assert run_encoder(["ffmpeg"]) == 183
        popen.assert_called_once_with(["ffmpeg"])

    def test_ctrl_c_waits_for_encoder(self):
        proc = MagicMock()
        proc.wait.side_effect = [KeyboardInterrupt, 255]
        with patch("subprocess.Popen", return_value=proc):
            assert run_encoder(["ffmpeg"]) == 255
        assert proc.wait.call_count == 2
