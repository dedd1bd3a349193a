"""Tests for AudioLoader."""

import numpy as np
import pytest
import soundfile as sf

from soundscope.core.loader import AudioLoader, create_audio_loader
from soundscope.utils.errors import DecodeError, FileTooLargeError, UnsupportedFormatError

SAMPLE_RATE = 22050


def write_tone(path, channels=1, amplitude=0.5, subtype="PCM_16"):
    t = np.arange(SAMPLE_RATE // 2) / SAMPLE_RATE
    tone = amplitude * np.sin(2 * np.pi * 440 * t)
    data = np.stack([tone] * channels, axis=1) if channels > 1 else tone
    sf.write(str(path), data, SAMPLE_RATE, subtype=subtype)
    return path


@pytest.fixture
def loader():
    return AudioLoader()


class TestLoad:
    def test_mono_wav(self, loader, tmp_path):
        buffer = loader.load(write_tone(tmp_path / "tone.wav"))
        assert buffer.channels == 1
        assert buffer.sample_rate == SAMPLE_RATE
        assert buffer.frames == SAMPLE_RATE // 2
        assert buffer.duration == pytest.approx(0.5)
        assert buffer.samples.dtype == np.float32

    def test_stereo_is_channels_first(self, loader, tmp_path):
        buffer = loader.load(write_tone(tmp_path / "stereo.wav", channels=2))
        assert buffer.samples.shape == (2, SAMPLE_RATE // 2)

    def test_flac(self, loader, tmp_path):
        buffer = loader.load(write_tone(tmp_path / "tone.flac"))
        assert buffer.channels == 1

    def test_samples_are_read_only(self, loader, tmp_path):
        buffer = loader.load(write_tone(tmp_path / "tone.wav"))
        with pytest.raises(ValueError):
            buffer.samples[0, 0] = 1.0

    def test_clipping_is_normalised(self, loader, tmp_path):
        path = write_tone(tmp_path / "loud.wav", amplitude=2.0, subtype="FLOAT")
        buffer = loader.load(path)
        assert np.max(np.abs(buffer.samples)) == pytest.approx(1.0)

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "missing.wav")

    def test_unsupported_suffix(self, loader, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"ID3")
        with pytest.raises(UnsupportedFormatError) as exc_info:
            loader.load(path)
        assert exc_info.value.format == ".mp3"

    def test_file_too_large(self, tmp_path):
        path = write_tone(tmp_path / "tone.wav")
        with pytest.raises(FileTooLargeError):
            AudioLoader(max_file_size=100).load(path)

    def test_corrupt_file(self, loader, tmp_path):
        path = tmp_path / "corrupt.wav"
        path.write_bytes(b"RIFF" + b"\x00" * 64)
        with pytest.raises(DecodeError):
            loader.load(path)


class TestDecode:
    def test_round_trip_bytes(self, loader, tmp_path):
        path = write_tone(tmp_path / "tone.wav")
        buffer = loader.decode(path.read_bytes())
        assert buffer.sample_rate == SAMPLE_RATE

    def test_empty(self, loader):
        with pytest.raises(DecodeError):
            loader.decode(b"")

    def test_garbage(self, loader):
        with pytest.raises(DecodeError):
            loader.decode(b"\x01\x02\x03" * 100)

    def test_too_large(self):
        with pytest.raises(FileTooLargeError):
            AudioLoader(max_file_size=10).decode(b"\x00" * 11)


class TestFactory:
    def test_from_config(self):
        loader = create_audio_loader({"max_file_size": 1024, "supported_formats": [".WAV"]})
        assert loader.max_file_size == 1024
        assert loader.supported_suffixes == {".wav"}

    def test_defaults(self):
        loader = create_audio_loader()
        assert ".flac" in loader.supported_suffixes
