"""End-to-end tests for the soundscope command line."""

import json
import logging

import numpy as np
import pytest
import soundfile as sf

from soundscope.cli import main

SAMPLE_RATE = 22050


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory and restore root logging afterwards."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def tone_file(tmp_path):
    t = np.arange(SAMPLE_RATE) / SAMPLE_RATE
    path = tmp_path / "tone.wav"
    sf.write(str(path), 0.5 * np.sin(2 * np.pi * 440 * t), SAMPLE_RATE)
    return path


def test_recognize_writes_json(tone_file, tmp_path, capsys):
    output = tmp_path / "result.json"
    assert main([str(tone_file), "--output", str(output)]) == 0

    data = json.loads(output.read_text())
    assert data["primary_recognition"]
    assert 0.0 <= data["confidence"] <= 1.0
    assert data["features"]["sample_rate"] == SAMPLE_RATE
    assert "RECOGNITION RESULTS" in capsys.readouterr().out


def test_multiple_files_keyed_by_path(tone_file, tmp_path):
    other = tmp_path / "copy.wav"
    other.write_bytes(tone_file.read_bytes())
    output = tmp_path / "results.json"
    assert main([str(tone_file), str(other), "--output", str(output)]) == 0
    assert set(json.loads(output.read_text())) == {str(tone_file), str(other)}


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.wav")]) == 1
    assert "not found" in capsys.readouterr().out


def test_undecodable_file_fails(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"not audio at all")
    assert main([str(path)]) == 1


def test_status(capsys):
    assert main(["--status"]) == 0
    out = capsys.readouterr().out
    assert "Service Status" in out
    assert "ready: True" in out


def test_requires_input():
    with pytest.raises(SystemExit):
        main([])


def test_bad_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("recognition:\n  max_workers: lots\n")
    assert main(["--status", "--config", str(config)]) == 1
