from pathlib import Path

import pytest

from contracts.signals import SignalType
from infra.pipeline_paths import OutputPaths


def test_defaults_are_stable() -> None:
    p = OutputPaths.for_input("data/VitalgramLogData.sqlite")
    assert p.ecg() == Path(".") / "VitalgramLogData.ecg_i.csv"
    assert p.accel() == Path(".") / "VitalgramLogData.acc_i.csv"
    assert p.manifest() == Path(".") / "VitalgramLogData.manifest.json"


def test_empty_out_dir_means_current_directory() -> None:
    assert OutputPaths.for_input("a.sqlite", "").out_dir == Path(".")
    assert OutputPaths.for_input("a.sqlite", "   ").out_dir == Path(".")


def test_only_last_extension_is_stripped() -> None:
    p = OutputPaths.for_input("/tmp/vital.2024.sqlite", "out")
    assert p.for_signal(SignalType.ECG) == Path("out") / "vital.2024.ecg_i.csv"


def test_input_without_extension_keeps_full_name() -> None:
    assert OutputPaths.for_input("vitaldump", "out").accel() == Path("out") / "vitaldump.acc_i.csv"


def test_rejects_non_path_values() -> None:
    with pytest.raises(TypeError):
        OutputPaths(input_path="a.sqlite")  # type: ignore[arg-type]


def test_ensure_out_dir_creates_nested_directories(tmp_path: Path) -> None:
    p = OutputPaths.for_input("a.sqlite", tmp_path / "x" / "y")
    assert p.ensure_out_dir().is_dir()
