"""Path conventions for exported CSV files.

All code that needs to know where a signal's CSV lands should go through
:class:`infra.pipeline_paths.OutputPaths`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from contracts.signals import SignalType

MANIFEST_SUFFIX = ".manifest.json"


def _p(path: str | Path) -> Path:
    return path if isinstance(path, Path) else Path(str(path))


def _stem(input_path: Path) -> str:
    # Only the last extension is stripped: "a.b.sqlite" -> "a.b".
    base = input_path.name
    suffix = input_path.suffix
    return base[: -len(suffix)] if suffix else base


@dataclass(frozen=True)
class OutputPaths:
    """
    Output layout for one input database.

    Rules:
      - Every output lives directly in ``out_dir`` (default: current directory)
      - File names are ``<input basename without extension><signal suffix>``
    """

    input_path: Path
    out_dir: Path = Path(".")

    def __post_init__(self) -> None:
        for name in ("input_path", "out_dir"):
            val = getattr(self, name)
            if not isinstance(val, Path):
                raise TypeError(f"{name} must be a pathlib.Path (got {type(val)})")
        if not _stem(self.input_path):
            raise ValueError(f"input path has no file name: {self.input_path!r}")

    @property
    def stem(self) -> str:
        return _stem(self.input_path)

    def for_signal(self, signal: SignalType) -> Path:
        return self.out_dir / f"{self.stem}{signal.file_suffix}"

    def ecg(self) -> Path:
        return self.for_signal(SignalType.ECG)

    def accel(self) -> Path:
        return self.for_signal(SignalType.ACCEL)

    def manifest(self) -> Path:
        return self.out_dir / f"{self.stem}{MANIFEST_SUFFIX}"

    def ensure_out_dir(self) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        return self.out_dir

    @classmethod
    def for_input(cls, input_path: str | Path, out_dir: str | Path | None = None) -> OutputPaths:
        """Preferred constructor for the CLI; an empty *out_dir* means the current directory."""
        text = str(out_dir or "").strip()
        return cls(input_path=_p(input_path), out_dir=Path(text) if text else Path("."))


__all__ = ["MANIFEST_SUFFIX", "OutputPaths"]
