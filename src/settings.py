from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

from errors import ValidationError


PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class IndexSettings:

    "Ρυθμίσεις της εφαρμογής (φάκελος δεδομένων, αρχείο δείγματος, benchmark)."
    data_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "data")
    sample_file: str = "sample.txt"
    bench_points: int = 20000
    bench_seed: int = 42
    bench_repeats: int = 5

    @property
    def sample_path(self) -> Path:
        return self.data_dir / self.sample_file

    def resolve(self, filename: str) -> Path:
        "Σχετικά ονόματα αρχείων λύνονται μόνο μέσα στο data_dir."
        if not str(filename).strip():
            raise ValidationError("File name must not be empty")
        path = Path(str(filename).strip()).expanduser()
        if path.is_absolute():
            return path
        return self.data_dir / path
