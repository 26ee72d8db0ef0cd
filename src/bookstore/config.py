"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("bookstore_data")
    seed_on_first_run: bool = True

    @classmethod
    def from_env(cls):
        return cls(
            data_dir=Path(os.getenv("BOOKSTORE_DATA_DIR", "bookstore_data")),
            seed_on_first_run=os.getenv("BOOKSTORE_SEED", "1").strip().lower() not in _FALSY,
        )
