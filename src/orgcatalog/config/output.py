"""Catalogue output configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_OUTPUT_PATH: Final[Path] = Path("dist") / "orgs.json"


@dataclass(frozen=True, slots=True)
class OutputConfig:
    output_path: Path = DEFAULT_OUTPUT_PATH
    pretty_print: bool = True
    database_uri: str | None = None


def get_output_config(
    *,
    output_path: Path | None = None,
    pretty_print: bool = True,
    database_uri: str | None = None,
) -> OutputConfig:
    env_output = os.getenv("ORGCATALOG_OUTPUT")
    env_uri = os.getenv("DATABASE_URI")
    return OutputConfig(
        output_path=output_path or (Path(env_output) if env_output else DEFAULT_OUTPUT_PATH),
        pretty_print=pretty_print,
        database_uri=database_uri or env_uri or None,
    )
