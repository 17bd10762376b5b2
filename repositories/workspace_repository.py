from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Union
import logging
import os

from dotenv import load_dotenv

from models.errors import ConfigurationError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

WORKING_DIRECTORY_KEY = "working_directory"
OUTPUT_FILE_KEY = "output_file"


@dataclass
class WorkspaceConfig:
    """Where inputs are looked up and where the next result is written."""
    working_directory: Path
    output_file: Path


class WorkspaceRepository:
    """
    Persists the workspace as `key=value` lines in a small text file.
    """
    def __init__(self, config_file: Union[str, Path, None] = None):
        self.config_file = Path(config_file or os.getenv("GGPICTURE_CONFIG_FILE", "config.txt"))
        self.default_output_name = os.getenv("DEFAULT_OUTPUT_NAME", "output.bmp")

    def read_entries(self) -> Dict[str, str]:
        if not self.config_file.is_file():
            raise ConfigurationError(
                f"No configuration found at {self.config_file}. Use set-dir first."
            )

        entries: Dict[str, str] = {}
        for line in self.config_file.read_text(encoding="utf-8").splitlines():
            key, sep, value = line.partition("=")
            if sep and value:
                entries[key.strip()] = value.strip()
        return entries

    def write_working_directory(self, directory: Path) -> None:
        # A new working directory starts a fresh file, dropping any output setting
        self._write(f"{WORKING_DIRECTORY_KEY}={directory}\n", mode="w")

    def append_output_file(self, output_file: Path) -> None:
        self._write(f"{OUTPUT_FILE_KEY}={output_file}\n", mode="a")

    def load(self) -> WorkspaceConfig:
        entries = self.read_entries()

        working_directory = entries.get(WORKING_DIRECTORY_KEY)
        if not working_directory:
            raise ConfigurationError("Working directory is not set. Use set-dir to set it.")
        working_directory = Path(working_directory)

        output_file = entries.get(OUTPUT_FILE_KEY)
        if output_file:
            output_path = Path(output_file)
        else:
            output_path = working_directory / self.default_output_name
            logger.info("No output file configured, defaulting to %s", output_path)

        return WorkspaceConfig(working_directory=working_directory, output_file=output_path)

    def _write(self, line: str, mode: str) -> None:
        try:
            with self.config_file.open(mode, encoding="utf-8") as fh:
                fh.write(line)
        except OSError as err:
            raise ConfigurationError(f"Could not write to {self.config_file}: {err}") from err
