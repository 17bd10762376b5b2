from pathlib import Path
from typing import Union
import logging

from models.errors import ConfigurationError
from repositories.workspace_repository import WorkspaceConfig, WorkspaceRepository

logger = logging.getLogger(__name__)


class WorkspaceService:
    """
    Command-layer bookkeeping: the working directory inputs are resolved
    against and the file the next result is written to.
    The transform engine never sees this state, callers pass plain paths.
    """

    def __init__(self, repository: WorkspaceRepository | None = None):
        self.repository = repository or WorkspaceRepository()

    def set_working_directory(self, directory: Union[str, Path]) -> Path:
        directory = Path(directory)
        if not directory.is_dir():
            raise ConfigurationError(f"Invalid directory {directory}. Please ensure the directory exists.")

        self.repository.write_working_directory(directory)
        logger.info("Working directory set to: %s", directory)
        return directory

    def set_output(self, file_name: str) -> Path:
        config = self.load()
        output_file = config.working_directory / file_name
        self.repository.append_output_file(output_file)
        logger.info("Output destination set to: %s", output_file)
        return output_file

    def load(self) -> WorkspaceConfig:
        return self.repository.load()

    @staticmethod
    def resolve_input(config: WorkspaceConfig, file_name: Union[str, Path]) -> Path:
        """Absolute names are used as-is, relative ones live in the working directory."""
        path = Path(file_name)
        if path.is_absolute():
            return path
        return config.working_directory / path
