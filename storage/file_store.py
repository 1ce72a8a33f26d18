"""YAML file persistence for bot settings."""
import logging
import os
import tempfile
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


class YAMLFileStore:
    """Reads and atomically writes a single YAML document.

    Attributes:
        path: Path to the YAML file
    """
    def __init__(self, path: str) -> None:
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read(self) -> Optional[Any]:
        """Parse the file.

        Returns:
            The parsed document, or None if the file is missing or not valid YAML
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except FileNotFoundError:
            return None
        except yaml.YAMLError as e:
            logger.warning("Invalid YAML in %s: %s", self.path, e)
            return None

    def write(self, data: Any) -> None:
        """Write ``data`` through a temp file in the same directory, then rename."""
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise
