"""Read and rewrite the curriculum index and read the volume map."""
import json
from pathlib import Path
from typing import Any, Dict, Tuple

from pydantic import ValidationError
from utils.logger import setup_logger
from pipeline.errors import ConfigurationError, CurriculumError
from pipeline.models import Curriculum, VolumeMap
import config

logger = setup_logger(__name__)


def _read_json(path: Path) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


class CurriculumStore:
    """Loads the curriculum index once and writes it back in place."""

    def __init__(self, path: Path = config.CURRICULUM_PATH):
        self.path = Path(path)

    def load(self) -> Tuple[Dict[str, Any], Curriculum]:
        """Load the curriculum index.

        Returns:
            The raw JSON object and its parsed view

        Raises:
            CurriculumError: If the file is missing, not JSON, or not a curriculum
        """
        try:
            raw = _read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise CurriculumError(f"Cannot read curriculum index {self.path}: {e}") from e

        try:
            curriculum = Curriculum.model_validate(raw)
        except ValidationError as e:
            raise CurriculumError(f"Invalid curriculum index {self.path}: {e}") from e

        reading_count = sum(len(topic.readings) for topic in curriculum.topics)
        logger.info(f"Loaded curriculum: {len(curriculum.topics)} topics, {reading_count} readings")
        return raw, curriculum

    def save(self, index: Dict[str, Any]) -> None:
        """Rewrite the curriculum index.

        The new content goes to a sibling temp file first so a failed write
        leaves the previous index in place.
        """
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(index, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)
        logger.info(f"Curriculum updated: {self.path}")


def load_volume_map(path: Path = config.VOLUME_MAP_PATH) -> VolumeMap:
    """Load the volume → readings configuration.

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        raw = _read_json(path)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read volume map {path}: {e}") from e

    try:
        return VolumeMap.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid volume map {path}: {e}") from e
