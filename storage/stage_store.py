"""JSON file storage for stage records."""
import json
from pathlib import Path
from typing import List
from utils.logger import setup_logger
from pipeline.models import Stage
import config

logger = setup_logger(__name__)


class StageStore:
    """Persists one JSON file per stage, named by stage id."""

    def __init__(self, stages_dir: Path = config.STAGES_DIR):
        """Initialize stage store.

        Args:
            stages_dir: Directory holding <stage id>.json files
        """
        self.stages_dir = Path(stages_dir)
        self.stages_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, stage_id: str) -> Path:
        return self.stages_dir / f"{stage_id}.json"

    def save(self, stage: Stage) -> Path:
        """Write a stage record, replacing any earlier file with the same id.

        Args:
            stage: Stage to persist

        Returns:
            Path of the written file
        """
        path = self.path_for(stage.id)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(stage.to_dict(), f, indent=2, ensure_ascii=False)
        return path

    def save_all(self, stages: List[Stage]) -> List[str]:
        """Write stages in order and return their ids."""
        return [self.save(stage).stem for stage in stages]
