"""Write stage ids and counts back into the curriculum index."""
from typing import Any, Dict, List, Mapping, Tuple

from pipeline.models import Curriculum
from utils.logger import setup_logger

logger = setup_logger(__name__)

Position = Tuple[int, int]  # (topic index, reading index)


def locate_readings(curriculum: Curriculum, reading_ids: List[str]) -> Dict[Position, str]:
    """Map each known reading id to its position in the index."""
    positions: Dict[Position, str] = {}
    for reading_id in reading_ids:
        found = curriculum.find_reading(reading_id)
        if found is None:
            logger.warning(f"Reading {reading_id} is not in the curriculum; index entry not updated")
            continue
        positions[(found.topic_index, found.reading_index)] = reading_id
    return positions


def updated_reading(reading: Mapping[str, Any], stage_ids: List[str]) -> Dict[str, Any]:
    """Copy of a raw reading record with new stageCount/stages; other keys keep their order."""
    return {**reading, "stageCount": len(stage_ids), "stages": list(stage_ids)}


def apply_stage_updates(
    index: Mapping[str, Any],
    curriculum: Curriculum,
    stage_ids: Mapping[str, List[str]]
) -> Dict[str, Any]:
    """Build a new curriculum index with the produced stage ids.

    The input index is left untouched. Only ``stageCount`` and ``stages`` of
    readings present in ``stage_ids`` change; an empty list still counts as
    processed and resets the reading to zero stages.

    Args:
        index: Raw curriculum JSON as loaded from disk
        curriculum: Parsed view of the same index, used for lookups
        stage_ids: Ordered stage ids per processed reading id

    Returns:
        New curriculum index value
    """
    positions = locate_readings(curriculum, list(stage_ids))

    topics = []
    for topic_index, topic in enumerate(index.get("topics", [])):
        readings = []
        for reading_index, reading in enumerate(topic.get("readings", [])):
            reading_id = positions.get((topic_index, reading_index))
            if reading_id is None:
                readings.append(reading)
            else:
                readings.append(updated_reading(reading, stage_ids[reading_id]))
        topics.append({**topic, "readings": readings})

    return {**index, "topics": topics}
