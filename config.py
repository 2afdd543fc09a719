"""Configuration module for the reading stage pipeline."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Stage sizing
WORDS_PER_STAGE = int(os.getenv("WORDS_PER_STAGE", "2000"))  # ~15-20 minutes of dense reading
MIN_CHUNK_WORDS = int(os.getenv("MIN_CHUNK_WORDS", "50"))
MIN_SEGMENT_WORDS = 100  # Below this a segment most likely points at a wrong mapping

# Reading time estimate
AVG_READING_WPM = 120
MIN_STAGE_MINUTES = 5
MAX_STAGE_MINUTES = 30

# Pipeline mode: "segmented" (one PDF per volume) or "direct" (one PDF per reading)
PIPELINE_MODE = os.getenv("PIPELINE_MODE", "segmented")

# Paths
PDF_DIR = Path(os.getenv("PDF_DIR", "./pdfs"))
CONTENT_DIR = Path(os.getenv("CONTENT_DIR", "./public/content"))
STAGES_DIR = Path(os.getenv("STAGES_DIR", str(CONTENT_DIR / "stages")))
CURRICULUM_PATH = Path(os.getenv("CURRICULUM_PATH", str(CONTENT_DIR / "curriculum.json")))
VOLUME_MAP_PATH = Path(os.getenv("VOLUME_MAP_PATH", "./volume_map.json"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
