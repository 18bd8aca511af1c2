"""Configuration singleton for the exam PDF pipeline."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import pymupdf

log = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw, 10)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


class Config:
    """Singleton configuration class."""

    _instance: Optional["Config"] = None
    _CONFIG_FILE_PATH = Path.home() / ".config" / "exam-pdf" / "exam-pdf.json"

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize all configuration values."""
        # Rendering Configuration
        self.RENDER_DPI: int = _env_int("EXAM_PDF_RENDER_DPI", 220)
        self.PDF_BASE_DPI = 72
        self.IMAGE_FORMAT = "PNG"

        # Fallback renderer (poppler) Configuration
        self.POPPLER_PATH: Optional[str] = os.environ.get("EXAM_PDF_POPPLER_PATH")
        self.TEMP_DIR: Optional[str] = os.environ.get("EXAM_PDF_TEMP_DIR")
        self.MIN_FALLBACK_SCALE = 1
        self.MAX_FALLBACK_SCALE = 10
        self.TEMP_PREFIX = "exam-pdf"

        # Chunking Configuration
        self.PAGES_PER_CHUNK: int = _env_int("EXAM_PDF_PAGES_PER_CHUNK", 5)

        # Quiet MuPDF's font and xref chatter on stderr
        self.SUPPRESS_RENDERER_WARNINGS = True

    def as_dict(self) -> Dict[str, Any]:
        """Public settings only; underscored attributes are internal."""
        return {key: value for key, value in vars(self).items() if not key.startswith("_")}

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the public settings as JSON and return the file written."""
        path = path or self._CONFIG_FILE_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.as_dict(), indent=2))
        log.debug(f"Saved configuration to {path}")
        return path

    def load(self, path: Optional[Path] = None) -> None:
        """Apply settings from a JSON file written by save(); a missing file is a no-op."""
        path = path or self._CONFIG_FILE_PATH
        if not path.exists():
            return

        known = self.as_dict()
        for key, value in json.loads(path.read_text()).items():
            if key not in known:
                log.warning(f"Ignoring unknown setting {key!r} in {path}")
                continue
            setattr(self, key, value)


def configure_logging() -> None:
    """Set up root logging from EXAM_PDF_DEBUG / EXAM_PDF_LOG_FILE."""
    log_level = (
        logging.DEBUG
        if os.environ.get("EXAM_PDF_DEBUG", "").lower() == "true"
        else logging.INFO
    )
    log_file = os.environ.get("EXAM_PDF_LOG_FILE")
    if log_file:
        logging.basicConfig(
            level=log_level,
            filename=log_file,
            filemode="w",
            format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        logging.basicConfig(
            level=log_level,
            format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # PyPDF2 warns on every slightly malformed xref table
    logging.getLogger("PyPDF2").setLevel(logging.ERROR)

    if Config().SUPPRESS_RENDERER_WARNINGS:
        pymupdf.TOOLS.mupdf_display_errors(False)
        pymupdf.TOOLS.mupdf_display_warnings(False)
