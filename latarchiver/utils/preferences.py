# preferences.py
import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Optional, Union

from ..core.accelerator import DEFAULT_ORDER
from ..core.archive import ArchiveFormat, CompressionOptions, GpuBackend
from ..core.registry import CodecRegistry, build_registry
from .logger import configure_logging

logger = logging.getLogger(__name__)

PREFERENCES_FILE = "preferences.json"


@dataclass
class Preferences:
    default_format: str = ArchiveFormat.ZIP.value
    compression_level: int = 6
    gpu_backend: str = GpuBackend.AUTO.value
    accelerator_order: list[str] = field(default_factory=lambda: list(DEFAULT_ORDER))
    debug_logging: bool = False
    log_dir: Optional[str] = None

    def load_preferences(self, path: Union[str, Path] = PREFERENCES_FILE) -> None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not load preferences from %s, using defaults: %s", path, exc)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: expected a JSON object", path)
            return

        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.debug("Ignoring unknown preference %r", key)

    def save_preferences(self, path: Union[str, Path] = PREFERENCES_FILE) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=4)

    def archive_format(self) -> ArchiveFormat:
        return ArchiveFormat.parse(self.default_format)

    def compression_options(self, password=None) -> CompressionOptions:
        return CompressionOptions(
            level=self.compression_level,
            backend=GpuBackend(self.gpu_backend),
            password=password,
        )

    def create_registry(self, password=None) -> CodecRegistry:
        return build_registry(
            self.compression_options(password),
            accelerator_order=self.accelerator_order,
        )

    def apply_logging(self, defer_file_logging: bool = False) -> logging.Logger:
        log_dir = Path(self.log_dir) if self.log_dir else None
        return configure_logging(self.debug_logging, log_dir, defer_file_logging)
