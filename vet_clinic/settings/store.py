"""诊所设置本地存储（单个 JSON 文件）。"""
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from vet_clinic.config import SETTINGS_DIR, ensure_dirs
from vet_clinic.settings.models import ClinicSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """加载与保存 ClinicSettings。"""
    _filename = "clinic_settings.json"

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
        self.base_dir = Path(base_dir or SETTINGS_DIR)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self) -> Path:
        return self.base_dir / self._filename

    def load(self) -> ClinicSettings:
        """读取设置；文件不存在或内容无效时返回默认值。"""
        if not self._path().exists():
            return ClinicSettings()
        try:
            with open(self._path(), "r", encoding="utf-8") as f:
                return ClinicSettings.model_validate(json.load(f))
        except (ValueError, ValidationError):
            logger.warning("诊所设置无效，使用默认值: %s", self._path())
            return ClinicSettings()

    def save(self, settings: ClinicSettings) -> None:
        with open(self._path(), "w", encoding="utf-8") as f:
            f.write(settings.model_dump_json(indent=2))

    def update(self, **changes) -> ClinicSettings:
        """修改部分字段并立即保存。"""
        current = self.load()
        updated = ClinicSettings.model_validate({**current.model_dump(), **changes})
        self.save(updated)
        return updated
