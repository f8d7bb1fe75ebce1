"""诊所全局配置与路径。"""
import os
from pathlib import Path

# 项目根目录（vet_clinic 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
# 数据目录：记录表、影像、诊所设置等
DATA_DIR = Path(os.environ.get("VET_CLINIC_DATA_DIR", "") or ROOT_DIR / "data")
RECORDS_DIR = DATA_DIR / "records"  # 各数据表 JSON
IMAGES_DIR = DATA_DIR / "images"  # 检查/处置附图
SETTINGS_DIR = DATA_DIR / "settings"

# 日志
LOG_LEVEL = os.environ.get("VET_CLINIC_LOG_LEVEL", "INFO").upper()

# 提醒默认
DEFAULT_MED_INTERVAL_DAYS = 30  # 长期用药间隔（天）
DUE_SOON_DAYS = 7  # 7 天内到期视为临近

# 午休默认（预约表使用）
LUNCH_START_TIME = "13:00"
LUNCH_END_TIME = "14:00"

# 生成式文本服务（Gemini）
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "").strip()
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-3-pro-preview")
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"

# 影像归档（Orthanc DICOMweb）
ORTHANC_URL = os.environ.get("ORTHANC_URL", "").strip().rstrip("/")

# 院内图片服务器（可选）
IMAGE_SERVER_URL = os.environ.get("IMAGE_SERVER_URL", "").strip().rstrip("/")


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, RECORDS_DIR, IMAGES_DIR, SETTINGS_DIR):
        d.mkdir(parents=True, exist_ok=True)
