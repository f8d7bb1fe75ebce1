"""检查/处置附图存储：本地目录，或院内图片服务器上传。"""
import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional

import requests

from vet_clinic.config import IMAGES_DIR, ensure_dirs

logger = logging.getLogger(__name__)


class ImageStore:
    """按 bucket 分目录保存图片，返回可访问的 URL（file://）。"""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
        self.base_dir = Path(base_dir or IMAGES_DIR)

    def save(self, bucket: str, source_path: Path) -> Optional[str]:
        """复制图片到 bucket 目录，文件名加时间戳与随机串避免重名；失败返回 None。"""
        source_path = Path(source_path)
        if not source_path.is_file():
            logger.warning("图片不存在: %s", source_path)
            return None
        dest_dir = self.base_dir / bucket
        dest_dir.mkdir(parents=True, exist_ok=True)
        ext = source_path.suffix.lower() or ".png"
        dest = dest_dir / f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}{ext}"
        try:
            shutil.copy2(source_path, dest)
        except OSError:
            logger.exception("保存图片失败: %s", source_path)
            return None
        return dest.resolve().as_uri()


def upload_to_image_server(
    server_url: str,
    image_path: str | Path,
    timeout: float = 30,
) -> tuple[Optional[str], Optional[str]]:
    """上传到院内图片服务器（POST /upload，字段 image）。

    返回 (图片 URL, None) 成功，或 (None, 错误信息) 失败。
    """
    if not server_url:
        return None, "未配置图片服务器地址"
    path = Path(image_path)
    if not path.is_file():
        return None, "图片文件不存在"
    url = server_url.rstrip("/") + "/upload"
    try:
        with open(path, "rb") as f:
            r = requests.post(url, files={"image": (path.name, f)}, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("图片上传失败: %s", e)
        return None, f"请求失败: {e}"
    try:
        data = r.json()
    except ValueError:
        return None, f"响应非 JSON: {r.text[:200]}"
    if r.status_code != 200:
        return None, f"HTTP {r.status_code}: {data.get('error') or r.text[:200]}"
    image_url = data.get("url")
    if not image_url:
        return None, "响应中没有 url"
    return image_url, None
