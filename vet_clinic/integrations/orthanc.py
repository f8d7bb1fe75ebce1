"""影像归档（Orthanc DICOMweb）：按病历号查最新检查，拼接 OHIF 查看器地址。"""
import logging
from typing import Optional
from urllib.parse import quote

import requests

from vet_clinic.config import ORTHANC_URL

logger = logging.getLogger(__name__)

STUDY_INSTANCE_UID_TAG = "0020000D"


class OrthancClient:
    """QIDO-RS 查询客户端。"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ):
        self.base_url = (base_url or ORTHANC_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def latest_study_uid(self, chart_number: str) -> Optional[str]:
        """按 PatientID（病历号）取最近一次检查的 StudyInstanceUID；查不到或出错返回 None。"""
        if not chart_number or not self.base_url:
            return None
        url = f"{self.base_url}/dicom-web/studies"
        params = {"PatientID": chart_number, "limit": 1, "sort": "-StudyDate"}
        try:
            r = self.session.get(url, params=params, headers={"Accept": "application/json"}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("连接 Orthanc 失败: %s", e)
            return None
        if r.status_code != 200:
            logger.warning("Orthanc 返回 HTTP %s", r.status_code)
            return None
        try:
            studies = r.json()
        except ValueError:
            logger.warning("Orthanc 响应非 JSON")
            return None
        if not studies:
            return None
        values = (studies[0].get(STUDY_INSTANCE_UID_TAG) or {}).get("Value") or []
        return values[0] if values else None

    def viewer_url(self, study_uid: str) -> str:
        """OHIF 查看器地址，供嵌入页面使用。"""
        return f"{self.base_url}/ohif/viewer?StudyInstanceUIDs={quote(study_uid)}"

    def viewer_url_for_chart(self, chart_number: str) -> Optional[str]:
        uid = self.latest_study_uid(chart_number)
        return self.viewer_url(uid) if uid else None
