"""Gemini 生成式文本：按 SOAP 病历给出检查、鉴别诊断、处置、处方建议与出院小结。

调用 REST 接口 models/{model}:generateContent，要求以 JSON 返回；
各方法返回 (解析后的 dict, None) 成功，或 (None, 错误信息) 失败。
"""
import json
import logging
import re
from typing import Optional

import requests

from vet_clinic.config import GEMINI_API_KEY, GEMINI_ENDPOINT, GEMINI_MODEL
from vet_clinic.care.models import Species
from vet_clinic.patient.models import Patient, SoapNote

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def parse_ai_response(text: Optional[str]) -> Optional[dict]:
    """从模型回复中取出 JSON；可能被 ``` 代码块包裹。解析失败返回 None。"""
    if not text:
        return None
    clean = text.strip()
    if "```" in clean:
        m = _FENCE.search(clean)
        if m:
            clean = m.group(1).strip()
    try:
        return json.loads(clean)
    except ValueError:
        logger.warning("AI 回复不是合法 JSON: %s", clean[:200])
        return None


def _patient_line(patient: Patient) -> str:
    weight = f"{patient.weight_kg}kg" if patient.weight_kg is not None else "unknown weight"
    return f"{Species(patient.species).value}, {patient.breed or 'unknown breed'}, {weight}"


class GeminiClient:
    """Gemini 文本生成客户端。"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60,
    ):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        self.timeout = timeout

    def generate_json(self, prompt: str) -> tuple[Optional[dict], Optional[str]]:
        """发送提示词并解析 JSON 回复。"""
        if not self.api_key:
            return None, "未配置 GEMINI_API_KEY"
        url = f"{GEMINI_ENDPOINT}/{self.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        try:
            r = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Gemini 请求失败: %s", e)
            return None, f"请求失败: {e}"
        try:
            data = r.json()
        except ValueError:
            return None, f"响应非 JSON: {r.text[:200]}"
        if r.status_code != 200:
            msg = (data.get("error") or {}).get("message") or r.text[:200]
            logger.warning("Gemini HTTP %s: %s", r.status_code, msg)
            return None, f"HTTP {r.status_code}: {msg}"
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None, f"响应中没有文本: {json.dumps(data, ensure_ascii=False)[:200]}"
        parsed = parse_ai_response(text)
        if parsed is None:
            return None, "AI 回复无法解析为 JSON"
        return parsed, None

    def suggest_diagnostics(self, patient: Patient, soap: SoapNote) -> tuple[Optional[dict], Optional[str]]:
        """O：只推荐诊断性检查，不含治疗。"""
        prompt = f"""
As a veterinary expert, recommend a list of diagnostic tests (imaging, blood tests, cytology, etc.) based on the patient's information.
Important: Do not include actual treatments (medication, surgery); suggest only tests for diagnosis.
Patient Data:
- Info: {_patient_line(patient)}
- S(Subjective): "{soap.subjective or 'No info'}"
- O(Objective observations): "{soap.objective or 'No observations'}"

Response must be in JSON format: {{ "suggestions": [{{ "testName": "Test Name", "reason": "Reason", "priority": "High/Medium/Low" }}] }}
"""
        return self.generate_json(prompt)

    def suggest_differentials(self, patient: Patient, soap: SoapNote) -> tuple[Optional[dict], Optional[str]]:
        """A：鉴别诊断列表。"""
        prompt = f"""
Based on the patient's information, suggest a list of potential differential diagnoses (DDx).
Reference Data:
- Patient: {_patient_line(patient)}
- S(Subjective): "{soap.subjective}"
- O(Labs/Vitals): "{soap.objective}", Lab: {json.dumps(soap.lab_results, ensure_ascii=False)}
- Problem List: "{soap.assessment_problems}"

Response must be in JSON format: {{ "diagnoses": [{{ "name": "Diagnosis Name", "reason": "Reason", "confidence": "0-100%" }}] }}
"""
        return self.generate_json(prompt)

    def suggest_treatments(self, patient: Patient, soap: SoapNote) -> tuple[Optional[dict], Optional[str]]:
        """P：处置建议，不含检查。"""
        prompt = f"""
As a veterinarian, recommend a list of actual treatments (Tx), surgeries, or procedures.
Strict Rule: Do not include diagnostic tests like CT, MRI, X-ray, or blood tests. Only include treatment actions.
Reference Data:
- Patient: {_patient_line(patient)}
- S: {soap.subjective}
- O: {soap.objective}
- A: {soap.assessment_problems} (DDx: {json.dumps(soap.assessment_ddx, ensure_ascii=False)})

Response must be in JSON format: {{ "suggestions": [{{ "txName": "Treatment Name", "details": "Dosage/Method/Cautions", "reason": "Reason", "priority": "High/Medium" }}] }}
"""
        return self.generate_json(prompt)

    def suggest_prescriptions(self, patient: Patient, soap: SoapNote) -> tuple[Optional[dict], Optional[str]]:
        """Rx：处方建议（剂量、频次/途径、注意事项）。"""
        prompt = f"""
As a veterinary pharmacology expert, recommend a prescription (Rx).
Include dosage, frequency/route, and detailed precautions.
Reference Data:
- Patient: {_patient_line(patient)}
- S: {soap.subjective}
- O: {soap.objective}
- A: {soap.assessment_problems}

Response must be in JSON format: {{ "suggestions": [{{ "medName": "Medication Name", "dosage": "Dosage/Freq", "caution": "Precautions", "reason": "Reason" }}] }}
"""
        return self.generate_json(prompt)

    def discharge_summary(self, patient: Patient, soap: SoapNote) -> tuple[Optional[dict], Optional[str]]:
        """给主人的出院小结：居家护理、注意事项、复诊计划。"""
        prompt = f"""
Write a discharge summary for the owner. Write in English. Maintain a professional yet warm and gentle tone.
Patient: {patient.name} ({_patient_line(patient)}).
Clinical Record:
- S: {soap.subjective}
- O: {soap.objective}
- A: {soap.assessment_problems}
- P: {soap.plan_tx}, {soap.plan_rx}

Requirements:
1. [Education/Advice]: Home care instructions and prescription diet recommendations.
2. [Cautions]: Predicted side effects or post-treatment reactions.
3. [Future Plan]: Specific recheck timeline and planned future tests.

Response must be in JSON format: {{ "education": "Care Advice", "disclaimer": "Cautions", "futurePlan": "Future Visit Plan" }}
"""
        return self.generate_json(prompt)
