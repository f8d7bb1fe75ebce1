"""外部服务客户端测试（requests 以假响应替换）。"""
import tempfile
from pathlib import Path

import requests

from vet_clinic.integrations import gemini as gemini_module
from vet_clinic.integrations import images as images_module
from vet_clinic.integrations.gemini import GeminiClient, parse_ai_response
from vet_clinic.integrations.images import ImageStore, upload_to_image_server
from vet_clinic.integrations.orthanc import OrthancClient
from vet_clinic.patient.models import Patient, SoapNote


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


PATIENT = Patient(id="p1", name="Coco", species="Dog", breed="Maltese", weight_kg=3.1)
SOAP = SoapNote(patient_id="p1", subjective="vomiting x2", objective="T 39.4")


def test_parse_ai_response() -> None:
    assert parse_ai_response('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_ai_response(' {"b": [1, 2]} ') == {"b": [1, 2]}
    assert parse_ai_response("not json") is None
    assert parse_ai_response(None) is None


def test_gemini_success(monkeypatch) -> None:
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured["url"] = url
        captured["body"] = json
        text = '```json\n{"suggestions": [{"testName": "CBC", "reason": "r", "priority": "High"}]}\n```'
        return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})

    monkeypatch.setattr(gemini_module.requests, "post", fake_post)
    data, err = GeminiClient(api_key="k", model="m").suggest_diagnostics(PATIENT, SOAP)
    assert err is None
    assert data["suggestions"][0]["testName"] == "CBC"
    assert captured["url"].endswith("/m:generateContent")
    assert "vomiting x2" in captured["body"]["contents"][0]["parts"][0]["text"]


def test_gemini_errors(monkeypatch) -> None:
    data, err = GeminiClient(api_key="").suggest_treatments(PATIENT, SOAP)
    assert data is None and "GEMINI_API_KEY" in err

    monkeypatch.setattr(
        gemini_module.requests, "post",
        lambda *a, **k: FakeResponse(403, {"error": {"message": "denied"}}),
    )
    data, err = GeminiClient(api_key="k").discharge_summary(PATIENT, SOAP)
    assert data is None and "403" in err and "denied" in err

    def raise_timeout(*a, **k):
        raise requests.Timeout("slow")

    monkeypatch.setattr(gemini_module.requests, "post", raise_timeout)
    data, err = GeminiClient(api_key="k").suggest_prescriptions(PATIENT, SOAP)
    assert data is None and "slow" in err


def test_orthanc_latest_study() -> None:
    session = FakeSession(FakeResponse(200, [{"0020000D": {"vr": "UI", "Value": ["1.2.3"]}}]))
    client = OrthancClient(base_url="https://pacs.local/", session=session)
    assert client.latest_study_uid("C-1001") == "1.2.3"
    url, kwargs = session.calls[0]
    assert url == "https://pacs.local/dicom-web/studies"
    assert kwargs["params"]["PatientID"] == "C-1001"
    assert client.viewer_url_for_chart("C-1001") == "https://pacs.local/ohif/viewer?StudyInstanceUIDs=1.2.3"


def test_orthanc_failures_return_none() -> None:
    assert OrthancClient(base_url="https://pacs.local", session=FakeSession(FakeResponse(200, []))).latest_study_uid("x") is None
    assert OrthancClient(base_url="https://pacs.local", session=FakeSession(FakeResponse(500, {}))).latest_study_uid("x") is None
    broken = FakeSession(requests.ConnectionError("down"))
    assert OrthancClient(base_url="https://pacs.local", session=broken).latest_study_uid("x") is None
    assert OrthancClient(base_url="https://pacs.local", session=broken).latest_study_uid("") is None


def test_image_store_save() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        src = Path(tmp) / "xray.PNG"
        src.write_bytes(b"\x89PNG")
        store = ImageStore(base_dir=Path(tmp) / "images")
        url = store.save("order_images", src)
        assert url is not None and url.startswith("file://") and url.endswith(".png")
        assert len(list((Path(tmp) / "images" / "order_images").iterdir())) == 1
        assert store.save("order_images", Path(tmp) / "missing.png") is None


def test_upload_to_image_server(monkeypatch) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        src = Path(tmp) / "a.jpg"
        src.write_bytes(b"jpg")
        monkeypatch.setattr(
            images_module.requests, "post",
            lambda url, files=None, timeout=None: FakeResponse(200, {"url": "https://10.0.0.2:3000/uploads/1-2.jpg"}),
        )
        url, err = upload_to_image_server("https://10.0.0.2:3000/", src)
        assert err is None and url.endswith("/uploads/1-2.jpg")
        assert upload_to_image_server("", src) == (None, "未配置图片服务器地址")
