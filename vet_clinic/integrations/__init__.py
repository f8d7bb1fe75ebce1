"""外部服务：生成式文本、影像归档、图片存储。"""
from vet_clinic.integrations.gemini import GeminiClient, parse_ai_response
from vet_clinic.integrations.images import ImageStore, upload_to_image_server
from vet_clinic.integrations.orthanc import OrthancClient

__all__ = [
    "GeminiClient",
    "ImageStore",
    "OrthancClient",
    "parse_ai_response",
    "upload_to_image_server",
]
