"""
Storage layer: 템플릿/사이트 레코드 저장소.
"""

from .base import SiteStore, TemplateStore
from .json_store import JsonCollection, JsonSiteStore, JsonTemplateStore

__all__ = [
    "TemplateStore",
    "SiteStore",
    "JsonCollection",
    "JsonTemplateStore",
    "JsonSiteStore",
]
