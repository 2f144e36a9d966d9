"""
FastAPI Routes.

파일 라우트 (프리뷰 다운로드) + API 라우트 (REST)
"""

from . import previews, sites

__all__ = ["previews", "sites"]
