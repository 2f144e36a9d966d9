"""
Templates layer: 템플릿 라이브러리 동기화.

역할:
- metadata.json 파싱 (metadata.py)
- 템플릿 루트 주기 스캔 → 레코드 upsert + 프리뷰 재렌더 (synchronizer.py)

주의: 폴더 구분
- src/templates/ → 코드 (이 모듈)
- templates_root (설정) → 템플릿 데이터 (디렉토리 1개 = 템플릿 1개)
"""

from .metadata import has_metadata, load_template_metadata
from .synchronizer import TemplateSynchronizer

__all__ = [
    "TemplateSynchronizer",
    "has_metadata",
    "load_template_metadata",
]
