"""
Render layer: HTML 조립 + 프리뷰 렌더.

외부 빌드/스크린샷 명령은 ProcessRunner 하나를 공유하여
동시 실행 수와 실행 시간이 제한됨.
"""

from .assembler import ContentAssembler, dump_bindings
from .base import Assembler, Renderer, site_source_paths
from .preview import PreviewRenderer, verify_preview
from .process import ProcessResult, ProcessRunner

__all__ = [
    "Assembler",
    "Renderer",
    "ContentAssembler",
    "PreviewRenderer",
    "ProcessRunner",
    "ProcessResult",
    "dump_bindings",
    "site_source_paths",
    "verify_preview",
]
