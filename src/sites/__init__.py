"""
Sites layer: 사이트 디렉토리 생성 + 프리뷰.
"""

from .materializer import SiteMaterializer, copy_template_tree
from .previews import LivePreviewService, render_site_preview

__all__ = [
    "SiteMaterializer",
    "LivePreviewService",
    "copy_template_tree",
    "render_site_preview",
]
