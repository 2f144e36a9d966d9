"""
Domain Constants: 아티팩트 수명주기 전역 상수.

디렉토리 레이아웃, 스크래치 파일명, TTL/주기 기본값 등
시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Site / Template Directory Layout (사이트/템플릿 디렉토리 구조)
# =============================================================================
# 빌드/렌더 스크립트와의 호환을 위해 그대로 유지해야 함:
# <root>/
# ├── index.html
# ├── styles/styles.css
# ├── js/script.js
# ├── resources/<asset files>
# └── previews/
#     ├── mobile.png
#     └── desktop.png

SITE_INDEX_FILENAME = "index.html"
SITE_STYLES_PATH = "styles/styles.css"
SITE_SCRIPT_PATH = "js/script.js"
SITE_PREVIEWS_DIR = "previews"

PREVIEW_MOBILE_FILENAME = "mobile.png"
PREVIEW_DESKTOP_FILENAME = "desktop.png"

# =============================================================================
# Template Metadata (템플릿 메타데이터)
# =============================================================================

TEMPLATE_METADATA_FILENAME = "metadata.json"
TEMPLATE_METADATA_REQUIRED_KEYS = ("name", "author", "category", "author_link")

# =============================================================================
# Scratch Workspace (스크래치 작업공간)
# =============================================================================
# 렌더/조립 요청 1건당 임시 디렉토리 1개. 유예 시간 후 삭제.

SCRATCH_DIR_PREFIX = "sitekiln-scratch-"
SCRATCH_HTML_FILENAME = "preview.html"
SCRATCH_MOBILE_FILENAME = "mobile_preview.png"
SCRATCH_DESKTOP_FILENAME = "desktop_preview.png"

# 원본 소스로 조립할 때 스크래치에 쓰는 파일명
SOURCE_HTML_FILENAME = "input.html"
SOURCE_CSS_FILENAME = "input.css"
SOURCE_JS_FILENAME = "input.js"
SOURCE_DATA_FILENAME = "input.json"

# 사이트 생성 중간 단계 (성공 시 rename, 실패 시 삭제)
STAGING_DIR_NAME = ".staging"

# =============================================================================
# Timing Defaults (default.yaml에서 오버라이드 가능)
# =============================================================================

EPHEMERAL_TOKEN_TTL_SECONDS = 120
RENDER_SCRATCH_GRACE_SECONDS = 120
ASSEMBLY_SCRATCH_GRACE_SECONDS = 60

TEMPLATE_SYNC_INTERVAL_SECONDS = 60 * 60
REGISTRY_SWEEP_INTERVAL_SECONDS = 5 * 60

PROCESS_TIMEOUT_SECONDS = 60.0
PROCESS_MAX_CONCURRENCY = 4

# =============================================================================
# ID Prefixes
# =============================================================================

RUN_ID_PREFIX = "SYNC-"
SYNC_LOG_GLOB = "sync_*.json"
