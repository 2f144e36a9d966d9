"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app

수명주기:
- 시작: 설정 로드 → 컴포넌트 생성 → 템플릿 동기화/레지스트리 정리 task 시작
- 종료: task 정지 (진행 중 tick 완료 대기) → 남은 삭제 예약 로그
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from fastapi import FastAPI

# Routes
from src.app.components import PROJECT_ROOT, build_components
from src.app.routes import previews, sites

# 환경 변수 → 설정 경로 오버라이드
ENV_OVERRIDES = {
    "SITEKILN_TEMPLATES_ROOT": "templates_root",
    "SITEKILN_SITES_ROOT": "sites_root",
    "SITEKILN_DATA_DIR": "data_dir",
}

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드 (+ 환경 변수 오버라이드)."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    data: dict[Any, Any] = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    paths = data.setdefault("paths", {})
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            paths[key] = value

    return data


# =============================================================================
# App Factory
# =============================================================================


def create_app(config: dict[str, Any] | None = None) -> FastAPI:
    """
    애플리케이션 생성.

    Args:
        config: 설정 dict (None이면 시작 시 default.yaml 로드)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        app.state.config = config if config is not None else load_config()
        components = build_components(app.state.config)
        app.state.components = components
        await components.start()

        yield

        # Shutdown
        await components.stop()

    app = FastAPI(
        title="Sitekiln",
        description="웹사이트 빌더 백엔드: 템플릿 동기화, 사이트 생성, 프리뷰 렌더",
        version="0.1.0",
        lifespan=lifespan,
    )

    # 페이지 라우트 (파일)
    app.include_router(previews.router, prefix="/preview", tags=["Preview"])

    # API 라우트
    app.include_router(previews.api_router, prefix="/api/previews", tags=["Preview API"])
    app.include_router(sites.api_router, prefix="/api/sites", tags=["Sites API"])

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "message": "Sitekiln",
            "endpoints": {
                "preview": "/preview/{token}",
                "live_preview": "/api/previews",
                "sites": "/api/sites",
            },
        }

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


# =============================================================================
# App Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
