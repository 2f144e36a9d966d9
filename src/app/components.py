"""
설정 → 코어 컴포넌트 조립.

모든 컴포넌트는 여기서 한 번만 생성되어 app.state.components로 공유됨.
registry, cleanup, runner는 프로세스당 1개.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.cleanup import DeferredCleanupScheduler
from src.core.registry import EphemeralArtifactRegistry
from src.core.scheduler import PeriodicTask
from src.domain.constants import (
    ASSEMBLY_SCRATCH_GRACE_SECONDS,
    EPHEMERAL_TOKEN_TTL_SECONDS,
    PROCESS_MAX_CONCURRENCY,
    PROCESS_TIMEOUT_SECONDS,
    REGISTRY_SWEEP_INTERVAL_SECONDS,
    RENDER_SCRATCH_GRACE_SECONDS,
    TEMPLATE_SYNC_INTERVAL_SECONDS,
)
from src.render.assembler import ContentAssembler
from src.render.preview import PreviewRenderer
from src.render.process import ProcessRunner
from src.sites.materializer import SiteMaterializer
from src.sites.previews import LivePreviewService
from src.storage.json_store import JsonSiteStore, JsonTemplateStore
from src.templates.synchronizer import TemplateSynchronizer

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


def resolve_path(value: str | None, base: Path = PROJECT_ROOT) -> Path | None:
    """설정 경로 해석 (~ 확장, 상대 경로는 프로젝트 루트 기준)."""
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


@dataclass
class Components:
    """실행 중인 코어 컴포넌트 묶음."""

    config: dict[str, Any]
    runner: ProcessRunner
    cleanup: DeferredCleanupScheduler
    registry: EphemeralArtifactRegistry
    assembler: ContentAssembler
    renderer: PreviewRenderer
    template_store: JsonTemplateStore
    site_store: JsonSiteStore
    synchronizer: TemplateSynchronizer
    materializer: SiteMaterializer
    live_preview: LivePreviewService
    registry_sweeper: PeriodicTask

    async def start(self) -> None:
        """백그라운드 task 시작."""
        if self.config.get("sync", {}).get("enabled", True):
            self.synchronizer.start()
        else:
            logger.info("Template sync disabled by configuration")
        self.registry_sweeper.start()

    async def stop(self) -> None:
        """백그라운드 task 정지 후 남은 삭제 예약 정리."""
        if self.synchronizer.running:
            await self.synchronizer.stop()
        if self.registry_sweeper.running:
            await self.registry_sweeper.stop()
        self.cleanup.abandon_pending()


def build_components(config: dict[str, Any]) -> Components:
    """
    설정 dict로 컴포넌트 생성.

    Args:
        config: load_config() 결과

    Returns:
        시작 전 상태의 Components
    """
    paths = config.get("paths", {})
    build = config.get("build", {})
    render = config.get("render", {})
    process = config.get("process", {})
    sync = config.get("sync", {})
    registry_cfg = config.get("registry", {})
    cleanup_cfg = config.get("cleanup", {})

    templates_root = resolve_path(paths.get("templates_root"))
    sites_root = resolve_path(paths.get("sites_root"))
    data_dir = resolve_path(paths.get("data_dir"))
    if templates_root is None or sites_root is None or data_dir is None:
        raise ValueError("paths.templates_root, paths.sites_root and paths.data_dir are required")

    scratch_root = resolve_path(paths.get("scratch_root"))
    logs_dir = resolve_path(paths.get("logs_dir"))
    default_data = resolve_path(build.get("default_data", "scripts/default.json"))
    assert default_data is not None

    runner = ProcessRunner(
        max_concurrency=process.get("max_concurrency", PROCESS_MAX_CONCURRENCY),
        timeout=process.get("timeout_seconds", PROCESS_TIMEOUT_SECONDS),
        cwd=PROJECT_ROOT,
    )
    cleanup = DeferredCleanupScheduler()
    registry = EphemeralArtifactRegistry(
        ttl_seconds=registry_cfg.get("ttl_seconds", EPHEMERAL_TOKEN_TTL_SECONDS),
    )

    assembler = ContentAssembler(
        command=build.get("command", ["bun", "run", "scripts/builder.js"]),
        runner=runner,
        cleanup=cleanup,
        default_data_path=default_data,
        scratch_root=scratch_root,
        scratch_grace=cleanup_cfg.get("assembly_grace_seconds", ASSEMBLY_SCRATCH_GRACE_SECONDS),
    )
    renderer = PreviewRenderer(
        command=render.get("command", ["bun", "run", "scripts/screenshot.js"]),
        runner=runner,
        cleanup=cleanup,
        scratch_root=scratch_root,
        scratch_grace=cleanup_cfg.get("render_grace_seconds", RENDER_SCRATCH_GRACE_SECONDS),
    )

    template_store = JsonTemplateStore(data_dir)
    site_store = JsonSiteStore(data_dir)

    synchronizer = TemplateSynchronizer(
        templates_root=templates_root,
        store=template_store,
        assembler=assembler,
        renderer=renderer,
        interval=sync.get("interval_seconds", TEMPLATE_SYNC_INTERVAL_SECONDS),
        logs_dir=logs_dir,
    )
    materializer = SiteMaterializer(
        sites_root=sites_root,
        template_store=template_store,
        site_store=site_store,
        assembler=assembler,
        renderer=renderer,
    )

    async def _sweep() -> None:
        evicted = registry.sweep()
        if evicted:
            logger.debug(f"Registry sweep evicted {evicted} expired tokens")

    registry_sweeper = PeriodicTask(
        "registry-sweep",
        registry_cfg.get("sweep_interval_seconds", REGISTRY_SWEEP_INTERVAL_SECONDS),
        _sweep,
    )

    return Components(
        config=config,
        runner=runner,
        cleanup=cleanup,
        registry=registry,
        assembler=assembler,
        renderer=renderer,
        template_store=template_store,
        site_store=site_store,
        synchronizer=synchronizer,
        materializer=materializer,
        live_preview=LivePreviewService(assembler, renderer, registry),
        registry_sweeper=registry_sweeper,
    )
