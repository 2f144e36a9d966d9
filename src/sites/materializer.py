"""
사이트 생성: 템플릿 트리 → 새 사이트 작업 디렉토리.

동작:
1. site_id 발급, 최종 경로 <sites_root>/<site_id>
2. 템플릿 조회 (없으면 TEMPLATE_NOT_FOUND)
3. 템플릿 트리를 <sites_root>/.staging/<site_id>로 복사 (최상위 previews/ 제외)
4. 기본 바인딩으로 조립 → previews/mobile.png, previews/desktop.png 렌더
5. 프리뷰 2개 확인 후 staging → 최종 경로로 rename
6. 레코드 삽입 (빈 바인딩, 템플릿 name/category)

규칙:
- 전부 성공하거나 아무것도 남지 않음 (staging 삭제, 삽입 실패 시 최종 디렉토리 삭제)
- 레코드가 있으면 디렉토리와 프리뷰도 있음
"""

import asyncio
import logging
import shutil
from pathlib import Path

from src.core.cleanup import remove_tree
from src.core.ids import generate_record_id
from src.domain.constants import SITE_PREVIEWS_DIR, STAGING_DIR_NAME
from src.domain.errors import ErrorCodes, MaterializeError
from src.domain.schemas import SiteMetadata, SiteRecord
from src.render.base import Assembler, Renderer
from src.render.preview import verify_preview
from src.sites.previews import render_site_preview
from src.storage.base import SiteStore, TemplateStore

logger = logging.getLogger(__name__)


def copy_template_tree(src: Path, dst: Path) -> None:
    """
    템플릿 트리 복사 (최상위 previews/ 만 제외).

    하위 디렉토리의 previews/는 그대로 복사됨.

    Args:
        src: 템플릿 디렉토리
        dst: 대상 경로 (존재하지 않아야 함)
    """
    src_root = str(src)

    def _ignore(directory: str, names: list[str]) -> set[str]:
        if directory == src_root and SITE_PREVIEWS_DIR in names:
            return {SITE_PREVIEWS_DIR}
        return set()

    shutil.copytree(src, dst, ignore=_ignore)


def _promote(staging_dir: Path, site_dir: Path) -> None:
    if site_dir.exists():
        raise FileExistsError(f"Site directory already exists: {site_dir}")
    staging_dir.rename(site_dir)


class SiteMaterializer:
    """
    템플릿으로부터 사이트 생성.

    Usage:
        materializer = SiteMaterializer(sites_root, templates, sites, assembler, renderer)
        site_id = await materializer.materialize(template_id, owner_id)
    """

    def __init__(
        self,
        sites_root: Path,
        template_store: TemplateStore,
        site_store: SiteStore,
        assembler: Assembler,
        renderer: Renderer,
    ):
        self.sites_root = sites_root
        self.template_store = template_store
        self.site_store = site_store
        self.assembler = assembler
        self.renderer = renderer
        self.staging_root = sites_root / STAGING_DIR_NAME

    def site_dir_for(self, site_id: str) -> Path:
        """site_id → 사이트 디렉토리 (결정론적)."""
        return self.sites_root / site_id

    async def materialize(self, template_id: str, owner_id: str) -> str:
        """
        새 사이트 생성.

        Args:
            template_id: 원본 템플릿 id
            owner_id: 소유자 id

        Returns:
            새 site_id

        Raises:
            MaterializeError: TEMPLATE_NOT_FOUND, IO_FAILURE
            AssemblyError: 조립 실패
            RenderError: 렌더 실패 / 프리뷰 누락
            StoreError: 레코드 삽입 실패
        """
        site_id = generate_record_id()
        site_dir = self.site_dir_for(site_id)

        template = await self.template_store.get(template_id)
        if template is None:
            raise MaterializeError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"Template '{template_id}' not found",
                template_id=template_id,
            )

        staging_dir = self.staging_root / site_id
        promoted = False
        try:
            try:
                await asyncio.to_thread(self.staging_root.mkdir, parents=True, exist_ok=True)
                await asyncio.to_thread(copy_template_tree, Path(template.dir_path), staging_dir)
            except OSError as e:
                raise MaterializeError(
                    ErrorCodes.IO_FAILURE,
                    f"Failed to copy template '{template.name}': {e}",
                    template_id=template_id,
                    site_id=site_id,
                ) from e

            pair = await render_site_preview(staging_dir, self.assembler, self.renderer)
            await asyncio.to_thread(verify_preview, pair)

            try:
                await asyncio.to_thread(_promote, staging_dir, site_dir)
            except OSError as e:
                raise MaterializeError(
                    ErrorCodes.IO_FAILURE,
                    f"Failed to move site into place: {e}",
                    site_id=site_id,
                ) from e
            promoted = True
        finally:
            if not promoted:
                await asyncio.to_thread(remove_tree, staging_dir)

        record = SiteRecord(
            id=site_id,
            path=str(site_dir.resolve()),
            metadata=SiteMetadata.new(template.name, template.category),
            user=owner_id,
        )
        try:
            await self.site_store.insert(record)
        except Exception:
            await asyncio.to_thread(remove_tree, site_dir)
            raise

        logger.info(
            f"Materialized site {site_id} from template '{template.name}' for user {owner_id}"
        )
        return site_id
