"""
템플릿 metadata.json 파싱.

필수 키: name, author, category, author_link (문자열)
선택 키: time (없으면 현재 시각)
"""

import json
from pathlib import Path

from src.domain.constants import (
    TEMPLATE_METADATA_FILENAME,
    TEMPLATE_METADATA_REQUIRED_KEYS,
)
from src.domain.errors import ErrorCodes, MetadataError
from src.domain.schemas import TemplateRecord, utc_now_iso


def has_metadata(template_dir: Path) -> bool:
    """템플릿 후보 디렉토리 여부 (metadata.json 존재)."""
    return (template_dir / TEMPLATE_METADATA_FILENAME).is_file()


def load_template_metadata(template_dir: Path) -> TemplateRecord:
    """
    metadata.json → TemplateRecord 후보.

    dir_path는 절대 경로로 채워짐. id/previews는 비어 있음.

    Args:
        template_dir: 템플릿 디렉토리

    Returns:
        TemplateRecord (저장 전)

    Raises:
        MetadataError: MALFORMED_METADATA
    """
    metadata_path = template_dir / TEMPLATE_METADATA_FILENAME

    try:
        raw = json.loads(metadata_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MetadataError(
            ErrorCodes.MALFORMED_METADATA,
            f"Cannot read {metadata_path}: {e}",
            path=str(metadata_path),
        ) from e

    if not isinstance(raw, dict):
        raise MetadataError(
            ErrorCodes.MALFORMED_METADATA,
            f"{metadata_path} must contain a JSON object",
            path=str(metadata_path),
        )

    missing = [
        key for key in TEMPLATE_METADATA_REQUIRED_KEYS
        if not isinstance(raw.get(key), str)
    ]
    if missing:
        raise MetadataError(
            ErrorCodes.MALFORMED_METADATA,
            f"{metadata_path} is missing string fields: {', '.join(missing)}",
            path=str(metadata_path),
            missing=missing,
        )

    time_value = raw.get("time")
    return TemplateRecord(
        name=raw["name"],
        author=raw["author"],
        author_link=raw["author_link"],
        category=raw["category"],
        time=time_value if isinstance(time_value, str) and time_value else utc_now_iso(),
        dir_path=str(template_dir.resolve()),
    )
