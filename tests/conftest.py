"""
Pytest fixtures for the artifact lifecycle tests.

외부 빌드/스크린샷 도구는 sys.executable로 실행되는 작은 Python 스크립트로 대체:
- fake builder: html/css/js/data → stdout HTML
- fake renderer: html → mobile/desktop PNG 2개

입력 HTML의 마커로 실패 동작을 제어함:
- FAIL_BUILD: 빌더 exit 3 (stderr "build exploded")
- BINARY_OUTPUT: 빌더가 UTF-8이 아닌 바이트 출력
- SLOW_BUILD: 빌더 5초 대기
- FAIL_RENDER: 렌더러 exit 2
- NO_OUTPUT: 렌더러가 출력 없이 exit 0
"""

import json
import sys
from pathlib import Path

import pytest
import yaml

from src.core.cleanup import DeferredCleanupScheduler
from src.core.registry import EphemeralArtifactRegistry
from src.render.assembler import ContentAssembler
from src.render.preview import PreviewRenderer
from src.render.process import ProcessRunner
from src.storage.json_store import JsonSiteStore, JsonTemplateStore

# 테스트 스크래치 유예 (초)
TEST_GRACE_SECONDS = 0.05

FAKE_BUILDER = '''
import json
import sys
import time

html_path, css_path, js_path, data_path = sys.argv[1:5]
html = open(html_path, encoding="utf-8").read()
css = open(css_path, encoding="utf-8").read()
js = open(js_path, encoding="utf-8").read()
data = json.load(open(data_path, encoding="utf-8"))

if "FAIL_BUILD" in html:
    sys.stderr.write("build exploded")
    sys.exit(3)
if "BINARY_OUTPUT" in html:
    sys.stdout.buffer.write(b"\\xff\\xfe\\xfa")
    sys.exit(0)
if "SLOW_BUILD" in html:
    time.sleep(5)

values = ",".join(str(item.get("value")) for item in data)
sys.stdout.write(f"<html><style>{css}</style>{html}<script>{js}</script><!--{values}--></html>")
'''

FAKE_RENDERER = '''
import sys

html_path, mobile_path, desktop_path = sys.argv[1:4]
html = open(html_path, encoding="utf-8").read()

if "FAIL_RENDER" in html:
    sys.stderr.write("render exploded")
    sys.exit(2)
if "NO_OUTPUT" in html:
    sys.exit(0)

for label, path in (("mobile", mobile_path), ("desktop", desktop_path)):
    with open(path, "wb") as f:
        f.write(b"\\x89PNG" + label.encode() + b"\\n" + html.encode("utf-8"))
'''

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config(project_root: Path) -> dict:
    """기본 설정 로드."""
    with open(project_root / "default.yaml", encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def tools_dir(tmp_path: Path) -> Path:
    """fake builder/renderer 스크립트 디렉토리."""
    tools = tmp_path / "tools"
    tools.mkdir()
    (tools / "builder.py").write_text(FAKE_BUILDER, encoding="utf-8")
    (tools / "renderer.py").write_text(FAKE_RENDERER, encoding="utf-8")
    (tools / "default.json").write_text("[]", encoding="utf-8")
    return tools


@pytest.fixture
def build_command(tools_dir: Path) -> list[str]:
    return [sys.executable, str(tools_dir / "builder.py")]


@pytest.fixture
def render_command(tools_dir: Path) -> list[str]:
    return [sys.executable, str(tools_dir / "renderer.py")]


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """테스트 전용 스크래치 상위 디렉토리."""
    return tmp_path / "scratch"


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def runner() -> ProcessRunner:
    return ProcessRunner(max_concurrency=2, timeout=10)


@pytest.fixture
def cleanup() -> DeferredCleanupScheduler:
    return DeferredCleanupScheduler()


@pytest.fixture
def registry() -> EphemeralArtifactRegistry:
    return EphemeralArtifactRegistry()


@pytest.fixture
def assembler(
    build_command: list[str],
    runner: ProcessRunner,
    cleanup: DeferredCleanupScheduler,
    tools_dir: Path,
    scratch_root: Path,
) -> ContentAssembler:
    return ContentAssembler(
        command=build_command,
        runner=runner,
        cleanup=cleanup,
        default_data_path=tools_dir / "default.json",
        scratch_root=scratch_root,
        scratch_grace=TEST_GRACE_SECONDS,
    )


@pytest.fixture
def renderer(
    render_command: list[str],
    runner: ProcessRunner,
    cleanup: DeferredCleanupScheduler,
    scratch_root: Path,
) -> PreviewRenderer:
    return PreviewRenderer(
        command=render_command,
        runner=runner,
        cleanup=cleanup,
        scratch_root=scratch_root,
        scratch_grace=TEST_GRACE_SECONDS,
    )


@pytest.fixture
def template_store(tmp_path: Path) -> JsonTemplateStore:
    return JsonTemplateStore(tmp_path / "data")


@pytest.fixture
def site_store(tmp_path: Path) -> JsonSiteStore:
    return JsonSiteStore(tmp_path / "data")


# =============================================================================
# Template Fixtures
# =============================================================================


def _make_template(
    root: Path,
    dir_name: str,
    name: str | None = None,
    html: str = "<h1 id='title'>Hello</h1>",
    metadata: dict | str | None = None,
    with_previews: bool = False,
) -> Path:
    """
    고정 레이아웃 템플릿 디렉토리 생성.

    Args:
        root: 템플릿 루트
        dir_name: 디렉토리 이름
        name: metadata name (기본: dir_name)
        html: index.html 내용
        metadata: metadata.json 내용 (dict/str 그대로 기록, None이면 기본값)
        with_previews: 오래된 previews/ 포함 여부
    """
    template_dir = root / dir_name
    (template_dir / "styles").mkdir(parents=True)
    (template_dir / "js").mkdir()
    (template_dir / "resources").mkdir()

    (template_dir / "index.html").write_text(html, encoding="utf-8")
    (template_dir / "styles" / "styles.css").write_text("body{margin:0}", encoding="utf-8")
    (template_dir / "js" / "script.js").write_text("console.log(1)", encoding="utf-8")
    (template_dir / "resources" / "logo.svg").write_text("<svg/>", encoding="utf-8")

    if metadata is None:
        metadata = {
            "name": name or dir_name,
            "author": "Jane",
            "category": "portfolio",
            "author_link": "https://example.com/jane",
        }
    if isinstance(metadata, dict):
        metadata = json.dumps(metadata)
    (template_dir / "metadata.json").write_text(metadata, encoding="utf-8")

    if with_previews:
        (template_dir / "previews").mkdir()
        (template_dir / "previews" / "mobile.png").write_bytes(b"stale")
        (template_dir / "previews" / "desktop.png").write_bytes(b"stale")

    return template_dir


@pytest.fixture
def make_template():
    """템플릿 디렉토리 생성 함수 (_make_template)."""
    return _make_template


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    root.mkdir()
    return root


@pytest.fixture
def sites_root(tmp_path: Path) -> Path:
    root = tmp_path / "sites"
    root.mkdir()
    return root
