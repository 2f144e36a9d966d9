"""
test_assembler.py - ContentAssembler 테스트

DoD:
- 4개 경로를 위치 인자로 전달, stdout = 결과
- data 생략 시 기본 바인딩 파일
- 실패/timeout/인코딩 오류 → AssemblyError
- 스크래치는 유예 시간 후 삭제
"""

import asyncio
from pathlib import Path

import pytest

from src.domain.errors import AssemblyError, ErrorCodes
from src.domain.schemas import ContentBinding
from src.render.assembler import ContentAssembler, dump_bindings
from src.render.process import ProcessRunner


def write_sources(root: Path, html: str = "<p>hi</p>") -> tuple[Path, Path, Path]:
    root.mkdir(parents=True, exist_ok=True)
    html_path = root / "index.html"
    css_path = root / "styles.css"
    js_path = root / "script.js"
    html_path.write_text(html, encoding="utf-8")
    css_path.write_text("p{color:red}", encoding="utf-8")
    js_path.write_text("var a=1", encoding="utf-8")
    return html_path, css_path, js_path


class TestAssemble:
    """assemble: 경로 기반 조립."""

    @pytest.mark.asyncio
    async def test_default_data(self, assembler: ContentAssembler, tmp_path: Path):
        paths = write_sources(tmp_path / "src")

        html = await assembler.assemble(*paths)

        assert html == "<html><style>p{color:red}</style><p>hi</p><script>var a=1</script><!----></html>"

    @pytest.mark.asyncio
    async def test_explicit_data(self, assembler: ContentAssembler, tmp_path: Path):
        paths = write_sources(tmp_path / "src")
        data_path = tmp_path / "data.json"
        data_path.write_text(dump_bindings([ContentBinding("#title", "Welcome", None)]))

        html = await assembler.assemble(*paths, data_path)

        assert "<!--Welcome-->" in html

    @pytest.mark.asyncio
    async def test_process_failure(self, assembler: ContentAssembler, tmp_path: Path):
        paths = write_sources(tmp_path / "src", html="FAIL_BUILD")

        with pytest.raises(AssemblyError) as exc_info:
            await assembler.assemble(*paths)

        assert exc_info.value.code == ErrorCodes.PROCESS_FAILED
        assert "build exploded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_encoding_failure(self, assembler: ContentAssembler, tmp_path: Path):
        paths = write_sources(tmp_path / "src", html="BINARY_OUTPUT")

        with pytest.raises(AssemblyError) as exc_info:
            await assembler.assemble(*paths)

        assert exc_info.value.code == ErrorCodes.ENCODING_FAILURE

    @pytest.mark.asyncio
    async def test_timeout(self, build_command, cleanup, tools_dir: Path, tmp_path: Path):
        assembler = ContentAssembler(
            command=build_command,
            runner=ProcessRunner(timeout=0.3),
            cleanup=cleanup,
            default_data_path=tools_dir / "default.json",
        )
        paths = write_sources(tmp_path / "src", html="SLOW_BUILD")

        with pytest.raises(AssemblyError) as exc_info:
            await assembler.assemble(*paths)

        assert exc_info.value.code == ErrorCodes.PROCESS_TIMEOUT

    def test_empty_command(self, runner, cleanup, tools_dir: Path):
        with pytest.raises(ValueError):
            ContentAssembler([], runner, cleanup, tools_dir / "default.json")


class TestAssembleSite:
    """assemble_site: 고정 레이아웃 디렉토리."""

    @pytest.mark.asyncio
    async def test_layout(self, assembler: ContentAssembler, templates_root: Path, make_template):
        template_dir = make_template(templates_root, "portfolio")

        html = await assembler.assemble_site(template_dir)

        assert "<style>body{margin:0}</style>" in html
        assert "<h1 id='title'>Hello</h1>" in html
        assert "<script>console.log(1)</script>" in html

    @pytest.mark.asyncio
    async def test_bindings(
        self,
        assembler: ContentAssembler,
        templates_root: Path,
        scratch_root: Path,
        make_template,
    ):
        template_dir = make_template(templates_root, "portfolio")
        bindings = [
            ContentBinding(selector="#title", value="Welcome"),
            ContentBinding(selector="#cta", value="Buy", link="https://example.com"),
        ]

        html = await assembler.assemble_site(template_dir, bindings)

        assert "<!--Welcome,Buy-->" in html
        # 바인딩 스크래치는 유예 후 삭제
        await asyncio.sleep(0.3)
        assert list(scratch_root.iterdir()) == []


class TestAssembleSource:
    """assemble_source: 원본 소스 문자열."""

    @pytest.mark.asyncio
    async def test_writes_inputs_and_cleans_up(self, assembler: ContentAssembler, scratch_root: Path):
        html = await assembler.assemble_source(
            "<b>x</b>", "b{}", "go()", [ContentBinding(value="V")]
        )

        assert html == "<html><style>b{}</style><b>x</b><script>go()</script><!--V--></html>"

        scratches = list(scratch_root.iterdir())
        assert len(scratches) == 1
        assert (scratches[0] / "input.html").read_text() == "<b>x</b>"
        assert (scratches[0] / "input.json").exists()

        await asyncio.sleep(0.3)
        assert not scratches[0].exists()

    @pytest.mark.asyncio
    async def test_failure_still_schedules_cleanup(
        self,
        assembler: ContentAssembler,
        scratch_root: Path,
    ):
        with pytest.raises(AssemblyError):
            await assembler.assemble_source("FAIL_BUILD", "", "")

        assert assembler.cleanup.pending == 1
        await asyncio.sleep(0.3)
        assert list(scratch_root.iterdir()) == []


class TestDumpBindings:

    def test_json_array(self):
        text = dump_bindings([ContentBinding("#a", "한글", None)])

        assert text == '[{"selector": "#a", "value": "한글", "link": null}]'
