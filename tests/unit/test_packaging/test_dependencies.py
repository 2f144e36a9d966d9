"""
test_dependencies.py - pyproject.toml 런타임 의존성 테스트

선언된 런타임 의존성은 모두 src/ 또는 scripts/에서 실제로 import 되어야 함.
"""

import re
import tomllib
from pathlib import Path

# 배포 이름 → import 이름
IMPORT_NAMES = {
    "fastapi": ["fastapi"],
    "uvicorn": ["uvicorn"],
    "python-multipart": [],  # FastAPI Form 파싱에서 간접 사용
    "pyyaml": ["yaml"],
    "filelock": ["filelock"],
}


def declared_dependencies(project_root: Path) -> list[str]:
    data = tomllib.loads((project_root / "pyproject.toml").read_text(encoding="utf-8"))
    return [
        re.split(r"[<>=!~\[ ;]", dep, maxsplit=1)[0].lower()
        for dep in data["project"]["dependencies"]
    ]


def imported_modules(project_root: Path) -> set[str]:
    modules: set[str] = set()
    pattern = re.compile(r"^\s*(?:from|import)\s+([A-Za-z_][\w]*)", re.MULTILINE)
    for folder in ("src", "scripts"):
        for path in (project_root / folder).rglob("*.py"):
            modules.update(pattern.findall(path.read_text(encoding="utf-8")))
    return modules


class TestRuntimeDependencies:

    def test_every_dependency_is_known(self, project_root: Path):
        for name in declared_dependencies(project_root):
            assert name in IMPORT_NAMES, f"unmapped dependency: {name}"

    def test_every_dependency_is_used(self, project_root: Path):
        modules = imported_modules(project_root)

        for name in declared_dependencies(project_root):
            for module in IMPORT_NAMES.get(name, []):
                assert module in modules, f"{name} declared but {module} never imported"

    def test_form_fields_need_multipart(self, project_root: Path):
        """Form(...) 사용 시 python-multipart 선언 필요."""
        routes = (project_root / "src" / "app" / "routes").rglob("*.py")
        uses_form = any("Form(" in p.read_text(encoding="utf-8") for p in routes)

        assert uses_form
        assert "python-multipart" in declared_dependencies(project_root)
