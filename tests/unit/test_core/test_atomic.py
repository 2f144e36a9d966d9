"""
test_atomic.py - atomic_write_json 테스트

DoD:
- 새 내용 전체로 교체
- 실패 시 기존 파일 보존, temp 파일 남지 않음
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from src.core.atomic import atomic_write_json


class TestAtomicWriteJson:

    def test_creates_parent_and_writes(self, tmp_path: Path):
        path = tmp_path / "nested" / "records.json"

        atomic_write_json(path, {"records": [{"name": "한글"}]})

        assert json.loads(path.read_text(encoding="utf-8")) == {"records": [{"name": "한글"}]}

    def test_replaces_existing(self, tmp_path: Path):
        path = tmp_path / "records.json"
        atomic_write_json(path, {"records": [1]})

        atomic_write_json(path, {"records": [2]})

        assert json.loads(path.read_text()) == {"records": [2]}
        assert [p.name for p in tmp_path.iterdir()] == ["records.json"]

    def test_failed_replace_keeps_original(self, tmp_path: Path):
        path = tmp_path / "records.json"
        atomic_write_json(path, {"records": [1]})

        with patch("src.core.atomic.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                atomic_write_json(path, {"records": [2]})

        assert json.loads(path.read_text()) == {"records": [1]}
        assert [p.name for p in tmp_path.iterdir()] == ["records.json"]

    def test_unserializable_leaves_nothing(self, tmp_path: Path):
        path = tmp_path / "records.json"

        with pytest.raises(TypeError):
            atomic_write_json(path, {"records": [object()]})

        assert not path.exists()
