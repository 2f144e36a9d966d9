"""
test_ids.py - ID/토큰 생성 테스트
"""

from src.core.ids import (
    generate_record_id,
    generate_run_id,
    generate_token,
    is_valid_record_id,
)


class TestGenerateRecordId:

    def test_format(self):
        record_id = generate_record_id()

        assert len(record_id) == 32
        assert is_valid_record_id(record_id)

    def test_unique(self):
        assert len({generate_record_id() for _ in range(100)}) == 100


class TestGenerateToken:

    def test_128_bit_hex(self):
        token = generate_token()

        assert len(token) == 32
        int(token, 16)

    def test_unique(self):
        assert len({generate_token() for _ in range(1000)}) == 1000


class TestGenerateRunId:

    def test_prefix(self):
        run_id = generate_run_id()

        assert run_id.startswith("SYNC-")
        assert len(run_id.split("-")) == 3


class TestIsValidRecordId:

    def test_rejects_path_traversal(self):
        assert not is_valid_record_id("../" + "a" * 29)

    def test_rejects_uppercase(self):
        assert not is_valid_record_id("A" * 32)

    def test_rejects_wrong_length(self):
        assert not is_valid_record_id("abc")
