from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SOURCE_DIRS = ("apps", "packages", "services", "scripts", "infra", "tests")


def python_sources():
    return sorted(
        path
        for directory in SOURCE_DIRS
        for path in (ROOT / directory).rglob("*.py")
        if "__pycache__" not in path.parts
    )


class TestLineEndings:
    def test_sources_found(self):
        assert len(python_sources()) > 20

    @pytest.mark.parametrize("path", python_sources(), ids=lambda p: str(p.relative_to(ROOT)))
    def test_crlf_line_endings(self, path):
        data = path.read_bytes()

        assert data.count(b"\n") == data.count(b"\r\n")
