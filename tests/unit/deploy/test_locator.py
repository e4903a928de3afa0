"""Unit tests for locate_package."""

from pathlib import Path

import pytest

from hapdeploy.deploy import is_package, locate_package


def _touch(path: Path, content: bytes = b'hap') -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


class TestLocatePackage:
    """Tests for package lookup in an extracted tree."""

    def test_finds_package_below_top_level(self, tmp_path):
        expected = _touch(tmp_path / 'outputs' / 'default' / 'entry.hap')
        _touch(tmp_path / 'outputs' / 'readme.txt', b'text')

        assert locate_package(tmp_path) == expected

    def test_returns_lexically_first_of_several(self, tmp_path):
        _touch(tmp_path / 'b' / 'z.hap')
        _touch(tmp_path / 'b' / 'a.hap')
        _touch(tmp_path / 'c.hap')

        assert locate_package(tmp_path) == tmp_path / 'b' / 'a.hap'

    def test_order_does_not_depend_on_listing(self, tmp_path, monkeypatch):
        first = _touch(tmp_path / 'a' / 'one.hap')
        second = _touch(tmp_path / 'b' / 'two.hap')
        original_rglob = Path.rglob

        def reversed_rglob(self, pattern):
            return reversed(list(original_rglob(self, pattern)))

        monkeypatch.setattr(Path, 'rglob', reversed_rglob)

        assert locate_package(tmp_path) == first
        assert second.exists()

    def test_extension_is_case_insensitive(self, tmp_path):
        expected = _touch(tmp_path / 'pkg' / 'APP.HAP')

        assert locate_package(tmp_path) == expected

    def test_directory_named_like_package_is_ignored(self, tmp_path):
        (tmp_path / 'fake.hap').mkdir()
        expected = _touch(tmp_path / 'z' / 'real.hap')

        assert locate_package(tmp_path) == expected

    def test_none_when_no_package(self, tmp_path):
        _touch(tmp_path / 'docs' / 'notes.txt', b'notes')

        assert locate_package(tmp_path) is None

    def test_none_for_missing_root(self, tmp_path):
        assert locate_package(tmp_path / 'missing') is None

    def test_accepts_string_root(self, tmp_path):
        expected = _touch(tmp_path / 'app.hap')

        assert locate_package(str(tmp_path)) == expected


@pytest.mark.parametrize('name, expected', [
    ('app.hap', True),
    ('App.Hap', True),
    ('app.hsp', False),
    ('app.hap.zip', False),
])
def test_is_package(name, expected):
    assert is_package(name) is expected
