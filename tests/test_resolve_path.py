import os

import pytest

from staticsend import ForbiddenPathError, MaliciousPathError, resolve_path


def test_joins_relative_path_onto_root():
    assert resolve_path("/var/www", "css/site.css") == os.path.normpath("/var/www/css/site.css")


def test_normalizes_inner_segments():
    assert resolve_path("/var/www", "a/./b/../c.txt") == os.path.normpath("/var/www/a/c.txt")


def test_empty_relative_path_is_the_root():
    assert resolve_path("/var/www", "") == os.path.normpath("/var/www")


def test_single_argument_uses_working_directory():
    assert resolve_path("index.html") == os.path.join(os.getcwd(), "index.html")


def test_relative_root_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert resolve_path("public", "a.txt") == os.path.join(os.getcwd(), "public", "a.txt")


@pytest.mark.parametrize(
    "relative_path",
    ["..", "../etc/passwd", "a/../../etc/passwd", "a/b/../../../x", "./.."],
)
def test_traversal_is_forbidden(relative_path):
    with pytest.raises(ForbiddenPathError) as exc_info:
        resolve_path("/var/www", relative_path)

    assert exc_info.value.status_code == 403


@pytest.mark.parametrize("relative_path", ["a/..", "a/b/../c", "..foo", "foo..", "a/..b"])
def test_dots_that_stay_inside_root_are_allowed(relative_path):
    resolved = resolve_path("/var/www", relative_path)

    root = os.path.normpath("/var/www")
    assert resolved == root or resolved.startswith(root + os.sep)


@pytest.mark.parametrize("relative_path", ["\0", "a\0b", "../\0", "/etc/\0passwd"])
def test_nul_byte_is_malicious(relative_path):
    with pytest.raises(MaliciousPathError) as exc_info:
        resolve_path("/var/www", relative_path)

    assert exc_info.value.status_code == 400


def test_nul_byte_wins_over_traversal():
    with pytest.raises(MaliciousPathError):
        resolve_path("/var/www", "../../\0")


@pytest.mark.parametrize("relative_path", ["/etc/passwd", "/"])
def test_absolute_path_is_malicious(relative_path):
    with pytest.raises(MaliciousPathError):
        resolve_path("/var/www", relative_path)


def test_root_must_be_a_string():
    with pytest.raises(TypeError, match="root must be a string"):
        resolve_path(42, "a.txt")


def test_relative_path_must_be_a_string():
    with pytest.raises(TypeError, match="relative_path must be a string"):
        resolve_path("/var/www", b"a.txt")


def test_relative_path_is_required():
    with pytest.raises(TypeError, match="relative_path is required"):
        resolve_path(None)


@pytest.mark.parametrize("relative_path", ["a", "a/b/c", "x/../y", "deep/./er/file.txt", ""])
def test_result_stays_under_root(relative_path):
    root = os.path.normpath("/srv/files")
    resolved = resolve_path(root, relative_path)

    assert resolved == root or resolved.startswith(root + os.sep)
