from pathlib import Path, PurePosixPath

from cbomgraph.utils.paths import normalize_path, relative_posix


def test_windows_separators_are_converted():
    assert normalize_path("etc\\ssl\\certs\\ca.pem") == "etc/ssl/certs/ca.pem"


def test_parts_are_joined():
    assert normalize_path("etc", "ssl", "ca.pem") == "etc/ssl/ca.pem"
    assert normalize_path(PurePosixPath("etc/ssl"), "ca.pem") == "etc/ssl/ca.pem"


def test_redundant_slashes_are_collapsed():
    assert normalize_path("etc//ssl/", "ca.pem") == "etc/ssl/ca.pem"


def test_relative_posix(tmp_path):
    path = Path(tmp_path, "etc", "ssl", "ca.pem")
    assert relative_posix(tmp_path, path) == "etc/ssl/ca.pem"
    assert relative_posix(str(tmp_path), str(path)) == "etc/ssl/ca.pem"
