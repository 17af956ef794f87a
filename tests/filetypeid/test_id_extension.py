import pytest

from cbomgraph.filetypeid import id_extension


@pytest.mark.parametrize(
    "filename", ["a.pem", "a.cer", "a.cert", "a.der", "a.ca-bundle", "dir/a.crt", "A.PEM", "b.Crt"]
)
def test_certificate_family(filename):
    assert id_extension.identify_file_type(filepath=filename) == "CERTIFICATE"


@pytest.mark.parametrize("filename", ["a.p7a", "a.p7b", "a.p7c", "a.p7r", "a.p7s", "a.spc", "A.P7B"])
def test_pkcs7_family(filename):
    assert id_extension.identify_file_type(filepath=filename) == "PKCS7"


@pytest.mark.parametrize("filename", ["a.txt", "pem", "a.pem.bak", "a.key", "Makefile"])
def test_other_files_are_ignored(filename):
    assert id_extension.identify_file_type(filepath=filename) is None
