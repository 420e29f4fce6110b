import pytest
from middleware.auth import extract_bearer_token


def test_extracts_token():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.parametrize("header", [
    None,
    "",
    "Bearer",
    "Bearer ",
    "bearer abc",
    "Basic abc",
    "Bearer abc extra",
    "abc",
])
def test_rejects_malformed_headers(header):
    assert extract_bearer_token(header) is None
