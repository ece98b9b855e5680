import pytest

from core.exceptions import InvalidKeyError, MissingKeyError
from core.proofs import build_object_key, extension_for, validate_object_key


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [("image/jpeg", "jpg"), ("image/png", "png"), ("image/webp", "webp"), ("image/gif", "bin")],
)
def test_extension_for(mime_type, expected):
    assert extension_for(mime_type) == expected


def test_build_object_key_layout():
    key = build_object_key("silaturahim/", "user-1", "image/png", now_ms=1740814200000, token="abc")
    assert key == "silaturahim/user-1/1740814200000-abc.png"


def test_build_object_key_is_unique_per_call():
    keys = {build_object_key("silaturahim/", "user-1", "image/jpeg", now_ms=1) for _ in range(50)}
    assert len(keys) == 50
    assert all(key.startswith("silaturahim/user-1/1-") for key in keys)


def test_validate_object_key():
    assert validate_object_key(" silaturahim/a/b.jpg ", "silaturahim/") == "silaturahim/a/b.jpg"
    with pytest.raises(MissingKeyError):
        validate_object_key("  ", "silaturahim/")
    with pytest.raises(InvalidKeyError):
        validate_object_key("evil/../secret", "silaturahim/")
