import pytest

from ethlink.ens import name_hash
from ethlink.types import Hash


@pytest.mark.parametrize(
    "name, expected",
    [
        ("eth", "0x93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae"),
        ("foo.eth", "0xde9b09fd7c5f901e23a3f19fecc54828e9c848539801e86591bd9801b019f84f"),
    ],
)
def test_name_hash(name, expected):
    assert str(name_hash(name)) == expected


def test_empty_name_is_zero():
    assert name_hash("") == Hash()


def test_different_names_differ():
    assert name_hash("a.eth") != name_hash("b.eth")