from __future__ import annotations

import pytest

from core.services.nonce import NONCE_CHARSET, generate_nonce, sha256_hex


def test_default_nonce_length_and_alphabet():
    nonce = generate_nonce()

    assert len(nonce) == 32
    assert set(nonce) <= set(NONCE_CHARSET)


def test_custom_length():
    assert len(generate_nonce(100)) == 100


def test_nonces_are_independent():
    nonces = {generate_nonce() for _ in range(200)}

    assert len(nonces) == 200
    assert len({nonce[0] for nonce in nonces}) > 10


def test_bytes_outside_uniform_range_are_discarded():
    # With 3 symbols only bytes < 255 are usable.
    batches = iter([bytes([255, 0]), bytes([255, 1, 5])])

    nonce = generate_nonce(3, charset="abc", random_bytes=lambda n: next(batches))

    assert nonce == "abc"


def test_invalid_arguments():
    with pytest.raises(ValueError):
        generate_nonce(0)
    with pytest.raises(ValueError):
        generate_nonce(8, charset="")


def test_sha256_hex():
    assert sha256_hex("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
