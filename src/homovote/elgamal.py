"""Exponential ElGamal over a prime-order modulus.

A vote count m is carried as the group element g^m, so multiplying two
ciphertexts componentwise adds the underlying counts. Recovering m after
decryption needs a (small) discrete log search, see `solve_discrete_log`.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ErrorKind, VotingError
from .params import CryptoParams


@dataclass(frozen=True)
class PublicKey:
    """ElGamal public key

    Attributes
    - h: public component h = g^x mod p
    """

    h: int

    def to_dict(self) -> dict:
        return {"h": str(self.h)}

    @classmethod
    def from_dict(cls, data: dict) -> "PublicKey":
        return cls(h=int(data["h"]))


@dataclass(frozen=True)
class SecretKey:
    """ElGamal secret key

    Attributes
    - x: secret exponent in [1..p-2]

    Never serialized; kept out of repr so it cannot leak into logs.
    """

    x: int = field(repr=False)


@dataclass(frozen=True)
class Ciphertext:
    """ElGamal ciphertext (c1, c2) = (g^r, m * h^r) mod p"""

    c1: int
    c2: int

    def to_dict(self) -> dict:
        return {"c1": str(self.c1), "c2": str(self.c2)}

    @classmethod
    def from_dict(cls, data: dict) -> "Ciphertext":
        return cls(c1=int(data["c1"]), c2=int(data["c2"]))


def _rand_exponent(params: CryptoParams) -> int:
    # sample uniformly in [1, p-2]
    return secrets.randbelow(params.p - 2) + 1


def generate_keypair(params: CryptoParams) -> Tuple[PublicKey, SecretKey]:
    """Generate an ElGamal key pair over `params`

    Uses the Python secrets module for strong randomness.
    """

    x = _rand_exponent(params)
    h = pow(params.g, x, params.p)

    return PublicKey(h=h), SecretKey(x=x)


def encrypt(message: int, public_key: PublicKey, params: CryptoParams) -> Tuple[Ciphertext, int]:
    """Encrypt a group element under `public_key`.

    Returns (ciphertext, r). A fresh r is drawn on every call; callers that
    keep r must never log or persist it since, together with the plaintext,
    it proves what was encrypted.
    """

    if not 0 < message < params.p:
        raise VotingError(ErrorKind.ENCRYPTION_ERROR, "message is not a group element")
    if not 0 < public_key.h < params.p:
        raise VotingError(ErrorKind.ENCRYPTION_ERROR, "public key does not match parameters")

    r = _rand_exponent(params)
    c1 = pow(params.g, r, params.p)
    c2 = (message * pow(public_key.h, r, params.p)) % params.p

    return Ciphertext(c1=c1, c2=c2), r


def decrypt(ciphertext: Ciphertext, secret_key: SecretKey, params: CryptoParams) -> int:
    """Recover the group element m = c2 * (c1^x)^-1 mod p."""

    p = params.p
    if not (0 < ciphertext.c1 < p and 0 < ciphertext.c2 < p):
        raise VotingError(ErrorKind.DECRYPTION_ERROR, "ciphertext component outside the group")

    s = pow(ciphertext.c1, secret_key.x, p)
    # Fermat inverse, p is prime
    s_inv = pow(s, p - 2, p)

    return (ciphertext.c2 * s_inv) % p


def encode_choice(index: int, params: CryptoParams) -> int:
    return pow(params.g, index, params.p)


def decode_choice(value: int, num_choices: int, params: CryptoParams) -> Optional[int]:
    """Find the index i < num_choices with g^i == value, or None.

    Brute force on purpose: the domain is the number of choices (or, during
    tallying, the number of ballots), which is always small.
    """

    for i in range(num_choices):
        if encode_choice(i, params) == value:
            return i
    return None


def homomorphic_identity() -> Ciphertext:
    """Encryption of g^0 with r = 0, the neutral element for aggregation."""

    return Ciphertext(c1=1, c2=1)


def add_homomorphic(a: Ciphertext, b: Ciphertext, params: CryptoParams) -> Ciphertext:
    p = params.p
    return Ciphertext(c1=(a.c1 * b.c1) % p, c2=(a.c2 * b.c2) % p)


def solve_discrete_log(target: int, params: CryptoParams, max_k: int) -> Optional[int]:
    """Return the smallest k in [0, max_k] with g^k == target, or None.

    Linear search costing O(max_k) multiplications; max_k is bounded by the
    number of ballots, never by the group order.
    """

    cur = 1
    for k in range(max_k + 1):
        if cur == target:
            return k
        cur = (cur * params.g) % params.p
    return None
