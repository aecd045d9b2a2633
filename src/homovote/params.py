from __future__ import annotations

from dataclasses import dataclass

from Crypto.Util.number import isPrime

from .errors import ErrorKind, VotingError

# RFC 3526 2048-bit MODP Group (Group 14) prime p
# Source for prime: https://datatracker.ietf.org/doc/html/rfc3526
_P_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3D"
    "C2007CB8A163BF0598DA48361C55D39A69163FA8FD24CF5F"
    "83655D23DCA3AD961C62F356208552BB9ED529077096966D"
    "670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9"
    "DE2BCBF6955817183995497CEA956AE515D2261898FA0510"
    "15728E5A8AACAA68FFFFFFFFFFFFFFFF"
)

PRESETS = ("toy", "test", "default")


@dataclass(frozen=True)
class CryptoParams:
    """Cyclic group description shared by the whole election

    Attributes
    - p: prime modulus
    - g: generator, 2 <= g <= p-2

    The parameters are validated on construction, so an instance that
    exists is always usable for ElGamal arithmetic.
    """

    p: int
    g: int

    def __post_init__(self) -> None:
        if not isinstance(self.p, int) or not isinstance(self.g, int):
            raise VotingError(ErrorKind.INVALID_PARAMETERS, "p and g must be integers")
        if self.p < 5:
            raise VotingError(ErrorKind.INVALID_PARAMETERS, f"modulus too small: {self.p}")
        if not 2 <= self.g <= self.p - 2:
            raise VotingError(ErrorKind.INVALID_PARAMETERS, f"generator {self.g} outside [2, p-2]")
        # the modular inverse in decrypt relies on Fermat's little theorem
        if not isPrime(self.p):
            raise VotingError(ErrorKind.INVALID_PARAMETERS, "modulus is not prime")

    @classmethod
    def toy(cls) -> "CryptoParams":
        """Tiny group (order of g is 11). Only good for unit tests."""

        return cls(p=23, g=4)

    @classmethod
    def test(cls) -> "CryptoParams":
        return cls(p=1019, g=2)

    @classmethod
    def default(cls) -> "CryptoParams":
        """RFC 3526 group-14 prime with generator g=2"""

        return cls(p=int(_P_HEX, 16), g=2)

    @classmethod
    def preset(cls, name: str) -> "CryptoParams":
        if name not in PRESETS:
            raise VotingError(ErrorKind.INVALID_PARAMETERS, f"unknown preset {name!r}")
        return getattr(cls, name)()

    def distinct_powers(self, n: int) -> bool:
        """Return True when g^0 .. g^n are pairwise distinct mod p.

        That holds iff the order of g is larger than n, i.e. g^k != 1 for
        every 1 <= k <= n.
        """

        acc = 1
        for _ in range(n):
            acc = (acc * self.g) % self.p
            if acc == 1:
                return False
        return True

    def to_dict(self) -> dict:
        return {"p": str(self.p), "g": str(self.g)}

    @classmethod
    def from_dict(cls, data: dict) -> "CryptoParams":
        try:
            return cls(p=int(data["p"]), g=int(data["g"]))
        except (KeyError, TypeError, ValueError) as e:
            raise VotingError(ErrorKind.INVALID_PARAMETERS, str(e)) from None
