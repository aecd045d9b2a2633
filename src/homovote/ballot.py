from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Sequence, Tuple

from . import elgamal
from .elgamal import Ciphertext, PublicKey
from .errors import ErrorKind, VotingError
from .params import CryptoParams


@dataclass(frozen=True)
class Ballot:
    """One-hot encrypted ballot

    Attributes
    - id: unique ballot identifier (its string form is the voter's receipt)
    - ciphertexts: one ciphertext per choice index; the selected index
      encrypts g^1, every other index encrypts g^0
    """

    id: uuid.UUID
    ciphertexts: Tuple[Ciphertext, ...]

    @classmethod
    def new(
        cls,
        choice: str,
        choices: Sequence[str],
        public_key: PublicKey,
        params: CryptoParams,
    ) -> "Ballot":
        """Encrypt `choice` as a one-hot vector over `choices`.

        The match is exact (case-sensitive, no trimming). Every entry gets
        its own encryption call and hence its own r; sharing r between
        entries would make the selected slot stand out.
        """

        try:
            selected = list(choices).index(choice)
        except ValueError:
            raise VotingError(ErrorKind.INVALID_CHOICE, repr(choice)) from None

        row = []
        for idx in range(len(choices)):
            encoded = elgamal.encode_choice(1 if idx == selected else 0, params)
            # r is dropped right away
            ct, _ = elgamal.encrypt(encoded, public_key, params)
            row.append(ct)

        return cls(id=uuid.uuid4(), ciphertexts=tuple(row))

    @property
    def receipt(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.receipt,
            "ciphertexts": [ct.to_dict() for ct in self.ciphertexts],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Ballot":
        return cls(
            id=uuid.UUID(data["id"]),
            ciphertexts=tuple(Ciphertext.from_dict(c) for c in data["ciphertexts"]),
        )
