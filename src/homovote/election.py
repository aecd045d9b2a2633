"""Election state: voter registry, ballot box and keys.

The Election is the only object that mutates `has_voted` and the ballot
list. Operations that must be atomic across several of its methods (see
`homovote.voting.vote`) hold `election.lock`.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from . import config, elgamal
from .ballot import Ballot
from .elgamal import PublicKey, SecretKey
from .errors import ErrorKind, VotingError
from .params import CryptoParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Voter:
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class VoterRegistryEntry:
    voter: Voter
    has_voted: bool = False


def _parse_receipt(receipt: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(receipt)
    except (TypeError, ValueError, AttributeError):
        return None


class Election:
    """A single election

    Attributes
    - id, name: identification
    - choices: fixed tuple of choice labels (index = position)
    - public_key: election public key
    - encryption_params: the CryptoParams every ballot is built with
    - lock: per-election re-entrant lock serializing vote/tally

    The secret key is optional. Without it the election is tally-blind for
    its whole lifetime: there is no setter.
    """

    def __init__(
        self,
        name: str,
        choices: Sequence[str],
        public_key: PublicKey,
        encryption_params: CryptoParams,
        secret_key: Optional[SecretKey] = None,
        election_id: Optional[uuid.UUID] = None,
    ):
        choices = tuple(choices)
        if not choices:
            raise VotingError(ErrorKind.INVALID_ELECTION, "an election needs at least one choice")
        if not all(isinstance(c, str) for c in choices):
            raise VotingError(ErrorKind.INVALID_ELECTION, "choices must be strings")
        if not encryption_params.distinct_powers(len(choices) - 1):
            raise VotingError(
                ErrorKind.INVALID_PARAMETERS,
                f"group too small to encode {len(choices)} choices",
            )

        self.id = election_id or uuid.uuid4()
        self.name = name
        self.choices = choices
        self.public_key = public_key
        self.encryption_params = encryption_params
        self._secret_key = secret_key
        self._voters: Dict[uuid.UUID, VoterRegistryEntry] = {}
        self._ballots: List[Ballot] = []
        self.lock = threading.RLock()

    @classmethod
    def create(
        cls, name: str, choices: Sequence[str], params: Optional[CryptoParams] = None
    ) -> "Election":
        """Create an election with a freshly generated key pair."""

        if params is None:
            params = CryptoParams.preset(config.PARAMS_PRESET)
        public_key, secret_key = elgamal.generate_keypair(params)
        election = cls(name, choices, public_key, params, secret_key=secret_key)
        logger.info("created election %s (%r) with %d choices", election.id, name, len(election.choices))
        return election

    # --- registry ---------------------------------------------------------

    def add_voter(self, voter: Voter) -> None:
        with self.lock:
            if voter.id in self._voters:
                raise VotingError(ErrorKind.DUPLICATE_VOTER, str(voter.id))
            # every count in 0..=voters must map to a distinct group element;
            # earlier registrations already cleared the smaller exponents
            n = len(self._voters) + 1
            params = self.encryption_params
            if pow(params.g, n, params.p) == 1:
                raise VotingError(
                    ErrorKind.INVALID_PARAMETERS,
                    f"group too small for {n} voters",
                )
            self._voters[voter.id] = VoterRegistryEntry(voter=voter)

    def is_allowed_voter(self, voter_id: uuid.UUID) -> bool:
        return voter_id in self._voters

    def is_valid_choice(self, choice: str) -> bool:
        return choice in self.choices

    def has_voted(self, voter_id: uuid.UUID) -> bool:
        entry = self._voters.get(voter_id)
        return entry is not None and entry.has_voted

    def set_voted(self, voter_id: uuid.UUID) -> None:
        entry = self._voters.get(voter_id)
        if entry is None:
            raise VotingError(ErrorKind.VOTER_NOT_FOUND, str(voter_id))
        entry.has_voted = True

    def voter_count(self) -> int:
        return len(self._voters)

    # --- ballot box -------------------------------------------------------

    @property
    def ballots(self) -> tuple:
        return tuple(self._ballots)

    def add_ballot(self, ballot: Ballot) -> str:
        """Append `ballot` and return its receipt."""

        with self.lock:
            if len(ballot.ciphertexts) != len(self.choices):
                raise VotingError(
                    ErrorKind.INVALID_ELECTION,
                    f"ballot has {len(ballot.ciphertexts)} entries, expected {len(self.choices)}",
                )
            p = self.encryption_params.p
            if not all(0 < ct.c1 < p and 0 < ct.c2 < p for ct in ballot.ciphertexts):
                raise VotingError(ErrorKind.INVALID_ELECTION, "ballot ciphertext outside the group")
            if len(self._ballots) >= len(self._voters):
                raise VotingError(ErrorKind.INVALID_ELECTION, "more ballots than registered voters")
            self._ballots.append(ballot)
        return ballot.receipt

    def nb_ballot(self) -> int:
        return len(self._ballots)

    def get_ballot(self, ballot_id: uuid.UUID) -> Optional[Ballot]:
        return next((b for b in self._ballots if b.id == ballot_id), None)

    # --- keys -------------------------------------------------------------

    @property
    def secret_key(self) -> Optional[SecretKey]:
        return self._secret_key

    def can_tally(self) -> bool:
        return self._secret_key is not None

    # --- receipts ---------------------------------------------------------

    def ballot_choice(self, ballot: Ballot) -> Optional[str]:
        """Decrypt a single ballot and return its choice label.

        Returns None if the election is tally-blind or the ballot is not a
        valid one-hot vector.
        """

        if self._secret_key is None:
            return None
        params = self.encryption_params
        selected = []
        for idx, ct in enumerate(ballot.ciphertexts):
            bit = elgamal.decode_choice(elgamal.decrypt(ct, self._secret_key, params), 2, params)
            if bit is None:
                return None
            if bit == 1:
                selected.append(idx)
        if len(selected) != 1 or selected[0] >= len(self.choices):
            return None
        return self.choices[selected[0]]

    def verify_vote(self, receipt: str, claimed_choice: str) -> Optional[bool]:
        """Check that the ballot behind `receipt` was cast for `claimed_choice`.

        Returns None (not False) when the receipt is malformed, the ballot
        is unknown, or the election cannot decrypt.
        """

        ballot_id = _parse_receipt(receipt)
        if ballot_id is None:
            return None
        ballot = self.get_ballot(ballot_id)
        if ballot is None or not self.can_tally():
            return None
        return self.ballot_choice(ballot) == claimed_choice

    def generate_inclusion_proof(self, receipt: str) -> Optional[str]:
        ballot_id = _parse_receipt(receipt)
        if ballot_id is None:
            return None
        for index, ballot in enumerate(self._ballots):
            if ballot.id == ballot_id:
                return f"Ballot found at position {index}"
        return None

    # --- views ------------------------------------------------------------

    def to_dict(self) -> dict:
        """JSON-friendly representation. Never contains the secret key."""

        with self.lock:
            return {
                "id": str(self.id),
                "name": self.name,
                "choices": list(self.choices),
                "params": self.encryption_params.to_dict(),
                "public_key": self.public_key.to_dict(),
                "voters": [
                    {"id": str(vid), "has_voted": entry.has_voted}
                    for vid, entry in self._voters.items()
                ],
                "ballots": [b.to_dict() for b in self._ballots],
            }

    @classmethod
    def from_dict(cls, data: dict, secret_key: Optional[SecretKey] = None) -> "Election":
        """Rebuild an election from `to_dict` output.

        Without `secret_key` the result is tally-blind.
        """

        try:
            election = cls(
                name=data["name"],
                choices=data["choices"],
                public_key=PublicKey.from_dict(data["public_key"]),
                encryption_params=CryptoParams.from_dict(data["params"]),
                secret_key=secret_key,
                election_id=uuid.UUID(data["id"]),
            )
            for v in data.get("voters", []):
                voter = Voter(id=uuid.UUID(v["id"]))
                election.add_voter(voter)
                if v.get("has_voted"):
                    election.set_voted(voter.id)
            for b in data.get("ballots", []):
                election.add_ballot(Ballot.from_dict(b))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise VotingError(ErrorKind.INVALID_ELECTION, f"malformed election data: {e}") from None
        return election

    def public_view(self) -> "Election":
        """Tally-blind copy safe to hand to untrusted parties."""

        return Election.from_dict(self.to_dict())
