"""homovote - exponential ElGamal voting core with homomorphic tallying

Voters cast one-hot encrypted ballots; the authority multiplies them
together per choice and decrypts only the totals.
"""

from . import elgamal, voting
from .ballot import Ballot
from .election import Election, Voter, VoterRegistryEntry
from .errors import ErrorKind, VotingError
from .params import CryptoParams

__all__ = [
    "Ballot",
    "CryptoParams",
    "Election",
    "ErrorKind",
    "Voter",
    "VoterRegistryEntry",
    "VotingError",
    "elgamal",
    "voting",
]
