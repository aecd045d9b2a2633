"""Voting service: stateless operations over an Election.

- vote: eligibility checks, ballot construction, ballot storage
- tally: homomorphic aggregation, decryption of the totals only
- verify_vote / inclusion_proof: receipt checks

Nothing here keeps state between calls; everything lives on the Election
passed in.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from . import elgamal
from .ballot import Ballot
from .elgamal import Ciphertext
from .election import Election
from .errors import ErrorKind, VotingError

logger = logging.getLogger(__name__)


def vote(election: Election, voter_id: uuid.UUID, choice: str) -> str:
    """Cast `choice` for `voter_id` and return the ballot receipt.

    Checks run in this order: registered voter, valid choice, not yet
    voted. The checks and the mutation happen under the election lock, so
    two concurrent calls for one voter cannot both get through.
    """

    with election.lock:
        if not election.is_allowed_voter(voter_id):
            logger.warning("vote from unregistered voter %s", voter_id)
            raise VotingError(ErrorKind.VOTER_NOT_FOUND, str(voter_id))
        if not election.is_valid_choice(choice):
            raise VotingError(ErrorKind.INVALID_CHOICE, repr(choice))
        if election.has_voted(voter_id):
            logger.warning("duplicate vote attempt from %s", voter_id)
            raise VotingError(ErrorKind.ALREADY_VOTED, str(voter_id))

        ballot = Ballot.new(
            choice,
            election.choices,
            election.public_key,
            election.encryption_params,
        )
        receipt = election.add_ballot(ballot)
        election.set_voted(voter_id)

    logger.info("ballot accepted (%d/%d cast)", election.nb_ballot(), election.voter_count())
    return receipt


def aggregate(election: Election) -> List[Ciphertext]:
    """Fold every ballot into one ciphertext per choice index."""

    params = election.encryption_params
    totals = [elgamal.homomorphic_identity() for _ in election.choices]
    for ballot in election.ballots:
        for idx, ct in enumerate(ballot.ciphertexts):
            totals[idx] = elgamal.add_homomorphic(totals[idx], ct, params)
    return totals


def tally(election: Election) -> Dict[str, int]:
    """Return choice -> count without decrypting any single ballot.

    A total whose discrete log is not found within [0, ballots cast] counts
    as 0. This is a known soundness gap (a corrupted ballot box reads as
    zero votes) kept for compatibility.
    """

    if not election.can_tally():
        raise VotingError(ErrorKind.TALLY_NOT_ALLOWED)

    with election.lock:
        params = election.encryption_params
        max_k = election.nb_ballot()
        results: Dict[str, int] = {}
        for choice, total in zip(election.choices, aggregate(election)):
            m = elgamal.decrypt(total, election.secret_key, params)
            count = elgamal.solve_discrete_log(m, params, max_k)
            if count is None:
                logger.warning("could not recover the total for %r, counting 0", choice)
                count = 0
            # duplicate labels: later indexes are never selected, summing keeps the first
            results[choice] = results.get(choice, 0) + count

    logger.info("tally computed over %d ballots", max_k)
    return results


def verify_vote(election: Election, receipt: str, claimed_choice: str) -> Optional[bool]:
    return election.verify_vote(receipt, claimed_choice)


def inclusion_proof(election: Election, receipt: str) -> Optional[str]:
    return election.generate_inclusion_proof(receipt)
