"""Minimal Flask API around a single in-memory election.

Endpoints:
- POST /init -> create the election {"name": ..., "choices": [...], "params": "toy"}
- GET /election -> public (tally-blind) view of the election
- POST /register -> register a voter, returns {"voter_id": "..."}
- POST /vote -> cast {"voter_id": ..., "choice": ...}, returns {"receipt": "..."}
- GET /ballots -> encrypted ballot box
- POST /tally -> homomorphic tally {"tally": {...}}
- POST /verify -> {"receipt": ..., "choice": ...} -> {"verified": true|false|null}
- GET /inclusion/<receipt> -> position of a ballot in the box
"""

import logging
import threading
import uuid
from typing import Any, Dict

from flask import Flask, jsonify, request

from homovote import config, voting
from homovote.election import Election, Voter
from homovote.errors import ErrorKind, VotingError
from homovote.params import CryptoParams

logging.basicConfig(format=config.LOG_FORMAT, level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# In-memory election state, one election per process
_STATE: Dict[str, Any] = {"election": None}
_STATE_LOCK = threading.Lock()

_STATUS = {
    ErrorKind.VOTER_NOT_FOUND: 404,
    ErrorKind.INVALID_CHOICE: 400,
    ErrorKind.ALREADY_VOTED: 409,
    ErrorKind.BALLOT_NOT_FOUND: 404,
    ErrorKind.INVALID_ELECTION: 400,
    ErrorKind.INVALID_PARAMETERS: 400,
    ErrorKind.TALLY_NOT_ALLOWED: 403,
    ErrorKind.ENCRYPTION_ERROR: 500,
    ErrorKind.DECRYPTION_ERROR: 500,
    ErrorKind.DUPLICATE_VOTER: 409,
}


def reset() -> None:
    with _STATE_LOCK:
        _STATE["election"] = None


def _error(err: VotingError):
    return jsonify({"error": err.kind.name, "detail": str(err)}), _STATUS[err.kind]


def _election():
    return _STATE["election"]


def _not_initialized():
    return jsonify({"error": "election not initialized"}), 409


@app.route("/init", methods=["POST"])
def init_election():
    """Create the election and its key pair."""
    data = request.get_json(silent=True) or {}
    name = data.get("name", config.DEFAULT_ELECTION_NAME)
    choices = data.get("choices", config.DEFAULT_CHOICES)
    if not isinstance(name, str) or not isinstance(choices, list):
        return jsonify({"error": "invalid name or choices"}), 400
    # check-then-set must not interleave with another /init
    with _STATE_LOCK:
        if _election() is not None:
            return jsonify({"error": "already initialized"}), 400
        try:
            params = CryptoParams.preset(data.get("params", config.PARAMS_PRESET))
            election = Election.create(name, choices, params)
        except VotingError as e:
            return _error(e)
        _STATE["election"] = election
    return jsonify({"status": "initialized", "election": election.to_dict()})


@app.route("/election", methods=["GET"])
def get_election():
    election = _election()
    if election is None:
        return _not_initialized()
    return jsonify(election.to_dict())


@app.route("/register", methods=["POST"])
def register_voter():
    """Register a voter. Accepts an optional {"voter_id": "<uuid>"}."""
    election = _election()
    if election is None:
        return _not_initialized()
    data = request.get_json(silent=True) or {}
    try:
        voter = Voter(id=uuid.UUID(data["voter_id"])) if "voter_id" in data else Voter()
    except (TypeError, ValueError, AttributeError):
        return jsonify({"error": "voter_id must be a UUID"}), 400
    try:
        election.add_voter(voter)
    except VotingError as e:
        return _error(e)
    return jsonify({"status": "registered", "voter_id": str(voter.id)})


@app.route("/vote", methods=["POST"])
def cast_vote():
    """Cast a ballot: expects {"voter_id": "...", "choice": "..."}."""
    election = _election()
    if election is None:
        return _not_initialized()
    data = request.get_json(silent=True) or {}
    choice = data.get("choice")
    if not isinstance(choice, str):
        return jsonify({"error": "missing choice"}), 400
    try:
        voter_id = uuid.UUID(data.get("voter_id"))
    except (TypeError, ValueError, AttributeError):
        return jsonify({"error": "voter_id must be a UUID"}), 400
    try:
        receipt = voting.vote(election, voter_id, choice)
    except VotingError as e:
        return _error(e)
    return jsonify({"status": "cast", "receipt": receipt}), 201


@app.route("/ballots", methods=["GET"])
def list_ballots():
    election = _election()
    if election is None:
        return _not_initialized()
    return jsonify({"ballots": [b.to_dict() for b in election.ballots]})


@app.route("/tally", methods=["POST"])
def compute_tally():
    election = _election()
    if election is None:
        return _not_initialized()
    try:
        # same locked section, so the count matches the tally
        with election.lock:
            result = voting.tally(election)
            cast = election.nb_ballot()
    except VotingError as e:
        return _error(e)
    return jsonify({"tally": result, "ballots_cast": cast})


@app.route("/verify", methods=["POST"])
def verify_vote():
    election = _election()
    if election is None:
        return _not_initialized()
    data = request.get_json(silent=True) or {}
    receipt = data.get("receipt")
    choice = data.get("choice")
    if not isinstance(receipt, str) or not isinstance(choice, str):
        return jsonify({"error": "missing or invalid 'receipt'/'choice'"}), 400
    return jsonify({"verified": voting.verify_vote(election, receipt, choice)})


@app.route("/inclusion/<receipt>", methods=["GET"])
def inclusion(receipt: str):
    election = _election()
    if election is None:
        return _not_initialized()
    proof = voting.inclusion_proof(election, receipt)
    if proof is None:
        return jsonify({"error": ErrorKind.BALLOT_NOT_FOUND.name}), 404
    return jsonify({"proof": proof})


if __name__ == "__main__":
    logger.info("starting voting server on %s:%d", config.SERVER_HOST, config.SERVER_PORT)
    app.run(host=config.SERVER_HOST, port=config.SERVER_PORT)
