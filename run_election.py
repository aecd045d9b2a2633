"""Demo runner: a small referendum from key generation to verified receipts.

Run this script from the repository root (after `pip install -e .`).
"""

import argparse
import hashlib

from homovote import CryptoParams, Election, Voter, VotingError, voting


def _print_heading(msg: str):
    print()
    print(msg)


def _print_kv(key: str, value: str):
    print(f"  {key}: {value}")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--params", default="test", help="group preset: toy, test or default")
    args = ap.parse_args()

    _print_heading("[Setup] generate group parameters and the election key pair")
    params = CryptoParams.preset(args.params)
    election = Election.create("Referendum", ["Yes", "No"], params)
    # print a short fingerprint of the public key only
    pub_fingerprint = hashlib.sha256(str(election.public_key.h).encode()).hexdigest()[:8]
    _print_kv("election", str(election.id))
    _print_kv("public key", pub_fingerprint)

    _print_heading("[Registration]")
    voters = [Voter() for _ in range(3)]
    for v in voters:
        election.add_voter(v)
        _print_kv("registered", str(v.id)[:8] + "..")

    _print_heading("[Casting]")
    receipts = []
    for v, choice in zip(voters, ["Yes", "Yes", "No"]):
        receipt = voting.vote(election, v.id, choice)
        receipts.append(receipt)
        _print_kv("receipt", receipt)

    # a second attempt by the first voter is refused
    try:
        voting.vote(election, voters[0].id, "No")
    except VotingError as e:
        _print_kv("double vote", e.kind.name)

    _print_heading("[Tally] homomorphic aggregation, only totals are decrypted")
    for choice, count in voting.tally(election).items():
        _print_kv(choice, str(count))

    _print_heading("[Verification]")
    _print_kv("receipt 3 is 'No'", str(voting.verify_vote(election, receipts[2], "No")))
    _print_kv("receipt 3 is 'Yes'", str(voting.verify_vote(election, receipts[2], "Yes")))
    _print_kv("bogus receipt", str(voting.verify_vote(election, "not-a-valid-id", "No")))
    _print_kv("inclusion", str(voting.inclusion_proof(election, receipts[0])))

    _print_heading("[Public view] election without its secret key")
    public = election.public_view()
    try:
        voting.tally(public)
    except VotingError as e:
        _print_kv("tally", e.kind.name)


if __name__ == "__main__":
    main()
