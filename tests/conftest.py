import os
import sys

import pytest

# Ensure repository src directory is on sys.path for tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from homovote import CryptoParams, Election, Voter, elgamal  # noqa: E402


@pytest.fixture
def params():
    # order of g=2 mod 1019 is 1018: plenty of room for small elections
    return CryptoParams.test()


@pytest.fixture
def keypair(params):
    return elgamal.generate_keypair(params)


@pytest.fixture
def referendum(params):
    """Yes/No election with three registered voters."""
    election = Election.create("Referendum", ["Yes", "No"], params)
    voters = [Voter() for _ in range(3)]
    for v in voters:
        election.add_voter(v)
    return election, voters
