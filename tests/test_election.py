import json
import uuid

import pytest

from homovote import (
    Ballot,
    CryptoParams,
    Election,
    ErrorKind,
    Voter,
    VotingError,
    elgamal,
    voting,
)


def test_election_needs_choices(params):
    pub, _ = elgamal.generate_keypair(params)
    with pytest.raises(VotingError) as exc:
        Election("Empty", [], pub, params)
    assert exc.value.kind is ErrorKind.INVALID_ELECTION


def test_choices_are_frozen(params):
    choices = ["Yes", "No"]
    election = Election.create("Frozen", choices, params)
    choices.append("Maybe")
    assert election.choices == ("Yes", "No")


def test_group_must_fit_choices():
    toy = CryptoParams.toy()
    with pytest.raises(VotingError) as exc:
        Election.create("Too many", [str(i) for i in range(12)], toy)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETERS


def test_group_must_fit_voter_count():
    election = Election.create("Small", ["Yes", "No"], CryptoParams.toy())
    for _ in range(10):
        election.add_voter(Voter())
    with pytest.raises(VotingError) as exc:
        election.add_voter(Voter())
    assert exc.value.kind is ErrorKind.INVALID_PARAMETERS
    assert election.voter_count() == 10


def test_registry_state_machine(referendum):
    election, voters = referendum
    stranger = uuid.uuid4()
    assert not election.is_allowed_voter(stranger)
    assert election.is_allowed_voter(voters[0].id)
    assert election.has_voted(voters[0].id) is False
    election.set_voted(voters[0].id)
    assert election.has_voted(voters[0].id) is True


def test_duplicate_registration_keeps_state(referendum):
    election, voters = referendum
    voting.vote(election, voters[0].id, "Yes")
    with pytest.raises(VotingError) as exc:
        election.add_voter(voters[0])
    assert exc.value.kind is ErrorKind.DUPLICATE_VOTER
    assert election.has_voted(voters[0].id) is True


def test_ballot_count_never_exceeds_voters(params):
    election = Election.create("One voter", ["Yes", "No"], params)
    election.add_voter(Voter())
    election.add_ballot(Ballot.new("Yes", election.choices, election.public_key, params))
    with pytest.raises(VotingError) as exc:
        election.add_ballot(Ballot.new("No", election.choices, election.public_key, params))
    assert exc.value.kind is ErrorKind.INVALID_ELECTION
    assert election.nb_ballot() == 1


def test_ballot_width_must_match_choices(referendum, params):
    election, _ = referendum
    wide = Ballot.new("C", ["A", "B", "C"], election.public_key, params)
    with pytest.raises(VotingError) as exc:
        election.add_ballot(wide)
    assert exc.value.kind is ErrorKind.INVALID_ELECTION


def test_verify_vote(referendum):
    election, voters = referendum
    receipt = voting.vote(election, voters[2].id, "No")
    assert election.verify_vote(receipt, "No") is True
    assert election.verify_vote(receipt, "Yes") is False
    assert election.verify_vote("not-a-valid-id", "No") is None
    assert election.verify_vote(str(uuid.uuid4()), "No") is None


def test_inclusion_proof(referendum):
    election, voters = referendum
    first = voting.vote(election, voters[0].id, "Yes")
    second = voting.vote(election, voters[1].id, "No")
    assert election.generate_inclusion_proof(first) == "Ballot found at position 0"
    assert election.generate_inclusion_proof(second) == "Ballot found at position 1"
    assert election.generate_inclusion_proof("garbage") is None
    assert election.generate_inclusion_proof(str(uuid.uuid4())) is None


def test_serialized_form_has_no_secret(referendum):
    election, voters = referendum
    voting.vote(election, voters[0].id, "Yes")
    data = election.to_dict()
    assert set(data) == {"id", "name", "choices", "params", "public_key", "voters", "ballots"}
    assert "secret" not in json.dumps(data)
    assert data["voters"][0] == {"id": str(voters[0].id), "has_voted": True}


def test_public_view_is_tally_blind(referendum):
    election, voters = referendum
    receipt = voting.vote(election, voters[0].id, "Yes")
    public = election.public_view()
    assert election.can_tally() is True
    assert public.can_tally() is False
    assert public.secret_key is None
    assert public.nb_ballot() == 1
    assert public.has_voted(voters[0].id) is True
    # receipts still resolve, but cannot be opened
    assert public.generate_inclusion_proof(receipt) == "Ballot found at position 0"
    assert public.verify_vote(receipt, "Yes") is None
    with pytest.raises(VotingError) as exc:
        voting.tally(public)
    assert exc.value.kind is ErrorKind.TALLY_NOT_ALLOWED
    loaded = Election.from_dict(election.to_dict())
    with pytest.raises(VotingError) as exc:
        voting.tally(loaded)
    assert exc.value.kind is ErrorKind.TALLY_NOT_ALLOWED


def test_reload_with_secret_key(referendum):
    election, voters = referendum
    voting.vote(election, voters[0].id, "Yes")
    voting.vote(election, voters[1].id, "No")
    loaded = Election.from_dict(election.to_dict(), secret_key=election.secret_key)
    assert loaded.id == election.id
    assert voting.tally(loaded) == {"Yes": 1, "No": 1}
    with pytest.raises(VotingError) as exc:
        voting.vote(loaded, voters[0].id, "No")
    assert exc.value.kind is ErrorKind.ALREADY_VOTED


def test_from_dict_rejects_garbage():
    with pytest.raises(VotingError) as exc:
        Election.from_dict({"name": "x"})
    assert exc.value.kind is ErrorKind.INVALID_ELECTION


@pytest.mark.parametrize("path", ["id", "voter", "ballot"])
def test_from_dict_non_string_ids(referendum, path):
    election, voters = referendum
    voting.vote(election, voters[0].id, "Yes")
    data = election.to_dict()
    if path == "id":
        data["id"] = 123
    elif path == "voter":
        data["voters"][0]["id"] = 123
    else:
        data["ballots"][0]["id"] = 123
    with pytest.raises(VotingError) as exc:
        Election.from_dict(data, secret_key=election.secret_key)
    assert exc.value.kind is ErrorKind.INVALID_ELECTION


@pytest.mark.parametrize("component,value", [("c1", "0"), ("c2", "0"), ("c1", "1019")])
def test_from_dict_rejects_ciphertext_outside_group(referendum, component, value):
    election, voters = referendum
    voting.vote(election, voters[0].id, "Yes")
    data = election.to_dict()
    data["ballots"][0]["ciphertexts"][0][component] = value
    with pytest.raises(VotingError) as exc:
        Election.from_dict(data, secret_key=election.secret_key)
    assert exc.value.kind is ErrorKind.INVALID_ELECTION


def test_add_ballot_rejects_ciphertext_outside_group(referendum):
    election, _ = referendum
    good = Ballot.new("Yes", election.choices, election.public_key, election.encryption_params)
    bad = Ballot(id=good.id, ciphertexts=(elgamal.Ciphertext(c1=0, c2=5),) + good.ciphertexts[1:])
    with pytest.raises(VotingError) as exc:
        election.add_ballot(bad)
    assert exc.value.kind is ErrorKind.INVALID_ELECTION
    assert election.nb_ballot() == 0
    # nothing stored, so the receipt is simply unknown
    assert election.verify_vote(bad.receipt, "Yes") is None
