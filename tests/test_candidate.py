
import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotbox.candidate
from ballotbox.candidate import CandidateRegistry, CandidateError, \
    DuplicateCandidate, UnknownCandidate, NoCandidates, InvalidCandidate


@pytest.mark.parametrize(('value', 'is_valid'), [
    (0, True),
    (1, True),
    (2 ** 256 - 1, True),
    (-1, False),
    (True, False),
    (False, False),
    (1.0, False),
    ('1', False),
    (None, False),
])
def test_candidate_id(value, is_valid):
    assert ballotbox.candidate.is_candidate_id(value) == is_valid
    if is_valid:
        assert ballotbox.candidate.check_candidate_id(value) == value
    else:
        with pytest.raises(InvalidCandidate):
            ballotbox.candidate.check_candidate_id(value)


@pytest.mark.parametrize('error', [
    DuplicateCandidate(1),
    UnknownCandidate(1),
    InvalidCandidate('x'),
    NoCandidates(),
])
def test_errors_are_candidate_errors(error):
    assert isinstance(error, CandidateError)
    assert str(error)


def test_registry_order():
    registry = CandidateRegistry()
    for cand in [3, 1, 2]:
        registry.add(cand)
    assert list(registry) == [3, 1, 2]
    assert len(registry) == 3
    assert 1 in registry
    assert 4 not in registry
    assert registry.tally() == {3: 0, 1: 0, 2: 0}


def test_registry_increment():
    registry = CandidateRegistry()
    registry.add(1)
    assert registry.increment(1) == 1
    assert registry.increment(1) == 2
    assert registry.votes_for(1) == 2
    with pytest.raises(UnknownCandidate):
        registry.increment(2)
    assert 2 not in registry


def test_registry_duplicate():
    registry = CandidateRegistry()
    registry.add(1)
    registry.increment(1)
    with pytest.raises(DuplicateCandidate):
        registry.add(1)
    assert registry.votes_for(1) == 1


def test_registry_tally_is_copy():
    registry = CandidateRegistry()
    registry.add(1)
    tally = registry.tally()
    tally[1] = 100
    assert registry.votes_for(1) == 0
