
import sys
import os
import io
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotbox.__main__
from ballotbox.access import Unauthorized
from ballotbox.election import Election

LOG = {
    'administrator': 'owner',
    'operations': [
        {'caller': 'owner', 'op': 'register_candidate', 'candidate': 1},
        {'caller': 'owner', 'op': 'register_candidate', 'candidate': 2},
        {'caller': 'mallory', 'op': 'register_candidate', 'candidate': 3},
        {'caller': 'owner', 'op': 'open_voting'},
        {'caller': 'a', 'op': 'cast_vote', 'candidate': 1},
        {'caller': 'b', 'op': 'cast_vote', 'candidate': 2},
        {'caller': 'c', 'op': 'cast_vote', 'candidate': 1},
        {'caller': 'c', 'op': 'cast_vote', 'candidate': 2},
        {'caller': 'owner', 'op': 'close_voting'},
    ],
}


def log_file(log=LOG):
    return io.StringIO(json.dumps(log))


def test_replay():
    election, operations = ballotbox.__main__.load_log(log_file())
    with pytest.warns(UserWarning):
        n_rejected = ballotbox.__main__.replay(election, operations)
    assert n_rejected == 2
    assert election.tally() == {1: 2, 2: 1}
    assert election.get_winner() == (1, 2)
    assert not election.voting_open


def test_replay_strict():
    election, operations = ballotbox.__main__.load_log(log_file())
    with pytest.raises(Unauthorized):
        ballotbox.__main__.replay(election, operations, strict=True)
    assert election.candidates == [1, 2]


def test_policy_in_log():
    log = dict(LOG, policy={'allow_late_registration': False})
    election, operations = ballotbox.__main__.load_log(log_file(log))
    assert not election.policy.allow_late_registration


@pytest.mark.parametrize('log', [
    [],
    {'operations': []},
    {'administrator': 'owner', 'operations': {}},
    {'administrator': 'owner', 'policy': {'bogus': True}},
])
def test_invalid_log(log):
    with pytest.raises(ValueError):
        ballotbox.__main__.load_log(log_file(log))


def test_invalid_json():
    with pytest.raises(ValueError):
        ballotbox.__main__.load_log(io.StringIO('{not json'))


@pytest.mark.parametrize('operation', [
    {'caller': 'owner', 'op': 'launch'},
    {'caller': 'owner', 'op': 'register_candidate'},
    {'op': 'open_voting'},
])
def test_invalid_operation(operation):
    with pytest.raises(ValueError):
        ballotbox.__main__.apply_operation(Election('owner'), operation)


def test_main_results(capsys):
    with pytest.warns(UserWarning):
        ballotbox.__main__.main(log_file(), quiet=True)
    out = capsys.readouterr().out
    assert 'Replayed 9 operations, 2 rejected' in out
    assert 'Voting is closed, 3 votes cast' in out
    assert 'Winner: 1 with 2 votes' in out


def test_main_no_candidates(capsys):
    ballotbox.__main__.main(log_file({'administrator': 'owner'}), quiet=True)
    assert 'No candidates registered' in capsys.readouterr().out


def test_main_dump(capsys):
    with pytest.warns(UserWarning):
        ballotbox.__main__.main(log_file(), dump=True, quiet=True)
    restored = Election.from_dict(json.loads(capsys.readouterr().out))
    assert restored.tally() == {1: 2, 2: 1}


@pytest.mark.parametrize('caller', [['x'], {'id': 'x'}, None])
def test_replay_skips_invalid_caller(caller):
    election, operations = ballotbox.__main__.load_log(log_file())
    operations = operations[:4] + [
        {'caller': caller, 'op': 'cast_vote', 'candidate': 1},
    ] + operations[4:]
    with pytest.warns(UserWarning, match='operation 4'):
        n_rejected = ballotbox.__main__.replay(election, operations)
    assert n_rejected == 3
    assert election.tally() == {1: 2, 2: 1}


def test_replay_strict_invalid_caller():
    election = Election('owner')
    with pytest.raises(ballotbox.__main__.InvalidCaller):
        ballotbox.__main__.replay(
            election, [{'caller': ['owner'], 'op': 'open_voting'}], strict=True
        )
    assert not election.voting_open


@pytest.mark.parametrize('log', [
    {'administrator': None},
    {'administrator': ['owner']},
    {'administrator': 'owner', 'policy': {'allow_reopening': 'false'}},
])
def test_invalid_log_values(log):
    with pytest.raises(ValueError):
        ballotbox.__main__.load_log(log_file(log))
