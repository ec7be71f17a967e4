'''The election state machine.

An :class:`Election` holds all state of a single election cycle: the fixed
administrator, the voting phase, the candidates with their vote counts in
registration order and the identities that have voted. The administrator
registers candidates and opens and closes voting; anybody may cast one vote
while voting is open; anybody may query the counts and the current winner.

Caller identities are authenticated by the transport that invokes these
methods; they are passed in explicitly as the first argument of every
operation acting on behalf of a caller.

Every failed operation raises before changing any state. All operations
on one election are serialized by a lock, so an election can be shared
between threads.

>>> election = Election('admin')
>>> election.register_candidate('admin', 1)
>>> election.register_candidate('admin', 2)
>>> election.open_voting('admin')
>>> election.cast_vote('alice', 2)
>>> election.get_winner()
(2, 1)
'''

import logging
import threading
from typing import Any, Dict, Hashable, List, Tuple

from ballotbox.access import admin_only, check_identity
from ballotbox.candidate import CandidateRegistry, CandidateError, \
    NoCandidates, UnknownCandidate, check_candidate_id, is_candidate_id
from ballotbox.evaluate import TieBreaking, Plurality, InputOrderSelector, \
    Tie, VotingSystemError
from ballotbox.persist import scoped_class_name, serialize_value, \
    deserialize_value
from ballotbox.policy import ElectionPolicy
from ballotbox.vote import VoterRoll, VotingClosed


logger = logging.getLogger(__name__)


class PhaseError(Exception):
    '''The operation is not permitted in the current voting phase.

    Only raised for behaviors restricted by the election policy.
    '''
    pass


DEFAULT_EVALUATOR = TieBreaking(Plurality(), InputOrderSelector())


class Election:
    '''A single election cycle.

    :param administrator: Identity of the administrator; fixed for the
        lifetime of the election.
    :param policy: Policy deciding behaviors not fixed by the election rules;
        see :class:`ballotbox.policy.ElectionPolicy` for the defaults.
    :param evaluator: Evaluator selecting the winner from the vote counts
        in registration order. The default elects the candidate with most
        votes and breaks ties in favor of the earliest registered one.
    '''
    def __init__(self,
                 administrator: Hashable,
                 policy: ElectionPolicy = None,
                 evaluator=None,
                 ):
        self._administrator = check_identity(administrator)
        self.policy = policy if policy is not None else ElectionPolicy()
        self.evaluator = (
            evaluator if evaluator is not None else DEFAULT_EVALUATOR
        )
        self._voting_open = False
        self._ever_opened = False
        self._ever_closed = False
        self._registry = CandidateRegistry()
        self._unregistered: Dict[int, int] = {}
        self._voters = VoterRoll()
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return (
            f'<Election(admin={self._administrator!r},'
            f' open={self._voting_open}, candidates={len(self._registry)},'
            f' voters={len(self._voters)})>'
        )

    @property
    def administrator(self) -> Hashable:
        return self._administrator

    @property
    def voting_open(self) -> bool:
        return self._voting_open

    @property
    def candidates(self) -> List[int]:
        '''Registered candidate identifiers in registration order.'''
        with self._lock:
            return list(self._registry)

    @property
    def n_voters(self) -> int:
        with self._lock:
            return len(self._voters)

    @admin_only
    def register_candidate(self, caller: Hashable, candidate_id: int) -> None:
        '''Register a candidate with zero votes at the end of the registry.

        :raises Unauthorized: If the caller is not the administrator.
        :raises InvalidCandidate: If the identifier is not a non-negative
            integer.
        :raises PhaseError: If voting has already been opened and the policy
            forbids late registration.
        :raises DuplicateCandidate: If the candidate is already registered.
        '''
        check_candidate_id(candidate_id)
        with self._lock:
            if self._ever_opened and not self.policy.allow_late_registration:
                raise PhaseError(
                    'candidates cannot be registered once voting has opened'
                )
            # votes counted while unregistered carry over
            self._registry.add(
                candidate_id, self._unregistered.get(candidate_id, 0)
            )
            self._unregistered.pop(candidate_id, None)
        logger.info('registered candidate %d', candidate_id)

    @admin_only
    def open_voting(self, caller: Hashable) -> None:
        '''Open voting.

        :raises Unauthorized: If the caller is not the administrator.
        :raises PhaseError: If the policy forbids the transition (voting
            already open under strict transitions, or reopening a closed
            vote).
        '''
        with self._lock:
            if self._voting_open and self.policy.strict_phase_transitions:
                raise PhaseError('voting is already open')
            if self._ever_closed and not self.policy.allow_reopening:
                raise PhaseError('voting cannot be reopened')
            self._voting_open = True
            self._ever_opened = True
        logger.info('voting opened')

    @admin_only
    def close_voting(self, caller: Hashable) -> None:
        '''Close voting.

        :raises Unauthorized: If the caller is not the administrator.
        :raises PhaseError: If voting is not open and the policy requires
            strict transitions.
        '''
        with self._lock:
            if not self._voting_open:
                if self.policy.strict_phase_transitions:
                    raise PhaseError('voting is not open')
            else:
                self._ever_closed = True
            self._voting_open = False
        logger.info('voting closed')

    def cast_vote(self, caller: Hashable, candidate_id: int) -> None:
        '''Cast the caller's single vote for the candidate.

        :raises TypeError: If the caller identity is not hashable.
        :raises VotingClosed: If voting is not open.
        :raises AlreadyVoted: If the caller has voted before.
        :raises UnknownCandidate: If the candidate is not registered and the
            policy rejects such votes.
        :raises InvalidCandidate: If the policy accepts votes for
            unregistered candidates but the identifier is not valid.
        '''
        check_identity(caller)
        with self._lock:
            if not self._voting_open:
                raise VotingClosed()
            self._voters.check(caller)
            if is_candidate_id(candidate_id) and candidate_id in self._registry:
                n_votes = self._registry.increment(candidate_id)
            elif self.policy.reject_unknown_candidates:
                raise UnknownCandidate(candidate_id)
            else:
                check_candidate_id(candidate_id)
                n_votes = self._unregistered.get(candidate_id, 0) + 1
                self._unregistered[candidate_id] = n_votes
            self._voters.mark(caller)
        logger.debug('vote counted for %d, now at %d', candidate_id, n_votes)

    def get_votes_for_candidate(self, candidate_id: int) -> int:
        '''Return the current number of votes for the candidate.

        :raises UnknownCandidate: If the candidate is not registered (unless
            the policy accepts votes for unregistered candidates, in which
            case their count is returned).
        '''
        with self._lock:
            if is_candidate_id(candidate_id):
                if candidate_id in self._registry:
                    return self._registry.votes_for(candidate_id)
                elif not self.policy.reject_unknown_candidates:
                    return self._unregistered.get(candidate_id, 0)
        raise UnknownCandidate(candidate_id)

    def has_voted(self, identity: Any) -> bool:
        with self._lock:
            return self._voters.has_voted(identity)

    def tally(self) -> Dict[int, int]:
        '''Return the vote counts of registered candidates.

        The dictionary is ordered by registration.
        '''
        with self._lock:
            return self._registry.tally()

    def get_winner(self) -> Tuple[int, int]:
        '''Return the winning candidate and their number of votes.

        Can be called at any time; while voting is open, this gives the
        current leader. With the default evaluator, the earliest registered
        of the candidates with most votes wins.

        :raises NoCandidates: If no candidates are registered.
        :raises VotingSystemError: If the evaluator leaves the winner tied.
        '''
        votes = self.tally()
        if not votes:
            raise NoCandidates()
        winner = self.evaluator.evaluate(votes, 1)[0]
        if isinstance(winner, Tie):
            raise VotingSystemError(f'winner not determined, tie: {set(winner)}')
        logger.debug('winner %d with %d votes', winner, votes[winner])
        return winner, votes[winner]

    def to_dict(self) -> Dict[str, Any]:
        '''Serialize the election state to a JSON-ready dictionary.'''
        with self._lock:
            return {
                'class': scoped_class_name(self),
                'administrator': serialize_value(self._administrator),
                'voting_open': self._voting_open,
                'ever_opened': self._ever_opened,
                'ever_closed': self._ever_closed,
                'candidates': [
                    [cand, n_votes] for cand, n_votes in self._registry.items()
                ],
                'unregistered': [
                    [cand, n_votes]
                    for cand, n_votes in self._unregistered.items()
                ],
                'voters': [
                    serialize_value(voter)
                    for voter in sorted(self._voters, key=repr)
                ],
                'policy': self.policy.to_dict(),
                'evaluator': serialize_value(self.evaluator),
            }

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> 'Election':
        '''Restore an election from a dictionary produced by :meth:`to_dict`.

        :raises ValueError: If the dictionary is not a valid election
            snapshot.
        '''
        try:
            election = cls(
                deserialize_value(value['administrator']),
                policy=deserialize_value(value.get('policy')),
                evaluator=deserialize_value(value.get('evaluator')),
            )
            election._voting_open = _check_flag(value.get('voting_open', False))
            election._ever_opened = _check_flag(
                value.get('ever_opened', election._voting_open)
            )
            election._ever_closed = _check_flag(value.get('ever_closed', False))
            for cand, n_votes in value.get('candidates', []):
                election._registry.add(
                    check_candidate_id(cand), _check_count(n_votes)
                )
            for cand, n_votes in value.get('unregistered', []):
                if check_candidate_id(cand) in election._registry:
                    raise ValueError(
                        f'candidate {cand} both registered and unregistered'
                    )
                election._unregistered[cand] = _check_count(n_votes)
            for voter in value.get('voters', []):
                election._voters.mark(check_identity(deserialize_value(voter)))
        except (KeyError, TypeError, ValueError, CandidateError) as e:
            raise ValueError(f'invalid election snapshot: {e}') from e
        if not isinstance(election.policy, ElectionPolicy):
            raise ValueError(
                f'invalid election snapshot policy: {election.policy!r}'
            )
        if not callable(getattr(election.evaluator, 'evaluate', None)):
            raise ValueError(
                f'invalid election snapshot evaluator: {election.evaluator!r}'
            )
        return election


def _check_flag(flag: Any) -> bool:
    if not isinstance(flag, bool):
        raise ValueError(f'invalid phase flag: {flag!r}')
    return flag


def _check_count(n_votes: Any) -> int:
    if (
        not isinstance(n_votes, int)
        or isinstance(n_votes, bool)
        or n_votes < 0
    ):
        raise ValueError(f'invalid vote count: {n_votes!r}')
    return n_votes
