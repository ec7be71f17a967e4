'''Candidate identifiers, the candidate registry and candidate errors.

Candidates are identified by caller-supplied non-negative integers. The
:class:`CandidateRegistry` keeps them in registration order together with
their vote counts; the order matters because the earliest registered
candidate wins a tie.
'''

from typing import Any, Dict, Iterator, List, Tuple


class CandidateError(Exception):
    '''A candidate is invalid in the given context.

    :param candidate: Candidate identifier that was found to be invalid.
    :param reason: What is wrong with the candidate.
    '''
    def __init__(self, candidate: Any, reason: str = 'invalid candidate'):
        self.candidate = candidate
        super().__init__(f'{reason}: {candidate!r}')


class InvalidCandidate(CandidateError):
    '''The candidate identifier is not a non-negative integer.'''
    def __init__(self, candidate: Any):
        super().__init__(
            candidate, 'candidate identifier must be a non-negative integer'
        )


class DuplicateCandidate(CandidateError):
    '''The candidate is already registered.'''
    def __init__(self, candidate: int):
        super().__init__(candidate, 'candidate already exists')


class UnknownCandidate(CandidateError):
    '''The candidate has not been registered.'''
    def __init__(self, candidate: Any):
        super().__init__(candidate, 'unknown candidate')


class NoCandidates(CandidateError):
    '''No candidates are registered, so there is nobody to elect.'''
    def __init__(self):
        self.candidate = None
        Exception.__init__(self, 'no candidates registered')


def is_candidate_id(value: Any) -> bool:
    '''Return True if the value is a non-negative integer (not a boolean).'''
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and value >= 0
    )


def check_candidate_id(candidate_id: Any) -> int:
    '''Return the identifier if it is a valid candidate identifier.

    :raises InvalidCandidate: If it is not a non-negative integer.
    '''
    if not is_candidate_id(candidate_id):
        raise InvalidCandidate(candidate_id)
    return candidate_id


class CandidateRegistry:
    '''Registered candidates with their vote counts, in registration order.

    Relies on dictionaries maintaining insertion order. Not thread-safe on
    its own; the owning election serializes access to it.
    '''
    def __init__(self):
        self._votes: Dict[int, int] = {}

    def __contains__(self, candidate_id: Any) -> bool:
        return candidate_id in self._votes

    def __iter__(self) -> Iterator[int]:
        return iter(self._votes)

    def __len__(self) -> int:
        return len(self._votes)

    def __repr__(self) -> str:
        return f'<CandidateRegistry({self._votes})>'

    def add(self, candidate_id: int, votes: int = 0) -> None:
        '''Append a candidate to the end of the registry.

        :raises DuplicateCandidate: If the candidate is already registered.
        '''
        if candidate_id in self._votes:
            raise DuplicateCandidate(candidate_id)
        self._votes[candidate_id] = votes

    def votes_for(self, candidate_id: int) -> int:
        try:
            return self._votes[candidate_id]
        except KeyError:
            raise UnknownCandidate(candidate_id) from None

    def increment(self, candidate_id: int) -> int:
        new_count = self.votes_for(candidate_id) + 1
        self._votes[candidate_id] = new_count
        return new_count

    def tally(self) -> Dict[int, int]:
        '''Return a copy of the vote counts, in registration order.'''
        return self._votes.copy()

    def items(self) -> List[Tuple[int, int]]:
        return list(self._votes.items())
