'''Voter records and vote errors.

A voter is any hashable identity supplied by the caller's transport layer.
The :class:`VoterRoll` remembers who has voted; nobody is ever removed from
it.
'''

from typing import Any, Hashable, Iterator, Set


class VoteError(Exception):
    '''A vote cannot be accepted given the election state.'''
    pass


class VotingClosed(VoteError):
    '''A vote was cast while voting was not open.'''
    def __init__(self):
        super().__init__('voting is not open')


class AlreadyVoted(VoteError):
    '''The voter has already cast a vote.

    :param voter: Identity of the voter.
    '''
    def __init__(self, voter: Hashable):
        self.voter = voter
        super().__init__(f'voter has already voted: {voter!r}')


class VoterRoll:
    '''Identities that have already cast their vote.'''
    def __init__(self):
        self._voted: Set[Hashable] = set()

    def __contains__(self, identity: Any) -> bool:
        return self.has_voted(identity)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._voted)

    def __len__(self) -> int:
        return len(self._voted)

    def has_voted(self, identity: Any) -> bool:
        try:
            return identity in self._voted
        except TypeError:
            # unhashable identities cannot have voted
            return False

    def check(self, identity: Hashable) -> None:
        '''Check that the identity may still vote.

        :raises AlreadyVoted: If it has voted already.
        '''
        if self.has_voted(identity):
            raise AlreadyVoted(identity)

    def mark(self, identity: Hashable) -> None:
        self._voted.add(identity)
