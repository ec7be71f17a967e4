'''Evaluators determining the election winner from the vote counts.

Evaluators receive the vote counts as a dictionary mapping candidates to
numbers of votes, ordered by registration, and return a list of the elected
candidates. Where the counts do not decide, a :class:`Tie` appears in the
result; wrap the evaluator in :class:`TieBreaking` to resolve it.

The default winner rule of an election is plurality with ties going to the
earliest registered candidate::

    TieBreaking(Plurality(), InputOrderSelector())
'''

from __future__ import annotations

import logging
import operator
from typing import Any, Dict, List, Tuple, Union

from ballotbox.persist import simple_serialization


logger = logging.getLogger(__name__)


class VotingSystemError(Exception):
    '''An evaluator with a valid setup ended up in an unresolvable state.'''
    pass


class Tie(frozenset):
    '''Candidates tied for a seat.

    Produced by evaluators that do not resolve ties, for example plurality
    when two candidates have an equal number of votes for a single seat.
    Caught and resolved by :class:`TieBreaking`.
    '''
    @staticmethod
    def any(result: List[Union[Any, Tie]]) -> bool:
        '''Return True if there is any tie in the list, False otherwise.'''
        return any(isinstance(item, Tie) for item in result)


def sorted_votes(votes: Dict[Any, int],
                 descending: bool = True,
                 ) -> List[Tuple[Any, int]]:
    '''Return votes items sorted by value.

    The sort is stable, so equal counts keep their input order.
    '''
    return sorted(votes.items(), key=operator.itemgetter(1), reverse=descending)


def get_n_best(votes: Dict[Any, int],
               n_seats: int,
               ) -> List[Union[Any, Tie]]:
    '''Return n_seats candidates with the highest number of votes.

    :param votes: Mapping of candidates to the number of votes obtained.
    :param n_seats: Number of seats to be filled.
    :returns: A list of top n_seats candidates. If there is a tie, the last
        items will refer to a single Tie object containing the tied candidates.
    '''
    sorted_items = sorted_votes(votes)
    if len(sorted_items) <= n_seats:
        return [cand for cand, n_votes in sorted_items]
    threshold_votes = sorted_items[n_seats - 1][1]
    if sorted_items[n_seats][1] != threshold_votes:
        return [cand for cand, n_votes in sorted_items[:n_seats]]
    # the last elected and first unelected are tied, find all tied
    tied = [cand for cand, n_votes in sorted_items if n_votes == threshold_votes]
    n_untied = next(
        i for i, (cand, n_votes) in enumerate(sorted_items)
        if n_votes == threshold_votes
    )
    return (
        [cand for cand, n_votes in sorted_items[:n_untied]]
        + [Tie(tied)] * (n_seats - n_untied)
    )


@simple_serialization
class Plurality:
    '''Plurality evaluator. Elects the candidates with most votes.

    For a single seat and one vote per voter, this is first-past-the-post.
    '''
    def evaluate(self,
                 votes: Dict[Any, int],
                 n_seats: int = 1,
                 ) -> List[Union[Any, Tie]]:
        '''Select candidates by plurality voting.

        In case of a tie, returns :class:`Tie` objects at the end of the list
        of elected candidates, one per tied seat.

        :param votes: Vote counts per candidate.
        :param n_seats: Number of candidates to select.
        '''
        return get_n_best(votes, n_seats)


@simple_serialization
class InputOrderSelector:
    '''Select first N candidates as they appear in the vote counts.

    Election vote counts are ordered by candidate registration, so as a
    tiebreaker this gives the seat to the earliest registered candidate.
    '''
    def evaluate(self,
                 votes: Dict[Any, int],
                 n_seats: int = 1,
                 ) -> List[Any]:
        return [cand for i, cand in enumerate(votes.keys()) if i < n_seats]


@simple_serialization
class TieBreaking:
    '''Break ties from the main evaluation through a dedicated tiebreaker.

    Runs the main evaluator on the input, and if ties are present in its
    output, runs the tiebreaker on the votes of the tied candidates only,
    keeping their input order.

    :param main: The main evaluator.
    :param tiebreaker: An evaluator to select from the tied candidates.
    '''
    def __init__(self, main, tiebreaker):
        self.main = main
        self.tiebreaker = tiebreaker

    def evaluate(self,
                 votes: Dict[Any, int],
                 n_seats: int = 1,
                 ) -> List[Any]:
        '''Evaluate the election, breaking ties if they arise.'''
        result = self.main.evaluate(votes, n_seats)
        if not Tie.any(result):
            return result
        result = list(result)
        for tie in {item for item in result if isinstance(item, Tie)}:
            n_tied_seats = result.count(tie)
            sub_votes = {
                cand: n_votes for cand, n_votes in votes.items()
                if cand in tie
            }
            broken = self.tiebreaker.evaluate(sub_votes, n_tied_seats)
            logger.debug('tie among %s broken in favor of %s',
                         set(tie), broken)
            for cand in broken:
                result[result.index(tie)] = cand
        return result
