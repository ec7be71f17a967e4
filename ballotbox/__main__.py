"""A commandline tool to replay an election operation log.

Reads a JSON document with the administrator identity, an optional election
policy and a list of operations, each with a caller, an operation name and
a candidate where the operation needs one. Applies the operations to a fresh
election in order and shows the resulting vote counts and winner.
"""

import argparse
import io
import json
import logging
import sys
import warnings
from typing import Any, Dict, List, Optional, Tuple

from ballotbox.access import Unauthorized, check_identity
from ballotbox.candidate import CandidateError
from ballotbox.election import Election, PhaseError
from ballotbox.policy import ElectionPolicy
from ballotbox.vote import VoteError

argparser = argparse.ArgumentParser(
    prog='ballotbox',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='file to load the operation log from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load the operation log from standard input',
)
argparser.add_argument(
    '-s', '--strict',
    action='store_true',
    help='stop at the first rejected operation instead of skipping it',
)
argparser.add_argument(
    '-d', '--dump',
    action='store_true',
    help='print the final election state as JSON instead of the results',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all election log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any election log messages',
)

CANDIDATE_OPERATIONS = {'register_candidate', 'cast_vote'}
PHASE_OPERATIONS = {'open_voting', 'close_voting'}


class InvalidCaller(ValueError):
    """The caller of a logged operation is missing or not a valid identity."""
    pass


REJECTIONS = (
    Unauthorized, CandidateError, VoteError, PhaseError, InvalidCaller,
)


def main(input_file: Optional[io.TextIOBase] = None,
         use_stdin: bool = False,
         strict: bool = False,
         dump: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    election, operations = load_log(input_file)
    n_rejected = replay(election, operations, strict=strict)
    if dump:
        print(json.dumps(election.to_dict(), indent=2))
    else:
        show_results(election, len(operations), n_rejected)


def load_log(input_file: io.TextIOBase) -> Tuple[Election, List[Dict[str, Any]]]:
    """Create an election from the operation log and return its operations."""
    try:
        log = json.load(input_file)
    except json.JSONDecodeError as e:
        raise ValueError(f'operation log is not valid JSON: {e}') from e
    if not isinstance(log, dict) or 'administrator' not in log:
        raise ValueError('operation log must be an object with administrator')
    try:
        policy = ElectionPolicy(**log.get('policy', {}))
    except (TypeError, ValueError) as e:
        raise ValueError(f'invalid election policy: {e}') from e
    operations = log.get('operations', [])
    if not isinstance(operations, list):
        raise ValueError('operations must be a list')
    try:
        election = Election(log['administrator'], policy=policy)
    except TypeError as e:
        raise ValueError(f'invalid administrator: {e}') from e
    return election, operations


def replay(election: Election,
           operations: List[Dict[str, Any]],
           strict: bool = False,
           ) -> int:
    """Apply the operations to the election and return how many failed.

    Rejected operations produce a warning and are skipped, unless strict
    is set, in which case the rejection is raised.
    """
    n_rejected = 0
    for i, operation in enumerate(operations):
        try:
            apply_operation(election, operation)
        except REJECTIONS as e:
            if strict:
                raise
            n_rejected += 1
            warnings.warn(
                f'operation {i} ({operation.get("op")}) rejected: {e}'
            )
    return n_rejected


def apply_operation(election: Election, operation: Dict[str, Any]) -> None:
    name = operation.get('op')
    caller = operation.get('caller')
    try:
        check_identity(caller)
    except TypeError as e:
        raise InvalidCaller(f'operation {name}: {e}') from e
    if name in CANDIDATE_OPERATIONS:
        if 'candidate' not in operation:
            raise ValueError(f'operation {name} needs a candidate')
        getattr(election, name)(caller, operation['candidate'])
    elif name in PHASE_OPERATIONS:
        getattr(election, name)(caller)
    else:
        raise ValueError(
            f'unknown operation {name!r}, supported: '
            + ', '.join(sorted(CANDIDATE_OPERATIONS | PHASE_OPERATIONS))
        )


def show_results(election: Election,
                 n_operations: int,
                 n_rejected: int,
                 ) -> None:
    print(f'Replayed {n_operations} operations, {n_rejected} rejected')
    print(f'Voting is {"open" if election.voting_open else "closed"},'
          f' {election.n_voters} votes cast')
    tally = election.tally()
    if not tally:
        print('No candidates registered')
        return
    print()
    n_just_chars = max(len(str(cand)) for cand in tally)
    for cand, n_votes in tally.items():
        print(str(cand).rjust(n_just_chars), ' ', n_votes)
    winner, n_votes = election.get_winner()
    print()
    print(f'Winner: {winner} with {n_votes} votes')


def run(argv: Optional[List[str]] = None) -> None:
    args = argparser.parse_args(argv)
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))


if __name__ == '__main__':
    run()
