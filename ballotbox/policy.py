'''Election policies.

The minimal election contract leaves a few behaviors open: registering
candidates after voting has started, repeating phase transitions, reopening
a closed vote, and votes for candidates that were never registered. An
:class:`ElectionPolicy` decides each of them explicitly. The defaults follow
the permissive observed behavior, except that votes for unknown candidates
are rejected.
'''

from ballotbox.persist import simple_serialization


@simple_serialization
class ElectionPolicy:
    '''Switches for the behaviors not fixed by the election rules.

    :param allow_late_registration: Whether candidates can still be
        registered after voting has been opened for the first time.
    :param strict_phase_transitions: Whether opening an open vote or closing
        a closed one is an error (:class:`ballotbox.election.PhaseError`)
        rather than a no-op.
    :param allow_reopening: Whether voting can be opened again after it was
        closed.
    :param reject_unknown_candidates: Whether a vote for an unregistered
        candidate is rejected with
        :class:`ballotbox.candidate.UnknownCandidate`. If False, such votes
        are counted for the identifier anyway, but the identifier is not
        eligible to win unless registered later.
    '''
    def __init__(self,
                 allow_late_registration: bool = True,
                 strict_phase_transitions: bool = False,
                 allow_reopening: bool = True,
                 reject_unknown_candidates: bool = True,
                 ):
        for name, flag in (
            ('allow_late_registration', allow_late_registration),
            ('strict_phase_transitions', strict_phase_transitions),
            ('allow_reopening', allow_reopening),
            ('reject_unknown_candidates', reject_unknown_candidates),
        ):
            if not isinstance(flag, bool):
                raise ValueError(f'policy {name} must be a boolean, got {flag!r}')
        self.allow_late_registration = allow_late_registration
        self.strict_phase_transitions = strict_phase_transitions
        self.allow_reopening = allow_reopening
        self.reject_unknown_candidates = reject_unknown_candidates

    @classmethod
    def strict(cls) -> 'ElectionPolicy':
        '''Return the most restrictive policy.

        Candidates must be registered before voting opens, every phase
        transition must change the phase, voting opens only once and votes
        must name a registered candidate.
        '''
        return cls(
            allow_late_registration=False,
            strict_phase_transitions=True,
            allow_reopening=False,
            reject_unknown_candidates=True,
        )

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, ElectionPolicy)
            and self.to_dict() == other.to_dict()
        )

    def __hash__(self) -> int:
        return hash(tuple(self.to_dict().items()))

    def __repr__(self) -> str:
        params = ', '.join(
            f'{key}={val}' for key, val in self.to_dict().items()
            if key != 'class'
        )
        return f'<ElectionPolicy({params})>'
