"""Ballotbox - a single-election vote tracking library.

A ballotbox :class:`election.Election` tracks the candidates and votes of one
election cycle:

-   The administrator, fixed when the election is created, registers
    candidates by integer identifiers and opens and closes voting. Other
    callers attempting this are rejected (see the ``access`` module).
-   While voting is open, every caller identity can cast exactly one vote
    for a registered candidate (see the ``vote`` and ``candidate`` modules).
-   At any time, anyone can query the vote counts and the winner. The winner
    is the candidate with most votes; ties go to the earliest registered
    candidate. Other winner rules can be built from the evaluators in the
    ``evaluate`` module.

Behaviors not fixed by these rules, such as registering candidates after
voting has opened, are configured by a :class:`policy.ElectionPolicy`.
Elections, policies and evaluators can be saved to and restored from
JSON-ready dictionaries with the ``persist`` module.

Caller identities are opaque hashable values; authenticating them is up to
the transport layer that exposes the election.
"""
