# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
The shared state-id space that automata reserve their states from.

Every automaton built from one :class:`StateSpace` gets ids that no other
automaton in the same space holds, which is what lets two automata be merged
without renumbering.
"""

from loguru import logger

from regexec.support.bitvector import BitVector

#: Default number of state ids in a space.
CAPACITY = 1000


# Exceptions


class NFAError(Exception):
    """
    Base class for errors raised while building or querying an automaton.
    """


class NonReservedState(NFAError):
    """
    Raised when a state id is not owned by the automaton it was given to.

    Attributes:
        state: The offending state id.
    """

    def __init__(self, state):
        super().__init__(f"State {state!r} is not reserved by this automaton")
        self.state = state


class AlreadyReservedState(NFAError):
    """
    Raised when a reservation overlaps an id that is already reserved.

    Attributes:
        state: The first id in the requested range that was already taken.
    """

    def __init__(self, state):
        super().__init__(f"State {state!r} is already reserved")
        self.state = state


class StateSpaceExhausted(NFAError):
    """
    Raised when a space has no free run of ids long enough for a request.
    """


def _is_state_id(state):
    return isinstance(state, int) and not isinstance(state, bool)


class StateSpace:
    """
    A fixed-capacity table of reserved state ids.

    Ids are integers in ``[0, capacity)``. A space is an ordinary object, so
    independent groups of automata (and independent tests) each get their own
    table rather than sharing one per process.

    >>> space = StateSpace(16)
    >>> space.reserve(0, 3)
    range(0, 4)
    >>> space.allocate(2)
    (4, 5)
    >>> space.is_reserved(5), space.is_reserved(6)
    (True, False)
    """

    def __init__(self, capacity=CAPACITY):
        if not _is_state_id(capacity) or capacity < 1:
            raise ValueError(f"Capacity must be a positive integer, not {capacity!r}")
        self.capacity = capacity
        self.taken = BitVector(capacity)

    def __repr__(self):
        return f"<{type(self).__name__} {len(self.taken)}/{self.capacity}>"

    def __len__(self):
        return len(self.taken)

    def check_range(self, lo, hi):
        """
        Checks that ``[lo, hi]`` is a well-formed inclusive range inside the
        space.

        Raises:
            ValueError: If either bound is not an int, lies outside
                ``[0, capacity)``, or ``lo > hi``.
        """
        if not (_is_state_id(lo) and _is_state_id(hi)):
            raise ValueError(f"State range bounds must be integers: {lo!r}, {hi!r}")
        if lo > hi:
            raise ValueError(f"Empty state range {lo}..{hi}")
        if lo < 0 or hi >= self.capacity:
            raise ValueError(
                f"State range {lo}..{hi} outside the space [0, {self.capacity})"
            )

    def is_reserved(self, state):
        """
        Returns True if any automaton in this space holds ``state``.
        Out-of-range ids are reported as not reserved.
        """
        return state in self.taken

    def reserve(self, lo, hi):
        """
        Reserves every id in the inclusive range ``[lo, hi]``.

        The whole range is checked before anything is marked, so a request
        that overlaps an existing reservation leaves the table unchanged.

        Args:
            lo (int): The first id to reserve.
            hi (int): The last id to reserve.

        Returns:
            range: The reserved ids.

        Raises:
            ValueError: If the range is malformed (see :meth:`check_range`).
            AlreadyReservedState: If any id in the range is already taken.
        """
        self.check_range(lo, hi)
        taken = self.taken
        for state in range(lo, hi + 1):
            if taken[state]:
                raise AlreadyReservedState(state)

        states = range(lo, hi + 1)
        taken.set_from(states)
        logger.debug("Reserved states {}..{} ({} in use)", lo, hi, len(taken))
        return states

    def allocate(self, count):
        """
        Reserves the lowest run of ``count`` consecutive free ids.

        Args:
            count (int): How many ids to reserve.

        Returns:
            tuple: The inclusive ``(lo, hi)`` bounds of the reserved run.

        Raises:
            ValueError: If ``count`` is less than 1.
            StateSpaceExhausted: If no free run of that length exists.
        """
        if not _is_state_id(count) or count < 1:
            raise ValueError(f"Can't allocate {count!r} states")

        taken = self.taken
        run = 0
        for state in range(self.capacity):
            if taken[state]:
                run = 0
                continue
            run += 1
            if run == count:
                lo = state - count + 1
                self.reserve(lo, state)
                return lo, state

        raise StateSpaceExhausted(
            f"No run of {count} free states in a space of {self.capacity}"
        )

    def release(self, states):
        """
        Returns the given ids to the space. Ids that are not reserved are
        ignored.
        """
        taken = self.taken
        freed = 0
        for state in states:
            if state in taken:
                taken.clear(state)
                freed += 1
        if freed:
            logger.debug("Released {} states ({} in use)", freed, len(taken))
        return freed
