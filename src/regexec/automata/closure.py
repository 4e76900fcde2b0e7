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
Incrementally maintained epsilon-reachability for an automaton.

:class:`EpsilonClosure` keeps, for every state, the full set of states it can
reach through one or more epsilon edges (``forward``) and the full set of
states that can reach it (``backward``). Both tables are updated when an edge
is added, so a closure query is a set lookup and never a graph search.
"""


class EpsilonClosure:
    """
    Transitive closure of an epsilon edge relation, kept up to date on every
    edge insertion.

    A state is only in its own forward set if it lies on an epsilon cycle
    (including a self-loop).

    >>> ec = EpsilonClosure([0, 1, 2])
    >>> ec.add_edge(1, 2)
    True
    >>> _ = ec.add_edge(0, 1)
    >>> sorted(ec.reachable(0))
    [1, 2]
    >>> sorted(ec.closure_of({1}))
    [1, 2]
    """

    def __init__(self, states=()):
        self.forward = {}
        self.backward = {}
        for state in states:
            self.add_state(state)

    def __contains__(self, state):
        return state in self.forward

    def __len__(self):
        return len(self.forward)

    def __eq__(self, other):
        if not isinstance(other, EpsilonClosure):
            return NotImplemented
        return self.forward == other.forward and self.backward == other.backward

    def add_state(self, state):
        """
        Creates empty forward and backward entries for ``state``. Existing
        entries are left alone.
        """
        self.forward.setdefault(state, set())
        self.backward.setdefault(state, set())

    def add_edge(self, a, b):
        """
        Records the epsilon edge ``a -> b`` and propagates the reachability it
        introduces.

        Every state that can reach ``a`` (and ``a`` itself) can now reach
        ``b`` and everything ``b`` already reaches. Because the backward sets
        are transitive, that group of predecessors is exactly
        ``{a} | backward[a]`` and no forward walk is needed.

        Both states must already have entries (see :meth:`add_state`).

        Returns:
            bool: True if the edge made any state newly reachable.
        """
        forward = self.forward
        backward = self.backward
        if b in forward[a]:
            return False

        # Snapshots: a cycle makes these sets grow while we update them
        sources = set(backward[a])
        sources.add(a)
        targets = set(forward[b])
        targets.add(b)

        for p in sources:
            forward[p].update(targets)
        for q in targets:
            backward[q].update(sources)
        return True

    def reachable(self, state):
        """
        Returns the states reachable from ``state`` by one or more epsilon
        edges, as a frozenset. Unknown states reach nothing.
        """
        return frozenset(self.forward.get(state, ()))

    def closure_of(self, states):
        """
        Returns the union of the forward sets of ``states``. Unknown states
        contribute nothing. The input states themselves are only included if
        they are epsilon-reachable from the set.
        """
        forward = self.forward
        result = set()
        for state in states:
            if state in forward:
                result.update(forward[state])
        return result

    def absorb(self, other):
        """
        Copies the tables of another closure over a disjoint set of states
        into this one. Since no edge joins the two sets, the union of the two
        closures is the closure of the union.

        Raises:
            ValueError: If the two closures share a state.
        """
        shared = self.forward.keys() & other.forward.keys()
        if shared:
            raise ValueError(f"Closures overlap on states {sorted(shared)}")
        for state, dests in other.forward.items():
            self.forward[state] = set(dests)
        for state, srcs in other.backward.items():
            self.backward[state] = set(srcs)

    def discard(self, states):
        """
        Drops the entries for ``states``. Intended for states that have no
        epsilon edges to or from the rest of the table, such as when a whole
        automaton is emptied.
        """
        for state in states:
            self.forward.pop(state, None)
            self.backward.pop(state, None)
