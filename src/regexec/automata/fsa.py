import sys

from loguru import logger

from regexec.automata.closure import EpsilonClosure
from regexec.automata.space import (
    CAPACITY,
    NFAError,
    NonReservedState,
    StateSpace,
)
from regexec.support.bitvector import BitVector

# Marker constants


class Marker:
    """
    Represents a marker object.

    Markers are distinguished labels that can never be confused with an input
    character, such as the label of an epsilon transition.

    Attributes:
        name (str): The name of the marker.

    Example:
        >>> marker = Marker("EPSILON")
        >>> repr(marker)
        '<EPSILON>'
    """

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"<{self.name}>"


EPSILON = Marker("EPSILON")


class NFA:
    """
    Non-deterministic finite automaton over integer states.

    The states of an NFA are ids reserved from a :class:`StateSpace`. Labeled
    transitions map a state and a single character to a set of destination
    states; :data:`EPSILON` transitions are tracked by an
    :class:`EpsilonClosure`, so the epsilon-closure of any state is always
    available without a search.

    Attributes:
        space (StateSpace): The id space this automaton reserves from.
        reserved (BitVector): The ids this automaton owns.
        transitions (dict): Maps a source state to a dictionary of labels and
            destination state sets.
        closure (EpsilonClosure): Epsilon-reachability for the owned states.

    Example:
        >>> nfa = create(0, 2)
        >>> nfa.add_transition(0, 1, "a")
        >>> nfa.add_transition(1, 2, EPSILON)
        >>> nfa.start, nfa.finish = 0, 2
        >>> nfa.simulate("a")
        True
    """

    def __init__(self, space):
        """
        Initializes an NFA with no states. Use :meth:`reserve` (or the
        :func:`create` and :meth:`allocate` constructors) to give it some.

        Args:
            space (StateSpace): The id space to reserve states from.
        """
        self.space = space
        self.reserved = BitVector(space.capacity)
        self.transitions = {}
        self.closure = EpsilonClosure()
        self._start = None
        self._finish = None

    @classmethod
    def allocate(cls, space, count):
        """
        Creates an NFA owning a fresh run of ``count`` ids from ``space``.

        Args:
            space (StateSpace): The id space to reserve from.
            count (int): The number of states.

        Returns:
            NFA: The new automaton. Its states are ``nfa.all_states()``.
        """
        nfa = cls(space)
        lo, hi = space.allocate(count)
        nfa._own(range(lo, hi + 1))
        return nfa

    def __repr__(self):
        return (
            f"<{type(self).__name__} {len(self)} states, "
            f"start={self._start!r}, finish={self._finish!r}>"
        )

    def __len__(self):
        """
        Returns the number of states this automaton owns.
        """
        return len(self.reserved)

    def __contains__(self, state):
        return self.is_reserved(state)

    # Start and finish states

    @property
    def start(self):
        return self._start

    @start.setter
    def start(self, state):
        if state is not None and not self.is_reserved(state):
            raise NonReservedState(state)
        self._start = state

    @property
    def finish(self):
        return self._finish

    @finish.setter
    def finish(self, state):
        if state is not None and not self.is_reserved(state):
            raise NonReservedState(state)
        self._finish = state

    # State space

    def is_reserved(self, state):
        """
        Returns True if this automaton owns ``state``. Ids outside the space
        (negative, too large, or not integers) are reported as not reserved.
        """
        return state in self.reserved

    def reserve(self, lo, hi):
        """
        Extends the automaton with the inclusive range of ids ``[lo, hi]``.

        Args:
            lo (int): The first id.
            hi (int): The last id.

        Raises:
            ValueError: If the range is malformed.
            AlreadyReservedState: If any id in the range is held by this or
                any other automaton in the same space. Nothing is reserved
                in that case.
        """
        self._own(self.space.reserve(lo, hi))

    def _own(self, states):
        reserved = self.reserved
        closure = self.closure
        for state in states:
            reserved.set(state)
            self.transitions[state] = {}
            closure.add_state(state)

    def all_states(self):
        """
        Returns a sorted list of the ids this automaton owns.
        """
        return list(self.reserved)

    def release(self):
        """
        Returns every owned id to the space and empties the automaton.
        """
        states = self.all_states()
        self.space.release(states)
        self._disown(states)

    def _disown(self, states):
        self.reserved.clear_from(states)
        for state in states:
            self.transitions.pop(state, None)
        self.closure.discard(states)
        self._start = None
        self._finish = None

    # Transitions

    def add_transition(self, src, dest, label):
        """
        Adds a transition from ``src`` to ``dest`` on ``label``.

        Adding a transition that already exists has no effect. An
        :data:`EPSILON` transition also updates the epsilon-closure of every
        state that can reach ``src``.

        Args:
            src (int): The source state.
            dest (int): The destination state.
            label: A single character, or :data:`EPSILON`.

        Raises:
            NonReservedState: If either state is not owned by this automaton.
                The automaton is unchanged in that case.
        """
        if not self.is_reserved(src):
            raise NonReservedState(src)
        if not self.is_reserved(dest):
            raise NonReservedState(dest)

        self.transitions[src].setdefault(label, set()).add(dest)
        if label is EPSILON:
            self.closure.add_edge(src, dest)

    def step(self, state, label):
        """
        Returns the states reachable from ``state`` by exactly one ``label``
        move, as a frozenset. An unowned state moves nowhere.
        """
        trans = self.transitions.get(state)
        if trans is None or label not in trans:
            return frozenset()
        return frozenset(trans[label])

    def epsilon_closure_of(self, states):
        """
        Returns the set of states reachable from any of ``states`` through
        one or more epsilon transitions. States this automaton does not own
        are skipped.
        """
        return self.closure.closure_of(s for s in states if self.is_reserved(s))

    def triples(self):
        """
        Generates every ``(source state, label, destination state)`` triple in
        the automaton, epsilon transitions included.
        """
        for src, trans in self.transitions.items():
            for label, dests in trans.items():
                for dest in dests:
                    yield src, label, dest

    def all_labels(self):
        """
        Returns the set of input characters used by any labeled transition.
        """
        labels = set()
        for trans in self.transitions.values():
            labels.update(trans)
        labels.discard(EPSILON)
        return labels

    def dump(self, stream=sys.stdout):
        """
        Prints a textual listing of the automaton to ``stream``. The start
        state is marked with ``@`` and the finish state with ``||``.
        """
        for src in self.all_states():
            beg = "@" if src == self._start else " "
            end = "||" if src == self._finish else ""
            print(beg, src, end, file=stream)
            trans = self.transitions[src]
            for label in sorted(trans, key=repr):
                print("   ", label, "->", sorted(trans[label]), file=stream)

    # Simulation

    def initial_states(self):
        """
        Returns the active set before any input is read: the start state and
        its epsilon-closure. Empty if the start state is unset or unowned.
        """
        start = self._start
        if not self.is_reserved(start):
            return frozenset()
        states = set(self.closure.reachable(start))
        states.add(start)
        return frozenset(states)

    def next_states(self, states, label):
        """
        Returns the active set after reading ``label`` from the active set
        ``states``: every one-move destination plus their epsilon-closures.
        """
        transitions = self.transitions
        stepped = set()
        for state in states:
            trans = transitions.get(state)
            if trans and label in trans:
                stepped.update(trans[label])
        stepped.update(self.closure.closure_of(stepped))
        return frozenset(stepped)

    def run(self, symbols, debug=False):
        """
        Runs every branch of the automaton in parallel over ``symbols``.

        Args:
            symbols (iterable): The input characters.
            debug (bool, optional): Log the active set after each symbol.
                Defaults to False.

        Returns:
            frozenset: The active set after the whole input. Once it becomes
            empty the rest of the input is not read.
        """
        states = self.initial_states()
        if debug:
            logger.debug("start: {}", sorted(states))

        for label in symbols:
            if not states:
                break
            states = self.next_states(states, label)
            if debug:
                logger.debug("{!r} -> {}", label, sorted(states))
        return states

    def simulate(self, symbols, debug=False):
        """
        Checks whether the automaton accepts ``symbols``.

        Args:
            symbols (iterable): The input characters, usually a string.
            debug (bool, optional): Log each step. Defaults to False.

        Returns:
            bool: True if the finish state is active after the whole input.
            An automaton without a valid start or finish state accepts
            nothing.

        Example:
            >>> nfa = string_nfa(StateSpace(), "ab")
            >>> nfa.simulate("ab"), nfa.simulate("a")
            (True, False)
        """
        finish = self._finish
        if not self.is_reserved(finish):
            return False
        return finish in self.run(symbols, debug=debug)

    # Composition

    def absorb(self, other):
        """
        Moves every state and transition of ``other`` into this automaton.

        The two automata must come from the same space; their ids are then
        disjoint, so no renumbering is needed. ``other`` is left with no
        states. This automaton's start and finish states are unchanged.

        Raises:
            ValueError: If ``other`` is this automaton or belongs to a
                different space.
        """
        if other is self:
            raise ValueError("Can't absorb an automaton into itself")
        if other.space is not self.space:
            raise ValueError("Can't combine automata from different state spaces")

        states = other.all_states()
        self.reserved = self.reserved | other.reserved
        for state in states:
            self.transitions[state] = {
                label: set(dests) for label, dests in other.transitions[state].items()
            }
        self.closure.absorb(other.closure)
        other._disown(states)
        logger.debug("Absorbed {} states into {!r}", len(states), self)


def create(lo, hi, space=None):
    """
    Creates an NFA owning the inclusive range of ids ``[lo, hi]``.

    Args:
        lo (int): The first id.
        hi (int): The last id.
        space (StateSpace, optional): The id space to reserve from. If omitted
            the automaton gets a private space of :data:`CAPACITY` ids.

    Returns:
        NFA: The new automaton, with no start or finish state set.

    Raises:
        ValueError: If the range is malformed.
        AlreadyReservedState: If part of the range is already reserved.
    """
    if space is None:
        space = StateSpace(CAPACITY)
    nfa = NFA(space)
    nfa.reserve(lo, hi)
    return nfa


def merge(first, second, bridges=()):
    """
    Combines two automata from the same space into a new one.

    The result owns the states of both inputs and holds the union of their
    transitions, plus each ``(src, dest, label)`` in ``bridges``. Its start
    state is ``first.start``; its finish state is ``second.finish`` if that
    is set, otherwise ``first.finish``. Both inputs are left with no states.

    Args:
        first (NFA): The first automaton.
        second (NFA): The second automaton.
        bridges (iterable, optional): Extra transitions joining the two.

    Returns:
        NFA: The merged automaton.

    Raises:
        ValueError: If the inputs are the same automaton or come from
            different spaces.
        NonReservedState: If a bridge names a state neither input owns.

    Example:
        >>> space = StateSpace()
        >>> a, b = basic_nfa(space, "a"), basic_nfa(space, "b")
        >>> ab = merge(a, b, [(a.finish, b.start, EPSILON)])
        >>> ab.simulate("ab")
        True
    """
    if first is second:
        raise ValueError("Can't merge an automaton with itself")
    if first.space is not second.space:
        raise ValueError("Can't combine automata from different state spaces")

    bridges = list(bridges)
    for src, dest, _ in bridges:
        for state in (src, dest):
            if not (first.is_reserved(state) or second.is_reserved(state)):
                raise NonReservedState(state)

    start = first.start
    finish = second.finish if second.finish is not None else first.finish

    nfa = NFA(first.space)
    nfa.absorb(first)
    nfa.absorb(second)
    for src, dest, label in bridges:
        nfa.add_transition(src, dest, label)
    nfa.start = start
    nfa.finish = finish
    return nfa


# Constructors


def basic_nfa(space, label):
    """
    Creates an NFA with a single transition from its start state to its
    finish state on ``label``.
    """
    nfa = NFA.allocate(space, 2)
    s, e = nfa.all_states()
    nfa.add_transition(s, e, label)
    nfa.start = s
    nfa.finish = e
    return nfa


def epsilon_nfa(space):
    """
    Creates an NFA that matches only the empty string.
    """
    return basic_nfa(space, EPSILON)


def charset_nfa(space, labels):
    """
    Creates an NFA that matches any one of the characters in ``labels``.
    """
    nfa = NFA.allocate(space, 2)
    s, e = nfa.all_states()
    for label in labels:
        nfa.add_transition(s, e, label)
    nfa.start = s
    nfa.finish = e
    return nfa


def string_nfa(space, string):
    """
    Creates an NFA that matches exactly ``string``.

    Example:
        >>> nfa = string_nfa(StateSpace(), "abc")
        >>> nfa.simulate("abc"), nfa.simulate("ab")
        (True, False)
    """
    nfa = NFA.allocate(space, len(string) + 1)
    states = nfa.all_states()
    for i, label in enumerate(string):
        nfa.add_transition(states[i], states[i + 1], label)
    nfa.start = states[0]
    nfa.finish = states[-1]
    return nfa


def _check_operands(*nfas):
    """
    Checks that automata can be combined: all from one space, all distinct,
    each with its start and finish states set. Raises before any ids are
    reserved or any input is consumed.
    """
    space = nfas[0].space
    for i, n in enumerate(nfas):
        if n.space is not space:
            raise ValueError("Can't combine automata from different state spaces")
        if any(n is m for m in nfas[:i]):
            raise ValueError("Can't combine an automaton with itself")
        for state in (n.start, n.finish):
            if not n.is_reserved(state):
                raise NonReservedState(state)
    return space


def _attach(head, n, bridges=()):
    # Gives head's ids back to the space if the merge fails
    try:
        return merge(head, n, bridges)
    except (NFAError, ValueError):
        head.release()
        raise


def concat_nfa(n1, n2):
    """
    Creates an NFA matching a string from ``n1`` followed by a string from
    ``n2``. Both inputs are consumed.
    """
    _check_operands(n1, n2)
    return merge(n1, n2, [(n1.finish, n2.start, EPSILON)])


def choice_nfa(n1, n2):
    """
    Creates an NFA matching a string from either ``n1`` or ``n2``. Both inputs
    are consumed.
    """

    #   -> n1 -
    #  /       \
    # s         e
    #  \       /
    #   -> n2 -
    space = _check_operands(n1, n2)
    head = NFA.allocate(space, 2)
    s, e = head.all_states()
    bridges = [
        (s, n1.start, EPSILON),
        (n1.finish, e, EPSILON),
        (s, n2.start, EPSILON),
        (n2.finish, e, EPSILON),
    ]
    nfa = merge(_attach(head, n1), n2, bridges)
    nfa.start = s
    nfa.finish = e
    return nfa


def star_nfa(n):
    r"""
    Creates an NFA matching zero or more repetitions of ``n``. The input is
    consumed.

        -----<-----
       /           \
      s ---> n ---> e
       \           /
        ----->-----

    The loop runs from the finish state of ``n`` back to ``s``.
    """
    head = NFA.allocate(_check_operands(n), 2)
    s, e = head.all_states()
    bridges = [
        (s, n.start, EPSILON),
        (n.finish, e, EPSILON),
        (s, e, EPSILON),
        (n.finish, s, EPSILON),
    ]
    nfa = _attach(head, n, bridges)
    nfa.start = s
    nfa.finish = e
    return nfa


def plus_nfa(n):
    """
    Creates an NFA matching one or more repetitions of ``n``. The input is
    consumed.
    """
    # Same shape as star_nfa without the s -> e bypass
    head = NFA.allocate(_check_operands(n), 2)
    s, e = head.all_states()
    bridges = [
        (s, n.start, EPSILON),
        (n.finish, e, EPSILON),
        (n.finish, s, EPSILON),
    ]
    nfa = _attach(head, n, bridges)
    nfa.start = s
    nfa.finish = e
    return nfa


def optional_nfa(n):
    """
    Creates an NFA matching zero or one occurrence of ``n``. The input is
    consumed.
    """
    return choice_nfa(n, epsilon_nfa(_check_operands(n)))
