import io

import pytest
from loguru import logger
from regexec.automata import EPSILON, NonReservedState, StateSpace, create

AAB_CHAINS = [
    (0, 0, "a"),
    (0, 0, "b"),
    (0, 1, "a"),
    (1, 1, "a"),
    (1, 1, "b"),
    (1, 2, "a"),
    (2, 2, "a"),
    (2, 2, "b"),
    (2, 3, "b"),
    (2, 0, EPSILON),
]

# Thompson construction of (a|b)*abb
ABB_CHAINS = [
    (0, 1, EPSILON),
    (0, 7, EPSILON),
    (1, 2, EPSILON),
    (1, 4, EPSILON),
    (2, 3, "a"),
    (4, 5, "b"),
    (3, 6, EPSILON),
    (5, 6, EPSILON),
    (6, 1, EPSILON),
    (6, 7, EPSILON),
    (7, 8, "a"),
    (8, 9, "b"),
    (9, 10, "b"),
]


def wire(lo, hi, chains, start, finish):
    nfa = create(lo, hi)
    for src, dest, label in chains:
        nfa.add_transition(src, dest, label)
    nfa.start = start
    nfa.finish = finish
    return nfa


@pytest.fixture
def debug_messages():
    messages = []
    logger.enable("regexec")
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        yield messages
    finally:
        logger.remove(handler_id)
        logger.disable("regexec")


def test_aab():
    nfa = wire(0, 3, AAB_CHAINS, 0, 3)
    assert nfa.simulate("abababbbabababbbaabbaab")
    assert nfa.simulate("aab")
    assert not nfa.simulate("")
    assert not nfa.simulate("ab")
    assert not nfa.simulate("bbb")


def test_abb():
    nfa = wire(0, 10, ABB_CHAINS, 0, 10)
    assert not nfa.simulate("a")
    assert not nfa.simulate("b")
    assert not nfa.simulate("aba")
    assert nfa.simulate("abbbabb")
    assert nfa.simulate("bbbbbbaaabb")
    assert not nfa.simulate("aaaaaaaaaaaaaaaaaaab")
    assert nfa.simulate("abb")
    assert not nfa.simulate("")


def test_abb_insertion_order():
    nfa = wire(0, 10, list(reversed(ABB_CHAINS)), 0, 10)
    assert nfa.simulate("abbbabb")
    assert not nfa.simulate("aba")
    assert nfa.closure == wire(0, 10, ABB_CHAINS, 0, 10).closure


def test_initial_states():
    nfa = wire(0, 10, ABB_CHAINS, 0, 10)
    assert nfa.initial_states() == {0, 1, 2, 4, 7}
    assert nfa.run("a") == {1, 2, 3, 4, 6, 7, 8}


def test_empty_input():
    nfa = create(0, 2)
    nfa.start = 0
    nfa.finish = 2
    assert not nfa.simulate("")

    nfa.add_transition(0, 1, EPSILON)
    assert not nfa.simulate("")
    nfa.add_transition(1, 2, EPSILON)
    assert nfa.simulate("")

    nfa.finish = 0
    assert nfa.simulate("")


def test_dead_input():
    nfa = wire(0, 3, AAB_CHAINS, 0, 3)
    assert nfa.run("c") == frozenset()
    assert nfa.run("caab") == frozenset()
    assert not nfa.simulate("caab")


def test_iterable_input():
    nfa = wire(0, 10, ABB_CHAINS, 0, 10)
    assert nfa.simulate(["a", "b", "b"])
    assert nfa.simulate(iter("babb"))


def test_start_finish_validation():
    nfa = create(0, 4)
    assert nfa.start is None
    with pytest.raises(NonReservedState):
        nfa.start = -1
    nfa.start = 0
    nfa.finish = 4
    with pytest.raises(NonReservedState):
        nfa.finish = 5
    assert nfa.finish == 4
    assert nfa.all_states() == [0, 1, 2, 3, 4]


def test_unset_start_or_finish_rejects():
    nfa = create(0, 1)
    nfa.add_transition(0, 1, EPSILON)
    assert not nfa.simulate("")
    nfa.start = 0
    assert not nfa.simulate("")
    nfa.finish = 1
    assert nfa.simulate("")


def test_step():
    nfa = create(0, 4)
    assert nfa.step(0, "a") == frozenset()

    nfa.add_transition(0, 1, "a")
    nfa.add_transition(0, 2, "a")
    nfa.add_transition(0, 3, "b")
    assert nfa.step(0, "a") == {1, 2}
    assert nfa.step(0, "b") == {3}
    assert nfa.step(0, "c") == frozenset()
    # Unreserved states move nowhere
    assert nfa.step(99, "a") == frozenset()
    assert nfa.step(-1, "a") == frozenset()


def test_transition_idempotent():
    once = create(0, 2)
    once.add_transition(0, 1, "a")
    once.add_transition(1, 2, EPSILON)

    twice = create(0, 2)
    for _ in range(2):
        twice.add_transition(0, 1, "a")
        twice.add_transition(1, 2, EPSILON)

    assert twice.transitions == once.transitions
    assert twice.closure == once.closure
    assert sorted(twice.triples(), key=repr) == sorted(once.triples(), key=repr)


def test_non_reserved_state():
    nfa = create(0, 2)
    with pytest.raises(NonReservedState) as excinfo:
        nfa.add_transition(0, 99, "a")
    assert excinfo.value.state == 99

    with pytest.raises(NonReservedState) as excinfo:
        nfa.add_transition(-1, 0, EPSILON)
    assert excinfo.value.state == -1

    with pytest.raises(NonReservedState):
        nfa.add_transition(0, 3, EPSILON)

    assert list(nfa.triples()) == []
    assert nfa.transitions[0] == {}
    assert nfa.epsilon_closure_of([0]) == set()


def test_queries():
    nfa = wire(0, 10, ABB_CHAINS, 0, 10)
    assert len(nfa) == 11
    assert 5 in nfa
    assert 11 not in nfa
    assert nfa.all_labels() == {"a", "b"}
    assert len(list(nfa.triples())) == len(ABB_CHAINS)
    assert (9, "b", 10) in set(nfa.triples())


def test_dump():
    nfa = wire(0, 3, AAB_CHAINS, 0, 3)
    out = io.StringIO()
    nfa.dump(stream=out)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("@ 0")
    assert any(line.rstrip().endswith("3 ||") for line in lines)


def test_repr():
    nfa = create(0, 3)
    nfa.start = 0
    assert repr(nfa) == "<NFA 4 states, start=0, finish=None>"
    assert repr(StateSpace(10)) == "<StateSpace 0/10>"


def test_debug_logging(debug_messages):
    nfa = wire(0, 10, ABB_CHAINS, 0, 10)
    assert nfa.simulate("ab", debug=True) is False
    text = "".join(str(m) for m in debug_messages)
    assert "start: [0, 1, 2, 4, 7]" in text
    assert "'b' ->" in text


def test_quiet_without_debug(debug_messages):
    nfa = create(0, 1)
    nfa.start = 0
    nfa.finish = 1
    nfa.simulate("ab")
    assert not any("start:" in str(m) for m in debug_messages)
