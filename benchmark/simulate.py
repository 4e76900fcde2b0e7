"""
Times construction and simulation of the (a|b)*abb automaton on random
inputs.

Usage: simulate.py [<count> [<length>]]
"""

import random
import sys

from regexec.automata import (
    StateSpace,
    basic_nfa,
    choice_nfa,
    concat_nfa,
    star_nfa,
    string_nfa,
)
from regexec.util import now, random_string


def build(space):
    head = star_nfa(choice_nfa(basic_nfa(space, "a"), basic_nfa(space, "b")))
    return concat_nfa(head, string_nfa(space, "abb"))


def main(count=1000, length=200):
    rng = random.Random(0)
    inputs = [random_string("ab", length, rng) for _ in range(count)]

    t = now()
    nfa = build(StateSpace())
    print(f"Built {len(nfa)} states in {now() - t:0.6f} s")

    t = now()
    matched = sum(1 for s in inputs if nfa.simulate(s))
    elapsed = now() - t
    print(
        f"Simulated {count} strings of length {length} in {elapsed:0.3f} s "
        f"({matched} matched, {count * length / elapsed:0.0f} symbols/s)"
    )


if __name__ == "__main__":
    main(*(int(arg) for arg in sys.argv[1:3]))
