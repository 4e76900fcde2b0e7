#!python

"""
This script wires a fixed automaton by hand and reports whether a string
matches it.

Usage: demo.py [--debug] [<string>]

Parameters:
    <string> (str): The string to match. Defaults to a long sample string.
    --debug: Log every simulation step to stderr.

The automaton has four states (0-3) over the alphabet {a, b}. State 0 is the
start state and state 3 the finish state; it accepts strings that contain an
"a", later another "a", and end with "b" after them, so the sample string
(which ends in "aab") is accepted.
"""

import sys

from loguru import logger

from regexec.automata import EPSILON, create

args = sys.argv[1:]
debug = "--debug" in args
if debug:
    args.remove("--debug")
    logger.enable("regexec")

if len(args) > 1:
    print("USAGE: demo.py [--debug] [<string>]")
    sys.exit(1)
target = args[0] if args else "abababbbabababbbaabbaab"

chains = [
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

nfa = create(0, 3)
for src, dest, label in chains:
    nfa.add_transition(src, dest, label)
nfa.start = 0
nfa.finish = 3

print("pattern: (a|b)* aab")
print(f'target str: "{target}"')
print("result:", nfa.simulate(target, debug=debug))
