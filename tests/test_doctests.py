import doctest

import pytest
from regexec.automata import closure, fsa, space
from regexec.support import bitvector


@pytest.mark.parametrize("module", [bitvector, closure, fsa, space])
def test_docstring_examples(module):
    failures, tried = doctest.testmod(module)
    assert tried > 0
    assert failures == 0
