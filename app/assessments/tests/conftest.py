"""
Fixtures for assessment tests.
"""

import pytest

from catalog.tests.factories import MockTestFactory, QuestionFactory

# Correct option per position of the ten-question fixtures
CORRECT_INDICES = [0, 1, 2, 0, 1, 2, 0, 1, 2, 0]


def _ten_question_test(**kwargs):
    test = MockTestFactory(**kwargs)
    for position, correct in enumerate(CORRECT_INDICES):
        QuestionFactory(test=test, position=position, correct_option_index=correct)
    return test


@pytest.fixture
def paid_test(db):
    """Paid test with 10 active questions (answers in CORRECT_INDICES)."""
    return _ten_question_test(is_paid=True)


@pytest.fixture
def free_test(db):
    """Free test with 10 active questions."""
    return _ten_question_test(is_paid=False, price=0)


@pytest.fixture
def all_correct():
    return list(CORRECT_INDICES)


@pytest.fixture
def seven_correct():
    """First seven answers right, last three wrong."""
    return CORRECT_INDICES[:7] + [2, 0, 1]
