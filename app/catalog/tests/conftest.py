"""
Fixtures for catalog tests.
"""

import pytest

from catalog.tests.factories import MockTestFactory, QuestionFactory


@pytest.fixture
def mock_test(db):
    """A paid mock test without questions."""
    return MockTestFactory()


@pytest.fixture
def ten_question_test(db):
    """
    Paid test with 10 active questions.

    Correct option indices follow the pattern [0, 1, 2, 0, 1, 2, 0, 1, 2, 0].
    """
    test = MockTestFactory()
    for position in range(10):
        QuestionFactory(test=test, position=position, correct_option_index=position % 3)
    return test
