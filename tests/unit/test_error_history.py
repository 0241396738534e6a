"""Tests for the bounded error history."""

from uuid import uuid4

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.studio.core.error_classifier import ErrorClassifier, ErrorHistory
from src.studio.core.errors import StorageFailure
from src.studio.core.logging import bind_user_context, clear_request_context

pytestmark = pytest.mark.unit


def test_most_recent_first(classifier: ErrorClassifier, error_history: ErrorHistory):
    first = classifier.classify(StorageFailure("first"))
    second = classifier.classify(StorageFailure("second"))

    assert error_history.entries() == [second, first]


def test_capped_at_fifty(classifier: ErrorClassifier, error_history: ErrorHistory):
    for i in range(60):
        classifier.classify(StorageFailure(f"failure {i}"))

    entries = error_history.entries()
    assert len(entries) == 50
    assert entries[0].message == "failure 59"
    assert entries[-1].message == "failure 10"


@given(count=st.integers(min_value=0, max_value=120), capacity=st.integers(min_value=1, max_value=60))
@settings(max_examples=50)
def test_never_exceeds_capacity(count: int, capacity: int):
    history = ErrorHistory(capacity)
    classifier = ErrorClassifier(history)
    for i in range(count):
        classifier.classify(str(i))

    assert len(history) == min(count, capacity)
    if count:
        assert history.entries()[0].message == str(count - 1)


def test_limit_and_clear(classifier: ErrorClassifier, error_history: ErrorHistory):
    for i in range(5):
        classifier.classify(StorageFailure(f"failure {i}"))

    assert [e.message for e in error_history.entries(2)] == ["failure 4", "failure 3"]

    error_history.clear()
    assert error_history.entries() == []


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ErrorHistory(0)


def test_errors_attributed_to_bound_caller(
    classifier: ErrorClassifier, error_history: ErrorHistory
):
    caller, other = uuid4(), uuid4()
    try:
        bind_user_context(caller)
        mine = classifier.classify(StorageFailure("mine"))
        bind_user_context(other)
        theirs = classifier.classify(StorageFailure("theirs"))
    finally:
        clear_request_context()
    anonymous = classifier.classify(StorageFailure("anonymous"))

    assert mine.user_id == str(caller)
    assert anonymous.user_id is None
    assert error_history.entries(user_id=str(caller)) == [mine]
    assert error_history.entries(user_id=str(other)) == [theirs]
    assert len(error_history.entries()) == 3


def test_clear_for_one_caller(classifier: ErrorClassifier, error_history: ErrorHistory):
    caller = uuid4()
    try:
        bind_user_context(caller)
        classifier.classify(StorageFailure("mine"))
    finally:
        clear_request_context()
    kept = classifier.classify(StorageFailure("anonymous"))

    error_history.clear(user_id=str(caller))

    assert error_history.entries() == [kept]
    assert error_history.capacity == 50
