"""Property-based tests for entity id validation using hypothesis."""

from uuid import UUID

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from src.studio.core.errors import ErrorKind, ValidationFailed
from src.studio.core.validators import is_valid_entity_id, parse_entity_id

pytestmark = pytest.mark.unit

HEX = "0123456789abcdefABCDEF"


def _group(size: int):
    return st.text(alphabet=HEX, min_size=size, max_size=size)


# 8-4-4-4-12 hex groups, any case
canonical_ids = st.tuples(_group(8), _group(4), _group(4), _group(4), _group(12)).map("-".join)


@given(value=st.uuids())
def test_uuid_objects_accepted(value: UUID):
    assert parse_entity_id(value) is value


@given(value=st.uuids())
def test_canonical_strings_round_trip(value: UUID):
    assert parse_entity_id(str(value)) == value


@given(value=canonical_ids)
@settings(max_examples=100)
def test_any_case_hex_groups_accepted(value: str):
    assert is_valid_entity_id(value)
    assert parse_entity_id(value) == UUID(value)


@given(value=st.text(max_size=60).filter(lambda s: not is_valid_entity_id(s)))
@settings(max_examples=200)
def test_arbitrary_text_rejected_as_validation(value: str):
    with pytest.raises(ValidationFailed) as exc_info:
        parse_entity_id(value, field="project_id")
    assert exc_info.value.kind == ErrorKind.VALIDATION
    assert exc_info.value.code == 400
    assert exc_info.value.details == {"field": "project_id"}


@pytest.mark.parametrize(
    "value",
    [
        "",
        "not-a-uuid",
        "123",
        "12345678123456781234567812345678",  # bare hex
        "{12345678-1234-1234-1234-123456789abc}",
        "urn:uuid:12345678-1234-1234-1234-123456789abc",
        "12345678-1234-1234-1234-123456789abg",
        " 12345678-1234-1234-1234-123456789abc",
        "12345678-1234-1234-1234-123456789abc\n",
        None,
        42,
    ],
)
def test_non_canonical_forms_rejected(value):
    assert not is_valid_entity_id(value)
    with pytest.raises(ValidationFailed):
        parse_entity_id(value)
