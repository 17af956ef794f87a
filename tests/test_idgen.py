import random
import uuid

from cbomgraph.idgen import DEFAULT_SEED, IdentifierGenerator


def test_same_seed_same_sequence():
    first = IdentifierGenerator(DEFAULT_SEED)
    second = IdentifierGenerator(DEFAULT_SEED)
    assert [first.next_id() for _ in range(20)] == [second.next_id() for _ in range(20)]


def test_different_seed_different_sequence():
    assert IdentifierGenerator(1).next_id() != IdentifierGenerator(2).next_id()


def test_identifiers_are_uuid_text():
    generated = IdentifierGenerator().next_id()
    parsed = uuid.UUID(generated)
    assert str(parsed) == generated
    assert parsed.version == 4


def test_independent_of_global_random_state():
    expected = IdentifierGenerator(5).next_id()
    random.seed(1234)
    random.random()
    assert IdentifierGenerator(5).next_id() == expected


def test_no_identifier_is_handed_out_twice():
    idgen = IdentifierGenerator()
    generated = [idgen.next_id() for _ in range(500)]
    assert len(set(generated)) == len(generated)
    assert idgen.issued_count == 500


def test_reserved_identifiers_are_skipped():
    expected = IdentifierGenerator(3)
    first, second = expected.next_id(), expected.next_id()

    idgen = IdentifierGenerator(3)
    idgen.reserve([first])
    assert idgen.next_id() == second
