"""Integration tests for Neo4jContactStore. Require Docker
(testcontainers)."""

import pytest

from sosalert.domain import Contact, InvalidInput
from sosalert.infrastructure import Neo4jContactStore


@pytest.fixture(scope="session")
def neo4j_driver():
    from testcontainers.neo4j import Neo4jContainer

    with Neo4jContainer() as neo4j:
        driver = neo4j.get_driver()
        try:
            yield driver
        finally:
            driver.close()


@pytest.fixture
def clean_neo4j(neo4j_driver):
    """Clear the graph before each test so tests are independent."""
    with neo4j_driver.session() as session:
        session.run("MATCH (n) DETACH DELETE n")
    yield neo4j_driver


def test_get_empty_returns_none(clean_neo4j):
    assert Neo4jContactStore(clean_neo4j).get() is None


def test_set_then_get(clean_neo4j):
    store = Neo4jContactStore(clean_neo4j, user_id="default")
    store.set("919876543210")
    assert store.get() == Contact(phone="919876543210")
    store.set("15551234567")
    assert Neo4jContactStore(clean_neo4j).get() == Contact(phone="15551234567")


def test_set_empty_keeps_previous(clean_neo4j):
    store = Neo4jContactStore(clean_neo4j)
    store.set("919876543210")
    with pytest.raises(InvalidInput):
        store.set("")
    assert store.get() == Contact(phone="919876543210")


def test_scoped_by_user(clean_neo4j):
    Neo4jContactStore(clean_neo4j, user_id="alice").set("111")
    assert Neo4jContactStore(clean_neo4j, user_id="bob").get() is None
    assert Neo4jContactStore(clean_neo4j, user_id="alice").get() == Contact(phone="111")


def test_corrupt_value_reads_as_absent(clean_neo4j):
    with clean_neo4j.session() as session:
        session.run(
            "CREATE (:Person {id: 'default', registered: true, "
            "primary_emergency_contact: '{broken'})"
        )
    assert Neo4jContactStore(clean_neo4j).get() is None
