import pytest
from fastapi.testclient import TestClient

from api import create_app
from bookstore import BookStore


@pytest.fixture
def store():
    # A freshly seeded store for every test
    return BookStore()


@pytest.fixture
def client(store):
    # Each test talks to its own application around its own store
    return TestClient(create_app(store))
