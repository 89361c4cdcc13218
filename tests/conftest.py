import pytest

from pocketsql import Session


@pytest.fixture
def session(tmp_path):
    s = Session.open(tmp_path)
    yield s
    s.shutdown()


@pytest.fixture
def shop(session):
    res = session.process("CREATE DATABASE shop;")
    assert res.success, res.message
    return session
