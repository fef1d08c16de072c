from quiz import db
from quiz.models import Employee
from quiz.services.identity import IdentityOracle

FALLBACK = {'Alice@Example.com': 'mars 2021'}


def test_fallback_directory_when_table_has_no_match(flask_app):
    oracle = IdentityOracle(FALLBACK)
    assert oracle.exists('alice@example.com')
    assert oracle.matches_period('alice@example.com', 'MARS 2021')
    assert not oracle.matches_period('alice@example.com', 'mars 2022')
    assert not oracle.exists('nobody@example.com')
    assert not oracle.exists(None)
    assert not oracle.matches_period('alice@example.com', '')


def test_table_match_is_case_insensitive(flask_app):
    db.session.add(Employee(email='Eve@Example.com', arrival_month_year='Mai 2019'))
    db.session.commit()
    oracle = IdentityOracle({})
    assert oracle.exists('eve@example.COM')
    assert oracle.matches_period('EVE@example.com', 'mai 2019')
    assert not oracle.matches_period('eve@example.com', 'juin 2019')


def test_unreachable_table_falls_back(flask_app):
    db.drop_all()
    oracle = IdentityOracle(FALLBACK)
    assert oracle.exists('alice@example.com')
    assert oracle.matches_period('alice@example.com', 'mars 2021')
    assert not oracle.exists('eve@example.com')
    db.create_all()


def test_checks_do_not_mutate(flask_app):
    oracle = IdentityOracle(FALLBACK)
    for _ in range(3):
        oracle.exists('alice@example.com')
        oracle.matches_period('alice@example.com', 'mars 2021')
    assert Employee.query.count() == 0
    assert oracle.fallback == {'alice@example.com': 'mars 2021'}
