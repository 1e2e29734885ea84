"""Factory Boy base wired to the per-test transactional session.

The ``session`` fixture registers its scoped session here before each test
(see ``_factories_session`` in ``conftest.py``); factories flush rows so ids
are available immediately while the outer transaction is still rolled back.
"""

from __future__ import annotations

import factory

_current_session = None


def bind_session(session) -> None:
    global _current_session
    _current_session = session


def current_session():
    if _current_session is None:
        raise RuntimeError("No session bound; request the 'session' fixture first.")
    return _current_session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"
