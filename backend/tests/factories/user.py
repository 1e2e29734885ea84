"""Factory Boy definition for :class:`forum.models.user.User`."""

from __future__ import annotations

import factory
from werkzeug.security import generate_password_hash

from forum.models.user import User, UserRole
from tests.factories import BaseFactory


class UserFactory(BaseFactory):
    """
    Build persisted :class:`forum.models.user.User` instances.

    Notes
    -----
    - ``password`` is a factory parameter hashed into ``password_hash`` at
      build time, so the row is flushed with a usable hash.
    - Use the ``admin`` trait (``UserFactory(admin=True)``) for administrators.
    """

    class Meta:
        model = User

    class Params:
        password = "Passw0rd!"
        admin = factory.Trait(role=UserRole.ADMIN)

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"user{n}")
    display_name = factory.LazyAttribute(lambda o: o.username.capitalize())
    role = UserRole.MEMBER
    password_hash = factory.LazyAttribute(lambda o: generate_password_hash(o.password))
