"""Test data factories."""

from tests.factories.user import DEFAULT_PASSWORD, RegisterRequestFactory, UserCreateFactory


__all__ = ["DEFAULT_PASSWORD", "RegisterRequestFactory", "UserCreateFactory"]
