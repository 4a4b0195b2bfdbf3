"""Unit tests for domain models."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from enclave_di.domain import (
    Declaration,
    DependencyMetadata,
    DIException,
    InjectionRequest,
    IProvider,
    Key,
    Lifetime,
    Message,
    NotReadyError,
    ProviderLookup,
    Registration,
)


class Service:
    pass


def make_registration(**overrides):
    values = dict(source="test", key=Key.of(Service), builder=lambda c: Service(), lifetime=Lifetime.SINGLETON)
    values.update(overrides)
    return Registration(**values)


class TestDeclaration:
    """Test cases for the Declaration base class."""

    def test_cannot_be_instantiated(self):
        """Test that only concrete declarations can be created."""
        with pytest.raises(TypeError):
            Declaration(source="test")

    def test_subclass_must_implement_apply_to(self):
        """Test that a declaration without apply_to is abstract."""

        class Incomplete(Declaration):
            pass

        with pytest.raises(TypeError):
            Incomplete(source="test")


class TestRegistration:
    """Test cases for the Registration model."""

    def test_registration_defaults_to_lazy(self):
        """Test that registrations are not eager unless asked."""
        registration = make_registration()

        assert registration.eager is False
        assert registration.lifetime == Lifetime.SINGLETON

    def test_registration_is_frozen(self):
        """Test that a registration cannot be changed."""
        registration = make_registration()

        with pytest.raises(ValidationError):
            registration.lifetime = Lifetime.TRANSIENT

    def test_registration_requires_callable_builder(self):
        """Test that the builder must be callable."""
        with pytest.raises(ValidationError):
            make_registration(builder="not callable")

    def test_apply_to_replays_lazy_binding(self):
        """Test that a lazy registration replays with its lifetime."""
        binder = MagicMock()
        registration = make_registration()

        registration.apply_to(binder)

        binder.with_source.assert_called_once_with("test")
        bound = binder.with_source.return_value.bind
        bound.assert_called_once_with(registration.key)
        linked = bound.return_value.to_builder
        linked.assert_called_once_with(registration.builder)
        linked.return_value.in_lifetime.assert_called_once_with(Lifetime.SINGLETON)

    def test_apply_to_replays_eager_binding(self):
        """Test that an eager registration replays as an eager singleton."""
        binder = MagicMock()

        make_registration(eager=True).apply_to(binder)

        builder = binder.with_source.return_value.bind.return_value.to_builder.return_value
        builder.as_eager_singleton.assert_called_once_with()
        builder.in_lifetime.assert_not_called()


class TestDependencyMetadata:
    """Test cases for DependencyMetadata."""

    def test_resolution_count_starts_at_zero(self):
        """Test the default resolution count."""
        metadata = DependencyMetadata(registration=make_registration())

        assert metadata.resolution_count == 0

    def test_resolution_count_is_mutable(self):
        """Test that the container can count resolutions."""
        metadata = DependencyMetadata(registration=make_registration())
        metadata.resolution_count += 1

        assert metadata.resolution_count == 1


class TestProviderLookup:
    """Test cases for ProviderLookup."""

    def test_lookup_is_a_provider(self):
        """Test that lookups can be used wherever a provider is expected."""
        assert isinstance(ProviderLookup(source="test", key=Key.of(Service)), IProvider)

    def test_get_before_initialize_raises(self):
        """Test that an uninitialized lookup is not ready."""
        lookup = ProviderLookup(source="test", key=Key.of(Service))

        assert not lookup.initialized
        with pytest.raises(NotReadyError, match="cannot be used until its container has been created"):
            lookup.get()

    def test_get_delegates_after_initialize(self):
        """Test that get() forwards to the delegate."""
        lookup = ProviderLookup(source="test", key=Key.of(Service))
        delegate = MagicMock()
        delegate.get.return_value = "instance"

        lookup.initialize(delegate)

        assert lookup.initialized
        assert lookup.get() == "instance"

    def test_initialize_twice_raises(self):
        """Test that a lookup is connected only once."""
        lookup = ProviderLookup(source="test", key=Key.of(Service))
        lookup.initialize(MagicMock())

        with pytest.raises(DIException, match="already initialized"):
            lookup.initialize(MagicMock())

    def test_apply_to_links_to_new_binder_lookup(self):
        """Test that replaying a lookup connects it to the new binder's provider."""
        lookup = ProviderLookup(source="origin", key=Key.of(Service))
        binder = MagicMock()
        new_provider = binder.with_source.return_value.get_provider.return_value
        new_provider.get.return_value = "replayed"

        lookup.apply_to(binder)

        binder.with_source.assert_called_once_with("origin")
        assert lookup.get() == "replayed"


class TestMessage:
    """Test cases for Message."""

    def test_message_str(self):
        """Test that the message and its source are shown."""
        assert str(Message(source="mod.py:3", message="Broken")) == "Broken (at mod.py:3)"

    def test_message_keeps_cause(self):
        """Test that an exception can be attached as cause."""
        cause = ValueError("bad")
        message = Message(source="x", message="bad", cause=cause)

        assert message.cause is cause

    def test_apply_to_adds_error(self):
        """Test that replaying a message reports it again."""
        binder = MagicMock()
        message = Message(source="x", message="bad")

        message.apply_to(binder)

        binder.add_error.assert_called_once_with(message)


class TestInjectionRequest:
    """Test cases for InjectionRequest."""

    def test_apply_to_requests_injection(self):
        """Test that replaying requests injection of the same instance."""
        instance = Service()
        binder = MagicMock()

        InjectionRequest(source="x", instance=instance).apply_to(binder)

        binder.with_source.assert_called_once_with("x")
        binder.with_source.return_value.request_injection.assert_called_once_with(instance)
