"""Unit tests for provider method discovery."""

from typing import Annotated

from enclave_di.application.binder import RecordingBinder
from enclave_di.application.container import DIContainer
from enclave_di.application.provider_methods import (
    EXPOSED_ATTRIBUTE,
    INJECT_ATTRIBUTE,
    PROVIDES_ATTRIBUTE,
    ProviderMethodScanner,
    ProvidesMarker,
    exposed,
    find_marked,
    inject,
    provides,
)
from enclave_di.domain import IModule, Key, Lifetime, Message


class Config:
    def __init__(self, url: str = "sqlite://"):
        self.url = url


class Connection:
    def __init__(self, url: str):
        self.url = url


class EmptyModule(IModule):
    def configure(self, binder):
        pass


def scan(module):
    binder = RecordingBinder()
    methods = ProviderMethodScanner().get_provider_methods(module, binder)
    return methods, [element for element in binder.finish() if isinstance(element, Message)]


class TestDecorators:
    """Test cases for the marker decorators."""

    def test_provides_without_arguments(self):
        """Test bare @provides usage."""

        @provides
        def factory() -> Config:
            return Config()

        marker = getattr(factory, PROVIDES_ATTRIBUTE)
        assert isinstance(marker, ProvidesMarker)
        assert marker.lifetime == Lifetime.TRANSIENT
        assert marker.qualifier is None

    def test_provides_with_options(self):
        """Test @provides with qualifier and lifetime."""

        @provides(qualifier="main", lifetime=Lifetime.SINGLETON)
        def factory() -> Config:
            return Config()

        marker = getattr(factory, PROVIDES_ATTRIBUTE)
        assert marker.qualifier == "main"
        assert marker.lifetime == Lifetime.SINGLETON

    def test_exposed_and_inject_markers(self):
        """Test that @exposed and @inject mark the function."""

        @exposed
        def a():
            pass

        @inject
        def b():
            pass

        assert getattr(a, EXPOSED_ATTRIBUTE) is True
        assert getattr(b, INJECT_ATTRIBUTE) is True


class TestFindMarked:
    """Test cases for find_marked."""

    def test_inherited_methods_found(self):
        """Test that marked methods of base classes are found."""

        class Base:
            @inject
            def set_config(self, config: Config):
                pass

        class Child(Base):
            pass

        assert list(find_marked(Child(), INJECT_ATTRIBUTE)) == ["set_config"]

    def test_unmarked_override_hides_base_method(self):
        """Test that overriding without the marker removes the method."""

        class Base:
            @inject
            def set_config(self, config: Config):
                pass

        class Child(Base):
            def set_config(self, config: Config):
                pass

        assert find_marked(Child, INJECT_ATTRIBUTE) == {}

    def test_static_and_class_methods_unwrapped(self):
        """Test that decorated staticmethods are found through __func__."""

        class Holder:
            @staticmethod
            @inject
            def configure_static(config: Config):
                pass

        assert "configure_static" in find_marked(Holder, INJECT_ATTRIBUTE)


class TestProviderMethodScanner:
    """Test cases for ProviderMethodScanner."""

    def test_finds_provider_methods(self):
        """Test that @provides methods become provider methods keyed by return type."""

        class DatabaseModule(EmptyModule):
            @provides(lifetime=Lifetime.SINGLETON)
            def connection(self, config: Config) -> Connection:
                return Connection(config.url)

        methods, errors = scan(DatabaseModule())

        assert errors == []
        assert len(methods) == 1
        assert methods[0].key == Key.of(Connection)
        assert methods[0].lifetime == Lifetime.SINGLETON
        assert not methods[0].exposed

    def test_qualifier_from_decorator(self):
        """Test that the decorator qualifier is added to the key."""

        class DatabaseModule(EmptyModule):
            @provides(qualifier="replica")
            def connection(self) -> Connection:
                return Connection("replica://")

        methods, _ = scan(DatabaseModule())

        assert methods[0].key == Key.of(Connection, "replica")

    def test_qualifier_from_annotated_return(self):
        """Test that an Annotated return type carries the qualifier."""

        class DatabaseModule(EmptyModule):
            @provides
            def connection(self) -> Annotated[Connection, "replica"]:
                return Connection("replica://")

        methods, _ = scan(DatabaseModule())

        assert methods[0].key == Key.of(Connection, "replica")

    def test_qualifier_twice_is_error(self):
        """Test that Annotated return plus decorator qualifier is reported."""

        class DatabaseModule(EmptyModule):
            @provides(qualifier="other")
            def connection(self) -> Annotated[Connection, "replica"]:
                return Connection("replica://")

        methods, errors = scan(DatabaseModule())

        assert methods == []
        assert "declares a qualifier twice" in errors[0].message

    def test_missing_return_type_is_error(self):
        """Test that provider methods need a return annotation."""

        class DatabaseModule(EmptyModule):
            @provides
            def connection(self):
                return Connection("x")

        methods, errors = scan(DatabaseModule())

        assert methods == []
        assert len(errors) == 1
        assert "must declare its return type" in errors[0].message
        assert "DatabaseModule.connection" in errors[0].source

    def test_exposed_without_provides_is_error(self):
        """Test that @exposed alone is reported."""

        class DatabaseModule(EmptyModule):
            @exposed
            def connection(self) -> Connection:
                return Connection("x")

        methods, errors = scan(DatabaseModule())

        assert methods == []
        assert "is marked @exposed but not @provides" in errors[0].message

    def test_exposed_flag(self):
        """Test that @exposed provider methods are flagged."""

        class DatabaseModule(EmptyModule):
            @exposed
            @provides
            def connection(self) -> Connection:
                return Connection("x")

        methods, errors = scan(DatabaseModule())

        assert errors == []
        assert methods[0].exposed


class TestProviderMethod:
    """Test cases for ProviderMethod bindings."""

    def test_configure_binds_resolving_call(self):
        """Test that the bound builder calls the method with resolved arguments."""

        class DatabaseModule(EmptyModule):
            @provides(lifetime=Lifetime.SINGLETON)
            def connection(self, config: Config) -> Connection:
                return Connection(config.url)

        methods, _ = scan(DatabaseModule())
        binder = RecordingBinder()
        methods[0].configure(binder)
        registration = binder.finish()[0]

        container = DIContainer()
        container.register_singletons({Config: lambda c: Config("postgres://")})
        connection = registration.builder(container)

        assert registration.lifetime == Lifetime.SINGLETON
        assert connection.url == "postgres://"
        assert registration.source == methods[0].source
