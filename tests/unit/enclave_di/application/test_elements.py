"""Unit tests for declaration capture and replay."""

from enclave_di.application.binder import RecordingBinder
from enclave_di.application.container import DIContainer
from enclave_di.application.elements import ReplayModule, bound_keys, get_elements
from enclave_di.application.module import AbstractModule
from enclave_di.domain import InjectionRequest, Key, Lifetime, Message, ProviderLookup, Registration, Stage


class Cache:
    pass


class Clock:
    pass


class CacheModule(AbstractModule):
    def __init__(self):
        self.stages = []

    def configure_bindings(self):
        self.stages.append(self.current_stage())
        self.bind(Cache).in_lifetime(Lifetime.SINGLETON)
        self.bind(Clock).annotated_with("utc").to_instance(Clock())
        self.get_provider(Clock)
        self.add_error("cache misconfigured")


class TestGetElements:
    """Test cases for get_elements."""

    def test_records_without_building(self):
        """Test that capture returns declarations and builds nothing."""
        built = []

        class Recorder(AbstractModule):
            def configure_bindings(self):
                self.bind(Cache).to_builder(lambda c: built.append(1))

        elements = get_elements(Recorder())

        assert len(elements) == 1
        assert built == []

    def test_declaration_kinds_in_order(self):
        """Test that every declaration kind is kept in encounter order."""
        elements = get_elements(CacheModule())

        assert [type(element) for element in elements] == [Registration, Registration, ProviderLookup, Message]

    def test_stage_passed_to_modules(self):
        """Test that modules see the requested stage."""
        module = CacheModule()

        get_elements(module, stage=Stage.TOOL)

        assert module.stages == [Stage.TOOL]

    def test_multiple_modules(self):
        """Test that several modules are recorded in order."""

        class ClockModule(AbstractModule):
            def configure_bindings(self):
                self.bind(Key.of(Clock, "local"))

        elements = get_elements(ClockModule(), CacheModule())

        assert elements[0].key == Key.of(Clock, "local")


class TestBoundKeys:
    """Test cases for bound_keys."""

    def test_only_registrations_count(self):
        """Test that lookups and messages do not bind keys."""
        keys = bound_keys(get_elements(CacheModule()))

        assert keys == {Key.of(Cache), Key.of(Clock, "utc")}

    def test_empty(self):
        """Test that no declarations bind no keys."""
        assert bound_keys([]) == set()


class TestReplayModule:
    """Test cases for ReplayModule."""

    def test_replay_reproduces_declarations(self):
        """Test that replaying gives the same keys, sources and lifetimes."""
        original = get_elements(CacheModule())

        replayed = get_elements(ReplayModule(original))

        assert [type(element) for element in replayed] == [type(element) for element in original]
        assert [element.source for element in replayed] == [element.source for element in original]
        assert replayed[0].lifetime == Lifetime.SINGLETON
        assert replayed[1].key == Key.of(Clock, "utc")

    def test_replay_links_original_lookups(self):
        """Test that a replayed lookup connects the original one."""
        original = get_elements(CacheModule())
        lookup = next(element for element in original if isinstance(element, ProviderLookup))

        binder = RecordingBinder()
        ReplayModule(original).configure(binder)
        new_lookup = next(element for element in binder.finish() if isinstance(element, ProviderLookup))
        new_lookup.initialize(DIContainer().get_provider(Clock))

        assert isinstance(lookup.get(), Clock)

    def test_replay_keeps_injection_requests(self):
        """Test that injection requests are replayed with the same instance."""
        instance = object()
        original = [InjectionRequest(source="x", instance=instance)]

        replayed = get_elements(ReplayModule(original))

        assert replayed[0].instance is instance

    def test_replay_does_not_scan_provider_methods(self):
        """Test that replaying never re-discovers provider methods."""
        assert ReplayModule([]).scan_provider_methods is False
        assert ReplayModule([]).elements == []
