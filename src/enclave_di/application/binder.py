"""Application layer - Recording binder.

The recording binder never builds anything: it turns module configuration into
an ordered list of declarations that a container (or another binder) consumes
later.
"""

import logging
from typing import Any, Callable, Hashable, List, Optional, Union

from enclave_di.application.provider_methods import ProviderMethodScanner
from enclave_di.application.sources import SourceProvider
from enclave_di.domain import (
    AlreadyAnnotatedError,
    Declaration,
    DIException,
    IBinder,
    IBindingBuilder,
    IContainer,
    IModule,
    InjectionRequest,
    IProvider,
    Key,
    KeyLike,
    Lifetime,
    Message,
    NotReadyError,
    ProviderLookup,
    ReentrancyError,
    Registration,
    Stage,
)

logger = logging.getLogger(__name__)


class BindingBuilder(IBindingBuilder):
    """Collects one binding until the recording finishes.

    The key stays open to a single qualifier attachment; the immutable
    Registration is only produced by build().
    """

    def __init__(self, key: Key, source: str) -> None:
        self._key = key
        self._source = source
        self._builder: Optional[Callable[[IContainer], Any]] = None
        self._lifetime = Lifetime.TRANSIENT
        self._eager = False

    @property
    def key(self) -> Key:
        return self._key

    def annotated_with(self, qualifier: Hashable) -> "BindingBuilder":
        if self._key.has_qualifier:
            raise AlreadyAnnotatedError(self._key)
        self._key = self._key.with_qualifier(qualifier)
        return self

    def _set_builder(self, builder: Callable[[IContainer], Any]) -> None:
        if self._builder is not None:
            raise DIException(f"Implementation for {self._key} is set more than once")
        self._builder = builder

    def to(self, implementation: KeyLike) -> "BindingBuilder":
        target = Key.of(implementation)
        self._set_builder(lambda container: container.resolve(target))
        return self

    def to_instance(self, instance: Any) -> None:
        self._set_builder(lambda container: instance)
        self._lifetime = Lifetime.SINGLETON

    def to_provider(self, provider: IProvider) -> "BindingBuilder":
        self._set_builder(lambda container: provider.get())
        return self

    def to_builder(self, builder: Callable[[IContainer], Any]) -> "BindingBuilder":
        self._set_builder(builder)
        return self

    def in_lifetime(self, lifetime: Lifetime) -> None:
        self._lifetime = Lifetime(lifetime)

    def as_eager_singleton(self) -> None:
        self._lifetime = Lifetime.SINGLETON
        self._eager = True

    def build(self) -> Registration:
        builder = self._builder
        if builder is None:
            # Untargeted: construct the bound class itself.
            dependency_type = self._key.dependency_type
            builder = lambda container: container.construct(dependency_type)  # noqa: E731
        return Registration(
            source=self._source,
            key=self._key,
            builder=builder,
            lifetime=self._lifetime,
            eager=self._eager,
        )


class _Recording:
    """State shared by a binder and all views derived from it."""

    def __init__(self, stage: Stage) -> None:
        self.stage = stage
        self.entries: List[Union[Declaration, BindingBuilder]] = []
        self.modules: List[IModule] = []

    def is_installed(self, module: IModule) -> bool:
        return any(installed is module for installed in self.modules)


class RecordingBinder(IBinder):
    """Binder that records declarations in encounter order.

    Attributes:
        _recording: Declarations and installed modules, shared with derived binders.
        _source: Fixed source for new declarations, if set by with_source().
        _source_provider: Computes sources from the call stack otherwise.

    Example:
        >>> binder = RecordingBinder(Stage.DEVELOPMENT)
        >>> binder.install(DatabaseModule())
        >>> elements = binder.finish()
    """

    def __init__(
        self,
        stage: Stage = Stage.DEVELOPMENT,
        *,
        source: Optional[str] = None,
        source_provider: Optional[SourceProvider] = None,
        recording: Optional[_Recording] = None,
    ) -> None:
        self._recording = recording if recording is not None else _Recording(Stage(stage))
        self._source = source
        self._source_provider = source_provider or SourceProvider()

    def _current_source(self) -> str:
        return self._source if self._source is not None else self._source_provider.get()

    def bind(self, key: KeyLike) -> BindingBuilder:
        builder = BindingBuilder(Key.of(key), self._current_source())
        self._recording.entries.append(builder)
        return builder

    def install(self, module: IModule) -> None:
        if self._recording.is_installed(module):
            return
        self._recording.modules.append(module)
        logger.debug("Installing %s", type(module).__name__)
        try:
            module.configure(self)
        except (ReentrancyError, NotReadyError, AlreadyAnnotatedError):
            raise
        except Exception as e:
            # Reported with the other configuration errors when the container is created.
            logger.debug("Configuring %s failed: %r", type(module).__name__, e)
            module_name = f"{type(module).__module__}.{type(module).__qualname__}"
            self.add_error(
                Message(
                    source=module_name,
                    message=f"An exception was caught and reported while configuring {type(module).__name__}: {e!r}",
                    cause=e,
                )
            )
            return

        if not getattr(module, "scan_provider_methods", True):
            return
        for provider_method in ProviderMethodScanner().get_provider_methods(module, self):
            provider_method.configure(self)
            if provider_method.exposed:
                self.with_source(provider_method.source).add_error(
                    f"Cannot expose {provider_method.key} from {type(module).__name__}: "
                    "@exposed provider methods are only allowed in private modules."
                )

    def add_error(self, error: Union[str, Exception, Message]) -> None:
        if isinstance(error, Message):
            message = error
        elif isinstance(error, Exception):
            message = Message(source=self._current_source(), message=str(error), cause=error)
        else:
            message = Message(source=self._current_source(), message=str(error))
        self._recording.entries.append(message)

    def get_provider(self, key: KeyLike) -> ProviderLookup:
        lookup = ProviderLookup(source=self._current_source(), key=Key.of(key))
        self._recording.entries.append(lookup)
        return lookup

    def request_injection(self, instance: Any) -> None:
        self._recording.entries.append(InjectionRequest(source=self._current_source(), instance=instance))

    def with_source(self, source: str) -> "RecordingBinder":
        return RecordingBinder(source=source, source_provider=self._source_provider, recording=self._recording)

    def skip_sources(self, *module_names: str) -> "RecordingBinder":
        return RecordingBinder(
            source=self._source,
            source_provider=self._source_provider.plus_skipped(*module_names),
            recording=self._recording,
        )

    def current_stage(self) -> Stage:
        return self._recording.stage

    def finish(self) -> List[Declaration]:
        """Return the recorded declarations, with pending bindings finalized."""
        return [entry.build() if isinstance(entry, BindingBuilder) else entry for entry in self._recording.entries]
