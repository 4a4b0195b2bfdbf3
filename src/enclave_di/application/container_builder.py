"""Application layer - Container creation from modules."""

import logging
from typing import List, Optional

from enclave_di.application.container import DIContainer
from enclave_di.application.elements import get_elements
from enclave_di.application.provider_methods import INJECT_ATTRIBUTE, find_marked
from enclave_di.application.resolver import DependencyResolver
from enclave_di.domain import (
    CreationError,
    DIException,
    IContainer,
    IModule,
    InjectionRequest,
    Message,
    ProviderLookup,
    Registration,
    Stage,
)

logger = logging.getLogger(__name__)


class ContainerBuilder:
    """Builds a container from modules.

    Steps, each completed before the next starts:
    1. Record the modules' declarations.
    2. Register bindings, collecting configuration errors and duplicate keys.
    3. Check and connect provider lookups.
    4. Fail with every collected error, if any.
    5. Run injection requests, then build eager singletons (skipped in TOOL stage).

    Attributes:
        _modules: Modules configuring the container.
        _stage: Stage of the new container.
        _parent: Parent of the new container, if it is a child.
    """

    def __init__(self, *modules: IModule, stage: Stage = Stage.DEVELOPMENT, parent: Optional[IContainer] = None) -> None:
        self._modules = modules
        self._stage = Stage(stage)
        self._parent = parent
        self._resolver = DependencyResolver()

    def build(self) -> DIContainer:
        """Create the container.

        Raises:
            CreationError: With every configuration error, or with every eager
                singleton / injection failure.
        """
        elements = get_elements(*self._modules, stage=self._stage)
        container = DIContainer(parent=self._parent, stage=self._stage)
        logger.debug(
            "Creating %s container from %d declarations (stage=%s)",
            "child" if self._parent is not None else "root",
            len(elements),
            self._stage,
        )

        errors: List[Message] = []
        lookups: List[ProviderLookup] = []
        injections: List[InjectionRequest] = []
        for element in elements:
            if isinstance(element, Registration):
                existing = container.add_registration(element)
                if existing is not None:
                    errors.append(
                        Message(
                            source=element.source,
                            message=f"A binding to {element.key} was already configured at {existing.source}.",
                        )
                    )
            elif isinstance(element, Message):
                errors.append(element)
            elif isinstance(element, ProviderLookup):
                lookups.append(element)
            elif isinstance(element, InjectionRequest):
                injections.append(element)

        for lookup in lookups:
            if container.can_resolve(lookup.key):
                lookup.initialize(container.get_provider(lookup.key))
            else:
                errors.append(Message(source=lookup.source, message=f"No binding to {lookup.key} was found."))
        self._fail_on(errors)

        if self._stage == Stage.TOOL:
            return container

        for request in injections:
            try:
                self._inject(request.instance, container)
            except CreationError as e:
                self._collect(errors, e)
            except DIException as e:
                errors.append(
                    Message(source=request.source, message=f"Error injecting {request.instance!r}: {e}", cause=e)
                )

        for key in container.eager_keys():
            try:
                container.resolve(key)
            except CreationError as e:
                self._collect(errors, e)
            except DIException as e:
                source = container.get_registry_copy()[key].registration.source
                errors.append(Message(source=source, message=f"Error creating {key}: {e}", cause=e))
        self._fail_on(errors)

        logger.debug("Created container with %d bindings", len(container.get_registry_copy()))
        return container

    def _inject(self, instance: object, container: DIContainer) -> None:
        for name in find_marked(instance, INJECT_ATTRIBUTE):
            self._resolver.call_with_dependencies(getattr(instance, name), container)

    @staticmethod
    def _collect(errors: List[Message], error: CreationError) -> None:
        # A failed gate reports the same CreationError to every dependent.
        for message in error.messages:
            if not any(known is message for known in errors):
                errors.append(message)

    @staticmethod
    def _fail_on(errors: List[Message]) -> None:
        if not errors:
            return
        for message in errors:
            logger.warning("Container creation error: %s", message)
        raise CreationError(errors)


def create_container(*modules: IModule, stage: Stage = Stage.DEVELOPMENT) -> DIContainer:
    """Create a root container configured by the given modules.

    Example:
        >>> container = create_container(DatabaseModule(), BillingModule(), stage=Stage.PRODUCTION)
        >>> billing = container.resolve(BillingService)
    """
    return ContainerBuilder(*modules, stage=stage).build()
