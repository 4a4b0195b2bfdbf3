"""
Domain layer - Core business logic and models.

This layer contains keys, declarations, exceptions and the abstract contracts
for dependency injection. It has no dependencies on other layers.
"""

from .enums import Lifetime, ModuleState, Stage
from .exceptions import (
    AlreadyAnnotatedError,
    CircularDependencyError,
    CreationError,
    DIException,
    LifetimeError,
    NotReadyError,
    ReentrancyError,
    ScopeError,
    UnboundExposureError,
    UnresolvableError,
)
from .interfaces import (
    IBinder,
    IBindingBuilder,
    IContainer,
    ILifetimeManager,
    IModule,
    IProvider,
    IResolver,
    KeyLike,
)
from .keys import Key, UniqueQualifier
from .models import (
    Declaration,
    DependencyMetadata,
    InjectionRequest,
    Message,
    ProviderLookup,
    Registration,
)

# Rebuild Pydantic models to resolve forward references
Registration.model_rebuild()
DependencyMetadata.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "Stage",
    "ModuleState",
    # Exceptions
    "DIException",
    "CircularDependencyError",
    "UnresolvableError",
    "LifetimeError",
    "ScopeError",
    "ReentrancyError",
    "NotReadyError",
    "AlreadyAnnotatedError",
    "UnboundExposureError",
    "CreationError",
    # Interfaces
    "IBinder",
    "IBindingBuilder",
    "IContainer",
    "IModule",
    "IProvider",
    "IResolver",
    "ILifetimeManager",
    "KeyLike",
    # Keys
    "Key",
    "UniqueQualifier",
    # Models
    "Declaration",
    "Registration",
    "DependencyMetadata",
    "ProviderLookup",
    "Message",
    "InjectionRequest",
]
