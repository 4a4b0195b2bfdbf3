"""
enclave-di: Type-hint based Dependency Injection with private modules.

Private modules build their bindings in a container of their own and expose
only selected keys to the container that installs them.

Public API exports for the enclave-di package.
"""

# Application exports
from enclave_di.application.container import DIContainer
from enclave_di.application.container_builder import create_container
from enclave_di.application.elements import get_elements
from enclave_di.application.exposure import Exposure
from enclave_di.application.module import AbstractModule
from enclave_di.application.private_module import PrivateModule
from enclave_di.application.provider_methods import exposed, inject, provides

# Domain exports
from enclave_di.domain.enums import Lifetime, ModuleState, Stage
from enclave_di.domain.exceptions import (
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
from enclave_di.domain.interfaces import IBinder, IModule, IProvider
from enclave_di.domain.keys import Key

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    "create_container",
    "get_elements",
    # Modules
    "IModule",
    "IBinder",
    "IProvider",
    "AbstractModule",
    "PrivateModule",
    "Exposure",
    "provides",
    "exposed",
    "inject",
    # Keys and enums
    "Key",
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
]
