"""
Application layer - Use cases and orchestration.

This layer contains the container, the recording binder and the private
module protocol built on them. It depends only on the Domain layer.
"""

from .binder import BindingBuilder, RecordingBinder
from .circular_detector import CircularDependencyDetector
from .container import ContainerProvider, DIContainer
from .container_builder import ContainerBuilder, create_container
from .elements import ReplayModule, bound_keys, get_elements
from .exposure import Exposure, ExposureLedger
from .gate import Ready, ReadyGate
from .lifetime_manager import LifetimeManager
from .module import AbstractModule, BinderMethods
from .private_module import PrivateModule
from .provider_methods import ProviderMethod, ProviderMethodScanner, exposed, inject, provides
from .resolver import DependencyResolver, key_for_hint
from .sources import SourceProvider

__all__ = [
    "DIContainer",
    "ContainerProvider",
    "ContainerBuilder",
    "create_container",
    "DependencyResolver",
    "key_for_hint",
    "LifetimeManager",
    "CircularDependencyDetector",
    "RecordingBinder",
    "BindingBuilder",
    "SourceProvider",
    "get_elements",
    "bound_keys",
    "ReplayModule",
    "AbstractModule",
    "BinderMethods",
    "PrivateModule",
    "Exposure",
    "ExposureLedger",
    "Ready",
    "ReadyGate",
    "ProviderMethod",
    "ProviderMethodScanner",
    "provides",
    "exposed",
    "inject",
]
