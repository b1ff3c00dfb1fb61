"""
grove-di: Annotation-driven dependency injection container with staged bean start-up.

Public API exports for the grove-di package.
"""

# Application exports
from grove_di.application.container import ApplicationContext

# Domain exports
from grove_di.domain.enums import ContextState
from grove_di.domain.exceptions import (
    AopConfigError,
    BeanCreationError,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    CircularDependencyError,
    ContextClosedError,
    DIException,
    DuplicateBeanNameError,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    PropertyError,
    PropertyNotFoundError,
    UnsatisfiedDependencyError,
)
from grove_di.domain.interfaces import BeanPostProcessor, ContextAware, InvocationHandler
from grove_di.domain.markers import (
    Autowired,
    Bean,
    Component,
    ComponentScan,
    Configuration,
    Import,
    Order,
    PostConstruct,
    PreDestroy,
    Primary,
    Value,
    bean,
    component,
    component_scan,
    configuration,
    import_types,
    order,
    post_construct,
    pre_destroy,
    primary,
)

# Infrastructure exports
from grove_di.infrastructure.properties import PropertyResolver
from grove_di.infrastructure.scanning import ComponentScanner

__version__ = "0.1.0"

__all__ = [
    # Context
    "ApplicationContext",
    "ContextState",
    "PropertyResolver",
    "ComponentScanner",
    # Extension points
    "BeanPostProcessor",
    "ContextAware",
    "InvocationHandler",
    # Markers
    "Component",
    "Configuration",
    "Bean",
    "Order",
    "Primary",
    "PostConstruct",
    "PreDestroy",
    "Value",
    "Autowired",
    "ComponentScan",
    "Import",
    "component",
    "configuration",
    "bean",
    "order",
    "primary",
    "post_construct",
    "pre_destroy",
    "component_scan",
    "import_types",
    # Exceptions
    "DIException",
    "BeanDefinitionError",
    "DuplicateBeanNameError",
    "NoSuchBeanDefinitionError",
    "NoUniqueBeanDefinitionError",
    "BeanCreationError",
    "UnsatisfiedDependencyError",
    "CircularDependencyError",
    "BeanNotOfRequiredTypeError",
    "PropertyError",
    "PropertyNotFoundError",
    "ContextClosedError",
    "AopConfigError",
]
