"""
Domain layer - Core models, markers and contracts.

This layer contains the bean definition model, the declarative markers and
the interfaces the container and its collaborators agree on.
It has no dependencies on other layers.
"""

from .enums import ContextState
from .exceptions import (
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
from .interfaces import (
    BeanPostProcessor,
    ContextAware,
    IApplicationContext,
    IComponentScanner,
    InvocationHandler,
    IPropertySource,
)
from .markers import (
    Autowired,
    Bean,
    Component,
    ComponentScan,
    Configuration,
    Import,
    Marker,
    Order,
    PostConstruct,
    PreDestroy,
    Primary,
    Value,
    bean,
    component,
    component_scan,
    configuration,
    find_marker,
    get_marker,
    import_types,
    order,
    post_construct,
    pre_destroy,
    primary,
)
from .models import (
    BeanDefinition,
    ConstructorStrategy,
    FactoryMethodStrategy,
    MethodHook,
    NamedHook,
    PropertyExpr,
)

__all__ = [
    # Enums
    "ContextState",
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
    # Interfaces
    "IPropertySource",
    "IApplicationContext",
    "IComponentScanner",
    "BeanPostProcessor",
    "ContextAware",
    "InvocationHandler",
    # Markers
    "Marker",
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
    "find_marker",
    "get_marker",
    # Models
    "BeanDefinition",
    "ConstructorStrategy",
    "FactoryMethodStrategy",
    "MethodHook",
    "NamedHook",
    "PropertyExpr",
]
