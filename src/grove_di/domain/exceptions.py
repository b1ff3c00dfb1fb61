from typing import List, Optional, Type


class DIException(Exception):
    """Base exception for DI-related errors."""


class BeanDefinitionError(DIException):
    """Raised when a bean definition is malformed.

    This occurs when:
    - Two definitions share the same bean name.
    - A component class is abstract or private.
    - A factory method is abstract, private, final or has no usable return type.
    - Markers are duplicated or injection targets are malformed.
    """


class DuplicateBeanNameError(BeanDefinitionError):
    """Raised when two bean definitions are registered under the same name.

    Attributes:
        name: The duplicated bean name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate bean name: {name}")


class NoSuchBeanDefinitionError(BeanDefinitionError):
    """Raised when no bean definition matches a lookup."""


class NoUniqueBeanDefinitionError(BeanDefinitionError):
    """Raised when a lookup by type matches several beans without a single primary.

    Attributes:
        required_type: The type that was looked up.
        primary_count: How many of the candidates were marked primary.
    """

    def __init__(self, required_type: Type, primary_count: int) -> None:
        self.required_type = required_type
        self.primary_count = primary_count
        if primary_count == 0:
            message = f"Multiple beans with type '{required_type.__name__}' found, but no @Primary specified."
        else:
            message = f"Multiple beans with type '{required_type.__name__}' found, and multiple @Primary specified."
        super().__init__(message)


class BeanCreationError(DIException):
    """Raised when a bean cannot be instantiated.

    The original exception, if any, is available as ``__cause__``.
    """


class UnsatisfiedDependencyError(BeanCreationError):
    """Raised when a required dependency cannot be satisfied."""


class CircularDependencyError(UnsatisfiedDependencyError):
    """Raised when a circular constructor dependency is detected.

    Attributes:
        dependency_chain: Bean names involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected when create bean '{dependency_chain[-1]}': {' -> '.join(dependency_chain)}"
        super().__init__(message)


class BeanNotOfRequiredTypeError(DIException):
    """Raised when a bean found by name is not of the requested type.

    Attributes:
        name: The bean name.
        required_type: The requested type.
        actual_type: The declared type of the bean.
    """

    def __init__(self, name: str, required_type: Type, actual_type: Type) -> None:
        self.name = name
        self.required_type = required_type
        self.actual_type = actual_type
        super().__init__(
            f"Autowire required type '{required_type.__name__}' but bean '{name}' "
            f"has actual type '{actual_type.__name__}'."
        )


class PropertyError(DIException):
    """Raised when a property expression is invalid or cannot be converted."""


class PropertyNotFoundError(PropertyError):
    """Raised when a required property is missing.

    Attributes:
        key: The missing property key.
    """

    def __init__(self, key: str, reason: Optional[str] = None) -> None:
        self.key = key
        message = f"Property '{key}' not found."
        if reason:
            message += f" Reason: {reason}"
        super().__init__(message)


class ContextClosedError(DIException):
    """Raised when a closed application context is used."""


class AopConfigError(DIException):
    """Raised for invalid proxy configurations.

    This occurs when:
    - The invocation handler named by a marker does not exist.
    - The named handler bean is not an InvocationHandler.
    """
