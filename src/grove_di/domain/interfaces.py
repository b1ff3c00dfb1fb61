from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Type, TypeVar, Union, overload

from grove_di.domain.models import BeanDefinition

T = TypeVar("T")


class IPropertySource(ABC):
    """Abstract interface for resolving configuration properties."""

    @abstractmethod
    def contains_property(self, key: str) -> bool:
        """Check whether a property key is defined.

        Args:
            key: The plain property key.
        """

    @abstractmethod
    def get_property(self, key: str, target_type: Type[T] = str, default: Optional[str] = None) -> Optional[T]:
        """Resolve a property and convert it to ``target_type``.

        Args:
            key: A plain key or a ``${key:default}`` expression.
            target_type: The type to convert the raw value to.
            default: Raw value used when the key is missing.

        Returns:
            The converted value, or None when missing and no default applies.
        """

    @abstractmethod
    def get_required_property(self, key: str, target_type: Type[T] = str) -> T:
        """Resolve a property that must exist.

        Args:
            key: A plain key or a ``${key:default}`` expression.
            target_type: The type to convert the raw value to.

        Raises:
            PropertyNotFoundError: If the property is missing.
        """


class BeanPostProcessor:
    """Extension hook able to substitute bean instances.

    Not an ABC: every hook defaults to identity, so subclasses override only
    the hooks they need. A post-processor that substitutes a bean in
    ``post_process_before_initialization`` must map the substitute back to
    the original in ``post_process_on_set_property``, because field and
    setter injection is applied to the original object.
    """

    def post_process_before_initialization(self, bean: Any, bean_name: str) -> Any:
        """Called right after a bean is instantiated, before injection."""
        return bean

    def post_process_after_initialization(self, bean: Any, bean_name: str) -> Any:
        """Called after the bean's init hook ran."""
        return bean

    def post_process_on_set_property(self, bean: Any, bean_name: str) -> Any:
        """Return the object that property injection should mutate."""
        return bean


class InvocationHandler(ABC):
    """Intercepts method calls made through a proxy."""

    @abstractmethod
    def invoke(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        """Handle a call of ``method`` (bound to ``target``) with ``args`` and ``kwargs``."""


class IApplicationContext(ABC):
    """Abstract interface for the bean registry exposed to collaborators."""

    @abstractmethod
    def contains_bean(self, name: str) -> bool:
        """Check whether a bean with the given name is defined."""

    @overload
    def get_bean(self, name_or_type: str) -> Any: ...

    @overload
    def get_bean(self, name_or_type: str, required_type: Type[T]) -> T: ...

    @overload
    def get_bean(self, name_or_type: Type[T]) -> T: ...

    @abstractmethod
    def get_bean(self, name_or_type: Union[str, Type[T]], required_type: Optional[Type[T]] = None) -> Any:
        """Return a bean by name, by type, or by name checked against a type.

        Raises:
            NoSuchBeanDefinitionError: If no bean matches.
            NoUniqueBeanDefinitionError: If several beans match a type without a single primary.
            BeanNotOfRequiredTypeError: If the named bean is not of the required type.
        """

    @abstractmethod
    def get_beans(self, required_type: Type[T]) -> List[T]:
        """Return every bean whose declared type is a subclass of ``required_type``."""

    @abstractmethod
    def find_bean_definition(
        self, name_or_type: Union[str, Type[Any]], required_type: Optional[Type[Any]] = None
    ) -> Optional[BeanDefinition]:
        """Find a definition by name or type; None when nothing matches."""

    @abstractmethod
    def find_bean_definitions(self, required_type: Type[Any]) -> List[BeanDefinition]:
        """Find all definitions matching a type, sorted by order then name."""

    @abstractmethod
    def create_bean_as_early_singleton(self, definition: BeanDefinition) -> Any:
        """Instantiate a bean and its constructor dependencies, applying post-processors."""

    @abstractmethod
    def close(self) -> None:
        """Invoke destroy hooks and empty the registry."""


class ContextAware:
    """Beans implementing this receive the application context right after instantiation."""

    application_context: Optional[IApplicationContext] = None

    def set_application_context(self, context: IApplicationContext) -> None:
        self.application_context = context


class IComponentScanner(ABC):
    """Abstract interface for discovering candidate type names."""

    @abstractmethod
    def scan(self, config_type: type) -> Set[str]:
        """Return fully-qualified names of types to turn into bean definitions.

        Args:
            config_type: The application's root configuration type.
        """
