import sys
from typing import Any, Callable, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from grove_di.domain.exceptions import BeanCreationError


class ConstructorStrategy(BaseModel):
    """Builds a bean by calling its class.

    Attributes:
        constructor: The class (or callable) invoked with resolved arguments.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["constructor"] = "constructor"
    constructor: Callable[..., Any] = Field(..., description="Callable creating the instance.")


class FactoryMethodStrategy(BaseModel):
    """Builds a bean by calling a factory method on a configuration bean.

    Attributes:
        factory_name: Name of the configuration bean owning the method.
        method: The factory function as declared in the configuration class body.
        method_name: Attribute name of the method on the configuration class.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["factory_method"] = "factory_method"
    factory_name: str = Field(..., description="Name of the owning configuration bean.")
    method: Callable[..., Any] = Field(..., description="Factory method creating the instance.")
    method_name: str = Field(..., description="Attribute name of the factory method.")


ConstructionStrategy = Union[ConstructorStrategy, FactoryMethodStrategy]


class MethodHook(BaseModel):
    """Lifecycle hook resolved to a function of the bean class."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["method"] = "method"
    method: Callable[..., Any] = Field(..., description="Unbound function called with the bean.")

    @property
    def label(self) -> str:
        return self.method.__name__


class NamedHook(BaseModel):
    """Lifecycle hook given by name, looked up on the runtime instance type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    name: str = Field(..., description="Method name on the runtime instance.")

    @property
    def label(self) -> str:
        return self.name


LifecycleHook = Union[MethodHook, NamedHook]


class BeanDefinition(BaseModel):
    """Construction recipe and metadata of one bean.

    Definitions are created by the definition builder before anything is
    instantiated. Only the application context writes the instance.

    Attributes:
        name: Globally unique bean name.
        declared_type: Type used for lookup by type.
        strategy: How the instance is created.
        order: Ordering for deterministic start-up.
        primary: Whether this bean wins ambiguous lookups by type.
        init_hook: Hook called after injection.
        destroy_hook: Hook called when the context closes.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Globally unique bean name.")
    declared_type: Type[Any] = Field(..., description="Type used for lookup by type.")
    strategy: ConstructionStrategy = Field(..., discriminator="kind", description="Construction strategy.")
    order: int = Field(default=sys.maxsize, description="Start-up order, ascending.")
    primary: bool = Field(default=False, description="Whether the bean is marked primary.")
    init_hook: Optional[LifecycleHook] = Field(default=None, description="Init hook.")
    destroy_hook: Optional[LifecycleHook] = Field(default=None, description="Destroy hook.")

    _instance: Optional[Any] = PrivateAttr(default=None)

    @property
    def instance(self) -> Optional[Any]:
        return self._instance

    @property
    def required_instance(self) -> Any:
        """The instance, failing if it was not created yet.

        Raises:
            BeanCreationError: If the instance is not set.
        """
        if self._instance is None:
            raise BeanCreationError(
                f"Instance of bean with name '{self.name}' and type '{self.declared_type.__qualname__}' "
                "is not instantiated during current stage."
            )
        return self._instance

    def set_instance(self, instance: Any) -> None:
        """Store the instance after checking it matches the declared type.

        Raises:
            BeanCreationError: If the instance is None or of an unexpected type.
        """
        if instance is None:
            raise BeanCreationError(f"Instance of bean '{self.name}' is None.")
        if not isinstance(instance, self.declared_type):
            raise BeanCreationError(
                f"Instance '{instance!r}' of bean '{self.name}' is not the expected type: "
                f"{self.declared_type.__qualname__}"
            )
        self._instance = instance

    def clear_instance(self) -> None:
        self._instance = None

    @property
    def factory_name(self) -> Optional[str]:
        if isinstance(self.strategy, FactoryMethodStrategy):
            return self.strategy.factory_name
        return None

    @property
    def sort_key(self) -> Tuple[int, str]:
        return (self.order, self.name)

    def __lt__(self, other: "BeanDefinition") -> bool:
        return self.sort_key < other.sort_key

    def describe(self) -> str:
        if isinstance(self.strategy, FactoryMethodStrategy):
            factory = f"{self.strategy.factory_name}.{self.strategy.method_name}"
        else:
            factory = None
        return (
            f"BeanDefinition [name={self.name}, declared_type={self.declared_type.__qualname__}, "
            f"factory={factory}, init={self.init_hook.label if self.init_hook else None}, "
            f"destroy={self.destroy_hook.label if self.destroy_hook else None}, "
            f"primary={self.primary}, instance={self._instance!r}]"
        )

    def __str__(self) -> str:
        return self.describe()


class PropertyExpr(BaseModel):
    """A parsed ``${key}`` or ``${key:default}`` expression.

    Attributes:
        key: The property key.
        default: The default value, or None when no default was given.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Property key.")
    default: Optional[str] = Field(default=None, description="Default value.")
