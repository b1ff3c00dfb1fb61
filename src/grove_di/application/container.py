import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar, Union

from grove_di.application.circular_detector import CircularDependencyDetector
from grove_di.application.definition_builder import BeanDefinitionBuilder
from grove_di.application.post_processors import PostProcessorChain
from grove_di.application.resolver import DependencyResolver
from grove_di.domain import (
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    BeanPostProcessor,
    Configuration,
    ConstructorStrategy,
    ContextAware,
    ContextClosedError,
    ContextState,
    DIException,
    IApplicationContext,
    IComponentScanner,
    IPropertySource,
    MethodHook,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
)
from grove_di.domain.markers import find_marker
from grove_di.domain.models import LifecycleHook

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _is_assignable(declared_type: type, required_type: Any) -> bool:
    if not isinstance(required_type, type):
        return False
    if declared_type is required_type:
        return True
    try:
        return issubclass(declared_type, required_type)
    except TypeError:
        # Protocols that are not @runtime_checkable, or have data members, refuse class checks.
        return False


class ApplicationContext(IApplicationContext):
    """Annotation-driven application context.

    Builds bean definitions from the given types, then runs the start-up
    protocol synchronously before returning:

    1. configuration beans are created as early singletons;
    2. post-processor beans are created and appended to the chain;
    3. every remaining bean is created;
    4. fields and setters are injected into the original (pre-substitution) objects;
    5. init hooks run, followed by the after-initialization post-processor pass.

    Every phase walks the registry sorted by order, then name. Any failure
    aborts start-up. Once started the registry is only read, so lookups are
    safe from any number of threads until ``close`` is called.

    Attributes:
        _beans: Bean definitions by name.
        _resolver: Component resolving arguments and injecting properties.
        _post_processors: The post-processor chain.
        _circular_detector: Tracks beans under construction.

    Example:
        >>> context = ApplicationContext([UserRepository, UserService], PropertyResolver())
        >>> context.get_bean(UserService).repo is context.get_bean(UserRepository)
        True
    """

    def __init__(
        self,
        types: Iterable[Union[str, type]],
        property_source: IPropertySource,
        *,
        builder: Optional[BeanDefinitionBuilder] = None,
    ) -> None:
        """Build the registry and start every bean.

        Args:
            types: Fully-qualified type names and/or classes to turn into beans.
            property_source: Source of ``Value`` properties.
            builder: Definition builder; a default one is used when omitted.

        Raises:
            BeanDefinitionError: If the definitions are malformed.
            BeanCreationError: If a bean cannot be created.
            UnsatisfiedDependencyError: If a dependency is missing or circular.
        """
        self._state = ContextState.CREATED
        self._property_source = property_source
        self._resolver = DependencyResolver(property_source)
        self._post_processors = PostProcessorChain()
        self._circular_detector = CircularDependencyDetector()
        self._beans: Dict[str, BeanDefinition] = (builder or BeanDefinitionBuilder()).build(types)

        try:
            self._refresh()
        finally:
            self._circular_detector.clear()

    @classmethod
    def from_config_class(
        cls,
        config_type: type,
        property_source: IPropertySource,
        scanner: IComponentScanner,
    ) -> "ApplicationContext":
        """Scan for components starting from a root configuration type.

        Args:
            config_type: Root type carrying ``ComponentScan`` / ``Import`` markers.
            property_source: Source of ``Value`` properties.
            scanner: Scanner producing fully-qualified type names.
        """
        return cls(sorted(scanner.scan(config_type)), property_source)

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def property_source(self) -> IPropertySource:
        return self._property_source

    def _sorted_definitions(self, predicate: Optional[Callable[[BeanDefinition], bool]] = None) -> List[BeanDefinition]:
        return sorted(d for d in self._beans.values() if predicate is None or predicate(d))

    def _refresh(self) -> None:
        self._state = ContextState.CONFIGURATIONS
        for definition in self._sorted_definitions(self._is_configuration_definition):
            self.create_bean_as_early_singleton(definition)

        self._state = ContextState.POST_PROCESSORS
        for definition in self._sorted_definitions(self._is_post_processor_definition):
            processor = self.create_bean_as_early_singleton(definition)
            self._post_processors.append(processor)

        self._state = ContextState.NORMAL_BEANS
        for definition in self._sorted_definitions():
            if definition.instance is None:
                self.create_bean_as_early_singleton(definition)

        self._state = ContextState.INJECTION
        for definition in self._sorted_definitions():
            self._inject_bean(definition)

        self._state = ContextState.INITIALIZATION
        for definition in self._sorted_definitions():
            self._init_bean(definition)

        self._state = ContextState.READY
        if logger.isEnabledFor(logging.DEBUG):
            for definition in self._sorted_definitions():
                logger.debug("bean initialized: %s", definition)

    def create_bean_as_early_singleton(self, definition: BeanDefinition) -> Any:
        """Create a bean, recursively creating its constructor dependencies.

        The raw instance is stored on the definition, then every
        before-initialization post-processor may substitute it. Calling this
        for a bean that already has an instance returns that instance.

        Args:
            definition: The bean to create.

        Returns:
            The final, possibly substituted, instance.

        Raises:
            CircularDependencyError: If the bean is already under construction.
            BeanCreationError: If construction or post-processing fails.
        """
        if definition.instance is not None:
            return definition.instance

        logger.debug(
            "Try create bean '%s' as early singleton: %s", definition.name, definition.declared_type.__qualname__
        )
        self._circular_detector.push(definition.name)
        try:
            strategy = definition.strategy
            if isinstance(strategy, ConstructorStrategy):
                target = strategy.constructor
                hint_source = target.__init__ if isinstance(target, type) else target
                args, kwargs = self._resolver.resolve_arguments(
                    definition,
                    target,
                    hint_source,
                    self,
                    is_configuration=self._is_configuration_definition(definition),
                )
            else:
                config_instance = self._factory_owner_instance(definition, strategy.factory_name)
                target = getattr(config_instance, strategy.method_name)
                args, kwargs = self._resolver.resolve_arguments(definition, target, strategy.method, self)

            definition.set_instance(self._invoke(definition, target, args, kwargs))
            if isinstance(definition.instance, ContextAware):
                definition.instance.set_application_context(self)

            return self._post_processors.apply_before_initialization(definition)
        finally:
            self._circular_detector.pop(definition.name)

    def _factory_owner_instance(self, definition: BeanDefinition, factory_name: str) -> Any:
        owner = self._beans.get(factory_name)
        if owner is None or not self._is_configuration_definition(owner):
            raise BeanCreationError(
                f"Factory bean '{factory_name}' of bean '{definition.name}' is not a @Configuration bean."
            )
        return self.create_bean_as_early_singleton(owner)

    @staticmethod
    def _invoke(definition: BeanDefinition, target: Callable[..., Any], args: List[Any], kwargs: Dict[str, Any]) -> Any:
        try:
            return target(*args, **kwargs)
        except DIException:
            raise
        except Exception as e:
            raise BeanCreationError(
                f"Exception when create bean '{definition.name}': {definition.declared_type.__qualname__}"
            ) from e

    def _inject_bean(self, definition: BeanDefinition) -> None:
        bean = self._post_processors.restore_original(definition)
        try:
            self._resolver.inject_properties(definition, bean, self)
        except DIException:
            raise
        except Exception as e:
            raise BeanCreationError(f"Exception when inject properties of bean '{definition.name}'") from e

    def _init_bean(self, definition: BeanDefinition) -> None:
        self._call_hook(definition, definition.required_instance, definition.init_hook)
        self._post_processors.apply_after_initialization(definition)

    @staticmethod
    def _call_hook(definition: BeanDefinition, bean: Any, hook: Optional[LifecycleHook]) -> None:
        if hook is None:
            return
        if isinstance(hook, MethodHook):
            method = hook.method.__get__(bean, type(bean))
        else:
            method = getattr(bean, hook.name, None)
            if method is None or not callable(method):
                raise BeanDefinitionError(f"Method '{hook.name}' not found in class: {type(bean).__qualname__}")
        try:
            method()
        except DIException:
            raise
        except Exception as e:
            raise BeanCreationError(
                f"Exception when invoke {hook.label}() of bean '{definition.name}': {type(bean).__qualname__}"
            ) from e

    def _is_configuration_definition(self, definition: BeanDefinition) -> bool:
        return find_marker(definition.declared_type, Configuration) is not None

    def _is_post_processor_definition(self, definition: BeanDefinition) -> bool:
        return issubclass(definition.declared_type, BeanPostProcessor)

    def _check_open(self) -> None:
        if self._state is ContextState.CLOSED:
            raise ContextClosedError("Application context is already closed.")

    def contains_bean(self, name: str) -> bool:
        return name in self._beans

    def get_bean_names(self) -> List[str]:
        return [definition.name for definition in self._sorted_definitions()]

    def find_bean_definitions(self, required_type: Type[Any]) -> List[BeanDefinition]:
        return self._sorted_definitions(lambda d: _is_assignable(d.declared_type, required_type))

    def find_bean_definition(
        self, name_or_type: Union[str, Type[Any]], required_type: Optional[Type[Any]] = None
    ) -> Optional[BeanDefinition]:
        """Find a definition by name (optionally type-checked) or by type.

        Lookup by type returns the single match, or the single primary match
        among several.

        Raises:
            BeanNotOfRequiredTypeError: If the named bean does not match ``required_type``.
            NoUniqueBeanDefinitionError: If several beans match without exactly one primary.
        """
        if isinstance(name_or_type, str):
            definition = self._beans.get(name_or_type)
            if definition is None:
                return None
            if required_type is not None and not _is_assignable(definition.declared_type, required_type):
                raise BeanNotOfRequiredTypeError(name_or_type, required_type, definition.declared_type)
            return definition

        definitions = self.find_bean_definitions(name_or_type)
        if not definitions:
            return None
        if len(definitions) == 1:
            return definitions[0]

        primaries = [definition for definition in definitions if definition.primary]
        if len(primaries) == 1:
            return primaries[0]
        raise NoUniqueBeanDefinitionError(name_or_type, len(primaries))

    def get_bean(self, name_or_type: Union[str, Type[T]], required_type: Optional[Type[T]] = None) -> Any:
        """Return a bean by name, by type, or by name checked against a type.

        Returns the same object on every call for the lifetime of the context.

        Example:
            >>> context.get_bean("userService")
            >>> context.get_bean(UserService)
            >>> context.get_bean("userService", UserService)
        """
        self._check_open()
        definition = self.find_bean_definition(name_or_type, required_type)
        if definition is None:
            if not isinstance(name_or_type, str):
                raise NoSuchBeanDefinitionError(f"No bean defined with type '{name_or_type!r}'.")
            if required_type is not None:
                raise NoSuchBeanDefinitionError(
                    f"No bean defined with name '{name_or_type}' and type '{required_type!r}'."
                )
            raise NoSuchBeanDefinitionError(f"No bean defined with name '{name_or_type}'.")
        return definition.required_instance

    def get_beans(self, required_type: Type[T]) -> List[T]:
        self._check_open()
        return [definition.required_instance for definition in self.find_bean_definitions(required_type)]

    def close(self) -> None:
        """Invoke destroy hooks on the original instances and empty the registry.

        Must not run concurrently with use of the beans. Closing twice is a no-op.
        """
        if self._state is ContextState.CLOSED:
            logger.debug("%s already closed.", type(self).__name__)
            return

        logger.info("Closing %s...", type(self).__name__)
        for definition in self._sorted_definitions():
            if definition.instance is None:
                continue
            bean = self._post_processors.restore_original(definition)
            self._call_hook(definition, bean, definition.destroy_hook)
            definition.clear_instance()

        self._beans.clear()
        self._post_processors.clear()
        self._state = ContextState.CLOSED
        logger.info("%s closed.", type(self).__name__)

    def __enter__(self) -> "ApplicationContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.close()
        return False
