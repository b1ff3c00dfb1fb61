"""Application layer - Bean definition discovery."""

import importlib
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Type, Union, get_type_hints

from grove_di.domain import (
    Bean,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    Component,
    Configuration,
    ConstructorStrategy,
    DuplicateBeanNameError,
    FactoryMethodStrategy,
    Marker,
    MethodHook,
    NamedHook,
    PostConstruct,
    PreDestroy,
    Primary,
)
from grove_di.domain.markers import (
    find_marker,
    get_bean_name,
    get_factory_bean_name,
    get_marker,
    get_order,
    has_marker,
    unwrap_annotation,
)

logger = logging.getLogger(__name__)

# Builtin scalars play the role of primitives: they cannot be bean types.
_SCALAR_TYPES = (bool, int, float, complex, str, bytes)


class BeanDefinitionBuilder:
    """Turns discovered types into a registry of bean definitions.

    Nothing is instantiated here: the builder only reads markers and
    signatures. Every problem found is a fatal ``BeanDefinitionError``.

    Example:
        >>> builder = BeanDefinitionBuilder()
        >>> definitions = builder.build(["myapp.repositories.UserRepository", UserService])
        >>> definitions["userService"].declared_type
        <class 'UserService'>
    """

    def build(self, types: Iterable[Union[str, type]]) -> Dict[str, BeanDefinition]:
        """Create bean definitions for every component among ``types``.

        Args:
            types: Fully-qualified type names and/or classes.

        Returns:
            Mapping of bean name to definition.

        Raises:
            BeanDefinitionError: For malformed components or duplicate names.
            BeanCreationError: If a type name cannot be loaded.
        """
        definitions: Dict[str, BeanDefinition] = {}
        for type_or_name in types:
            cls = self.load_type(type_or_name) if isinstance(type_or_name, str) else type_or_name
            if not self._is_candidate_type(cls):
                continue

            if find_marker(cls, Component) is None:
                continue
            logger.debug("found component: %s", cls.__qualname__)

            if inspect.isabstract(cls):
                raise BeanDefinitionError(f"@Component class {cls.__qualname__} must not be abstract.")
            if cls.__name__.startswith("_"):
                raise BeanDefinitionError(f"@Component class {cls.__qualname__} must not be private.")

            bean_name = get_bean_name(cls)
            definition = BeanDefinition(
                name=bean_name,
                declared_type=cls,
                strategy=ConstructorStrategy(constructor=self._suitable_constructor(cls)),
                order=get_order(cls),
                primary=has_marker(cls, Primary),
                init_hook=self._find_hook(cls, PostConstruct),
                destroy_hook=self._find_hook(cls, PreDestroy),
            )
            self._add_definition(definitions, definition)
            logger.debug("define bean: %s", definition)

            if find_marker(cls, Configuration) is not None:
                self._scan_factory_methods(bean_name, cls, definitions)

        return definitions

    @staticmethod
    def load_type(type_name: str) -> type:
        """Import the class named by a fully-qualified name.

        Nested classes (``package.module.Outer.Inner``) are supported.

        Raises:
            BeanCreationError: If no module prefix of the name imports or the
                attribute path does not exist.
        """
        parts = type_name.split(".")
        for index in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:index])
            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as e:
                missing = e.name or ""
                if missing == module_name or module_name.startswith(missing + "."):
                    continue
                raise BeanCreationError(f"Cannot load type '{type_name}': {e}") from e

            target: Any = module
            try:
                for attribute in parts[index:]:
                    target = getattr(target, attribute)
            except AttributeError as e:
                raise BeanCreationError(f"Cannot load type '{type_name}': {e}") from e
            return target

        raise BeanCreationError(f"Cannot load type '{type_name}': no importable module.")

    @staticmethod
    def _is_candidate_type(cls: Any) -> bool:
        """Marker classes, enums, protocols and tuple-based records are never components."""
        if not inspect.isclass(cls):
            return False
        if issubclass(cls, (Marker, Enum, tuple)):
            return False
        return not getattr(cls, "_is_protocol", False)

    @staticmethod
    def _suitable_constructor(cls: type) -> Callable[..., Any]:
        try:
            inspect.signature(cls)
        except (TypeError, ValueError) as e:
            raise BeanDefinitionError(f"Cannot inspect constructor of class {cls.__qualname__}: {e}") from e
        return cls

    @staticmethod
    def _find_hook(cls: type, marker_type: type) -> Optional[MethodHook]:
        """Find the single method of the class body carrying a lifecycle marker."""
        methods = []
        for member in vars(cls).values():
            if not inspect.isfunction(member) or get_marker(member, marker_type) is None:
                continue
            parameters = list(inspect.signature(member).parameters.values())[1:]
            if parameters:
                raise BeanDefinitionError(
                    f"Method '{member.__name__}' with @{marker_type.__name__} must not have argument: "
                    f"{cls.__qualname__}"
                )
            methods.append(member)

        if not methods:
            return None
        if len(methods) > 1:
            raise BeanDefinitionError(
                f"Multiple methods with @{marker_type.__name__} found in class: {cls.__qualname__}"
            )
        return MethodHook(method=methods[0])

    def _scan_factory_methods(
        self,
        factory_bean_name: str,
        cls: type,
        definitions: Dict[str, BeanDefinition],
    ) -> None:
        """Add a definition for every ``Bean`` method of a configuration class."""
        for attribute_name, member in vars(cls).items():
            function = member.__func__ if isinstance(member, (staticmethod, classmethod)) else member
            if not inspect.isfunction(function):
                continue
            marker = get_marker(function, Bean)
            if marker is None:
                continue

            method_label = f"{cls.__qualname__}.{attribute_name}"
            if getattr(function, "__isabstractmethod__", False):
                raise BeanDefinitionError(f"@Bean method {method_label} must not be abstract.")
            if getattr(function, "__final__", False):
                raise BeanDefinitionError(f"@Bean method {method_label} must not be final.")
            if attribute_name.startswith("_"):
                raise BeanDefinitionError(f"@Bean method {method_label} must not be private.")

            declared_type = self._factory_return_type(function, method_label)
            definition = BeanDefinition(
                name=get_factory_bean_name(function),
                declared_type=declared_type,
                strategy=FactoryMethodStrategy(
                    factory_name=factory_bean_name, method=function, method_name=attribute_name
                ),
                order=get_order(function),
                primary=has_marker(function, Primary),
                init_hook=NamedHook(name=marker.init_method) if marker.init_method else None,
                destroy_hook=NamedHook(name=marker.destroy_method) if marker.destroy_method else None,
            )
            self._add_definition(definitions, definition)
            logger.debug("define bean: %s", definition)

    @staticmethod
    def _factory_return_type(function: Callable[..., Any], method_label: str) -> Type[Any]:
        try:
            hints = get_type_hints(function, include_extras=True)
        except NameError as e:
            raise BeanDefinitionError(f"Cannot resolve type hints of @Bean method {method_label}: {e}") from e

        if "return" not in hints:
            raise BeanDefinitionError(f"@Bean method {method_label} must declare a return type.")
        return_type = hints["return"]
        if return_type is None or return_type is type(None):
            raise BeanDefinitionError(f"@Bean method {method_label} must not return None.")

        declared_type = unwrap_annotation(return_type)
        if not isinstance(declared_type, type):
            raise BeanDefinitionError(f"@Bean method {method_label} must return a class, got {return_type!r}.")
        if declared_type in _SCALAR_TYPES:
            raise BeanDefinitionError(f"@Bean method {method_label} must not return builtin scalar type.")
        if getattr(declared_type, "_is_protocol", False) and not getattr(declared_type, "_is_runtime_protocol", False):
            raise BeanDefinitionError(
                f"@Bean method {method_label} must not return protocol {declared_type.__qualname__} "
                "unless it is @runtime_checkable."
            )
        return declared_type

    @staticmethod
    def _add_definition(definitions: Dict[str, BeanDefinition], definition: BeanDefinition) -> None:
        if definition.name in definitions:
            raise DuplicateBeanNameError(definition.name)
        definitions[definition.name] = definition
