import inspect
import logging
from typing import Any, Callable, ClassVar, Dict, Final, List, Optional, Tuple, get_args, get_origin, get_type_hints

from grove_di.domain import (
    Autowired,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    IApplicationContext,
    IPropertySource,
    UnsatisfiedDependencyError,
    Value,
)
from grove_di.domain.markers import Marker, annotated_markers, get_markers, unwrap_annotation

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Resolves constructor arguments and injects fields and setters.

    Every injection point carries exactly one of ``Value`` (a property from
    the property source) or ``Autowired`` (another bean, by type and
    optionally by name).

    Attributes:
        _property_source: Source of ``Value`` properties.
    """

    def __init__(self, property_source: IPropertySource) -> None:
        self._property_source = property_source

    def resolve_arguments(
        self,
        definition: BeanDefinition,
        target: Callable[..., Any],
        hint_source: Callable[..., Any],
        context: IApplicationContext,
        is_configuration: bool = False,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        """Resolve every parameter of a constructor or factory method.

        Args:
            definition: The bean being created.
            target: The callable that will be invoked (class or bound method).
            hint_source: The function whose annotations describe the parameters.
            context: Context used to find and create autowired beans.
            is_configuration: Whether ``definition`` is a configuration bean,
                which must not autowire constructor parameters.

        Returns:
            Positional and keyword arguments for ``target``.

        Raises:
            BeanCreationError: If a parameter has both or neither marker.
            UnsatisfiedDependencyError: If a required bean is missing.

        Example:
            >>> class UserService:
            ...     def __init__(self, repo: Annotated[UserRepository, Autowired()]):
            ...         self.repo = repo
            >>> args, kwargs = resolver.resolve_arguments(definition, UserService, UserService.__init__, context)
        """
        parameters = [
            param
            for param in inspect.signature(target).parameters.values()
            if param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if not parameters:
            return [], {}

        hints = self._type_hints(hint_source, definition)
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for param in parameters:
            annotation = hints.get(param.name, param.annotation)
            value, autowired = self._pick_markers(annotated_markers(annotation))

            if is_configuration and autowired is not None:
                raise BeanCreationError(
                    f"Cannot specify @Autowired when create @Configuration bean '{definition.name}': "
                    f"{definition.declared_type.__qualname__}."
                )
            if value is not None and autowired is not None:
                raise BeanCreationError(
                    f"Cannot specify both @Autowired and @Value when create bean '{definition.name}': "
                    f"{definition.declared_type.__qualname__}."
                )
            if value is None and autowired is None:
                raise BeanCreationError(
                    f"Must specify @Autowired or @Value for parameter '{param.name}' when create bean "
                    f"'{definition.name}': {definition.declared_type.__qualname__}."
                )

            target_type = unwrap_annotation(annotation)
            if value is not None:
                argument = self._property_source.get_required_property(value.expression, target_type)
            else:
                argument = self.resolve_autowired(definition, autowired, target_type, context)

            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[param.name] = argument
            else:
                args.append(argument)
        return args, kwargs

    def resolve_autowired(
        self,
        definition: BeanDefinition,
        autowired: Autowired,
        target_type: Any,
        context: IApplicationContext,
    ) -> Optional[Any]:
        """Find the bean an ``Autowired`` point refers to, creating it early if needed.

        Returns:
            The dependency instance, or None for a missing optional dependency.

        Raises:
            UnsatisfiedDependencyError: If the dependency is required and missing.
        """
        if not isinstance(target_type, type):
            raise BeanCreationError(
                f"Cannot autowire non-class type {target_type!r} when create bean '{definition.name}'."
            )

        if autowired.name:
            dependency = context.find_bean_definition(autowired.name, target_type)
        else:
            dependency = context.find_bean_definition(target_type)

        if dependency is None:
            if autowired.required:
                raise UnsatisfiedDependencyError(
                    f"Missing autowired bean with type '{target_type.__qualname__}' when create bean "
                    f"'{definition.name}': {definition.declared_type.__qualname__}."
                )
            return None

        instance = dependency.instance
        if instance is None:
            instance = context.create_bean_as_early_singleton(dependency)
        return instance

    def inject_properties(self, definition: BeanDefinition, bean: Any, context: IApplicationContext) -> None:
        """Inject marked fields and setters, walking the declared type's MRO.

        Args:
            definition: The bean's definition.
            bean: The object to mutate; the original, not a substitute.
            context: Context used to find autowired beans.
        """
        for klass in definition.declared_type.__mro__:
            if klass is object:
                continue
            self._inject_fields(definition, klass, bean, context)
            self._inject_setters(definition, klass, bean, context)

    def _inject_fields(self, definition: BeanDefinition, klass: type, bean: Any, context: IApplicationContext) -> None:
        try:
            annotations = inspect.get_annotations(klass, eval_str=True)
        except NameError as e:
            raise BeanDefinitionError(f"Cannot resolve field annotations of {klass.__qualname__}: {e}") from e

        for field_name, annotation in annotations.items():
            markers = self._field_markers(klass, field_name, annotation)
            value, autowired = self._pick_markers(markers)
            if value is None and autowired is None:
                continue
            if value is not None and autowired is not None:
                raise BeanCreationError(
                    f"Cannot specify both @Autowired and @Value when inject {klass.__name__}.{field_name} "
                    f"for bean '{definition.name}': {definition.declared_type.__qualname__}"
                )

            target_type = unwrap_annotation(annotation)
            if value is not None:
                resolved = self._property_source.get_required_property(value.expression, target_type)
            else:
                resolved = self._resolve_for_property(definition, klass, field_name, autowired, target_type, context)
                if resolved is None:
                    continue

            logger.debug("Field injection: %s.%s = %r", definition.declared_type.__qualname__, field_name, resolved)
            setattr(bean, field_name, resolved)

    def _inject_setters(
        self, definition: BeanDefinition, klass: type, bean: Any, context: IApplicationContext
    ) -> None:
        for attribute_name, member in vars(klass).items():
            if isinstance(member, (staticmethod, classmethod)):
                if self._pick_markers(get_markers(member)) != (None, None):
                    raise BeanDefinitionError(f"Cannot inject static method: {klass.__qualname__}.{attribute_name}")
                continue
            if not inspect.isfunction(member):
                continue

            value, autowired = self._pick_markers(get_markers(member))
            if value is None and autowired is None:
                continue
            if value is not None and autowired is not None:
                raise BeanCreationError(
                    f"Cannot specify both @Autowired and @Value when inject {klass.__name__}.{attribute_name} "
                    f"for bean '{definition.name}': {definition.declared_type.__qualname__}"
                )

            parameters = list(inspect.signature(member).parameters.values())[1:]
            if len(parameters) != 1:
                raise BeanDefinitionError(
                    f"Cannot inject a non-setter method {attribute_name} for bean '{definition.name}': "
                    f"{definition.declared_type.__qualname__}"
                )
            if getattr(member, "__final__", False):
                logger.warning(
                    "Inject final method %s.%s should be careful because it is not called on target bean "
                    "when bean is proxied.",
                    klass.__qualname__,
                    attribute_name,
                )

            hints = self._type_hints(member, definition)
            parameter = parameters[0]
            if value is not None:
                target_type = unwrap_annotation(hints.get(parameter.name, str))
                resolved = self._property_source.get_required_property(value.expression, target_type)
            else:
                if parameter.name not in hints:
                    raise BeanDefinitionError(
                        f"Setter {klass.__qualname__}.{attribute_name} must annotate its parameter to be autowired."
                    )
                target_type = unwrap_annotation(hints[parameter.name])
                resolved = self._resolve_for_property(
                    definition, klass, attribute_name, autowired, target_type, context
                )
                if resolved is None:
                    continue

            logger.debug("Setter injection: %s.%s(%r)", definition.declared_type.__qualname__, attribute_name, resolved)
            member(bean, resolved)

    def _resolve_for_property(
        self,
        definition: BeanDefinition,
        klass: type,
        member_name: str,
        autowired: Autowired,
        target_type: Any,
        context: IApplicationContext,
    ) -> Optional[Any]:
        try:
            return self.resolve_autowired(definition, autowired, target_type, context)
        except UnsatisfiedDependencyError as e:
            raise UnsatisfiedDependencyError(
                f"Dependency bean not found when inject {klass.__name__}.{member_name} for bean "
                f"'{definition.name}': {definition.declared_type.__qualname__}"
            ) from e

    @staticmethod
    def _field_markers(klass: type, field_name: str, annotation: Any) -> Tuple[Marker, ...]:
        """Markers of a field annotation; ClassVar and Final fields cannot be injected."""
        origin = get_origin(annotation)
        if origin is ClassVar or origin is Final:
            args = get_args(annotation)
            if args and annotated_markers(args[0]):
                kind = "static" if origin is ClassVar else "final"
                raise BeanDefinitionError(f"Cannot inject {kind} field: {klass.__qualname__}.{field_name}")
            return ()
        return annotated_markers(annotation)

    @staticmethod
    def _pick_markers(markers: Tuple[Marker, ...]) -> Tuple[Optional[Value], Optional[Autowired]]:
        value = next((marker for marker in markers if isinstance(marker, Value)), None)
        autowired = next((marker for marker in markers if isinstance(marker, Autowired)), None)
        return value, autowired

    @staticmethod
    def _type_hints(function: Callable[..., Any], definition: BeanDefinition) -> Dict[str, Any]:
        try:
            return get_type_hints(function, include_extras=True)
        except NameError as e:
            raise BeanCreationError(
                f"Cannot resolve type hints of {getattr(function, '__qualname__', function)!r} "
                f"when create bean '{definition.name}'."
            ) from e
