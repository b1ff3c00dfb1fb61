"""Declarative markers attached to classes, functions, parameters and fields.

Markers are frozen pydantic models. Calling a marker instance on a class or
function attaches it to that target, so every marker doubles as a decorator::

    @component
    class UserRepository:
        ...

    @configuration
    class AppConfiguration:
        @bean(init_method="start")
        def scheduler(self, clock: Annotated[Clock, Autowired()]) -> Scheduler:
            return Scheduler(clock)

Parameters and fields carry ``Value`` / ``Autowired`` as ``typing.Annotated``
metadata. A marker class may itself carry markers; ``find_marker`` resolves
such meta-markers recursively, which is how ``Configuration`` counts as a
``Component`` and how custom stereotypes are declared.
"""

import sys
import types
from typing import Annotated, Any, Callable, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

from grove_di.domain.exceptions import BeanDefinitionError

T = TypeVar("T")
M = TypeVar("M", bound="Marker")

MARKERS_ATTRIBUTE = "__grove_markers__"


class Marker(BaseModel):
    """Base class of every marker."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __call__(self, target: T) -> T:
        attach_marker(target, self)
        return target


def _unwrap(target: Any) -> Any:
    if isinstance(target, (staticmethod, classmethod, types.MethodType)):
        return target.__func__
    return target


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", repr(target))


def attach_marker(target: Any, marker: Marker) -> None:
    """Attach a marker to a class or function.

    Markers are stored in the target's own ``__dict__`` so they are never
    inherited by subclasses.
    """
    owner = _unwrap(target)
    existing = vars(owner).get(MARKERS_ATTRIBUTE, ())
    setattr(owner, MARKERS_ATTRIBUTE, existing + (marker,))


def get_markers(target: Any) -> Tuple[Marker, ...]:
    """Return markers attached directly to ``target``."""
    owner = _unwrap(target)
    return getattr(owner, "__dict__", {}).get(MARKERS_ATTRIBUTE, ())


def get_marker(target: Any, marker_type: Type[M]) -> Optional[M]:
    """Return the direct marker of ``marker_type`` on ``target``, if any.

    Raises:
        BeanDefinitionError: If the marker is attached more than once.
    """
    found = [marker for marker in get_markers(target) if isinstance(marker, marker_type)]
    if len(found) > 1:
        raise BeanDefinitionError(f"Duplicate @{marker_type.__name__} found on {_describe(target)}")
    return found[0] if found else None


def has_marker(target: Any, marker_type: Type[Marker]) -> bool:
    return get_marker(target, marker_type) is not None


def find_marker(target: Any, marker_type: Type[M]) -> Optional[M]:
    """Find a marker on ``target`` directly or through meta-markers.

    Each marker attached to ``target`` is inspected in turn: if the marker's
    own class carries ``marker_type`` (recursively), that counts as a match.

    Args:
        target: Class or function to inspect.
        marker_type: The marker class to look for.

    Returns:
        The marker instance found, or None.

    Raises:
        BeanDefinitionError: If the marker is reachable on more than one path.

    Example:
        >>> @configuration
        ... class AppConfiguration:
        ...     pass
        >>> find_marker(AppConfiguration, Component)
        Component(name='')
    """
    found = get_marker(target, marker_type)
    for marker in get_markers(target):
        meta_type = type(marker)
        if issubclass(meta_type, marker_type):
            continue
        meta = find_marker(meta_type, marker_type)
        if meta is None:
            continue
        if found is not None:
            raise BeanDefinitionError(f"Duplicate @{marker_type.__name__} found on {_describe(target)}")
        found = meta
    return found


def annotated_markers(annotation: Any) -> Tuple[Marker, ...]:
    """Return the markers carried as ``Annotated`` metadata of a type hint."""
    if get_origin(annotation) is Annotated:
        return tuple(item for item in annotation.__metadata__ if isinstance(item, Marker))
    return ()


def unwrap_annotation(annotation: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers from a type hint.

    Example:
        >>> unwrap_annotation(Annotated[Optional[Clock], Autowired()])
        <class 'Clock'>
    """
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    args = get_args(annotation)
    if get_origin(annotation) is Union or isinstance(annotation, types.UnionType):
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) == 1:
            annotation = non_none[0]
    origin = get_origin(annotation)
    if isinstance(origin, type):
        return origin
    return annotation


# Markers for classes


class Component(Marker):
    """Marks a class as a directly instantiable bean.

    Attributes:
        name: Explicit bean name; defaults to the lower-camel-cased class name.
    """

    name: str = Field(default="", description="Explicit bean name.")


@Component()
class Configuration(Marker):
    """Marks a component whose ``Bean`` methods are factories for other beans."""

    name: str = Field(default="", description="Explicit bean name.")


class Order(Marker):
    """Ordering used for deterministic start-up; lower values come first."""

    value: int = Field(..., description="Order value.")

    def __init__(self, value: int, **data: Any) -> None:
        super().__init__(value=value, **data)


class Primary(Marker):
    """Marks the preferred bean when several beans match a type lookup."""


class ComponentScan(Marker):
    """Lists the packages a component scanner walks.

    An empty tuple means the package of the marked class.
    """

    packages: Tuple[str, ...] = Field(default=(), description="Packages to scan.")


class Import(Marker):
    """Lists extra configuration types added to the scanned ones."""

    types: Tuple[type, ...] = Field(default=(), description="Types to import.")


# Markers for methods


class Bean(Marker):
    """Marks a configuration method as a bean factory.

    Attributes:
        name: Explicit bean name; defaults to the method name.
        init_method: Name of a method invoked on the created bean after injection.
        destroy_method: Name of a method invoked on the bean when the context closes.
    """

    name: str = Field(default="", description="Explicit bean name.")
    init_method: str = Field(default="", description="Init method name on the runtime instance.")
    destroy_method: str = Field(default="", description="Destroy method name on the runtime instance.")


class PostConstruct(Marker):
    """Marks the init hook of a component class."""


class PreDestroy(Marker):
    """Marks the destroy hook of a component class."""


# Markers for parameters, fields and setters


class Value(Marker):
    """Injects a property, e.g. ``Annotated[int, Value("${server.port:8080}")]``."""

    expression: str = Field(..., description="Property key or ${key:default} expression.")

    def __init__(self, expression: str, **data: Any) -> None:
        super().__init__(expression=expression, **data)


class Autowired(Marker):
    """Injects another bean resolved by type, optionally narrowed by name.

    Attributes:
        required: Whether a missing bean is an error; otherwise None is injected.
        name: Bean name to narrow the lookup.
    """

    required: bool = Field(default=True, description="Whether the dependency is required.")
    name: str = Field(default="", description="Bean name narrowing the lookup.")


# Decorator sugar


def component(name_or_class: Union[str, Type[T], None] = None) -> Any:
    """Mark a class as a component, bare (``@component``) or named (``@component("repo")``)."""
    if isinstance(name_or_class, type):
        return Component()(name_or_class)
    return Component(name=name_or_class or "")


def configuration(name_or_class: Union[str, Type[T], None] = None) -> Any:
    """Mark a class as a configuration, bare or named."""
    if isinstance(name_or_class, type):
        return Configuration()(name_or_class)
    return Configuration(name=name_or_class or "")


def bean(
    function: Optional[Callable[..., Any]] = None,
    *,
    name: str = "",
    init_method: str = "",
    destroy_method: str = "",
) -> Any:
    """Mark a configuration method as a bean factory, bare or with arguments."""
    marker = Bean(name=name, init_method=init_method, destroy_method=destroy_method)
    if function is not None:
        return marker(function)
    return marker


def order(value: int) -> Order:
    return Order(value)


def primary(target: T) -> T:
    return Primary()(target)


def post_construct(function: T) -> T:
    return PostConstruct()(function)


def pre_destroy(function: T) -> T:
    return PreDestroy()(function)


def component_scan(*packages: str) -> ComponentScan:
    return ComponentScan(packages=packages)


def import_types(*types: type) -> Import:
    return Import(types=types)


# Bean names


def get_bean_name(cls: type) -> str:
    """Resolve the bean name of a component class.

    The explicit name of a direct ``Component`` wins, then the ``name`` of a
    stereotype marker that carries ``Component``, then the class name with
    its first letter lower-cased.
    """
    name = ""
    direct = get_marker(cls, Component)
    if direct is not None:
        name = direct.name
    else:
        for marker in get_markers(cls):
            if find_marker(type(marker), Component) is not None:
                name = getattr(marker, "name", "")
    if not name:
        simple_name = cls.__name__
        name = simple_name[:1].lower() + simple_name[1:]
    return name


def get_factory_bean_name(function: Callable[..., Any]) -> str:
    marker = get_marker(function, Bean)
    if marker is not None and marker.name:
        return marker.name
    return _unwrap(function).__name__


def get_order(target: Any) -> int:
    marker = get_marker(target, Order)
    return sys.maxsize if marker is None else marker.value
