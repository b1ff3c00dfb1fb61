import functools
import inspect
import logging
from typing import Any, Callable, Dict, FrozenSet, TypeVar

from grove_di.domain import AopConfigError, InvocationHandler

T = TypeVar("T")

logger = logging.getLogger(__name__)

_TARGET = "_grove_target"
_HANDLER = "_grove_handler"


def _public_methods(target_class: type) -> FrozenSet[str]:
    names = set()
    for name in dir(target_class):
        if name.startswith("_"):
            continue
        member = inspect.getattr_static(target_class, name)
        if inspect.isfunction(member):
            names.add(name)
    return frozenset(names)


def _interceptor(name: str, original: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(original)
    def intercept(self, *args, **kwargs):
        target = object.__getattribute__(self, _TARGET)
        handler = object.__getattribute__(self, _HANDLER)
        return handler.invoke(target, getattr(target, name), args, kwargs)

    return intercept


def _build_proxy_class(target_class: type) -> type:
    intercepted = _public_methods(target_class)

    def __getattribute__(self, name):
        if name in intercepted or (name.startswith("__") and name.endswith("__")):
            return object.__getattribute__(self, name)
        return getattr(object.__getattribute__(self, _TARGET), name)

    def __setattr__(self, name, value):
        setattr(object.__getattribute__(self, _TARGET), name, value)

    def __delattr__(self, name):
        delattr(object.__getattribute__(self, _TARGET), name)

    namespace: Dict[str, Any] = {
        "__slots__": (_TARGET, _HANDLER),
        "__module__": target_class.__module__,
        "__qualname__": f"{target_class.__qualname__}Proxy",
        "__getattribute__": __getattribute__,
        "__setattr__": __setattr__,
        "__delattr__": __delattr__,
    }
    for name in intercepted:
        namespace[name] = _interceptor(name, inspect.getattr_static(target_class, name))

    try:
        return type(f"{target_class.__name__}Proxy", (target_class,), namespace)
    except TypeError as e:
        raise AopConfigError(f"Cannot create proxy class for {target_class.__qualname__}: {e}") from e


class ProxyFactory:
    """Creates proxies by subclassing the target class.

    Every public method of the proxy class routes the call through an
    ``InvocationHandler``, which receives the original target. Any other
    attribute read or write goes straight to the target. Proxy classes are
    cached per target class.

    Example:
        >>> proxy = ProxyFactory().create_proxy(greeting_bean, PoliteInvocationHandler())
        >>> isinstance(proxy, GreetingBean)
        True
    """

    def __init__(self) -> None:
        self._proxy_classes: Dict[type, type] = {}

    def create_proxy(self, bean: T, handler: InvocationHandler) -> T:
        """Wrap ``bean`` so that its public method calls go through ``handler``.

        Raises:
            AopConfigError: If the bean's class cannot be subclassed.
        """
        target_class = type(bean)
        logger.debug("create proxy for bean %s @%x", target_class.__qualname__, id(bean))

        proxy_class = self._proxy_classes.get(target_class)
        if proxy_class is None:
            proxy_class = _build_proxy_class(target_class)
            self._proxy_classes[target_class] = proxy_class

        try:
            proxy = object.__new__(proxy_class)
        except TypeError as e:
            raise AopConfigError(f"Cannot instantiate proxy for {target_class.__qualname__}: {e}") from e
        object.__setattr__(proxy, _TARGET, bean)
        object.__setattr__(proxy, _HANDLER, handler)
        return proxy


def get_proxy_target(proxy: Any) -> Any:
    """Return the object wrapped by a proxy, or the argument itself."""
    try:
        return object.__getattribute__(proxy, _TARGET)
    except AttributeError:
        return proxy
