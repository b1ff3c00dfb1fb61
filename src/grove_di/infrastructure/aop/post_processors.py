import logging
from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import Field

from grove_di.domain import AopConfigError, BeanPostProcessor, ContextAware, InvocationHandler, Marker
from grove_di.domain.markers import get_marker
from grove_di.infrastructure.aop.proxy import ProxyFactory

logger = logging.getLogger(__name__)


class Around(Marker):
    """Routes the public methods of a component through the named invocation handler bean.

    Unlike the core markers, ``Around`` applies to subclasses of the marked class.

    Example:
        >>> @Around("auditInvocationHandler")
        ... @component
        ... class PaymentService: ...
    """

    handler: str = Field(..., description="Name of the InvocationHandler bean.")

    def __init__(self, handler: str, **data: Any) -> None:
        super().__init__(handler=handler, **data)


def find_inherited_marker(cls: type, marker_type: Type[Marker]) -> Optional[Marker]:
    """Return the first ``marker_type`` marker found along the MRO of ``cls``."""
    for klass in cls.__mro__:
        marker = get_marker(klass, marker_type)
        if marker is not None:
            return marker
    return None


class AnnotationProxyBeanPostProcessor(BeanPostProcessor, ContextAware):
    """Replaces beans whose class carries ``marker_type`` with a proxy.

    The marker names the ``InvocationHandler`` bean that receives the calls;
    it is created early when it does not exist yet. Originals are remembered
    per bean name so that injection and destroy hooks still reach them.

    Subclasses set ``marker_type`` to a marker with a ``handler`` field.

    Attributes:
        marker_type: The marker selecting beans to proxy.
        _origin_beans: Original instances by bean name.
        _proxy_factory: Factory building the proxies.
    """

    marker_type: ClassVar[Optional[Type[Marker]]] = None

    def __init__(self) -> None:
        if self.marker_type is None:
            raise AopConfigError(f"{type(self).__name__} does not declare a marker_type.")
        self._origin_beans: Dict[str, Any] = {}
        self._proxy_factory = ProxyFactory()

    def post_process_before_initialization(self, bean: Any, bean_name: str) -> Any:
        marker = find_inherited_marker(type(bean), self.marker_type)
        if marker is None:
            return bean

        handler_name = getattr(marker, "handler", None)
        if not isinstance(handler_name, str):
            raise AopConfigError(f"@{self.marker_type.__name__} must have a handler of str type.")

        proxy = self._proxy_factory.create_proxy(bean, self._find_handler(handler_name))
        self._origin_beans[bean_name] = bean
        logger.debug("Bean '%s' proxied with handler '%s'.", bean_name, handler_name)
        return proxy

    def _find_handler(self, handler_name: str) -> InvocationHandler:
        context = self.application_context
        if context is None:
            raise AopConfigError(f"{type(self).__name__} has no application context.")

        definition = context.find_bean_definition(handler_name)
        if definition is None:
            raise AopConfigError(
                f"@{self.marker_type.__name__} proxy handler '{handler_name}' not found."
            )
        handler = definition.instance
        if handler is None:
            handler = context.create_bean_as_early_singleton(definition)
        if not isinstance(handler, InvocationHandler):
            raise AopConfigError(
                f"@{self.marker_type.__name__} proxy handler '{handler_name}' is not type of "
                f"{InvocationHandler.__name__}."
            )
        return handler

    def post_process_on_set_property(self, bean: Any, bean_name: str) -> Any:
        return self._origin_beans.get(bean_name, bean)


class AroundProxyBeanPostProcessor(AnnotationProxyBeanPostProcessor):
    """Proxies beans marked with ``Around``."""

    marker_type = Around
