"""
AOP module.

Provides subclass-based proxies and the post-processors that substitute
marked beans with them.
"""

from .handlers import AfterInvocationHandler, BeforeInvocationHandler
from .post_processors import (
    AnnotationProxyBeanPostProcessor,
    Around,
    AroundProxyBeanPostProcessor,
    find_inherited_marker,
)
from .proxy import ProxyFactory, get_proxy_target

__all__ = [
    "Around",
    "ProxyFactory",
    "get_proxy_target",
    "find_inherited_marker",
    "AnnotationProxyBeanPostProcessor",
    "AroundProxyBeanPostProcessor",
    "BeforeInvocationHandler",
    "AfterInvocationHandler",
]
