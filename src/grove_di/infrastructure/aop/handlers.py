from abc import abstractmethod
from typing import Any, Callable, Dict, Tuple

from grove_di.domain import InvocationHandler


class BeforeInvocationHandler(InvocationHandler):
    """Runs ``before`` ahead of every proxied call, then calls the original method."""

    @abstractmethod
    def before(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        """Called before the original method; raising aborts the call."""

    def invoke(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        self.before(target, method, args, kwargs)
        return method(*args, **kwargs)


class AfterInvocationHandler(InvocationHandler):
    """Calls the original method, then lets ``after`` replace its return value."""

    @abstractmethod
    def after(
        self,
        target: Any,
        return_value: Any,
        method: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> Any:
        """Return the value handed back to the caller."""

    def invoke(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        return_value = method(*args, **kwargs)
        return self.after(target, return_value, method, args, kwargs)
