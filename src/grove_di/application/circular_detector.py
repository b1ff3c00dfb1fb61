"""Application layer - Circular dependency detection."""

from typing import List

from grove_di.domain import CircularDependencyError


class CircularDependencyDetector:
    """Tracks the bean names currently under construction.

    Construction is single-threaded, so a single ordered stack is enough.
    When a name is pushed while already present, the constructor path has
    closed a cycle.

    Attributes:
        _stack: Names of beans currently being created, outermost first.
    """

    def __init__(self) -> None:
        """Initialize the detector with an empty stack."""
        self._stack: List[str] = []

    def push(self, bean_name: str) -> None:
        """Mark a bean as under construction.

        Args:
            bean_name: The bean being created.

        Raises:
            CircularDependencyError: If the bean is already under construction.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("serviceA")
            >>> detector.push("serviceB")
            >>> detector.push("serviceA")  # Raises CircularDependencyError
        """
        if bean_name in self._stack:
            cycle_start_index = self._stack.index(bean_name)
            cycle = self._stack[cycle_start_index:] + [bean_name]
            raise CircularDependencyError(cycle)

        self._stack.append(bean_name)

    def pop(self, bean_name: str) -> None:
        """Remove a bean from the stack once its construction finished or failed."""
        if bean_name in self._stack:
            self._stack.remove(bean_name)

    def is_creating(self, bean_name: str) -> bool:
        return bean_name in self._stack

    @property
    def creating(self) -> List[str]:
        return list(self._stack)

    def clear(self) -> None:
        """Clear the entire stack."""
        self._stack.clear()
