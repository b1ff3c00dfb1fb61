"""Application layer - Post-processor chain."""

import logging
from typing import Any, Callable, Iterator, List

from grove_di.domain import BeanCreationError, BeanDefinition, BeanPostProcessor

logger = logging.getLogger(__name__)


class PostProcessorChain:
    """Ordered post-processors applied to every bean built after they were registered.

    Forward passes may substitute the stored instance of a definition (for
    example with a proxy). ``restore_original`` walks the chain backwards
    so injection and destroy hooks reach the original object.

    Attributes:
        _processors: Registered post-processors, in registration order.
    """

    def __init__(self) -> None:
        self._processors: List[BeanPostProcessor] = []

    def append(self, processor: BeanPostProcessor) -> None:
        self._processors.append(processor)

    def __iter__(self) -> Iterator[BeanPostProcessor]:
        return iter(self._processors)

    def __len__(self) -> int:
        return len(self._processors)

    def apply_before_initialization(self, definition: BeanDefinition) -> Any:
        """Run every ``post_process_before_initialization`` hook in chain order.

        Args:
            definition: Definition whose raw instance is already stored.

        Returns:
            The final, possibly substituted, instance.

        Raises:
            BeanCreationError: If a hook returns None.
        """
        return self._apply(definition, lambda processor: processor.post_process_before_initialization)

    def apply_after_initialization(self, definition: BeanDefinition) -> Any:
        """Run every ``post_process_after_initialization`` hook in chain order."""
        return self._apply(definition, lambda processor: processor.post_process_after_initialization)

    def _apply(
        self,
        definition: BeanDefinition,
        hook_of: Callable[[BeanPostProcessor], Callable[[Any, str], Any]],
    ) -> Any:
        for processor in self._processors:
            current = definition.required_instance
            processed = hook_of(processor)(current, definition.name)
            if processed is None:
                raise BeanCreationError(
                    f"PostBeanProcessor returns None when process bean '{definition.name}' by {processor!r}"
                )
            if processed is not current:
                logger.debug(
                    "Bean '%s' was replaced by post processor %s.", definition.name, type(processor).__name__
                )
                definition.set_instance(processed)
        return definition.required_instance

    def restore_original(self, definition: BeanDefinition) -> Any:
        """Recover the pre-substitution instance of a bean.

        Walks the chain in reverse registration order, applying
        ``post_process_on_set_property`` to the current instance.
        """
        bean = definition.required_instance
        for processor in reversed(self._processors):
            restored = processor.post_process_on_set_property(bean, definition.name)
            if restored is not bean:
                logger.debug(
                    "BeanPostProcessor %s specified injection from %s to %s.",
                    type(processor).__name__,
                    type(bean).__name__,
                    type(restored).__name__,
                )
                bean = restored
        return bean

    def clear(self) -> None:
        self._processors.clear()
