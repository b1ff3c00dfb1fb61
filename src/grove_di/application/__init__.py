"""
Application layer - Use cases and orchestration.

This layer builds bean definitions and runs the staged start-up protocol.
It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .container import ApplicationContext
from .definition_builder import BeanDefinitionBuilder
from .post_processors import PostProcessorChain
from .resolver import DependencyResolver

__all__ = [
    "ApplicationContext",
    "BeanDefinitionBuilder",
    "DependencyResolver",
    "PostProcessorChain",
    "CircularDependencyDetector",
]
