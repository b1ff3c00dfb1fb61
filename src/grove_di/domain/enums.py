from enum import Enum


class ContextState(str, Enum):
    """Defines the start-up phase an application context is in.

    Attributes:
        CREATED: Definitions are being built, nothing is instantiated.
        CONFIGURATIONS: Configuration beans are being instantiated.
        POST_PROCESSORS: Post-processor beans are being instantiated.
        NORMAL_BEANS: All remaining beans are being instantiated.
        INJECTION: Fields and setters are being injected.
        INITIALIZATION: Init hooks are being invoked.
        READY: Start-up completed, the registry is read-only.
        CLOSED: Destroy hooks ran and the registry was emptied.
    """

    CREATED = "created"
    CONFIGURATIONS = "configurations"
    POST_PROCESSORS = "post_processors"
    NORMAL_BEANS = "normal_beans"
    INJECTION = "injection"
    INITIALIZATION = "initialization"
    READY = "ready"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value
