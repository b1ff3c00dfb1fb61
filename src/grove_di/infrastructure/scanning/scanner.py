import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Iterator, List, Set

from grove_di.domain import BeanDefinitionError, ComponentScan, IComponentScanner, Import, find_marker

logger = logging.getLogger(__name__)


class ComponentScanner(IComponentScanner):
    """Discovers candidate types by importing every module of the scanned packages.

    Packages come from the ``ComponentScan`` marker of the configuration
    type, defaulting to the package the configuration type lives in. Types
    listed by an ``Import`` marker are added to the result.

    Example:
        >>> @component_scan("myapp.services", "myapp.web")
        ... @configuration
        ... class AppConfiguration: ...
        >>> names = ComponentScanner().scan(AppConfiguration)
        >>> "myapp.services.users.UserService" in names
        True
    """

    def scan(self, config_type: type) -> Set[str]:
        scan_marker = find_marker(config_type, ComponentScan)
        packages = list(scan_marker.packages) if scan_marker and scan_marker.packages else [self._own_package(config_type)]
        logger.info("component scan in packages: %s", packages)

        class_names: Set[str] = set()
        for package in packages:
            logger.debug("scan package: %s", package)
            for module in self._iter_modules(package):
                class_names.update(self._class_names(module))

        import_marker = find_marker(config_type, Import)
        if import_marker is not None:
            for imported in import_marker.types:
                name = f"{imported.__module__}.{imported.__qualname__}"
                if name in class_names:
                    logger.warning("Ignore import: %s for it is already been scanned.", name)
                    continue
                logger.debug("class found by import: %s", name)
                class_names.add(name)

        return class_names

    @staticmethod
    def _own_package(config_type: type) -> str:
        module = importlib.import_module(config_type.__module__)
        if hasattr(module, "__path__"):
            return module.__name__
        return module.__package__ or module.__name__

    def _iter_modules(self, package: str) -> Iterator[ModuleType]:
        try:
            root = importlib.import_module(package)
        except ImportError as e:
            raise BeanDefinitionError(f"Cannot import package to scan: {package}") from e
        yield root

        if not hasattr(root, "__path__"):
            return
        for module_info in pkgutil.walk_packages(root.__path__, prefix=f"{root.__name__}.", onerror=self._on_error):
            try:
                yield importlib.import_module(module_info.name)
            except ImportError as e:
                raise BeanDefinitionError(f"Cannot import module while scanning: {module_info.name}") from e

    @staticmethod
    def _on_error(name: str) -> None:
        raise BeanDefinitionError(f"Cannot import package while scanning: {name}")

    def _class_names(self, module: ModuleType) -> List[str]:
        names = []
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ == module.__name__ and "<locals>" not in cls.__qualname__:
                names.extend(self._with_nested(cls))
        for name in names:
            logger.debug("class found by component scan: %s", name)
        return names

    def _with_nested(self, cls: type) -> List[str]:
        names = [f"{cls.__module__}.{cls.__qualname__}"]
        for member in vars(cls).values():
            if inspect.isclass(member) and member.__qualname__ == f"{cls.__qualname__}.{member.__name__}":
                names.extend(self._with_nested(member))
        return names
