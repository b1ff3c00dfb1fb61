"""Unit tests for DependencyResolver."""

from typing import Annotated, ClassVar, Optional
from unittest.mock import Mock

import pytest

from grove_di.application.resolver import DependencyResolver
from grove_di.domain import (
    Autowired,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    ConstructorStrategy,
    IApplicationContext,
    UnsatisfiedDependencyError,
    Value,
)
from grove_di.infrastructure.properties import PropertyResolver


class Repo:
    pass


def _definition(cls, name="bean"):
    return BeanDefinition(name=name, declared_type=cls, strategy=ConstructorStrategy(constructor=cls))


def _created(cls, name):
    definition = _definition(cls, name)
    definition.set_instance(cls())
    return definition


def _resolver(**properties):
    return DependencyResolver(PropertyResolver(properties, include_environment=False))


def _context(*definitions):
    """Mock context finding the given definitions by name or type."""
    context = Mock(spec=IApplicationContext)

    def find_bean_definition(name_or_type, required_type=None):
        for definition in definitions:
            if isinstance(name_or_type, str):
                if definition.name == name_or_type:
                    return definition
            elif issubclass(definition.declared_type, name_or_type):
                return definition
        return None

    context.find_bean_definition.side_effect = find_bean_definition
    return context


class TestResolveArguments:
    """Test cases for constructor and factory argument resolution."""

    def test_no_parameters(self):
        """Test that a no-argument constructor needs nothing."""

        class Service:
            pass

        args, kwargs = _resolver().resolve_arguments(_definition(Service), Service, Service.__init__, _context())

        assert (args, kwargs) == ([], {})

    def test_autowired_and_value_parameters(self):
        """Test that markers select bean and property arguments."""
        repo = _created(Repo, "repo")

        class Service:
            def __init__(
                self,
                repo: Annotated[Repo, Autowired()],
                port: Annotated[int, Value("${app.port}")],
                *,
                name: Annotated[str, Value("${app.name:demo}")],
            ):
                pass

        args, kwargs = _resolver(**{"app.port": "8080"}).resolve_arguments(
            _definition(Service), Service, Service.__init__, _context(repo)
        )

        assert args == [repo.instance, 8080]
        assert kwargs == {"name": "demo"}

    def test_missing_marker_is_an_error(self):
        """Test that an unmarked parameter fails."""

        class Service:
            def __init__(self, repo: Repo):
                pass

        with pytest.raises(BeanCreationError, match="Must specify @Autowired or @Value for parameter 'repo'"):
            _resolver().resolve_arguments(_definition(Service), Service, Service.__init__, _context())

    def test_both_markers_is_an_error(self):
        """Test that a parameter with both markers fails."""

        class Service:
            def __init__(self, repo: Annotated[Repo, Autowired(), Value("${repo}")]):
                pass

        with pytest.raises(BeanCreationError, match="Cannot specify both @Autowired and @Value"):
            _resolver().resolve_arguments(_definition(Service), Service, Service.__init__, _context())

    def test_configuration_cannot_autowire(self):
        """Test that configuration constructors only accept Value parameters."""

        class AppConfiguration:
            def __init__(self, repo: Annotated[Repo, Autowired()]):
                pass

        with pytest.raises(BeanCreationError, match="Cannot specify @Autowired when create @Configuration"):
            _resolver().resolve_arguments(
                _definition(AppConfiguration),
                AppConfiguration,
                AppConfiguration.__init__,
                _context(),
                is_configuration=True,
            )

    def test_var_arguments_are_skipped(self):
        """Test that *args and **kwargs are ignored."""

        class Service:
            def __init__(self, *args, **kwargs):
                pass

        args, kwargs = _resolver().resolve_arguments(_definition(Service), Service, Service.__init__, _context())

        assert (args, kwargs) == ([], {})


class TestResolveAutowired:
    """Test cases for autowired lookups."""

    def test_missing_required_dependency(self):
        """Test that a missing required bean fails."""
        with pytest.raises(UnsatisfiedDependencyError, match="Missing autowired bean with type 'Repo'"):
            _resolver().resolve_autowired(_definition(Repo), Autowired(), Repo, _context())

    def test_missing_optional_dependency(self):
        """Test that a missing optional bean resolves to None."""
        assert _resolver().resolve_autowired(_definition(Repo), Autowired(required=False), Repo, _context()) is None

    def test_lookup_by_name(self):
        """Test that a name narrows the lookup."""
        first, second = _created(Repo, "first"), _created(Repo, "second")
        context = _context(first, second)

        resolved = _resolver().resolve_autowired(_definition(Repo), Autowired(name="second"), Repo, context)

        assert resolved is second.instance
        context.find_bean_definition.assert_called_once_with("second", Repo)

    def test_creates_dependency_early(self):
        """Test that an uninstantiated dependency is created through the context."""
        pending = _definition(Repo, "repo")
        context = _context(pending)
        created = Repo()
        context.create_bean_as_early_singleton.return_value = created

        resolved = _resolver().resolve_autowired(_definition(Repo, "service"), Autowired(), Repo, context)

        assert resolved is created
        context.create_bean_as_early_singleton.assert_called_once_with(pending)

    def test_non_class_type_is_an_error(self):
        """Test that only classes can be autowired."""
        with pytest.raises(BeanCreationError, match="Cannot autowire non-class type"):
            _resolver().resolve_autowired(_definition(Repo), Autowired(), "Repo", _context())


class TestInjectProperties:
    """Test cases for field and setter injection."""

    def test_field_injection(self):
        """Test that marked fields are set on the bean."""
        repo = _created(Repo, "repo")

        class Service:
            repo: Annotated[Repo, Autowired()]
            timeout: Annotated[float, Value("${timeout:1.5}")]
            plain: int = 0

        bean = Service()
        _resolver().inject_properties(_definition(Service), bean, _context(repo))

        assert bean.repo is repo.instance
        assert bean.timeout == 1.5
        assert bean.plain == 0

    def test_inherited_field_injection(self):
        """Test that fields declared by base classes are injected."""
        repo = _created(Repo, "repo")

        class Base:
            repo: Annotated[Repo, Autowired()]

        class Service(Base):
            pass

        bean = Service()
        _resolver().inject_properties(_definition(Service), bean, _context(repo))

        assert bean.repo is repo.instance

    def test_optional_missing_field_is_left_alone(self):
        """Test that a missing optional dependency leaves the field untouched."""

        class Service:
            repo: Annotated[Optional[Repo], Autowired(required=False)] = None

        bean = Service()
        _resolver().inject_properties(_definition(Service), bean, _context())

        assert bean.repo is None

    def test_setter_injection(self):
        """Test that marked single-argument methods are called."""
        repo = _created(Repo, "repo")

        class Service:
            @Autowired()
            def set_repo(self, repo: Repo):
                self.repo = repo

            @Value("${app.name}")
            def set_name(self, name: str):
                self.name = name

        bean = Service()
        _resolver(**{"app.name": "demo"}).inject_properties(_definition(Service), bean, _context(repo))

        assert bean.repo is repo.instance
        assert bean.name == "demo"

    def test_setter_with_several_arguments_is_rejected(self):
        """Test that setters must take exactly one argument."""

        class Service:
            @Autowired()
            def set_repos(self, first: Repo, second: Repo):
                pass

        with pytest.raises(BeanDefinitionError, match="non-setter method"):
            _resolver().inject_properties(_definition(Service), Service(), _context())

    def test_static_setter_is_rejected(self):
        """Test that static methods cannot be injected."""

        class Service:
            @staticmethod
            @Autowired()
            def set_repo(repo: Repo):
                pass

        with pytest.raises(BeanDefinitionError, match="Cannot inject static method"):
            _resolver().inject_properties(_definition(Service), Service(), _context())

    def test_class_var_field_is_rejected(self):
        """Test that ClassVar fields cannot be injected."""

        class Service:
            repo: ClassVar[Annotated[Repo, Autowired()]]

        with pytest.raises(BeanDefinitionError, match="Cannot inject static field"):
            _resolver().inject_properties(_definition(Service), Service(), _context())

    def test_missing_field_dependency(self):
        """Test that a missing required field dependency fails."""

        class Service:
            repo: Annotated[Repo, Autowired()]

        with pytest.raises(UnsatisfiedDependencyError, match="Dependency bean not found when inject Service.repo"):
            _resolver().inject_properties(_definition(Service), Service(), _context())
