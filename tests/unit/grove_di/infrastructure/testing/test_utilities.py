"""Unit tests for testing utilities."""

from typing import Annotated

import pytest

from grove_di.domain import ContextState, PropertyNotFoundError, Value, component, pre_destroy
from grove_di.infrastructure.testing import ContextScope, RecordingPostProcessor, build_test_context


class TestBuildTestContext:
    """Test cases for build_test_context function."""

    def test_starts_context_with_properties(self):
        """Test that explicit properties are available to Value injection."""

        @component
        class Settings:
            def __init__(self, port: Annotated[int, Value("${app.port}")]):
                self.port = port

        context = build_test_context(Settings, properties={"app.port": "8080"})

        assert context.state is ContextState.READY
        assert context.get_bean(Settings).port == 8080

    def test_ignores_environment_by_default(self, monkeypatch):
        """Test that environment variables are not visible unless requested."""
        monkeypatch.setenv("GROVE_TEST_PORT", "9090")

        @component
        class Settings:
            def __init__(self, port: Annotated[int, Value("${GROVE_TEST_PORT}")]):
                self.port = port

        with pytest.raises(PropertyNotFoundError):
            build_test_context(Settings)

        context = build_test_context(Settings, include_environment=True)
        assert context.get_bean(Settings).port == 9090


class TestContextScope:
    """Test cases for ContextScope."""

    def test_closes_context_on_exit(self):
        """Test that destroy hooks run when the scope exits."""
        events = []

        @component
        class Pool:
            @pre_destroy
            def shutdown(self):
                events.append("shutdown")

        with ContextScope(Pool) as context:
            assert isinstance(context.get_bean(Pool), Pool)
            assert events == []

        assert events == ["shutdown"]
        assert context.state is ContextState.CLOSED

    def test_closes_context_on_error(self):
        """Test that the scope closes the context when the block raises."""
        with pytest.raises(ValueError):
            with ContextScope() as context:
                raise ValueError("boom")

        assert context.state is ContextState.CLOSED


class TestRecordingPostProcessor:
    """Test cases for RecordingPostProcessor."""

    def test_records_hooks_in_order(self):
        """Test that the recorder sees every later bean in each phase."""

        @component
        class Recorder(RecordingPostProcessor):
            pass

        @component
        class Repo:
            pass

        context = build_test_context(Recorder, Repo)
        recorder = context.get_bean(Recorder)

        assert recorder.bean_names("before") == ["repo"]
        assert recorder.bean_names("on_set_property") == ["recorder", "repo"]
        assert recorder.bean_names("after") == ["recorder", "repo"]

    def test_returns_beans_unchanged(self):
        """Test that the recorder never substitutes beans."""
        recorder = RecordingPostProcessor()
        bean = object()

        assert recorder.post_process_before_initialization(bean, "bean") is bean
        assert recorder.calls == [("before", "bean")]
