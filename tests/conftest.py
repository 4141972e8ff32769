"""Shared fixtures for the swagger-forge test suite."""
from typing import List, Tuple

import pytest

from swagger_forge.config import BuilderSettings
from swagger_forge.schema_gen.cache import NodeCache
from swagger_forge.schema_gen.definitions import DefinitionRegistry
from swagger_forge.schema_gen.properties import PropertyTranslator


@pytest.fixture
def settings() -> BuilderSettings:
    return BuilderSettings()


@pytest.fixture
def registry(settings: BuilderSettings) -> DefinitionRegistry:
    return DefinitionRegistry(settings)


@pytest.fixture
def translator(settings: BuilderSettings, registry: DefinitionRegistry) -> PropertyTranslator:
    return PropertyTranslator(settings, registry, NodeCache())


class DiagnosticRecorder:
    """Collects (tags, message) pairs passed to a diagnostic callback."""

    def __init__(self):
        self.entries: List[Tuple[List[str], str]] = []

    def __call__(self, tags: List[str], message: str) -> None:
        self.entries.append((list(tags), message))

    def with_tag(self, tag: str) -> List[str]:
        return [message for tags, message in self.entries if tag in tags]


@pytest.fixture
def diagnostics() -> DiagnosticRecorder:
    return DiagnosticRecorder()
