from typing import Dict, Generator

import pytest

from core import env as env_module
from services.env_service import EnvService
from services.env_sources import StaticEnvSource


class MutableEnvSource(StaticEnvSource):
    """Static source whose values tests can change between calls."""

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


@pytest.fixture
def env_values() -> Dict[str, str]:
    return {}


@pytest.fixture
def env_source(env_values: Dict[str, str]) -> MutableEnvSource:
    return MutableEnvSource(env_values)


@pytest.fixture
def service(env_source: MutableEnvSource) -> EnvService:
    return EnvService(env_source)


@pytest.fixture(autouse=True)
def reset_default_service() -> Generator[None, None, None]:
    env_module.reset_env()
    yield
    env_module.reset_env()
