from typing import Any, Callable

import pytest
from graphdump import RESULT_NAME


def execute(script: str, **env: Any) -> Any:
    """Run a reconstruction script and return the rebuilt root"""
    namespace = dict(env)
    exec(compile(script, "<graphdump>", "exec"), namespace)
    return namespace[RESULT_NAME]


@pytest.fixture
def rebuild() -> Callable[..., Any]:
    return execute
