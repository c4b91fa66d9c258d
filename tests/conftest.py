"""Shared test fixtures for the codectx test suite."""

from pathlib import Path

import pytest

from codectx.gateway import GatewayResponse
from codectx.index import SQLiteIndexStore
from codectx.shared.infrastructure.config import EngineConfig, Settings


@pytest.fixture
def project_root(tmp_path):
    """Create a temporary project root directory."""
    return tmp_path


@pytest.fixture
def app_settings(tmp_path):
    """Settings isolated from the environment: no provider key, temp database."""
    return Settings(
        _env_file=None,
        embedding_api_key=None,
        database_path=str(tmp_path / ".codectx" / "index.sqlite3"),
    )


@pytest.fixture
def engine_config():
    return EngineConfig()


@pytest.fixture
def store():
    """In-memory index store."""
    index_store = SQLiteIndexStore(":memory:")
    yield index_store
    index_store.close()


def write_files(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def js_workspace(tmp_path):
    """
    Small JavaScript workspace.

    src/a.js exports add, src/b.js imports it, tests/a.test.js imports it too.
    """
    root = tmp_path / "workspace"
    return write_files(
        root,
        {
            "package.json": '{"name": "calc"}\n',
            "src/a.js": (
                "export function add(a, b) {\n"
                "  return a + b;\n"
                "}\n"
                "\n"
                "export function subtract(a, b) {\n"
                "  return a - b;\n"
                "}\n"
            ),
            "src/b.js": (
                "import { add } from './a';\n"
                "\n"
                "export function total(items) {\n"
                "  let sum = 0;\n"
                "  for (const item of items) {\n"
                "    sum = add(sum, item);\n"
                "  }\n"
                "  return sum;\n"
                "}\n"
            ),
            "tests/a.test.js": (
                "import { add } from '../src/a';\n"
                "\n"
                "test('adds numbers', () => {\n"
                "  expect(add(1, 2)).toBe(3);\n"
                "});\n"
            ),
            "node_modules/lib/index.js": "module.exports = {};\n",
        },
    )


class FakeGateway:
    """Records calls and answers with a canned response."""

    def __init__(self, text: str = "answer"):
        self.text = text
        self.calls: list[dict] = []

    async def complete_async(self, prompt: str, context: str, model_id: str) -> GatewayResponse:
        self.calls.append({"prompt": prompt, "context": context, "model_id": model_id})
        return GatewayResponse(text=self.text, usage={"prompt_tokens": len(prompt) + len(context)})


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture(name="write_files")
def write_files_fixture():
    """Helper that writes {relative_path: content} under a root."""
    return write_files
