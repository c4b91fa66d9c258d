"""
Tests for keyword heuristics.
"""

from codectx.analyzer.heuristics import (
    ERROR_HANDLING,
    LOGGING,
    detect_design_patterns,
    detect_diagnostic_patterns,
    detect_framework,
    detect_security_patterns,
    extract_api_endpoints,
    extract_database_queries,
)
from codectx.shared.languages import Language


class TestFrameworkDetection:
    def test_flask(self):
        source = "from flask import Flask\napp = Flask(__name__)\n"
        assert detect_framework(source, Language.PYTHON) == "Flask"

    def test_laravel(self):
        assert detect_framework("use Illuminate\\Support\\Facades\\Route;", Language.PHP) == "Laravel"

    def test_none_for_plain_code(self):
        assert detect_framework("x = 1", Language.PYTHON) is None


class TestDesignPatterns:
    def test_repository_confidence(self):
        source = "class UserRepository:\n    def find(): ...\n    def save(): ...\n"
        hits = detect_design_patterns(source)

        assert [h.pattern for h in hits] == ["Repository"]
        assert hits[0].confidence == 0.75

    def test_single_indicator_below_threshold(self):
        assert detect_design_patterns("class UserRepository: pass") == []


class TestDiagnosticPatterns:
    def test_error_handling_and_logging(self):
        source = "try:\n    run()\nexcept ValueError:\n    logger.error('failed')\n"
        hits = {h.pattern: h.occurrences for h in detect_diagnostic_patterns(source)}

        assert hits == {ERROR_HANDLING: 2, LOGGING: 1}

    def test_retry_is_not_try(self):
        assert detect_diagnostic_patterns("retry_count = 3") == []


class TestSecurityPatterns:
    def test_input_validation(self):
        hits = {h.pattern: h.occurrences for h in detect_security_patterns("$clean = htmlspecialchars($raw);")}
        assert hits["Input Validation"] == 1


class TestExtraction:
    def test_flask_route(self):
        source = "app = Flask(__name__)\n\n@app.route('/users')\ndef users():\n    pass\n"
        endpoints = extract_api_endpoints(source, Language.PYTHON)

        assert [(e.method, e.path, e.line) for e in endpoints] == [("GET", "/users", 3)]

    def test_express_routes(self):
        source = "app.get('/items', list);\nrouter.post(\"/items\", create);\n"
        endpoints = extract_api_endpoints(source, Language.JAVASCRIPT)

        assert [(e.method, e.path) for e in endpoints] == [("GET", "/items"), ("POST", "/items")]

    def test_sql_statement(self):
        source = 'cursor.execute("SELECT id FROM users WHERE active = 1")\n'
        queries = extract_database_queries(source, Language.PYTHON)

        assert len(queries) == 1
        assert queries[0].query == "SELECT id FROM"
        assert queries[0].line == 1
