"""
Keyword heuristics: frameworks, design patterns, security, performance and
diagnostic clusters, API endpoints and database queries.

All detectors are plain functions over file (or chunk) text. Indicator tables
are intentionally simple substring and regex lists; they describe what code
looks like, not what it does.
"""

import bisect
import re

from codectx.analyzer.models import ApiEndpoint, DatabaseQuery, PatternHit
from codectx.shared.languages import Language

# =============================================================================
# INDICATOR TABLES
# =============================================================================

# language -> ordered (framework, substrings); first framework with any hit wins
FRAMEWORK_SIGNATURES: dict[Language, list[tuple[str, tuple[str, ...]]]] = {
    Language.PHP: [
        ("Laravel", ("Illuminate\\", "Artisan::", "Route::", "Schema::", "Eloquent")),
        ("Symfony", ("Symfony\\", "use Doctrine\\", "@Route", "@Entity")),
        ("CodeIgniter", ("$this->load->", "CI_Controller", "$this->db->")),
        ("Zend", ("Zend\\", "Laminas\\")),
    ],
    Language.JAVASCRIPT: [
        ("React", ("import React", "useState", "useEffect", "jsx", "React.Component")),
        ("Vue", ("Vue.component", "new Vue", "v-if", "v-for", "@click")),
        ("Angular", ("@Component", "@Injectable", "ngOnInit", "Angular")),
        ("Express", ("express()", "app.get", "app.post", "req.body")),
        ("Next.js", ("next/", "getStaticProps", "getServerSideProps")),
    ],
    Language.TYPESCRIPT: [
        ("Angular", ("@Component", "@Injectable", "ngOnInit")),
        ("NestJS", ("@Controller", "@Injectable", "@Get", "@Post")),
        ("React", ("React.FC", "useState", "useEffect")),
    ],
    Language.PYTHON: [
        ("Django", ("django.", "models.Model", "HttpResponse", "render")),
        ("Flask", ("from flask", "@app.route", "Flask(__name__)")),
        ("FastAPI", ("from fastapi", "@app.get", "@app.post", "FastAPI()")),
    ],
    Language.JAVA: [
        ("Spring", ("org.springframework", "@SpringBootApplication", "@RestController", "@Autowired")),
        ("Jakarta EE", ("jakarta.ws.rs", "javax.ws.rs", "@Path(")),
    ],
    Language.GO: [
        ("Gin", ("github.com/gin-gonic/gin", "gin.Context", "gin.Default()")),
        ("Echo", ("github.com/labstack/echo", "echo.Context", "echo.New()")),
    ],
}

DESIGN_PATTERN_INDICATORS: dict[str, tuple[str, ...]] = {
    "Singleton": ("private static $instance", "getInstance()", "private function __construct"),
    "Factory": ("Factory", "create()", "make()"),
    "Observer": ("Observer", "notify()", "attach()", "detach()"),
    "Strategy": ("Strategy", "execute()", "setStrategy()"),
    "Decorator": ("Decorator", "decorate()", "wrap()"),
    "Repository": ("Repository", "find()", "save()", "delete()"),
    "Service": ("Service", "handle()", "process()"),
    "Builder": ("Builder", "build()", "with()"),
}

SECURITY_INDICATORS: dict[str, tuple[str, ...]] = {
    "SQL Injection Risk": ("$_GET", "$_POST", "$_REQUEST", "query(", "exec("),
    "XSS Risk": ("echo $_", "print $_", "innerHTML", "document.write"),
    "CSRF Protection": ("csrf_token", "@csrf", "csrf_field"),
    "Authentication": ("Auth::", "login()", "authenticate()", "password_verify"),
    "Authorization": ("authorize()", "can()", "cannot()", "middleware"),
    "Encryption": ("encrypt()", "decrypt()", "hash()", "bcrypt()", "password_hash"),
    "Input Validation": ("validate()", "sanitize()", "filter_var", "htmlspecialchars"),
}

PERFORMANCE_INDICATORS: dict[str, tuple[str, ...]] = {
    "Caching": ("Cache::", "cache()", "remember()", "Redis::", "Memcached"),
    "Database Optimization": ("with()", "eager loading", "chunk()", "cursor()"),
    "Async Operations": ("async", "await", "Promise", "setTimeout", "setInterval"),
    "Memory Management": ("unset()", "gc_collect_cycles()", "memory_get_usage()"),
    "Query Optimization": ("select()", "where()", "orderBy()", "limit()", "offset()"),
}

ERROR_HANDLING = "error_handling"
LOGGING = "logging"

# Word-bounded regexes; plain substrings would count "retry" as "try"
DIAGNOSTIC_INDICATORS: dict[str, tuple[re.Pattern, ...]] = {
    ERROR_HANDLING: (
        re.compile(r"\btry\b"),
        re.compile(r"\bcatch\b"),
        re.compile(r"\bexcept\b"),
        re.compile(r"\bfinally\b"),
        re.compile(r"\bthrow\b"),
        re.compile(r"\braise\b"),
        re.compile(r"\brecover\(\)"),
    ),
    LOGGING: (
        re.compile(r"\blogger\.\w+\("),
        re.compile(r"\blogging\.\w+\("),
        re.compile(r"\bconsole\.(?:log|error|warn|info|debug)\("),
        re.compile(r"\bLog::\w+\("),
        re.compile(r"\blog\.(?:Print|Fatal|Panic|Info|Error|Warn|Debug)\w*\("),
        re.compile(r"\berror_log\("),
    ),
}

_HTTP = r"(?P<method>get|post|put|delete|patch)"
_QUOTED_PATH = r"\s*\(\s*['\"](?P<path>[^'\"]+)['\"]"

API_ENDPOINT_PATTERNS: dict[Language, tuple[re.Pattern, ...]] = {
    Language.PHP: (
        re.compile(r"Route::" + _HTTP + _QUOTED_PATH, re.IGNORECASE),
        re.compile(r"@Route" + _QUOTED_PATH, re.IGNORECASE),
    ),
    Language.JAVASCRIPT: (
        re.compile(r"\b(?:app|router)\." + _HTTP + _QUOTED_PATH, re.IGNORECASE),
    ),
    Language.TYPESCRIPT: (
        re.compile(r"@" + _HTTP + _QUOTED_PATH, re.IGNORECASE),
        re.compile(r"\b(?:app|router)\." + _HTTP + _QUOTED_PATH, re.IGNORECASE),
    ),
    Language.PYTHON: (
        re.compile(r"@(?:app|bp|blueprint)\.route" + _QUOTED_PATH, re.IGNORECASE),
        re.compile(r"@(?:\w+\.)?" + _HTTP + _QUOTED_PATH, re.IGNORECASE),
    ),
    Language.JAVA: (
        re.compile(r"@(?P<method>Get|Post|Put|Delete|Patch)Mapping\s*\(\s*(?:value\s*=\s*)?\"(?P<path>[^\"]+)\""),
    ),
    Language.GO: (
        re.compile(r"\.(?P<method>GET|POST|PUT|DELETE|PATCH)\s*\(\s*\"(?P<path>[^\"]+)\""),
    ),
}

_SQL_STATEMENT = re.compile(
    r"\b(?:SELECT|INSERT|UPDATE|DELETE)\s+[^;'\"`]{0,200}?\b(?:FROM|INTO|SET|WHERE)\b",
    re.IGNORECASE | re.DOTALL,
)

DATABASE_QUERY_PATTERNS: dict[Language, tuple[re.Pattern, ...]] = {
    Language.PHP: (
        re.compile(r"DB::(?:select|insert|update|delete|raw)\s*\(", re.IGNORECASE),
        re.compile(r"\$this->db->(?:get|insert|update|delete|query)\s*\(", re.IGNORECASE),
        _SQL_STATEMENT,
    ),
    Language.JAVASCRIPT: (
        re.compile(r"\.(?:find|findOne|insertOne|updateOne|deleteOne|aggregate)\s*\("),
        _SQL_STATEMENT,
    ),
    Language.TYPESCRIPT: (
        re.compile(r"\.(?:find|findOne|insertOne|updateOne|deleteOne|aggregate)\s*\("),
        _SQL_STATEMENT,
    ),
    Language.PYTHON: (
        re.compile(r"\.objects\.(?:filter|get|create|update|delete|raw|exclude|all)\s*\("),
        re.compile(r"\bsession\.(?:query|execute|add|delete)\s*\("),
        _SQL_STATEMENT,
    ),
    Language.JAVA: (_SQL_STATEMENT,),
    Language.GO: (_SQL_STATEMENT,),
}


# =============================================================================
# DETECTORS
# =============================================================================


def detect_framework(content: str, language: Language) -> str | None:
    """First framework whose signature substrings appear in *content*."""
    for framework, signatures in FRAMEWORK_SIGNATURES.get(language, []):
        if any(sig in content for sig in signatures):
            return framework
    return None


def detect_design_patterns(content: str, min_hits: int = 2) -> list[PatternHit]:
    """
    Report a design pattern once at least *min_hits* distinct indicators occur.

    confidence = distinct indicator hits / number of indicators.
    """
    hits: list[PatternHit] = []
    for pattern, indicators in DESIGN_PATTERN_INDICATORS.items():
        score = sum(1 for indicator in indicators if indicator in content)
        if score >= min_hits:
            hits.append(PatternHit(pattern=pattern, confidence=round(min(1.0, score / len(indicators)), 4)))
    return hits


def _count_clusters(content: str, table: dict[str, tuple[str, ...]], min_occurrences: int) -> list[PatternHit]:
    hits: list[PatternHit] = []
    for pattern, indicators in table.items():
        count = sum(content.count(indicator) for indicator in indicators)
        if count >= min_occurrences:
            hits.append(PatternHit(pattern=pattern, occurrences=count))
    return hits


def detect_security_patterns(content: str, min_occurrences: int = 1) -> list[PatternHit]:
    return _count_clusters(content, SECURITY_INDICATORS, min_occurrences)


def detect_performance_patterns(content: str, min_occurrences: int = 1) -> list[PatternHit]:
    return _count_clusters(content, PERFORMANCE_INDICATORS, min_occurrences)


def detect_diagnostic_patterns(content: str, min_occurrences: int = 1) -> list[PatternHit]:
    """Error-handling and logging clusters, used by debugging-focused retrieval."""
    hits: list[PatternHit] = []
    for pattern, regexes in DIAGNOSTIC_INDICATORS.items():
        count = sum(len(regex.findall(content)) for regex in regexes)
        if count >= min_occurrences:
            hits.append(PatternHit(pattern=pattern, occurrences=count))
    return hits


def extract_api_endpoints(content: str, language: Language, line_starts: list[int] | None = None) -> list[ApiEndpoint]:
    line_starts = line_starts if line_starts is not None else compute_line_starts(content)
    endpoints: list[ApiEndpoint] = []
    for regex in API_ENDPOINT_PATTERNS.get(language, ()):
        for match in regex.finditer(content):
            groups = match.groupdict()
            endpoints.append(
                ApiEndpoint(
                    method=(groups.get("method") or "GET").upper(),
                    path=groups["path"],
                    line=line_of(line_starts, match.start()),
                )
            )
    endpoints.sort(key=lambda e: e.line)
    return endpoints


def extract_database_queries(
    content: str, language: Language, line_starts: list[int] | None = None
) -> list[DatabaseQuery]:
    line_starts = line_starts if line_starts is not None else compute_line_starts(content)
    queries: list[DatabaseQuery] = []
    for regex in DATABASE_QUERY_PATTERNS.get(language, ()):
        for match in regex.finditer(content):
            queries.append(
                DatabaseQuery(
                    query=" ".join(match.group(0).split())[:200],
                    line=line_of(line_starts, match.start()),
                )
            )
    queries.sort(key=lambda q: q.line)
    return queries


def compute_line_starts(content: str) -> list[int]:
    """Offsets at which each line begins."""
    starts = [0]
    starts.extend(m.end() for m in re.finditer("\n", content))
    return starts


def line_of(line_starts: list[int], offset: int) -> int:
    """1-based line number for a character offset."""
    return bisect.bisect_right(line_starts, offset)
