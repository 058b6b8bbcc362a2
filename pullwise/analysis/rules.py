"""
Declarative rule tables for the lexical pattern detectors.

Each rule pairs a regular expression with the issue it produces. Tables are
compiled once at import time and shared by every detector instance; adding
a rule never requires touching detector control flow.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Pattern, Tuple

from pullwise.schemas import IssueSeverity, IssueType


class RuleCategory(str, Enum):
    """Family a rule belongs to."""
    SECURITY = "security"
    PERFORMANCE = "performance"
    CHANGE = "change"


@dataclass(frozen=True)
class Rule:
    """A single lexical detection rule."""
    label: str
    pattern: Pattern[str]
    message: str
    suggestion: str
    category: RuleCategory
    issue_type: IssueType
    severity: IssueSeverity

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


def _build(
    entries: Iterable[Tuple[str, str, str, str]],
    category: RuleCategory,
    issue_type: IssueType,
    severity: IssueSeverity,
    flags: int = 0,
) -> Tuple[Rule, ...]:
    """Compile (label, pattern, message, suggestion) entries into rules."""
    return tuple(
        Rule(
            label=label,
            pattern=re.compile(pattern, flags),
            message=message,
            suggestion=suggestion,
            category=category,
            issue_type=issue_type,
            severity=severity,
        )
        for label, pattern, message, suggestion in entries
    )


def _security(label: str, pattern: str, suggestion: str) -> Tuple[str, str, str, str]:
    return (label, pattern, f"Potential security issue: {label}", suggestion)


_SECURITY_ENTRIES = [
    # Secrets and credentials
    _security(
        "Hardcoded Secrets",
        r"""(['"]?)\b(?:password|secret|key|token|api[_-]?key|private[_-]?key|access[_-]?key|auth[_-]?token)\1\s*[:=]\s*['"][^'"]+['"]""",
        "Move sensitive data to environment variables or a secrets management service",
    ),
    _security(
        "Hardcoded Password",
        r"""(?:password|pwd|passwd)\s*[:=]\s*['"][^'"]{0,50}['"]""",
        "Never hardcode credentials. Use environment variables or a vault service",
    ),
    _security(
        "AWS Key Exposure",
        r"(?-i:AKIA[0-9A-Z]{16})",
        "This looks like an AWS access key. Rotate it immediately and use IAM roles instead of keys",
    ),
    _security(
        "Private Key Hardcoded",
        r"-----BEGIN (?:RSA |DSA |EC |OPENSSH )?PRIVATE KEY-----",
        "Private keys must never be committed. Use a key management service",
    ),
    # Injection
    _security(
        "SQL Injection",
        r"""(?:execute|query|sql)\s*\(\s*(?:[`'"].*?\$\{.*?\}|f['"].*?\{.*?\}|['"].*?['"]\s*(?:\+|%))""",
        "Use parameterized queries or an ORM instead of building SQL from strings",
    ),
    _security(
        "Command Injection",
        r"""(?:exec|spawn|fork|system|popen)\s*\(\s*(?:[`'"].*?\$\{|f['"].*?\{)|shell\s*=\s*True""",
        "Pass arguments as a list and avoid invoking a shell with interpolated input",
    ),
    _security(
        "NoSQL Injection",
        r"(?:find|findOne|update|delete|remove)\s*\(\s*\{.*?\$\{",
        "Validate and sanitize input with a schema before building queries",
    ),
    # Cross-site scripting
    _security(
        "XSS Vulnerability",
        r"dangerouslySetInnerHTML|innerHTML\s*=|document\.write|\beval\(|new\s+Function\(",
        "Rely on framework escaping or sanitize with DOMPurify; avoid raw HTML sinks",
    ),
    _security(
        "Unsafe String Interpolation",
        r"innerHTML\s*\+=|insertAdjacentHTML",
        "Use textContent instead of innerHTML and sanitize user input",
    ),
    _security(
        "Unsafe DOM Methods",
        r"\.html\(|\$\(.*?\)\.append\(|jQuery.*html",
        "Avoid direct DOM manipulation; insert elements with appendChild()",
    ),
    # Transport and cookies
    _security(
        "Insecure Protocol",
        r"http://(?!localhost|127\.0\.0\.1)",
        "Always use HTTPS in production and configure HSTS headers",
    ),
    _security(
        "Insecure Cookie",
        r"secure\s*[:=]\s*false|httponly\s*[:=]\s*false",
        "Set Secure, HttpOnly and SameSite flags on all cookies",
    ),
    # Cryptography
    _security(
        "Weak Crypto",
        r"\b(?:md5|sha1|des|rc4)\b|\bcrypt\(",
        "Use SHA-256 or better for hashing and AES-256 for encryption",
    ),
    _security(
        "Hardcoded Cipher Key",
        r"""cipher\.update\(.*['"][a-zA-Z0-9]{8,}""",
        "Store encryption keys in a vault and derive them with PBKDF2 or Argon2",
    ),
    # Authentication
    _security(
        "Weak Password Check",
        r"password.*length\s*<{1,2}\s*[68]\b|len\(\s*password\s*\)\s*<\s*[68]\b",
        "Enforce a minimum of 12 characters and hash with bcrypt, scrypt or Argon2",
    ),
    _security(
        "JWT without Verification",
        r"""jwt\.decode\s*\([^,]*\)(?!\s*,\s*verify)|verify_signature['"]?\s*:\s*false""",
        "Always verify JWT signatures with the expected key and algorithm",
    ),
    _security(
        "Missing CSRF Token",
        r"""form.*method\s*=\s*['"](?:post|put|delete)""",
        "Protect state-changing forms with CSRF tokens or SameSite cookies",
    ),
    # Concurrency
    _security(
        "Potential Race Condition",
        r"(?:setTimeout|setInterval).*(?:fetch|axios|supabase)",
        "Coordinate timed requests; cancel them on teardown and avoid shared state",
    ),
    _security(
        "TOCTOU Vulnerability",
        r"(?:fs\.exists|fs\.stat|os\.path\.exists).*(?:fs\.(?:write|read)|open\()",
        "Open files directly and handle the error instead of checking first",
    ),
    # Logic
    _security(
        "Always True Condition",
        r"\bif\s*\(\s*(?:true|1)\s*\)|\bif\s+(?:true|1)\s*:",
        "This condition is always true. Remove or fix the condition",
    ),
    _security(
        "Dead Code",
        r"else\s*\{\s*(?://|throw|return|unreachable)",
        "Remove unreachable code paths",
    ),
]

_PERFORMANCE_ENTRIES = [
    (
        "Empty Effect Dependencies",
        r"useEffect\(\(\)\s*=>\s*\{[^}]*\},\s*\[\s*\]\)",
        "Empty dependency array in useEffect",
        "Add the required dependencies or document why the effect runs only once",
    ),
    (
        "Nested Array Operations",
        r"\.map\(.*\.map\(",
        "Nested array operations detected - O(n²) complexity",
        "Use flatMap, a single loop, or a better data structure",
    ),
    (
        "Manual Promise",
        r"new\s+Promise",
        "Manual Promise creation - consider async/await",
        "Use async/await or existing Promise-based APIs",
    ),
    (
        "Timer Usage",
        r"setInterval|setTimeout",
        "Timer usage detected",
        "Clear timers on teardown to prevent leaks and duplicate work",
    ),
    (
        "Inline Effect Dependencies",
        r"useEffect[^}]*\[.*,",
        "useEffect with inline objects/arrays in dependencies",
        "Hoist objects and arrays or memoize them with useMemo",
    ),
    (
        "Chained Iterations",
        r"\.filter\(.*\)\.map\(|\.map\(.*\)\.filter\(",
        "Multiple array iterations detected",
        "Combine filter and map into a single pass",
    ),
    (
        "State Update In Handler",
        r"onClick.*=>.*setState|onChange.*=>.*setState",
        "Direct state update in event handler",
        "Make sure state updates are batched and handlers are memoized",
    ),
    (
        "Serialization Round Trip",
        r"JSON\.stringify.*JSON\.parse|JSON\.parse\(\s*JSON\.stringify|json\.loads\(\s*json\.dumps",
        "JSON stringify/parse cycle detected",
        "Use structured cloning or a dedicated copy instead of serializing",
    ),
    (
        "Nested Loops",
        r"\bfor\b[^{]*\{[^}]*\bfor\s*\(",
        "Nested loops detected - potential O(n²) complexity",
        "Index one side with a map or set to avoid the inner loop",
    ),
    (
        "Nested Comprehension",
        r"\bfor\s+\w+\s+in\b.*\bfor\s+\w+\s+in\b",
        "Nested iteration in a single expression - potential O(n²) complexity",
        "Index one side with a dict or set to avoid the inner iteration",
    ),
    (
        "Deeply Nested Functions",
        r"function.*\{.*function.*\{[^}]*function",
        "Deeply nested functions detected",
        "Extract nested functions for readability and to avoid re-creating closures",
    ),
    (
        "Large Intermediate Arrays",
        r"const.*=.*\[.*\].*\.filter.*\.map",
        "Creating large intermediate arrays",
        "Use generators or streaming to reduce memory usage",
    ),
]

# Plain case-sensitive substrings: "fetchUser" and "apiClient" count too.
_CHANGE_ENTRIES = [
    (
        "API Integration",
        r"api|fetch|axios",
        "New API integration detected",
        "Ensure error handling and rate limiting are implemented",
    ),
    (
        "State Management",
        r"useState|useReducer|store",
        "State management changes detected",
        "Verify state updates and side effects are properly handled",
    ),
]


SECURITY_RULES = _build(
    _SECURITY_ENTRIES,
    RuleCategory.SECURITY,
    IssueType.ERROR,
    IssueSeverity.HIGH,
    flags=re.IGNORECASE,
)

PERFORMANCE_RULES = _build(
    _PERFORMANCE_ENTRIES,
    RuleCategory.PERFORMANCE,
    IssueType.SUGGESTION,
    IssueSeverity.MEDIUM,
)

CHANGE_RULES = _build(
    _CHANGE_ENTRIES,
    RuleCategory.CHANGE,
    IssueType.SUGGESTION,
    IssueSeverity.MEDIUM,
)

# Removed-line markers that suggest a declaration or contract was altered.
BREAKING_CHANGE_MARKERS = (
    "interface",
    "type",
    "class",
    "props",
    "required",
    "optional",
)

IMPORT_LINE_PATTERN = re.compile(r"^\s*(?:import\b|from\s+\S+\s+import\b|(?:const|let|var)\s+.*=\s*require\()")

FUNCTION_START_PATTERN = re.compile(r"\bfunction\b|=>")
