"""Built-in rule checks.

Rules:
- Presence: required, nullable
- Types: string, integer, numeric, boolean, date
- Formats: email, url, alpha, alpha_num, alpha_dash, regex
- Sizes: min, max, between, size
- Sets: in, not_in
- Cross-field: same, different, confirmed
- Storage: unique, exists
"""

import re
from datetime import date, datetime
from typing import Any

from recordguard.engine.registry import RuleRegistry
from recordguard.engine.types import RuleContext
from recordguard.exceptions import RuleConfigurationError
from recordguard.rules.injectors import NULL_LITERAL


# =============================================================================
# Patterns
# =============================================================================

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

ALPHA_DASH_PATTERN = re.compile(r"^[\w-]+$")

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


# =============================================================================
# Helpers
# =============================================================================


def is_empty(value: Any) -> bool:
    """Check if a value is considered empty."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, tuple, dict, set)) and len(value) == 0:
        return True
    return False


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def size_kind(ctx: RuleContext) -> str:
    """How a value is measured: "numeric", "array" or "string"."""
    if isinstance(ctx.value, (list, tuple, dict, set)):
        return "array"
    if ctx.rules & {"numeric", "integer"} and is_numeric(ctx.value):
        return "numeric"
    if is_numeric(ctx.value) and not isinstance(ctx.value, str):
        return "numeric"
    return "string"


def size_of(ctx: RuleContext) -> float:
    kind = size_kind(ctx)
    if kind == "numeric":
        return float(ctx.value)
    return float(len(ctx.value if kind == "array" else str(ctx.value)))


def _number(ctx: RuleContext, index: int) -> float:
    raw = ctx.parameter(index)
    if raw is None or not is_numeric(raw):
        raise RuleConfigurationError(
            f"Rule on '{ctx.field}' requires a numeric parameter at position {index + 1}"
        )
    return float(raw)


def compile_pattern(raw: str) -> re.Pattern:
    """Compile ``/pattern/flags`` or a bare pattern."""
    if len(raw) >= 2 and raw.startswith("/") and raw.rfind("/") > 0:
        end = raw.rfind("/")
        flags = 0
        for char in raw[end + 1:]:
            if char not in _REGEX_FLAGS:
                raise RuleConfigurationError(f"Unsupported regex flag '{char}' in {raw}")
            flags |= _REGEX_FLAGS[char]
        pattern = raw[1:end]
    else:
        pattern, flags = raw, 0
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise RuleConfigurationError(f"Invalid regex pattern {raw}: {e}") from e


def _require_query(ctx: RuleContext, rule: str):
    if ctx.query is None:
        raise RuleConfigurationError(
            f"The '{rule}' rule on '{ctx.field}' needs a query service; "
            "construct the Validator with one"
        )
    return ctx.query


def _where_pairs(parameters: tuple[str, ...]) -> list[tuple[str, str]]:
    extra = list(parameters)
    if len(extra) % 2:
        extra.append(NULL_LITERAL)
    return [(extra[i], extra[i + 1]) for i in range(0, len(extra), 2)]


# =============================================================================
# Rule checks
# =============================================================================


def required(ctx: RuleContext) -> bool:
    return not is_empty(ctx.value)


def nullable(ctx: RuleContext) -> bool:
    return True


def string(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str)


def integer(ctx: RuleContext) -> bool:
    if isinstance(ctx.value, bool):
        return False
    if isinstance(ctx.value, int):
        return True
    return isinstance(ctx.value, str) and bool(INTEGER_PATTERN.match(ctx.value))


def numeric(ctx: RuleContext) -> bool:
    return is_numeric(ctx.value)


def boolean(ctx: RuleContext) -> bool:
    return ctx.value in (True, False, 0, 1, "0", "1", "true", "false")


def valid_date(ctx: RuleContext) -> bool:
    if isinstance(ctx.value, (date, datetime)):
        return True
    if not isinstance(ctx.value, str):
        return False
    try:
        datetime.fromisoformat(ctx.value)
    except ValueError:
        return False
    return True


def email(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str) and bool(EMAIL_PATTERN.match(ctx.value))


def url(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str) and bool(URL_PATTERN.match(ctx.value))


def alpha(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str) and ctx.value.isalpha()


def alpha_num(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str) and ctx.value.isalnum()


def alpha_dash(ctx: RuleContext) -> bool:
    return isinstance(ctx.value, str) and bool(ALPHA_DASH_PATTERN.match(ctx.value))


def regex(ctx: RuleContext) -> bool:
    raw = ctx.parameter(0)
    if raw is None:
        raise RuleConfigurationError(f"The regex rule on '{ctx.field}' needs a pattern")
    return bool(compile_pattern(raw).search(str(ctx.value)))


def minimum(ctx: RuleContext) -> bool:
    return size_of(ctx) >= _number(ctx, 0)


def maximum(ctx: RuleContext) -> bool:
    return size_of(ctx) <= _number(ctx, 0)


def between(ctx: RuleContext) -> bool:
    return _number(ctx, 0) <= size_of(ctx) <= _number(ctx, 1)


def size(ctx: RuleContext) -> bool:
    return size_of(ctx) == _number(ctx, 0)


def in_list(ctx: RuleContext) -> bool:
    return str(ctx.value) in ctx.parameters


def not_in_list(ctx: RuleContext) -> bool:
    return str(ctx.value) not in ctx.parameters


def same(ctx: RuleContext) -> bool:
    other = ctx.parameter(0)
    return other is not None and ctx.attributes.get(other) == ctx.value


def different(ctx: RuleContext) -> bool:
    other = ctx.parameter(0)
    return other is not None and ctx.attributes.get(other) != ctx.value


def confirmed(ctx: RuleContext) -> bool:
    return ctx.attributes.get(f"{ctx.field}_confirmation") == ctx.value


def unique(ctx: RuleContext) -> bool:
    """``unique:table,column,except,idColumn[,whereColumn,whereValue...]``"""
    query = _require_query(ctx, "unique")
    table = ctx.parameter(0)
    if table is None:
        raise RuleConfigurationError(f"The unique rule on '{ctx.field}' needs a table")

    exclude = ctx.parameter(2)
    if exclude is not None and exclude.upper() == NULL_LITERAL:
        exclude = None

    return not query.exists(
        table,
        ctx.parameter(1, ctx.field),
        ctx.value,
        exclude=exclude,
        exclude_column=ctx.parameter(3, "id"),
        where=_where_pairs(ctx.parameters[4:]),
    )


def exists(ctx: RuleContext) -> bool:
    """``exists:table,column[,whereColumn,whereValue...]``"""
    query = _require_query(ctx, "exists")
    table = ctx.parameter(0)
    if table is None:
        raise RuleConfigurationError(f"The exists rule on '{ctx.field}' needs a table")

    return query.exists(
        table,
        ctx.parameter(1, ctx.field),
        ctx.value,
        where=_where_pairs(ctx.parameters[2:]),
    )


# =============================================================================
# Registration
# =============================================================================


def register_builtin_rules() -> None:
    """Register all built-in rules with the RuleRegistry."""
    RuleRegistry.register("required", required, implicit=True)
    RuleRegistry.register("nullable", nullable)
    RuleRegistry.register("string", string)
    RuleRegistry.register("integer", integer)
    RuleRegistry.register("numeric", numeric)
    RuleRegistry.register("boolean", boolean)
    RuleRegistry.register("date", valid_date)
    RuleRegistry.register("email", email)
    RuleRegistry.register("url", url)
    RuleRegistry.register("alpha", alpha)
    RuleRegistry.register("alpha_num", alpha_num)
    RuleRegistry.register("alpha_dash", alpha_dash)
    RuleRegistry.register("regex", regex)
    RuleRegistry.register("min", minimum)
    RuleRegistry.register("max", maximum)
    RuleRegistry.register("between", between)
    RuleRegistry.register("size", size)
    RuleRegistry.register("in", in_list)
    RuleRegistry.register("not_in", not_in_list)
    RuleRegistry.register("same", same)
    RuleRegistry.register("different", different)
    RuleRegistry.register("confirmed", confirmed)
    RuleRegistry.register("unique", unique)
    RuleRegistry.register("exists", exists)
