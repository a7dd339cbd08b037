"""Message formatting for failed rule checks.

Templates use ``:attribute`` for the field's display name and named
placeholders for rule parameters (``:min``, ``:max``, ``:size``,
``:values``, ``:other``).
"""

import re
from typing import Any

from recordguard.engine.builtins import size_kind
from recordguard.engine.types import RuleContext

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "The :attribute field is required.",
    "string": "The :attribute must be a string.",
    "integer": "The :attribute must be an integer.",
    "numeric": "The :attribute must be a number.",
    "boolean": "The :attribute field must be true or false.",
    "date": "The :attribute is not a valid date.",
    "email": "The :attribute must be a valid email address.",
    "url": "The :attribute format is invalid.",
    "alpha": "The :attribute may only contain letters.",
    "alpha_num": "The :attribute may only contain letters and numbers.",
    "alpha_dash": "The :attribute may only contain letters, numbers, dashes and underscores.",
    "regex": "The :attribute format is invalid.",
    "min.numeric": "The :attribute must be at least :min.",
    "min.string": "The :attribute must be at least :min characters.",
    "min.array": "The :attribute must have at least :min items.",
    "max.numeric": "The :attribute may not be greater than :max.",
    "max.string": "The :attribute may not be greater than :max characters.",
    "max.array": "The :attribute may not have more than :max items.",
    "between.numeric": "The :attribute must be between :min and :max.",
    "between.string": "The :attribute must be between :min and :max characters.",
    "between.array": "The :attribute must have between :min and :max items.",
    "size.numeric": "The :attribute must be :size.",
    "size.string": "The :attribute must be :size characters.",
    "size.array": "The :attribute must contain :size items.",
    "in": "The selected :attribute is invalid.",
    "not_in": "The selected :attribute is invalid.",
    "same": "The :attribute and :other must match.",
    "different": "The :attribute and :other must be different.",
    "confirmed": "The :attribute confirmation does not match.",
    "unique": "The :attribute has already been taken.",
    "exists": "The selected :attribute is invalid.",
}

FALLBACK_MESSAGE = "The :attribute is invalid."

_SIZE_RULES = frozenset({"min", "max", "between", "size"})

_PLACEHOLDER = re.compile(r":([a-z_]+)")


class MessageFormatter:
    """Builds the message for a failed clause.

    Lookup order: custom "field.rule", custom "rule", then the default
    for the rule (per size kind for min/max/between/size).
    """

    def __init__(
        self,
        custom_messages: dict[str, str] | None = None,
        attribute_names: dict[str, str] | None = None,
    ):
        self.custom_messages = custom_messages or {}
        self.attribute_names = attribute_names or {}

    def display_name(self, field: str) -> str:
        if field in self.attribute_names:
            return self.attribute_names[field]
        return field.replace("_", " ")

    def template(self, rule: str, ctx: RuleContext) -> str:
        for key in (f"{ctx.field}.{rule}", rule):
            if key in self.custom_messages:
                return self.custom_messages[key]
        if rule in _SIZE_RULES:
            return DEFAULT_MESSAGES.get(f"{rule}.{size_kind(ctx)}", FALLBACK_MESSAGE)
        return DEFAULT_MESSAGES.get(rule, FALLBACK_MESSAGE)

    def format(self, rule: str, ctx: RuleContext) -> str:
        replacements = self._replacements(rule, ctx)

        def replace(match: re.Match) -> str:
            name = match.group(1)
            return str(replacements.get(name, match.group(0)))

        return _PLACEHOLDER.sub(replace, self.template(rule, ctx))

    def _replacements(self, rule: str, ctx: RuleContext) -> dict[str, Any]:
        params = ctx.parameters
        values: dict[str, Any] = {"attribute": self.display_name(ctx.field)}
        if rule in ("min", "between") and params:
            values["min"] = params[0]
        if rule == "max" and params:
            values["max"] = params[0]
        if rule == "between" and len(params) > 1:
            values["max"] = params[1]
        if rule == "size" and params:
            values["size"] = params[0]
        if rule in ("in", "not_in"):
            values["values"] = ", ".join(params)
        if rule in ("same", "different") and params:
            values["other"] = self.display_name(params[0])
        return values
