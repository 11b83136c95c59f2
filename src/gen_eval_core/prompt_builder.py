"""
Prompt Builder

Fills an evaluation prompt template with the fields of a data record.

Placeholder rules:
- {{.Input}}, {{.Response}}, {{.Reference}}, {{.Context}}, {{.ImageURL}},
  {{.VideoURL}}: the record's corresponding field
- any other {{.Key}}: record.metadata["Key"] (e.g. ResponseA / ResponseB
  for pairwise templates)
- {{if .Key}}...{{end}}: kept only when Key resolves to a non-empty value
Missing values substitute as an empty string.
"""

import re

from gen_eval_core.domain.errors import MetricError
from gen_eval_core.domain.value_objects import DataRecord, PromptTemplate

_PLACEHOLDER_RE = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")
_CONDITIONAL_RE = re.compile(r"\{\{\s*if\s+\.(\w+)\s*\}\}(.*?)\{\{\s*end\s*\}\}", re.DOTALL)


def record_variables(record: DataRecord) -> dict[str, str]:
    """
    Collect the template variables a record provides

    Args:
        record: Data record

    Returns:
        Mapping of placeholder name to value
    """
    variables = {str(k): "" if v is None else str(v) for k, v in record.metadata.items()}
    variables.update({
        "Input": record.input,
        "Response": record.response,
        "Reference": record.reference,
        "Context": record.context,
        "ImageURL": record.image_url,
        "VideoURL": record.video_url,
    })
    return variables


def format_template(template: str, variables: dict[str, str]) -> str:
    """
    Substitute placeholders in a template string

    Args:
        template: Template text
        variables: Placeholder values

    Returns:
        Formatted text
    """
    def _conditional(match: re.Match) -> str:
        return match.group(2) if variables.get(match.group(1)) else ""

    text = _CONDITIONAL_RE.sub(_conditional, template)
    return _PLACEHOLDER_RE.sub(lambda m: variables.get(m.group(1), ""), text)


def build_prompt(template: PromptTemplate | str, record: DataRecord) -> str:
    """
    Build an evaluation prompt for a record

    Args:
        template: Prompt template (or raw template text)
        record: Data record supplying the values

    Returns:
        Prompt string
    """
    text = template.template if isinstance(template, PromptTemplate) else template
    return format_template(text, record_variables(record))


def validate_template(template: PromptTemplate | None) -> None:
    """
    Check that a template can be formatted

    Args:
        template: Prompt template to check

    Raises:
        MetricError: When the template is missing, empty, or has unbalanced delimiters
    """
    if template is None or not template.template.strip():
        raise MetricError("prompt template is missing or empty")
    text = template.template
    if text.count("{{") != text.count("}}"):
        raise MetricError("prompt template has unbalanced '{{' / '}}' delimiters")
    opened = len(re.findall(r"\{\{\s*if\s", text))
    closed = len(re.findall(r"\{\{\s*end\s*\}\}", text))
    if opened != closed:
        raise MetricError("prompt template has unmatched '{{if}}' / '{{end}}' blocks")
