"""Workflow notification templates: {{token}} substitution and HTML conversion."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from markupsafe import escape

from opsflow.shared.utils.serialization import to_json_compatible

TEMPLATE_TOKEN_PATTERN = re.compile(r"{{\s*([A-Za-z0-9_.-]+)\s*}}")
_MARKUP_PATTERN = re.compile(r"<[^>]+>")
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def stringify_value(value: Any) -> str:
    """Render one template variable value as text (None renders empty)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(to_json_compatible(value), separators=(",", ":"))
    return str(value)


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Replace every {{token}} in template; unknown tokens render as empty string."""
    return TEMPLATE_TOKEN_PATTERN.sub(
        lambda match: stringify_value(variables.get(match.group(1))), template
    )


def _plain_text_to_html(text: str) -> str:
    escaped = str(escape(text))
    paragraphs = [part.replace("\n", "<br />") for part in _PARAGRAPH_BREAK.split(escaped)]
    return "".join(f"<p>{paragraph}</p>" for paragraph in paragraphs)


def convert_to_html(content: str) -> str:
    """Return content as minimal HTML.

    Content that already contains a tag passes through trimmed. Plain text is
    escaped, split into paragraphs on blank lines, and single newlines become
    <br />.
    """
    trimmed = content.replace("\r\n", "\n").strip()
    if not trimmed:
        return ""
    if _MARKUP_PATTERN.search(trimmed):
        return trimmed
    return _plain_text_to_html(trimmed)


def render_html(template: str, variables: Mapping[str, Any]) -> str:
    """Render template to HTML, deciding markup vs plain text from the template alone.

    Markup templates keep their tags and get HTML-escaped variable values.
    Plain-text templates are rendered first, then escaped as a whole, so a
    value like "Acme <Ltd>" never turns them into markup.
    """
    trimmed = template.replace("\r\n", "\n").strip()
    if not trimmed:
        return ""
    if _MARKUP_PATTERN.search(trimmed):
        return TEMPLATE_TOKEN_PATTERN.sub(
            lambda match: str(escape(stringify_value(variables.get(match.group(1))))),
            trimmed,
        )
    rendered = render_template(trimmed, variables).strip()
    return _plain_text_to_html(rendered) if rendered else ""


@dataclass(frozen=True)
class RenderedEmail:
    """Subject, plain body and HTML body produced from a template pair."""

    subject: str
    body: str
    html_body: str


class WorkflowTemplateRenderer:
    """Renders a workflow's subject/body templates against a variable mapping."""

    def render(
        self,
        subject_template: str,
        body_template: str,
        variables: Mapping[str, Any],
    ) -> RenderedEmail:
        subject = render_template(subject_template, variables).strip()
        body = render_template(body_template, variables)
        return RenderedEmail(
            subject=subject, body=body, html_body=render_html(body_template, variables)
        )
