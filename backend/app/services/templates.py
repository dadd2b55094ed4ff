from __future__ import annotations

from dataclasses import dataclass

from app.core.enums import PlaceholderLabel
from app.services.numbering_errors import TemplateError


# 10**18 - 1 still fits a signed 64-bit counter column.
MAX_SEQUENCE_WIDTH = 18


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    label: PlaceholderLabel
    width: int | None = None


Token = Literal | Placeholder


@dataclass(frozen=True)
class RenderContext:
    year: int
    month: int
    sequence: int
    default_width: int
    department_code: str | None = None
    document_type_code: str | None = None


def _parse_placeholder(body: str, *, template: str) -> Placeholder:
    label_text, sep, width_text = body.partition(":")
    try:
        label = PlaceholderLabel(label_text)
    except ValueError:
        raise TemplateError(f"Unknown placeholder {{{body}}} in template: {template}") from None

    if not sep:
        return Placeholder(label=label)

    if label is not PlaceholderLabel.SEQUENCE:
        raise TemplateError(f"Placeholder {{{label}}} does not accept a width in template: {template}")
    if not (width_text.isascii() and width_text.isdigit()) or len(width_text) > 2:
        raise TemplateError(f"Invalid width {{{body}}} in template: {template}")
    if not 1 <= int(width_text) <= MAX_SEQUENCE_WIDTH:
        raise TemplateError(f"Width must be 1..{MAX_SEQUENCE_WIDTH} in {{{body}}} in template: {template}")
    return Placeholder(label=label, width=int(width_text))


def parse_template(template: str) -> list[Token]:
    """
    Split a template into literal text and placeholders.

    Grammar: literal text interleaved with `{label}` or `{label:width}`.
    Braces cannot be escaped; a stray `{` or `}` is a TemplateError.
    """
    tokens: list[Token] = []
    buf: list[str] = []
    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "}":
            raise TemplateError(f"Unbalanced '}}' at position {i} in template: {template}")
        if ch != "{":
            buf.append(ch)
            i += 1
            continue

        end = template.find("}", i + 1)
        if end == -1:
            raise TemplateError(f"Unclosed placeholder at position {i} in template: {template}")
        body = template[i + 1 : end]
        if "{" in body:
            raise TemplateError(f"Nested '{{' at position {i} in template: {template}")

        if buf:
            tokens.append(Literal("".join(buf)))
            buf = []
        tokens.append(_parse_placeholder(body, template=template))
        i = end + 1

    if buf:
        tokens.append(Literal("".join(buf)))
    return tokens


def validate_template(template: str) -> None:
    parse_template(template)


def sequence_limit(template: str, *, default_width: int) -> int:
    """Largest sequence value that still fits every sequence placeholder of `template`."""
    widths = [
        t.width or default_width
        for t in parse_template(template)
        if isinstance(t, Placeholder) and t.label is PlaceholderLabel.SEQUENCE
    ]
    width = min(widths) if widths else default_width
    return 10**width - 1


def _require(value: str | None, label: PlaceholderLabel, template: str) -> str:
    if value is None:
        raise TemplateError(f"No value for placeholder {{{label}}} in template: {template}")
    return value


def _substitute(token: Placeholder, ctx: RenderContext, template: str) -> str:
    match token.label:
        case PlaceholderLabel.DEPARTMENT:
            return _require(ctx.department_code, token.label, template)
        case PlaceholderLabel.DOCUMENT_TYPE:
            return _require(ctx.document_type_code, token.label, template)
        case PlaceholderLabel.YEAR_2:
            return f"{ctx.year % 100:02d}"
        case PlaceholderLabel.YEAR_4:
            return f"{ctx.year:04d}"
        case PlaceholderLabel.MONTH_2:
            return f"{ctx.month:02d}"
        case PlaceholderLabel.SEQUENCE:
            width = token.width or ctx.default_width
            return f"{ctx.sequence:0{width}d}"
    raise TemplateError(f"Unsupported placeholder {{{token.label}}} in template: {template}")


def render(template: str, ctx: RenderContext) -> str:
    parts: list[str] = []
    for token in parse_template(template):
        if isinstance(token, Literal):
            parts.append(token.text)
        else:
            parts.append(_substitute(token, ctx, template))
    return "".join(parts)
