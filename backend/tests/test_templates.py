from __future__ import annotations

import pytest

from app.core.enums import PlaceholderLabel
from app.services.numbering_errors import TemplateError
from app.services.templates import (
    Literal,
    Placeholder,
    RenderContext,
    parse_template,
    render,
    sequence_limit,
)


def _ctx(**overrides) -> RenderContext:
    values = {
        "year": 2025,
        "month": 8,
        "sequence": 1,
        "default_width": 3,
        "department_code": "T",
        "document_type_code": "A",
    }
    values.update(overrides)
    return RenderContext(**values)


def test_render_department_year_and_sequence() -> None:
    assert render("{department}-{year2}{seq:3}", _ctx(sequence=1)) == "T-25001"


@pytest.mark.parametrize(("sequence", "expected"), [(8, "CTA-2508008"), (15, "CTA-2508015")])
def test_render_literal_prefix_with_month(sequence: int, expected: str) -> None:
    ctx = RenderContext(year=2025, month=8, sequence=sequence, default_width=3)
    assert render("CTA-{year2}{month2}{seq:3}", ctx) == expected


def test_render_uses_rule_width_when_placeholder_has_none() -> None:
    assert render("{doctype}{year4}-{seq}", _ctx(sequence=42, default_width=5)) == "A2025-00042"


def test_render_pads_two_digit_year_and_month() -> None:
    assert render("{year2}/{month2}", _ctx(year=2009, month=1)) == "09/01"


def test_render_is_pure() -> None:
    ctx = _ctx(sequence=7)
    assert render("{department}-{year2}{month2}{seq:4}", ctx) == render("{department}-{year2}{month2}{seq:4}", ctx)


def test_render_template_without_placeholders_is_copied() -> None:
    assert render("FIXED", _ctx()) == "FIXED"


def test_parse_template_tokens() -> None:
    assert parse_template("X-{year2}{seq:4}") == [
        Literal("X-"),
        Placeholder(PlaceholderLabel.YEAR_2),
        Placeholder(PlaceholderLabel.SEQUENCE, width=4),
    ]


@pytest.mark.parametrize(
    "template",
    [
        "{unknown}",
        "{year2:2}",
        "{seq:0}",
        "{seq:}",
        "{seq:x}",
        "{seq:\u00b2}",
        "{seq:19}",
        "{seq:1000000000}",
        "{seq",
        "seq}",
        "{{seq}}",
        "{}",
    ],
)
def test_render_rejects_malformed_templates(template: str) -> None:
    with pytest.raises(TemplateError):
        render(template, _ctx())


def test_render_requires_department_when_template_uses_it() -> None:
    with pytest.raises(TemplateError):
        render("{department}-{seq}", RenderContext(year=2025, month=8, sequence=1, default_width=3))


def test_sequence_limit_uses_narrowest_sequence_placeholder() -> None:
    assert sequence_limit("{seq:3}", default_width=5) == 999
    assert sequence_limit("{seq}", default_width=2) == 99
    assert sequence_limit("{seq:4}-{seq}", default_width=2) == 99
    assert sequence_limit("NO-SEQ", default_width=1) == 9


def test_widest_sequence_placeholder_is_accepted() -> None:
    assert sequence_limit("{seq:18}", default_width=3) == 10**18 - 1
