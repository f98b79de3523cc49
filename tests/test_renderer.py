from types import SimpleNamespace

from app.domain.workflows.renderer import build_context, find_tokens, render, unknown_tokens


def test_render_replaces_tokens():
    context = {"patient": {"first_name": "Ana"}, "deal": {"title": "Rhinoplasty"}}

    assert render("Hi {{patient.first_name}} - {{deal.title}}", context) == "Hi Ana - Rhinoplasty"


def test_render_tolerates_whitespace_inside_braces():
    context = {"patient": {"first_name": "Ana"}}

    assert render("Hi {{ patient.first_name  }}!", context) == "Hi Ana!"


def test_missing_and_none_values_render_empty():
    context = {"patient": {"first_name": None}, "deal": {}}

    assert render("[{{patient.first_name}}][{{deal.title}}][{{unknown.path}}]", context) == "[][][]"


def test_paths_past_a_plain_value_render_empty():
    context = {"patient": {"first_name": "Ana"}, "deal": {"value": 1200.0}}

    assert render("[{{patient.first_name.upper}}][{{deal.value.real}}]", context) == "[][]"


def test_render_is_idempotent_with_tokens():
    context = {
        "patient": {"first_name": "Ana", "last_name": None},
        "deal": {"title": "Rhinoplasty", "pipeline": "Geneva"},
    }
    template = "Hi {{patient.first_name}} {{patient.last_name}}, {{ deal.title }} ({{deal.pipeline}}) {{deal.owner.name}}"

    once = render(template, context)

    assert once == "Hi Ana , Rhinoplasty (Geneva) "
    assert render(once, context) == once


def test_deep_paths_resolve():
    context = {"deal": {"owner": {"contact": {"email": "owner@clinic.test"}}}}

    assert render("{{deal.owner.contact.email}}", context) == "owner@clinic.test"


def test_text_without_tokens_is_unchanged():
    template = "No placeholders here, {single} braces stay."

    assert render(template, {}) == template
    assert render(render(template, {}), {}) == template


def test_empty_template():
    assert render(None, {"patient": {}}) == ""
    assert render("", {"patient": {}}) == ""


def test_find_tokens_in_order_without_duplicates():
    template = "{{patient.first_name}} {{deal.title}} {{ patient.first_name }}"

    assert find_tokens(template) == ["patient.first_name", "deal.title"]


def test_build_context_from_rows():
    patient = SimpleNamespace(
        id="p1",
        first_name="Ana",
        last_name="Silva",
        email="ana@example.com",
        phone=None,
        language_preference="fr",
        clinic_preference="Geneva",
    )
    deal = SimpleNamespace(
        id="d1",
        title="Consultation",
        pipeline="Geneva",
        value=1200.0,
        stage=SimpleNamespace(name="Request processed"),
    )

    context = build_context(patient, deal)

    assert context["patient"]["full_name"] == "Ana Silva"
    assert context["deal"]["stage"] == "Request processed"
    assert render("{{patient.full_name}} / {{deal.stage}}", context) == "Ana Silva / Request processed"


def test_build_context_without_rows():
    assert build_context(None, None) == {"patient": {}, "deal": {}}


def test_unknown_tokens_lists_unsupported_entities():
    subject = "Hello {{patient.first_name}}"
    body = "{{clinic.name}} {{deal.title}} {{ clinic.name }} {{owner}}"

    assert unknown_tokens(subject, body) == ["clinic.name", "owner"]
    assert unknown_tokens(None, "{{deal.stage}}") == []
