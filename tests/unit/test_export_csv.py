from talentgate.core.export import _experience_label, render_csv


def test_empty_export_is_empty_string() -> None:
    assert render_csv([]) == ""


def test_header_is_bare_and_text_cells_quoted() -> None:
    rows = [
        {"id": "a1", "first_name": "Ada", "hours_per_week": 20, "notes": 'Says "hi", often'},
        {"id": "b2", "first_name": "Grace", "hours_per_week": "", "notes": ""},
    ]
    lines = render_csv(rows).split("\n")
    assert lines == [
        "id,first_name,hours_per_week,notes",
        '"a1","Ada",20,"Says ""hi"", often"',
        '"b2","Grace","",""',
    ]


def test_experience_label_skips_missing_parts() -> None:
    assert _experience_label("Engineer", "Acme") == "Engineer at Acme"
    assert _experience_label(None, "Acme") == "Acme"
    assert _experience_label("Engineer", "") == "Engineer"
    assert _experience_label(None, None) == ""
