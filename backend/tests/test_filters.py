# tests/test_filters.py
from __future__ import annotations

from datetime import date, datetime, timezone

from synergies.models.recommendation import Recommendation
from synergies.services import email_templates
from synergies.services.filters import distinct_sorted, in_date_range, in_selection, matches_search


def test_search_is_case_insensitive_substring():
    assert matches_search("dup", ["Jean DUPONT", None])
    assert not matches_search("x", ["abc", None])
    assert matches_search("", ["anything"])
    assert matches_search(None, [])


def test_empty_selection_passes_everything():
    assert in_selection("Vente", None)
    assert in_selection("Vente", [])
    assert in_selection("Vente", ["Vente", "Syndic"])
    assert not in_selection("Achat", ["Vente"])


def test_date_range_is_inclusive_in_local_time():
    # 21:59 UTC on 31/10 is 22:59 in Paris, still the 31st
    late = datetime(2026, 10, 31, 21, 59, tzinfo=timezone.utc)
    assert in_date_range(late, date(2026, 10, 31), date(2026, 10, 31))
    assert not in_date_range(late, date(2026, 11, 1), None)
    assert not in_date_range(late, None, date(2026, 10, 30))
    # naive values come back from SQLite and are read as UTC
    assert in_date_range(datetime(2026, 10, 31, 12, 0), date(2026, 10, 31), None)


def test_distinct_sorted_drops_empty_values():
    assert distinct_sorted(["b", None, "a", "", "b"]) == ["a", "b"]


def test_notification_bodies_escape_user_input():
    reco = Recommendation(
        client_name="<script>alert(1)</script>",
        prescriber_name="Paul",
        project_title="Vente",
        intake_status="non_traitee",
        created_at=datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc),
    )

    content = email_templates.new_recommendation(reco)

    assert "<script>" not in content.html
    assert "&lt;script&gt;" in content.html
    assert content.subject.startswith("Nouvelle recommandation")
