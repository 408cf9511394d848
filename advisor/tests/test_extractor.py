from __future__ import annotations

from advisor.chat.extractor import extract
from advisor.recommendations.models import Budget, CollectedPreferences


# ── Purpose ──────────────────────────────────────────────────────────────


class TestPurpose:
    def test_gaming_sets_purpose_and_default_budget(self):
        prefs = extract("I want a gaming laptop")
        assert prefs.purposes == ["gaming"]
        assert prefs.budget == Budget(min=800, max=2500)

    def test_work_synonyms_map_to_work(self):
        for text in ("for business trips", "office stuff", "productivity"):
            assert extract(text).purposes == ["work"]

    def test_student(self):
        prefs = extract("something for college")
        assert prefs.purposes == ["student"]
        assert prefs.budget == Budget(min=300, max=1200)

    def test_work_is_checked_before_creative(self):
        prefs = extract("video editing and photo work")
        assert prefs.purposes == ["work"]

    def test_creative_only(self):
        prefs = extract("photo editing")
        assert prefs.purposes == ["creative"]
        assert prefs.budget == Budget(min=1000, max=3000)

    def test_first_matching_rule_wins(self):
        assert extract("gaming and school").purposes == ["gaming"]


# ── Budget ───────────────────────────────────────────────────────────────


class TestBudget:
    def test_upper_bound(self):
        assert extract("under $1500").budget == Budget(min=300, max=1500)

    def test_upper_bound_low_anchor(self):
        assert extract("below 250").budget == Budget(min=100, max=250)

    def test_lower_bound(self):
        assert extract("over 2000").budget == Budget(min=2000, max=3000)

    def test_lower_bound_high_anchor(self):
        assert extract("at least 2800").budget == Budget(min=2800, max=3300)

    def test_bare_number_gets_window(self):
        assert extract("around 1000").budget == Budget(min=800, max=1200)

    def test_thousands_separator(self):
        assert extract("up to $1,200").budget == Budget(min=300, max=1200)

    def test_numeric_budget_overrides_purpose_default(self):
        prefs = extract("gaming laptop under 1500")
        assert prefs.purposes == ["gaming"]
        assert prefs.budget == Budget(min=300, max=1500)

    def test_memory_sizes_are_not_budgets(self):
        assert extract("needs 16GB RAM and 512 GB storage").budget is None

    def test_gpu_model_numbers_are_not_budgets(self):
        assert extract("something with an RTX 4060").budget is None

    def test_in_as_a_word_does_not_block_budget(self):
        assert extract("I have 1200 in my budget").budget == Budget(min=1000, max=1400)

    def test_out_of_range_numbers_ignored(self):
        assert extract("I have 50 dollars").budget is None
        assert extract("budget is 9000").budget is None


# ── Brands ───────────────────────────────────────────────────────────────


class TestBrands:
    def test_multiple_brands_title_cased(self):
        assert extract("dell or lenovo please").brands == ["Dell", "Lenovo"]

    def test_no_brand(self):
        assert extract("a light laptop").brands == []


# ── Edge cases ───────────────────────────────────────────────────────────


def test_empty_utterance_yields_empty_delta():
    assert extract("").is_empty()


def test_no_signals_yields_empty_delta():
    assert extract("hmm not sure yet").is_empty()


def test_existing_preferences_are_not_mutated():
    existing = CollectedPreferences(purposes=["work"])
    extract("gaming", existing)
    assert existing.purposes == ["work"]


def test_merge_replaces_non_empty_fields_only():
    existing = CollectedPreferences(purposes=["work"], brands=["Dell"])
    merged = existing.merge(extract("under 900"))
    assert merged.purposes == ["work"]
    assert merged.brands == ["Dell"]
    assert merged.budget == Budget(min=300, max=900)
