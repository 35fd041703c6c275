"""
Configuration store tests.

Integrity checks run at load time and raise CatalogError; the bundled
configuration must load cleanly. Also covers the closest-age lookup.
"""

import copy
import json

import pytest

from screener.tools.catalog import (
    CatalogError,
    load_catalog,
    missing_required,
    parse_age_norms,
    parse_catalog,
    parse_patterns,
)
from screener.tools.conditions import CONDITIONS
from screener.tools.norms import age_context, closest_age_norm

from .conftest import SMALL_CATALOG


def catalog_with(question: dict) -> dict:
    raw = copy.deepcopy(SMALL_CATALOG)
    raw["sections"][1]["questions"].append(question)
    return raw


def norm(note="n", span=10) -> dict:
    return {"note": note, "attention_span": span, "hyperactivity_expected": False, "impulsivity_high": False}


# ============================================================================
# Question catalogue
# ============================================================================

class TestCatalogIntegrity:

    def test_small_catalogue_is_valid(self, small_catalog):
        assert small_catalog.find("focus").weights["adhd"] == [0, 3, 6]
        assert small_catalog.find("missing") is None
        assert small_catalog.section("impact").title == "Impact"

    def test_weights_shorter_than_options(self):
        bad = {"id": "short", "type": "scale", "options": ["A", "B", "C"], "weights": {"adhd": [0, 1]}}
        with pytest.raises(CatalogError, match="short"):
            parse_catalog(catalog_with(bad))

    def test_empty_option_list(self):
        with pytest.raises(CatalogError):
            parse_catalog(catalog_with({"id": "empty", "type": "select", "options": []}))

    def test_duplicate_question_id(self):
        with pytest.raises(CatalogError, match="duplicate"):
            parse_catalog(catalog_with({"id": "focus", "type": "select", "options": ["A"]}))

    def test_ml_values_length_mismatch(self):
        bad = {"id": "m", "type": "select", "options": ["A", "B"], "ml_key": "trigger", "ml_values": ["x"]}
        with pytest.raises(CatalogError):
            parse_catalog(catalog_with(bad))

    def test_unknown_feature_key(self):
        bad = {"id": "m", "type": "select", "options": ["A"], "ml_key": "mood", "ml_values": ["x"]}
        with pytest.raises(CatalogError):
            parse_catalog(catalog_with(bad))

    def test_age_adjustment_index_out_of_range(self):
        bad = {
            "id": "a", "type": "select", "options": ["A", "B"], "weights": {"adhd": [0, 1]},
            "age_adjusted": True, "age_adjustments": {"young": {"index": 5, "adjustment": -1}},
        }
        with pytest.raises(CatalogError):
            parse_catalog(catalog_with(bad))

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="invalid JSON"):
            load_catalog(path)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps(SMALL_CATALOG), encoding="utf-8")
        assert load_catalog(path).find("activity").age_adjusted is True


class TestMissingRequired:

    def test_reports_unanswered_required_questions(self, small_catalog):
        section = small_catalog.section("demographics")

        assert missing_required({}, section) == ["age", "gender"]
        assert missing_required({"age": 9, "gender": ""}, section) == ["gender"]
        assert missing_required({"age": 9, "gender": "Female"}, section) == []


# ============================================================================
# Patterns & age norms
# ============================================================================

class TestPatternTable:

    def test_unknown_condition(self):
        with pytest.raises(CatalogError, match="unknown conditions"):
            parse_patterns({"dyslexia": []})

    def test_empty_signature(self):
        with pytest.raises(CatalogError):
            parse_patterns({"adhd": [{"name": "Empty", "confidence_boost": 5, "signature": {}}]})

    def test_missing_conditions_default_to_empty(self):
        assert parse_patterns({}) == {c: [] for c in CONDITIONS}


class TestAgeNorms:

    def test_keys_sorted_ascending(self):
        norms = parse_age_norms({"12": norm(), "6": norm(), "9": norm()})
        assert list(norms) == [6, 9, 12]

    def test_empty_table(self):
        with pytest.raises(CatalogError):
            parse_age_norms({})

    def test_non_numeric_key(self):
        with pytest.raises(CatalogError):
            parse_age_norms({"six": norm()})

    def test_closest_key(self):
        norms = parse_age_norms({str(k): norm(str(k)) for k in (6, 9, 12, 15, 18)})

        assert closest_age_norm(7, norms)[0] == 6
        assert closest_age_norm(14, norms)[0] == 15
        assert closest_age_norm(30, norms)[0] == 18

    def test_tie_goes_to_lower_key(self):
        norms = parse_age_norms({"9": norm(), "6": norm()})

        assert closest_age_norm(7.5, norms)[0] == 6

    def test_age_context(self):
        norms = parse_age_norms({"6": norm("six", 15)})

        ctx = age_context(4, norms)

        assert ctx.norm_age == 6
        assert ctx.norm.attention_span == 15


# ============================================================================
# Bundled configuration
# ============================================================================

class TestBundledConfig:

    def test_loads(self, config):
        assert [s.id for s in config.catalog.sections] == ["demographics", "tier1", "tier2", "tier3", "tier4"]
        assert all(len(config.patterns[c]) == 2 for c in CONDITIONS)
        assert list(config.age_norms) == sorted(config.age_norms)

    def test_every_impairment_domain_has_a_question(self, config):
        domains = {q.impairment_domain for q in config.catalog.all_questions() if q.impairment_domain}
        assert domains == {"academic", "social", "family", "emotional"}

    def test_sleep_question_present(self, config):
        assert config.catalog.find("sleep_issues").sleep_scores is not None
