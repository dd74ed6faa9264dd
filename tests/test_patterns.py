"""
Tests for the default pattern table and pattern-file loading.
"""

import json

import pytest

from scamsentry.model import (
    Category, ConfigError, InvalidPattern, InvalidWeight, Pattern, UnknownCategory,
)
from scamsentry.patterns import build_table, default_patterns, load_patterns


class TestDefaultTable:

    def test_categories(self):
        table = default_patterns()
        assert set(table) == {Category.URGENCY, Category.FINANCIAL, Category.PHISHING,
                              Category.IMPERSONATION, Category.LEGIT}

    def test_all_valid(self):
        for pats in default_patterns().values():
            for p in pats:
                assert isinstance(p, Pattern)
                assert 0.0 <= p.weight <= 1.0
                assert len(p.keyword.strip()) >= 3

    def test_fresh_copy_each_call(self):
        a = default_patterns()
        a[Category.URGENCY].clear()
        assert default_patterns()[Category.URGENCY]


class TestBuildTable:

    def test_mixed_entries(self):
        table = build_table({
            "urgency": [("urgent", 0.7), {"keyword": "act now", "weight": 0.7}],
            Category.URL: [Pattern("bit.ly/", 0.78)],
        })
        assert [p.keyword for p in table[Category.URGENCY]] == ["urgent", "act now"]
        assert table[Category.URL][0].weight == 0.78

    def test_unknown_category(self):
        with pytest.raises(UnknownCategory):
            build_table({"SPAM": [("x" * 3, 0.5)]})

    def test_errors_are_config_errors(self):
        for bad in ({"URGENCY": [("", 0.5)]}, {"URGENCY": [("urgent", 2)]}, {"URGENCY": [{"weight": 0.5}]}):
            with pytest.raises(ConfigError):
                build_table(bad)


class TestLoadPatterns:

    def test_csv(self, tmp_path):
        path = tmp_path / "patterns.csv"
        path.write_text("Category,Keyword,Weight\nurgency,act now,0.7\nPHISHING,verify,0.58\n", encoding="utf-8")
        table = load_patterns(path)
        assert table[Category.URGENCY] == [Pattern("act now", 0.7)]
        assert table[Category.PHISHING] == [Pattern("verify", 0.58)]

    def test_csv_header_aliases(self, tmp_path):
        path = tmp_path / "patterns.csv"
        path.write_text("group;phrase;score\nFINANCIAL;free money;0.75\n", encoding="utf-8")
        table = load_patterns(path)
        assert table[Category.FINANCIAL][0].keyword == "free money"

    def test_csv_bad_weight(self, tmp_path):
        path = tmp_path / "patterns.csv"
        path.write_text("category,keyword,weight\nURGENCY,urgent,high\n", encoding="utf-8")
        with pytest.raises(InvalidWeight):
            load_patterns(path)

    def test_csv_empty_keyword(self, tmp_path):
        path = tmp_path / "patterns.csv"
        path.write_text("category,keyword,weight\nURGENCY,,0.5\n", encoding="utf-8")
        with pytest.raises(InvalidPattern):
            load_patterns(path)

    def test_csv_missing_column(self, tmp_path):
        path = tmp_path / "patterns.csv"
        path.write_text("category,keyword\nURGENCY,urgent\n", encoding="utf-8")
        with pytest.raises(KeyError):
            load_patterns(path)

    def test_json(self, tmp_path):
        doc = {
            "version": "1",
            "categories": {
                "URGENCY": {"description": "time pressure", "patterns": [{"keyword": "urgent", "weight": 0.7}]},
                "LEGIT": {"patterns": [{"keyword": "reply stop", "weight": 0.3}]},
            },
        }
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps(doc), encoding="utf-8")
        table = load_patterns(path)
        assert table[Category.URGENCY] == [Pattern("urgent", 0.7)]
        assert table[Category.LEGIT] == [Pattern("reply stop", 0.3)]

    def test_json_out_of_range(self, tmp_path):
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps({"categories": {"URL": {"patterns": [{"keyword": "bit.ly/", "weight": 1.5}]}}}))
        with pytest.raises(InvalidWeight):
            load_patterns(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_patterns(tmp_path / "nope.csv")
