"""
End-to-end tests for the scan pipeline and its explanation.
"""

import pytest

from scamsentry.model import Category, ScanResult
from scamsentry.patterns import default_patterns
from scamsentry.pipeline import ScanPipeline, analyze, build_pipeline, explain, risk_level

EXAMPLE = "URGENT! Your GCash account suspended. Verify now: bit.ly/verify123"


def spans(result, category):
    return {(m.start, m.end) for m in result.matches if m.category is category}


class TestScanPipeline:

    def test_example_message(self, pipeline):
        res = pipeline.scan(EXAMPLE)
        cats = res.categories
        for c in (Category.URGENCY, Category.IMPERSONATION, Category.PHISHING, Category.URL):
            assert c in cats, c
        by_pattern = {(m.category, m.pattern.lower()) for m in res.matches}
        assert (Category.URGENCY, "urgent") in by_pattern
        assert (Category.URGENCY, "suspended") in by_pattern
        assert (Category.IMPERSONATION, "gcash") in by_pattern
        assert (Category.PHISHING, "verify") in by_pattern
        assert (Category.URL, "bit.ly/verify123") in by_pattern
        url = next(m for m in res.matches if m.category is Category.URL)
        assert EXAMPLE[url.start:url.end] == "bit.ly/verify123"
        assert res.score >= 80

    def test_example_context(self, pipeline):
        adj = pipeline.adjust(EXAMPLE)
        assert adj.critical
        assert adj.boost > 0

    def test_verify_inside_url_not_counted_as_phishing(self, pipeline):
        res = pipeline.scan(EXAMPLE)
        verify_spans = spans(res, Category.PHISHING)
        assert (EXAMPLE.index("Verify"), EXAMPLE.index("Verify") + 6) in verify_spans
        inside = EXAMPLE.index("verify123")
        assert (inside, inside + 6) not in verify_spans

    def test_empty_input(self, pipeline):
        res = pipeline.scan("")
        assert res.matches == ()
        assert res.score == 0.0

    def test_non_string_input(self, pipeline):
        assert pipeline.scan(None).score == 0.0

    def test_benign_message(self, pipeline):
        res = pipeline.scan("See you at lunch tomorrow")
        assert res.matches == ()
        assert res.score == 0.0

    def test_single_generic_word_stays_low(self, pipeline):
        res = pipeline.scan("I will earn my degree next year")
        assert risk_level(res.score) == "LOW"

    def test_deterministic(self, pipeline):
        assert pipeline.scan(EXAMPLE) == pipeline.scan(EXAMPLE)

    def test_sample_scams_score_high(self, pipeline, sample_scams):
        for text in sample_scams:
            assert pipeline.scan(text).score >= 60, text

    def test_legit_notice_scores_below_phish(self, pipeline):
        legit = pipeline.scan("BPI: Your OTP is 123456. Never share your OTP with anyone.")
        phish = pipeline.scan("BPI: Send your OTP now to verify your account.")
        assert legit.score < phish.score
        assert any(m.category is Category.LEGIT and m.weight == 0.0 for m in legit.matches)

    def test_pathological_input(self, pipeline):
        for text in ("a" * 5000, "." * 5000, "urgent " * 500, "İ" * 1000):
            res = pipeline.scan(text)
            assert 0.0 <= res.score <= 95.0

    def test_matches_are_unique_per_key(self, pipeline):
        res = pipeline.scan("urgent urgent URGENT bank alert bit.ly/x")
        keys = [(m.category, m.start, m.end) for m in res.matches]
        assert len(keys) == len(set(keys))


class TestCoverage:

    @pytest.mark.parametrize("category", [c for c in Category if c is not Category.URL])
    def test_every_default_pattern_is_found(self, pipeline, category):
        for pat in default_patterns().get(category, []):
            text = f"xx {pat.keyword} yy"
            res = pipeline.scan(text)
            assert (3, 3 + len(pat.keyword)) in spans(res, category), pat.keyword


class TestIsolatedPipelines:

    def test_custom_table(self):
        p = build_pipeline({"URGENCY": [("act", 0.9)]})
        assert p.scan("Your transaction is complete").matches == ()
        res = p.scan("act")
        assert [m.pattern for m in res.matches] == ["act"]

    def test_pipelines_do_not_share_state(self):
        a = ScanPipeline.from_patterns({"FINANCIAL": [("loan", 0.6)]})
        b = ScanPipeline.from_patterns({"PHISHING": [("otp", 0.6)]})
        assert Category.FINANCIAL in a.scan("quick loan please").categories
        assert Category.FINANCIAL not in b.scan("quick loan please").categories

    def test_automata_ordered_by_category(self):
        p = build_pipeline({"PHISHING": [("otp", 0.6)], "URGENCY": [("urgent", 0.7)]})
        assert [a.category for a in p.automata] == [Category.URGENCY, Category.PHISHING]


class TestExplain:

    def test_explain_example(self, pipeline):
        res = pipeline.scan(EXAMPLE)
        text = explain(res, EXAMPLE)
        assert "Risk Level: CRITICAL" in text
        assert "Detected: URGENCY, PHISHING, IMPERSONATION, URL" in text
        assert text.startswith(f"Score: {res.score:.2f}%")

    def test_analyze(self, pipeline):
        res = pipeline.scan(EXAMPLE)
        a = analyze(res, EXAMPLE)
        assert a.flags["has_url"] and a.flags["has_phishing"]
        assert not a.flags["has_financial"]
        assert 0.0 < a.confidence <= 1.0
        assert a.total_matches == len(res.matches)

    def test_explain_empty(self):
        text = explain(ScanResult(score=0.0), "")
        assert "Risk Level: LOW" in text
        assert "Confidence: 0%" in text
        assert "Detected" not in text

    @pytest.mark.parametrize("score,level", [(0, "LOW"), (34.99, "LOW"), (35, "MEDIUM"),
                                             (60, "HIGH"), (79.99, "HIGH"), (80, "CRITICAL")])
    def test_risk_levels(self, score, level):
        assert risk_level(score) == level

    def test_to_dict(self, pipeline):
        d = pipeline.scan(EXAMPLE).to_dict()
        assert set(d) == {"score", "matches"}
        assert all(set(m) == {"pattern", "weight", "category", "start", "end"} for m in d["matches"])
