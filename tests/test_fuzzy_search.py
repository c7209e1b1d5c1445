from systematic_reasoning.modules.search.fuzzy import (
    FuzzySearchEngine,
    or_query,
    parse_query,
    token_distance,
)

RECORDS = [
    {"task": "fix crash", "learning": "check null before deref", "outcome": "success"},
    {"task": "parser work", "learning": "null pointer crash in parser", "outcome": "failure"},
    {"task": "db outage", "learning": "database connection pool exhausted", "outcome": "failure"},
]


def test_parse_query_splits_alternatives_and_terms():
    assert parse_query("database connection") == [["database", "connection"]]
    assert parse_query("null|deref") == [["null"], ["deref"]]
    assert parse_query("  |  ") == []


def test_or_query_joins_words():
    assert or_query("  null   deref ") == "null|deref"
    assert or_query("") == ""


def test_token_distance_orders_exact_partial_and_misspelled():
    assert token_distance("deref", "deref") == 0.0
    partial = token_distance("deref", "dereference")
    typo = token_distance("conection", "connection")
    unrelated = token_distance("kubernetes", "success")
    assert 0.0 < typo < partial < unrelated
    assert unrelated > 0.6


def test_exact_match_scores_zero_and_ranks_first():
    engine = FuzzySearchEngine(threshold=0.6)
    hits = engine.search(RECORDS, "null deref")
    assert hits[0].item is RECORDS[0]
    assert hits[0].score == 0.0
    assert all(a.score <= b.score for a, b in zip(hits, hits[1:]))


def test_misspelled_query_still_matches():
    engine = FuzzySearchEngine(threshold=0.4)
    hits = engine.search(RECORDS, "databse conection")
    assert [h.ref_index for h in hits] == [2]
    assert 0.0 < hits[0].score < 0.2


def test_threshold_drops_weak_matches():
    engine = FuzzySearchEngine(threshold=0.3)
    assert engine.search(RECORDS, "kubernetes") == []


def test_or_alternatives_take_best_score():
    engine = FuzzySearchEngine(threshold=0.4)
    assert engine.search(RECORDS, "kubernetes deref") == []
    hits = engine.search(RECORDS, "kubernetes|deref")
    assert [h.ref_index for h in hits] == [0]


def test_outcome_field_is_searchable():
    engine = FuzzySearchEngine(threshold=0.2)
    hits = engine.search(RECORDS, "failure")
    assert sorted(h.ref_index for h in hits) == [1, 2]


def test_limit_and_empty_inputs():
    engine = FuzzySearchEngine(threshold=0.6)
    assert len(engine.search(RECORDS, "null|database", limit=1)) == 1
    assert engine.search(RECORDS, "", limit=5) == []
    assert engine.search([], "null") == []


def test_ties_keep_input_order():
    records = [{"task": "t", "learning": "same words", "outcome": "success"} for _ in range(3)]
    hits = FuzzySearchEngine().search(records, "same")
    assert [h.ref_index for h in hits] == [0, 1, 2]


def test_objects_with_searchable_method():
    class Record:
        def searchable(self):
            return {"task": "retry flaky test", "learning": "", "outcome": "success"}

    hits = FuzzySearchEngine().search([Record()], "flaky")
    assert hits[0].score == 0.0
