import pytest
from backend.voting.ledger import VoteLedger
from backend.voting.registry import CandidateRegistry
from backend.voting.results import ResultsAggregator, vote_percentage


@pytest.fixture
def registry(app_ctx, notifier):
    return CandidateRegistry(notifier)


@pytest.fixture
def ledger(app_ctx, notifier):
    return VoteLedger(notifier)


@pytest.fixture
def aggregator(app_ctx):
    return ResultsAggregator()


def test_vote_percentage():
    assert vote_percentage(1, 3) == 33.3
    assert vote_percentage(2, 3) == 66.7
    assert vote_percentage(5, 5) == 100.0
    assert vote_percentage(0, 0) == 0.0
    assert vote_percentage(3, 0) == 0.0


def test_no_candidates_gives_no_rows(aggregator):
    assert aggregator.compute_results() == []


def test_zero_votes_lists_every_candidate_at_zero(registry, aggregator):
    registry.add_candidate("Bravo")
    registry.add_candidate("Alpha")

    rows = aggregator.compute_results()

    assert [r.name for r in rows] == ["Alpha", "Bravo"]
    assert all(r.vote_count == 0 for r in rows)
    assert all(r.percentage == 0.0 for r in rows)


def test_tie_is_ordered_by_name(registry, ledger, aggregator):
    b = registry.add_candidate("B")
    a = registry.add_candidate("A")
    ledger.cast_vote(a['id'], "1.1.1.1")
    ledger.cast_vote(b['id'], "2.2.2.2")

    rows = aggregator.compute_results()

    assert [(r.name, r.vote_count) for r in rows] == [("A", 1), ("B", 1)]
    assert [r.percentage for r in rows] == [50.0, 50.0]


def test_results_sorted_by_count_descending(registry, ledger, aggregator):
    a = registry.add_candidate("Alpha")
    b = registry.add_candidate("Bravo")
    c = registry.add_candidate("Charlie")
    for i in range(3):
        ledger.cast_vote(c['id'], f"10.0.0.{i}")
    ledger.cast_vote(a['id'], "10.0.1.1")

    rows = aggregator.compute_results()

    assert [(r.name, r.vote_count) for r in rows] == [("Charlie", 3), ("Alpha", 1), ("Bravo", 0)]
    assert [r.percentage for r in rows] == [75.0, 25.0, 0.0]
    assert rows[0].id == c['id']
    assert rows[2].id == b['id']


def test_counts_match_ledger_for_present_candidates(registry, ledger, aggregator):
    a = registry.add_candidate("A")
    gone = registry.add_candidate("Gone")
    ledger.cast_vote(a['id'], "1.1.1.1")
    ledger.cast_vote(a['id'], "1.1.1.2")
    ledger.cast_vote(gone['id'], "1.1.1.3")
    registry.delete_candidate(gone['id'])

    rows = aggregator.compute_results()

    assert sum(r.vote_count for r in rows) == len(ledger.list_votes_detailed()) == 2
    assert rows[0].percentage == 100.0


def test_summary_pairs(registry, ledger, aggregator):
    a = registry.add_candidate("A")
    registry.add_candidate("B")
    ledger.cast_vote(a['id'], "1.1.1.1")

    assert aggregator.summary() == [("A", 1), ("B", 0)]


def test_result_row_to_dict(registry, aggregator):
    registry.add_candidate("A", "⭐", "http://img/a.png")
    row = aggregator.compute_results()[0].to_dict()
    assert set(row) == {'id', 'name', 'description', 'image_url', 'vote_count', 'percentage'}
    assert row['description'] == "⭐"
