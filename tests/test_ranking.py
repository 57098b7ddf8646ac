import pytest

from leaderboard.ranking.engine import RankEngine, RankedIndex

from conftest import make_result


@pytest.fixture()
def population():
    return [
        make_result(650, minute=1, player_name='dave'),
        make_result(850, minute=2, player_name='alice'),
        make_result(720, minute=3, player_name='cara'),
        make_result(780, minute=4, player_name='bob'),
    ]


def test_rank_by_score(population):
    runner_up = next(r for r in population if r.score == 780)
    assert RankEngine.rank(runner_up, population) == 2
    assert RankedIndex(population).rank(runner_up) == 2


def test_earlier_completion_wins_ties():
    early = make_result(500, minute=1, player_name='early')
    late = make_result(500, minute=2, player_name='late')
    population = [late, early]

    assert RankEngine.rank(early, population) == 1
    assert RankEngine.rank(late, population) == 2
    index = RankedIndex(population)
    assert index.rank(early) == 1
    assert index.rank(late) == 2
    assert [e.result for e in index.page(2)] == [early, late]


def test_identical_keys_share_rank():
    first = make_result(500, minute=1, id='g1')
    second = make_result(500, minute=1, id='g2')
    entries = RankEngine.page([first, second], limit=10)
    assert [e.rank for e in entries] == [1, 1]


def test_rank_of_unrecorded_score(population):
    assert RankEngine.rank_of(800, population[0].completed_at, population) == 2
    assert RankedIndex(population).rank_of(800, population[0].completed_at) == 2
    assert RankEngine.rank_of(10, population[0].completed_at, population) == 5


def test_pages_partition_the_board(population):
    first = RankEngine.page(population, limit=2, offset=0)
    second = RankEngine.page(population, limit=2, offset=2)
    assert [e.result.score for e in first] == [850, 780]
    assert [e.result.score for e in second] == [720, 650]
    assert [e.rank for e in first + second] == [1, 2, 3, 4]


def test_offset_past_end_is_empty(population):
    assert RankEngine.page(population, limit=10, offset=4) == []
    assert RankEngine.page(population, limit=10, offset=100) == []
    assert RankEngine.page([], limit=10) == []


def test_negative_window_rejected(population):
    with pytest.raises(ValueError):
        RankEngine.page(population, limit=-1)
    with pytest.raises(ValueError):
        RankEngine.page(population, limit=1, offset=-1)


def test_same_rule_for_player_population():
    mine = [make_result(300, minute=5), make_result(300, minute=2), make_result(900, minute=9)]
    others = [make_result(1000, minute=1, player_name='bob')]
    target = mine[0]

    assert RankEngine.rank(target, mine) == 3
    assert RankEngine.rank(target, mine + others) == 4


def test_index_matches_engine_as_results_arrive(population):
    index = RankedIndex()
    seen = []
    for result in population:
        index.add(result)
        seen.append(result)
        for existing in seen:
            assert index.rank(existing) == RankEngine.rank(existing, seen)
    assert len(index) == 4


def test_discard_removes_one_result():
    first = make_result(900, minute=1, id='first')
    twin = make_result(900, minute=1, id='twin')
    index = RankedIndex([first, twin, make_result(800, minute=2)])
    index.discard(first)
    assert len(index) == 2
    assert index.rank(twin) == 1
    index.discard(first)
    assert len(index) == 2
