import json

from leaderboard.integrity.validator import SCORE_TOO_HIGH


def game_payload(**overrides):
    payload = {
        'player_name': 'alice',
        'score': 1500,
        'rounds': 6,
        'final_progress': 100,
        'final_bugs': 0,
        'final_tech_debt': 20,
        'game_duration_seconds': 300,
        'cards_played': ['refactor', 'deploy', 'coffee-break', 'pair-program', 'hotfix', 'code-review'],
    }
    payload.update(overrides)
    return payload


def test_submit_score(client):
    res = client.post('/scores', json=game_payload())
    assert res.status_code == 201
    body = res.json()
    assert body['success'] is True
    assert body['message'] == 'Score submitted successfully'
    assert body['data']['player_name'] == 'alice'
    assert body['data']['fingerprint']
    assert body['data']['cards_played'] == game_payload()['cards_played']


def test_schema_errors_are_rejected_before_the_pipeline(client):
    res = client.post('/scores', json=game_payload(score=-1))
    assert res.status_code == 422
    res = client.post('/scores', json=game_payload(cards_played=[]))
    assert res.status_code == 422
    res = client.post('/scores', json=game_payload(player_name='not a name!'))
    assert res.status_code == 422


def test_implausible_score_is_a_client_error(client):
    res = client.post('/scores', json=game_payload(score=5000))
    assert res.status_code == 400
    assert res.json()['detail'] == f'Invalid game state: {SCORE_TOO_HIGH}'


def test_score_submissions_are_rate_limited(client):
    for _ in range(10):
        assert client.post('/scores', json=game_payload(), headers={'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}).status_code == 201
    res = client.post('/scores', json=game_payload(), headers={'X-Forwarded-For': '203.0.113.7'})
    assert res.status_code == 429
    assert res.json()['detail'] == 'Rate limit exceeded. Too many score-submission requests.'
    assert res.headers['Retry-After'] == '60'

    other = client.post('/scores', json=game_payload(), headers={'X-Real-IP': '198.51.100.2'})
    assert other.status_code == 201


def test_reads_use_general_limit(client, clock):
    headers = {'CF-Connecting-IP': '203.0.113.9'}
    for _ in range(60):
        assert client.get('/leaderboard', headers=headers).status_code == 200
    assert client.get('/leaderboard/stats', headers=headers).status_code == 429

    clock.advance(60001)
    assert client.get('/leaderboard/stats', headers=headers).status_code == 200


def test_leaderboard_pagination(client):
    for name, score in [('alice', 850), ('bob', 780), ('cara', 720), ('dave', 650)]:
        res = client.post('/scores', json=game_payload(player_name=name, score=score))
        assert res.status_code == 201

    first = client.get('/leaderboard', params={'limit': 2, 'offset': 0}).json()
    second = client.get('/leaderboard', params={'limit': 2, 'offset': 2}).json()
    beyond = client.get('/leaderboard', params={'limit': 2, 'offset': 10}).json()

    assert [(e['player_name'], e['rank']) for e in first['entries']] == [('alice', 1), ('bob', 2)]
    assert [(e['player_name'], e['rank']) for e in second['entries']] == [('cara', 3), ('dave', 4)]
    assert first['pagination'] == {'limit': 2, 'offset': 0, 'has_more': True}
    assert beyond['entries'] == []
    assert beyond['pagination']['has_more'] is False


def test_player_history(client):
    client.post('/scores', json=game_payload(score=1200))
    client.post('/scores', json=game_payload(player_name='bob', score=1800))
    client.post('/scores', json=game_payload(score=1700))

    res = client.get('/leaderboard/player/alice')
    assert res.status_code == 200
    body = res.json()
    assert body['player_name'] == 'alice'
    assert body['stats']['total_games'] == 2
    assert body['stats']['best_score'] == 1700
    assert [(g['score'], g['rank'], g['personal_rank']) for g in body['games']] == [(1700, 2, 1), (1200, 3, 2)]

    stats = client.get('/players/alice/stats').json()
    assert stats['avg_score'] == 1450
    games = client.get('/players/alice/games', params={'limit': 1}).json()
    assert [g['score'] for g in games] == [1700]


def test_unknown_player(client):
    assert client.get('/leaderboard/player/nobody').status_code == 404
    assert client.get('/players/nobody/stats').status_code == 404
    assert client.get('/players/nobody/games').json() == []


def test_totals(client):
    client.post('/scores', json=game_payload())
    client.post('/scores', json=game_payload(player_name='bob'))
    client.post('/scores', json=game_payload())
    assert client.get('/leaderboard/stats').json() == {'total_games': 3, 'total_players': 2}


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.json()['status'] == 'healthy'


def test_unpaired_surrogate_card_is_a_schema_error(client):
    body = json.dumps(game_payload(cards_played=['\ud800'] * 6))
    res = client.post('/scores', content=body, headers={'Content-Type': 'application/json'})
    assert res.status_code == 422
    assert res.json()['detail'][0]['loc'][-1] == 'cards_played'


def test_score_submissions_count_against_general_limit(client):
    headers = {'X-Real-IP': '198.51.100.40'}
    for _ in range(60):
        assert client.get('/leaderboard', headers=headers).status_code == 200
    res = client.post('/scores', json=game_payload(), headers=headers)
    assert res.status_code == 429
    assert res.json()['detail'] == 'Rate limit exceeded. Too many general requests.'
    assert client.get('/leaderboard/stats').json()['total_games'] == 0
