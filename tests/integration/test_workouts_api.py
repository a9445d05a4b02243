# tests/integration/test_workouts_api.py
from conftest import iso_in


def test_create_and_get_workout(client, auth_headers, create_member):
    member = create_member()
    resp = client.post('/api/workouts', json={
        'memberId': member['id'], 'workoutType': 'strength', 'duration': 50,
        'calories': 420, 'notes': 'Leg day', 'workoutAt': '2024-03-02T18:00:00Z',
    }, headers=auth_headers)
    workout = resp.get_json()['data']['workout']
    assert resp.status_code == 201
    assert workout['workoutType'] == 'STRENGTH'
    assert workout['workoutAt'] == '2024-03-02T18:00:00Z'
    assert workout['member']['name'] == member['name']

    fetched = client.get(f"/api/workouts/{workout['id']}", headers=auth_headers)
    assert fetched.get_json()['data']['workout']['notes'] == 'Leg day'


def test_create_workout_errors(client, auth_headers, create_member):
    resp = client.post('/api/workouts', json={'memberId': 999, 'workoutType': 'CARDIO', 'duration': 5},
                       headers=auth_headers)
    assert resp.status_code == 404
    member = create_member()
    resp = client.post('/api/workouts', json={
        'memberId': member['id'], 'workoutType': 'NAPPING', 'duration': 5,
    }, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Invalid workout type'


def test_update_and_delete_workout(client, auth_headers, create_member, create_workout):
    workout = create_workout(create_member()['id'])
    url = f"/api/workouts/{workout['id']}"
    updated = client.put(url, json={'duration': 75, 'calories': 500}, headers=auth_headers)
    assert updated.get_json()['data']['workout']['duration'] == 75
    assert client.delete(url, headers=auth_headers).status_code == 200
    assert client.get(url, headers=auth_headers).status_code == 404


def test_list_workouts_date_range_and_sort(client, auth_headers, create_member, create_workout):
    member_id = create_member()['id']
    create_workout(member_id, duration=20, workoutAt='2024-01-10T10:00:00Z')
    create_workout(member_id, duration=40, workoutAt='2024-02-10T10:00:00Z')
    create_workout(member_id, duration=60, workoutAt='2024-03-10T10:00:00Z', workoutType='SPORTS')

    def durations(query):
        resp = client.get(f'/api/workouts?{query}', headers=auth_headers)
        assert resp.status_code == 200, resp.get_json()
        return [w['duration'] for w in resp.get_json()['data']['workouts']]

    assert durations('') == [60, 40, 20]
    assert durations('startDate=2024-02-01&endDate=2024-03-01') == [40]
    # a date-only end bound keeps the whole day
    assert durations('startDate=2024-03-10&endDate=2024-03-10') == [60]
    assert durations('endDate=2024-03-10T09:00:00Z') == [40, 20]
    assert durations('sortBy=duration&sortOrder=asc') == [20, 40, 60]
    assert durations('workoutType=SPORTS') == [60]
    bad = client.get('/api/workouts?startDate=someday', headers=auth_headers)
    assert bad.status_code == 400
    assert bad.get_json()['message'] == 'Invalid start date'


def test_workout_stats_overview(client, auth_headers, create_member, create_workout):
    member_id = create_member()['id']
    create_workout(member_id, duration=30, calories=100)
    create_workout(member_id, duration=90, calories=None, workoutType='STRENGTH',
                   workoutAt='2020-01-01T00:00:00Z')
    stats = client.get('/api/workouts/stats/overview', headers=auth_headers).get_json()['data']
    assert stats['totalWorkouts'] == 2
    assert stats['todayWorkouts'] == 1
    assert stats['weeklyWorkouts'] == 1
    assert stats['monthlyWorkouts'] == 1
    assert stats['totalDuration'] == 120
    assert stats['totalCalories'] == 100
    assert stats['averageDuration'] == 60
    assert stats['workoutTypeDistribution'] == [
        {'type': 'CARDIO', 'count': 1}, {'type': 'STRENGTH', 'count': 1},
    ]


def test_member_workout_history(client, auth_headers, create_member, create_workout):
    member_id = create_member()['id']
    other_id = create_member(email='other@example.com')['id']
    create_workout(member_id, duration=10, calories=50, workoutAt='2024-05-01T08:00:00Z')
    create_workout(member_id, duration=20, calories=70, workoutAt='2024-06-01T08:00:00Z')
    create_workout(other_id, duration=99)

    resp = client.get(f'/api/workouts/member/{member_id}/history?startDate=2024-05-15',
                      headers=auth_headers)
    data = resp.get_json()['data']
    assert [w['duration'] for w in data['workouts']] == [20]
    assert data['pagination']['total'] == 1
    assert data['stats'] == {'totalWorkouts': 2, 'totalDuration': 30, 'totalCalories': 120}

    assert client.get('/api/workouts/member/4040/history', headers=auth_headers).status_code == 404
