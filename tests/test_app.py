import json

from conftest import LISTENER, OWNER, login, video_url
from app import app
from streamqueue.core import QueuePolicy


def submit(client, url, owner_id=OWNER):
    return client.post(f'/rooms/{owner_id}/queue', json={'url': url})


def queue_of(client, owner_id=OWNER):
    response = client.get(f'/rooms/{owner_id}/queue')
    assert response.status_code == 200
    return json.loads(response.data)


class TestHealthEndpoint:
    """Test the health check endpoint"""

    def test_health_returns_200(self, client):
        """Health endpoint should return 200 OK"""
        response = client.get('/health')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ok'


class TestSessionEndpoints:
    """Development sign-in"""

    def test_anonymous_session(self, client):
        """Session endpoint should report an anonymous visitor"""
        data = json.loads(client.get('/session').data)
        assert data == {'authenticated': False, 'userId': None}

    def test_login_and_logout(self, client):
        """Dev login should set the user and logout should clear it"""
        login(client, LISTENER)
        assert json.loads(client.get('/session').data)['userId'] == LISTENER

        client.post('/session/logout')
        assert json.loads(client.get('/session').data)['authenticated'] is False

    def test_dev_login_disabled(self, client, monkeypatch):
        """Dev login should be refused when disabled"""
        monkeypatch.setitem(app.config, 'ALLOW_DEV_LOGIN', False)
        response = client.post('/session', json={'userId': LISTENER})
        assert response.status_code == 403


class TestQueueEndpoints:
    """Submitting and listing"""

    def test_requires_authentication(self, client):
        """Queue endpoints should require a signed-in user"""
        response = client.get(f'/rooms/{OWNER}/queue')
        assert response.status_code == 401
        assert json.loads(response.data)['error'] == 'Unauthorized'

        response = submit(client, video_url(1))
        assert response.status_code == 401

    def test_empty_room(self, client):
        """An unknown room should list as empty"""
        login(client, LISTENER)
        data = queue_of(client)
        assert data['streams'] == []
        assert data['activeStream'] is None
        assert data['isCreator'] is False
        assert data['creatorId'] == OWNER

    def test_submit_returns_entry_with_zero_votes(self, client):
        """Submitting should return the new entry with no votes"""
        login(client, LISTENER)
        response = submit(client, video_url(1))
        assert response.status_code == 201

        entry = json.loads(response.data)
        assert entry['extractedId'] == 'vid00000001'
        assert entry['upvotes'] == 0
        assert entry['haveUpvoted'] is False
        assert entry['played'] is False
        assert entry['submitterId'] == LISTENER

        assert [s['id'] for s in queue_of(client)['streams']] == [entry['id']]

    def test_invalid_link(self, client):
        """A non-YouTube link should return 400 with the format message"""
        login(client, LISTENER)
        response = submit(client, 'https://example.com/watch?v=abc')
        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['error'] == 'InvalidInput'
        assert data['message'] == 'Invalid YouTube URL format'

    def test_missing_url(self, client):
        """A missing url should return 400 with reason empty"""
        login(client, LISTENER)
        response = client.post(f'/rooms/{OWNER}/queue', json={})
        assert response.status_code == 400
        assert json.loads(response.data)['reason'] == 'empty'

    def test_rate_limit_response(self, client):
        """A duplicate should return 429 RateLimited"""
        login(client, LISTENER)
        submit(client, video_url(1))
        response = submit(client, video_url(1))

        assert response.status_code == 429
        data = json.loads(response.data)
        assert data['error'] == 'RateLimited'
        assert data['reason'] == 'duplicate'
        assert data['message']

    def test_burst_response(self, client):
        """A burst breach should report reason burst"""
        login(client, LISTENER)
        submit(client, video_url(1))
        submit(client, video_url(2))
        data = json.loads(submit(client, video_url(3)).data)
        assert (data['error'], data['reason']) == ('RateLimited', 'burst')

    def test_queue_full_response(self, client, monkeypatch):
        """A full room should return 429 QueueFull"""
        monkeypatch.setattr(app.queue_services.admission, 'policy', QueuePolicy(max_queue_len=1))
        login(client, OWNER)
        submit(client, video_url(1))
        response = submit(client, video_url(2))
        assert response.status_code == 429
        assert json.loads(response.data)['error'] == 'QueueFull'


class TestVoteEndpoints:
    """Toggle voting over HTTP"""

    def test_upvote_and_downvote(self, client):
        """Upvote and downvote should toggle the caller's vote"""
        login(client, OWNER)
        entry_id = json.loads(submit(client, video_url(1)).data)['id']

        login(client, LISTENER)
        data = json.loads(client.post(f'/rooms/{OWNER}/queue/{entry_id}/upvote').data)
        assert data == {'entryId': entry_id, 'upvotes': 1, 'haveUpvoted': True, 'changed': True}

        data = json.loads(client.post(f'/rooms/{OWNER}/queue/{entry_id}/upvote').data)
        assert data['upvotes'] == 1
        assert data['changed'] is False

        stream = queue_of(client)['streams'][0]
        assert (stream['upvotes'], stream['haveUpvoted']) == (1, True)

        data = json.loads(client.post(f'/rooms/{OWNER}/queue/{entry_id}/downvote').data)
        assert data == {'entryId': entry_id, 'upvotes': 0, 'haveUpvoted': False, 'changed': True}

    def test_have_upvoted_is_scoped_to_viewer(self, client):
        """haveUpvoted should only reflect the caller's vote"""
        login(client, OWNER)
        entry_id = json.loads(submit(client, video_url(1)).data)['id']
        login(client, LISTENER)
        client.post(f'/rooms/{OWNER}/queue/{entry_id}/upvote')

        login(client, 'listener-2')
        stream = queue_of(client)['streams'][0]
        assert (stream['upvotes'], stream['haveUpvoted']) == (1, False)

    def test_vote_on_entry_of_other_room(self, client):
        """Voting through the wrong room should return 404"""
        login(client, OWNER)
        entry_id = json.loads(submit(client, video_url(1)).data)['id']

        response = client.post(f'/rooms/owner-2/queue/{entry_id}/upvote')
        assert response.status_code == 404
        assert json.loads(response.data)['error'] == 'NotFound'

    def test_queue_is_ranked_by_votes(self, client):
        """The queue listing should be ordered by votes"""
        login(client, OWNER)
        ids = [json.loads(submit(client, video_url(n)).data)['id'] for n in range(3)]
        for voter in ('a', 'b'):
            login(client, voter)
            client.post(f'/rooms/{OWNER}/queue/{ids[2]}/upvote')
        client.post(f'/rooms/{OWNER}/queue/{ids[1]}/upvote')

        login(client, OWNER)
        assert [s['id'] for s in queue_of(client)['streams']] == [ids[2], ids[1], ids[0]]


class TestOwnerEndpoints:
    """Advance, remove and empty are restricted to the room owner"""

    def test_play_next(self, client):
        """Owner advance should return the new now-playing entry"""
        login(client, OWNER)
        first = json.loads(submit(client, video_url(1)).data)['id']
        second = json.loads(submit(client, video_url(2)).data)['id']
        client.post(f'/rooms/{OWNER}/queue/{second}/upvote')

        response = client.post(f'/rooms/{OWNER}/next')
        assert response.status_code == 200
        assert json.loads(response.data)['stream']['id'] == second

        data = queue_of(client)
        assert data['activeStream']['id'] == second
        assert data['activeStream']['played'] is True
        assert [s['id'] for s in data['streams']] == [first]
        assert data['isCreator'] is True

    def test_play_next_on_empty_queue(self, client):
        """Advancing an empty queue should return 404"""
        login(client, OWNER)
        response = client.post(f'/rooms/{OWNER}/next')
        assert response.status_code == 404
        data = json.loads(response.data)
        assert (data['error'], data['reason']) == ('NotFound', 'empty')

    def test_listener_cannot_administer(self, client):
        """Listeners should get 403 on owner actions"""
        login(client, OWNER)
        entry_id = json.loads(submit(client, video_url(1)).data)['id']

        login(client, LISTENER)
        assert client.post(f'/rooms/{OWNER}/next').status_code == 403
        assert client.delete(f'/rooms/{OWNER}/queue/{entry_id}').status_code == 403
        response = client.post(f'/rooms/{OWNER}/queue/empty')
        assert response.status_code == 403
        assert json.loads(response.data)['error'] == 'Forbidden'

        assert len(queue_of(client)['streams']) == 1

    def test_remove_entry(self, client):
        """Owner should be able to remove an entry once"""
        login(client, OWNER)
        entry_id = json.loads(submit(client, video_url(1)).data)['id']

        response = client.delete(f'/rooms/{OWNER}/queue/{entry_id}')
        assert response.status_code == 200
        assert queue_of(client)['streams'] == []

        assert client.delete(f'/rooms/{OWNER}/queue/{entry_id}').status_code == 404

    def test_empty_queue(self, client):
        """Owner should be able to empty the queue"""
        login(client, OWNER)
        for n in range(3):
            submit(client, video_url(n))

        response = client.post(f'/rooms/{OWNER}/queue/empty')
        assert response.status_code == 200
        assert json.loads(response.data)['removed'] == 3
        assert queue_of(client)['streams'] == []
