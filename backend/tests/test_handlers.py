"""
End-to-end tests through the Lambda handlers with API Gateway events.
"""
import json
from unittest.mock import MagicMock

import pytest

from conftest import LISBON, make_event
from handlers.messages import get_task_messages, mark_messages_read, send_message
from handlers.reviews import create_review, get_task_reviews, get_user_reviews
from handlers.tasks import (
    apply_for_task,
    assign_task,
    complete_task,
    create_task,
    get_my_tasks,
    get_nearby_tasks,
    get_task,
)
from handlers.users import (
    create_user_profile,
    get_current_user,
    get_nearby_helpers,
    get_points_history,
    get_user,
    update_user_profile,
)

HANDLER_MODULES = [
    get_task_messages, mark_messages_read, send_message,
    create_review, get_task_reviews, get_user_reviews,
    apply_for_task, assign_task, complete_task, create_task, get_my_tasks, get_nearby_tasks, get_task,
    create_user_profile, get_current_user, get_nearby_helpers, get_points_history, get_user, update_user_profile,
]


@pytest.fixture(autouse=True)
def fake_store(store, monkeypatch):
    for module in HANDLER_MODULES:
        monkeypatch.setattr(module, 'store', store)
    return store


def call(module, **event_kwargs):
    response = module.handler(make_event(**event_kwargs), None)
    return response['statusCode'], json.loads(response['body'])


def post_task(reward=15):
    status, body = call(create_task, user_id='seeker-1', body={
        'title': 'Fix my router',
        'description': 'Wi-Fi keeps dropping',
        'category': 'digital',
        'location': dict(LISBON),
        'rewardPoints': reward,
    })
    assert status == 201
    return body['taskId']


class TestTaskHandlers:

    def test_exchange_scenario(self, fake_store):
        """Seeker posts (15 pts), helper applies, gets assigned, completes and is rated 4."""
        task_id = post_task(15)

        assert call(apply_for_task, user_id='helper-a', path={'taskId': task_id}) == (200, {'success': True})
        assert call(assign_task, user_id='seeker-1', path={'taskId': task_id},
                    body={'helperId': 'helper-a'}) == (200, {'success': True})

        status, body = call(get_task_messages, user_id='helper-a', path={'taskId': task_id})
        assert status == 200
        assert [m['messageType'] for m in body['messages']] == ['system']

        assert call(complete_task, user_id='helper-a', path={'taskId': task_id})[0] == 200

        status, body = call(create_review, user_id='seeker-1', path={'taskId': task_id}, body={
            'revieweeId': 'helper-a', 'rating': 4, 'reviewType': 'seeker_to_helper', 'comment': 'Fast!'
        })
        assert (status, body) == (201, {'success': True})

        status, body = call(get_current_user, user_id='helper-a')
        assert body['user']['totalPoints'] == 15
        assert body['user']['rating'] == 4.0
        assert body['user']['reviewCount'] == 1

    def test_error_mapping(self):
        task_id = post_task()

        status, body = call(apply_for_task, user_id='seeker-1', path={'taskId': task_id})
        assert (status, body['error']) == (400, 'SelfApplication')

        call(apply_for_task, user_id='helper-a', path={'taskId': task_id})
        status, body = call(apply_for_task, user_id='helper-a', path={'taskId': task_id})
        assert (status, body['error']) == (409, 'DuplicateApplication')

        status, body = call(apply_for_task, path={'taskId': task_id})
        assert (status, body['error']) == (401, 'Unauthenticated')

        status, body = call(assign_task, user_id='helper-a', path={'taskId': task_id}, body={'helperId': 'helper-a'})
        assert (status, body['error']) == (403, 'Forbidden')

        status, body = call(assign_task, user_id='seeker-1', path={'taskId': task_id}, body={'helperId': 'helper-b'})
        assert (status, body['error']) == (400, 'NotAnApplicant')

        status, body = call(assign_task, user_id='seeker-1', path={'taskId': task_id}, body={})
        assert (status, body['error']) == (400, 'ValidationError')

        status, body = call(complete_task, user_id='seeker-1', path={'taskId': 'missing'})
        assert (status, body['error']) == (404, 'NotFound')

    def test_create_task_validation(self):
        status, body = call(create_task, user_id='seeker-1', body={'title': 'x', 'description': 'y',
                                                                   'category': 'gardening',
                                                                   'location': dict(LISBON), 'rewardPoints': 10})
        assert (status, body['error']) == (400, 'ValidationError')

    def test_detail_and_missing(self):
        task_id = post_task()

        status, body = call(get_task, path={'taskId': task_id})
        assert status == 200
        assert body['task']['seeker']['name'] == 'Sofia'

        assert call(get_task, path={'taskId': 'missing'}) == (200, {'task': None})

    def test_nearby_query_params(self):
        task_id = post_task()

        status, body = call(get_nearby_tasks, query={'lat': str(LISBON['lat']), 'lng': str(LISBON['lng'])})
        assert status == 200
        assert [t['taskId'] for t in body['tasks']] == [task_id]

        status, body = call(get_nearby_tasks, user_id='seeker-1',
                            query={'lat': str(LISBON['lat']), 'lng': str(LISBON['lng']), 'category': 'digital'})
        assert body['tasks'] == []

        status, body = call(get_nearby_tasks, query={'lat': 'north', 'lng': '0'})
        assert (status, body['error']) == (400, 'ValidationError')

    def test_my_tasks(self):
        task_id = post_task()

        status, body = call(get_my_tasks, user_id='seeker-1', query={'type': 'posted'})
        assert [t['taskId'] for t in body['tasks']] == [task_id]

        assert call(get_my_tasks, query={'type': 'posted'}) == (200, {'tasks': []})

    def test_unexpected_failure_is_500(self, monkeypatch):
        broken = MagicMock()
        broken.get_task.side_effect = RuntimeError('store down')
        monkeypatch.setattr(complete_task, 'store', broken)

        status, body = call(complete_task, user_id='seeker-1', path={'taskId': 't1'})
        assert (status, body['error']) == (500, 'InternalError')


class TestUserHandlers:

    def test_profile_lifecycle(self, fake_store):
        fake_store.seed_user('newbie')
        assert call(get_current_user, user_id='newbie') == (200, {'user': None})

        status, body = call(create_user_profile, user_id='newbie', email='newbie@example.com', body={
            'name': 'Nuno', 'userType': 'helper', 'location': dict(LISBON), 'skills': ['errands']
        })
        assert (status, body) == (201, {'userId': 'newbie'})
        assert fake_store.users['newbie']['email'] == 'newbie@example.com'

        status, body = call(create_user_profile, user_id='newbie', body={
            'name': 'Nuno', 'email': 'n@example.com', 'userType': 'helper', 'location': dict(LISBON), 'skills': []
        })
        assert (status, body['error']) == (409, 'ProfileExists')

        assert call(update_user_profile, user_id='newbie', body={'bio': 'Happy to help'}) == (200, {'userId': 'newbie'})
        assert fake_store.users['newbie']['bio'] == 'Happy to help'

        status, body = call(get_user, path={'userId': 'newbie'})
        assert body['user']['name'] == 'Nuno'
        assert 'email' not in body['user']

    def test_nearby_helpers(self):
        status, body = call(get_nearby_helpers, query={'lat': str(LISBON['lat']), 'lng': str(LISBON['lng'])})
        assert status == 200
        assert sorted(h['userId'] for h in body['helpers']) == ['helper-a', 'helper-b']

    def test_points_history(self):
        task_id = post_task(30)
        call(apply_for_task, user_id='helper-b', path={'taskId': task_id})
        call(assign_task, user_id='seeker-1', path={'taskId': task_id}, body={'helperId': 'helper-b'})
        call(complete_task, user_id='seeker-1', path={'taskId': task_id})

        status, body = call(get_points_history, user_id='helper-b')
        assert status == 200
        assert body['totalAwarded'] == 30
        assert body['entries'][0]['taskTitle'] == 'Fix my router'


class TestMessageHandlers:

    def test_send_read_and_mark(self, fake_store):
        task_id = post_task()
        call(apply_for_task, user_id='helper-a', path={'taskId': task_id})

        status, body = call(send_message, user_id='seeker-1', path={'taskId': task_id}, body={'content': 'hi'})
        assert (status, body['error']) == (409, 'NoRecipient')

        call(assign_task, user_id='seeker-1', path={'taskId': task_id}, body={'helperId': 'helper-a'})
        assert call(send_message, user_id='seeker-1', path={'taskId': task_id},
                    body={'content': 'Router is in the hall'}) == (200, {'success': True})

        status, body = call(get_task_messages, user_id='helper-b', path={'taskId': task_id})
        assert (status, body) == (200, {'messages': []})

        assert call(mark_messages_read, user_id='helper-a', path={'taskId': task_id}) == (200, {'success': True})
        assert all(m['isRead'] for m in fake_store.messages_for_task(task_id))


class TestReviewHandlers:

    def test_invalid_and_duplicate_reviews(self):
        task_id = post_task()
        call(apply_for_task, user_id='helper-a', path={'taskId': task_id})
        call(assign_task, user_id='seeker-1', path={'taskId': task_id}, body={'helperId': 'helper-a'})

        review = {'revieweeId': 'helper-a', 'rating': 5, 'reviewType': 'seeker_to_helper'}
        status, body = call(create_review, user_id='seeker-1', path={'taskId': task_id}, body=review)
        assert (status, body['error']) == (409, 'InvalidState')

        call(complete_task, user_id='seeker-1', path={'taskId': task_id})

        status, body = call(create_review, user_id='seeker-1', path={'taskId': task_id}, body={**review, 'rating': 9})
        assert (status, body['error']) == (400, 'InvalidRating')

        assert call(create_review, user_id='seeker-1', path={'taskId': task_id}, body=review)[0] == 201
        status, body = call(create_review, user_id='seeker-1', path={'taskId': task_id}, body=review)
        assert (status, body['error']) == (409, 'AlreadyReviewed')

        status, body = call(get_user_reviews, path={'userId': 'helper-a'})
        assert [r['reviewerName'] for r in body['reviews']] == ['Sofia']
        assert body['reviews'][0]['taskTitle'] == 'Fix my router'

        status, body = call(get_task_reviews, path={'taskId': task_id})
        assert body['reviews'][0]['revieweeName'] == 'Andre'
