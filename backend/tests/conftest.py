"""
Shared fixtures: a FakeStore with a seeker and two helpers in Lisbon.
"""
import json

import pytest

from fakes import FakeStore

LISBON = {'lat': 38.7223, 'lng': -9.1393, 'address': 'Praça do Comércio, Lisboa'}
NEARBY = {'lat': 38.7300, 'lng': -9.1400, 'address': 'Rua Augusta, Lisboa'}
PORTO = {'lat': 41.1579, 'lng': -8.6291, 'address': 'Avenida dos Aliados, Porto'}


def profile(name, user_type='both', location=None, **extra):
    return {
        'name': name,
        'email': f'{name.lower()}@example.com',
        'userType': user_type,
        'location': dict(location or LISBON),
        'skills': [],
        'totalPoints': 0,
        'rating': 5.0,
        'reviewCount': 0,
        'isActive': True,
        **extra,
    }


@pytest.fixture()
def store():
    store = FakeStore()
    store.seed_user('seeker-1', **profile('Sofia', 'seeker'))
    store.seed_user('helper-a', **profile('Andre', 'helper', NEARBY, skills=['pets', 'gardening']))
    store.seed_user('helper-b', **profile('Beatriz', 'both', NEARBY, skills=['tech']))
    return store


@pytest.fixture()
def task_input():
    return {
        'title': 'Walk my dog',
        'description': 'Thirty minute walk around the block',
        'category': 'pets',
        'location': dict(LISBON),
        'reward_points': 15,
    }


def make_event(user_id=None, body=None, path=None, query=None, email=None):
    """API Gateway proxy event with Cognito claims."""
    event = {
        'httpMethod': 'POST' if body is not None else 'GET',
        'pathParameters': path,
        'queryStringParameters': query,
        'body': json.dumps(body) if body is not None else None,
        'requestContext': {},
    }
    if user_id:
        claims = {'sub': user_id}
        if email:
            claims['email'] = email
        event['requestContext'] = {'authorizer': {'claims': claims}}
    return event
