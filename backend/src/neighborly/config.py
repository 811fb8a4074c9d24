"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the marketplace.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    USERS_TABLE = os.environ.get('USERS_TABLE', 'neighborly-users')
    TASKS_TABLE = os.environ.get('TASKS_TABLE', 'neighborly-tasks')
    MESSAGES_TABLE = os.environ.get('MESSAGES_TABLE', 'neighborly-messages')
    REVIEWS_TABLE = os.environ.get('REVIEWS_TABLE', 'neighborly-reviews')
    POINTS_TABLE = os.environ.get('POINTS_TABLE', 'neighborly-points')

    # Feed
    DEFAULT_RADIUS_KM = float(os.environ.get('DEFAULT_RADIUS_KM', '10'))
    USER_REVIEWS_LIMIT = int(os.environ.get('USER_REVIEWS_LIMIT', '20'))

    # Reward points the web client offers; advisory only
    REWARD_POINTS_MIN = int(os.environ.get('REWARD_POINTS_MIN', '5'))
    REWARD_POINTS_MAX = int(os.environ.get('REWARD_POINTS_MAX', '100'))

    # Optimistic retries for review + rating transaction
    REVIEW_WRITE_ATTEMPTS = int(os.environ.get('REVIEW_WRITE_ATTEMPTS', '3'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


# Secondary indexes (hash key, range key)
TASKS_STATUS_INDEX = 'StatusIndex'      # status, createdAt
TASKS_SEEKER_INDEX = 'SeekerIndex'      # seekerId, createdAt
TASKS_HELPER_INDEX = 'HelperIndex'      # helperId, createdAt
USERS_TYPE_INDEX = 'UserTypeIndex'      # userType
MESSAGES_TASK_INDEX = 'TaskIndex'       # taskId, createdAt
REVIEWS_TASK_INDEX = 'TaskIndex'        # taskId, createdAt
REVIEWS_REVIEWEE_INDEX = 'RevieweeIndex'  # revieweeId, createdAt
POINTS_USER_INDEX = 'UserIndex'         # userId, awardedAt


config = Config()
