import logging

import bson
from flask_login import UserMixin

from db import users_collection

logger = logging.getLogger(__name__)


class User(UserMixin):
    def __init__(self, user_data):
        self.id = str(user_data['_id'])
        self.name = user_data.get('name')
        self.email = user_data.get('email')
        self.role = (user_data.get('role') or '').lower()
        self.division = user_data.get('division_id')
        self.status = user_data.get('status') or 'active'

    @property
    def is_active(self):
        return self.status == 'active'

    def to_public(self):
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "division": self.division,
            "status": self.status,
        }

    def __repr__(self):
        return f"<User {self.email}, {self.role}>"


def get_user_by_id(user_id):
    try:
        user_data = users_collection.find_one({'_id': bson.ObjectId(user_id)})
    except (bson.errors.InvalidId, TypeError):
        return None
    if user_data:
        return User(user_data)
    logger.info("User with ID %s not found.", user_id)
    return None


def find_user_doc_by_email(email):
    return users_collection.find_one({'email': (email or '').strip().lower()})
