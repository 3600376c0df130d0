"""MongoDB implementation of UserRepository (collection ``users``)."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

from commerce.domain.model.user import User, UserRole, normalize_email
from commerce.domain.repository.user_repository import UserQuery, UserRepository, UserStats
from commerce.infrastructure.persistence.mongo import (
    MongoConnection,
    as_utc,
    count_by,
    find_page,
    object_id,
)

COLLECTION = "users"


class MongoUserRepository(UserRepository):

    def __init__(self, connection: MongoConnection) -> None:
        self._connection = connection

    @property
    def _users(self):
        return self._connection.collection(COLLECTION)

    def add(self, user: User) -> None:
        result = self._users.insert_one(self._to_document(user))
        user.id = str(result.inserted_id)

    def get_by_id(self, user_id: str) -> User | None:
        oid = object_id(user_id)
        if oid is None:
            return None
        doc = self._users.find_one({"_id": oid})
        return self._to_domain(doc) if doc else None

    def get_by_email(self, email: str) -> User | None:
        doc = self._users.find_one({"email": normalize_email(email)})
        return self._to_domain(doc) if doc else None

    def find_many(self, query: UserQuery) -> tuple[list[User], int]:
        filter_: dict[str, Any] = {}
        if query.role is not None:
            filter_["role"] = query.role.value
        if query.is_active is not None:
            filter_["isActive"] = query.is_active
        if query.search:
            pattern = {"$regex": re.escape(query.search), "$options": "i"}
            filter_["$or"] = [
                {"firstName": pattern},
                {"lastName": pattern},
                {"email": pattern},
            ]
        docs, total = find_page(self._users, filter_, query.paging)
        return [self._to_domain(doc) for doc in docs], total

    def save(self, user: User, expected_active: bool | None = None) -> bool:
        oid = object_id(user.id or "")
        if oid is None:
            return False
        filter_ = {"_id": oid}
        if expected_active is not None:
            filter_["isActive"] = expected_active
        result = self._users.replace_one(filter_, self._to_document(user))
        return result.matched_count == 1

    def record_login(self, user: User) -> None:
        oid = object_id(user.id or "")
        if oid is None:
            return
        self._users.update_one({"_id": oid}, {"$set": {"lastLoginAt": user.last_login_at}})

    def delete(self, user_id: str) -> bool:
        oid = object_id(user_id)
        if oid is None:
            return False
        return self._users.delete_one({"_id": oid}).deleted_count > 0

    def stats(self) -> UserStats:
        by_state = count_by(self._users, {}, "isActive")
        by_role = count_by(self._users, {}, "role")
        active = by_state.get(True, 0)
        inactive = by_state.get(False, 0)
        return UserStats(
            total_users=active + inactive,
            active_users=active,
            inactive_users=inactive,
            role_counts={r: by_role.get(r.value, 0) for r in UserRole},
        )

    @staticmethod
    def _to_document(user: User) -> dict[str, Any]:
        # BSON has no date type; birthdays are stored as midnight UTC.
        birthday = (
            datetime(
                user.date_of_birth.year,
                user.date_of_birth.month,
                user.date_of_birth.day,
                tzinfo=timezone.utc,
            )
            if user.date_of_birth
            else None
        )
        return {
            "email": user.email,
            "password": user.password_hash,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "role": user.role.value,
            "phone": user.phone,
            "dateOfBirth": birthday,
            "isActive": user.is_active,
            "lastLoginAt": user.last_login_at,
            "createdAt": user.created_at,
            "updatedAt": user.updated_at,
        }

    @staticmethod
    def _to_domain(doc: dict[str, Any]) -> User:
        birthday = doc.get("dateOfBirth")
        return User(
            id=str(doc["_id"]),
            email=doc["email"],
            password_hash=doc["password"],
            first_name=doc["firstName"],
            last_name=doc["lastName"],
            role=UserRole(doc.get("role", UserRole.USER.value)),
            phone=doc.get("phone"),
            date_of_birth=date(birthday.year, birthday.month, birthday.day) if birthday else None,
            is_active=doc.get("isActive", True),
            last_login_at=as_utc(doc.get("lastLoginAt")),
            created_at=as_utc(doc["createdAt"]),
            updated_at=as_utc(doc["updatedAt"]),
        )
