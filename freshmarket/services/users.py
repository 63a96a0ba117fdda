import logging
from typing import Any, ClassVar, Mapping, Optional, Type, Union

from pydantic import BaseModel as Schema
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freshmarket.auth.security import CredentialService
from freshmarket.core.errors import DuplicateEmail, InvalidCredentials
from freshmarket.models.user import User
from freshmarket.schemas.user import (
    AdminCreate,
    AdminUpdate,
    LoginRequest,
    RetailerCreate,
    RetailerUpdate,
    User as UserSchema,
    UserWithToken,
)
from freshmarket.services.base import EntityService, validate_input

log = logging.getLogger(__name__)

# fields a caller may write; role and password are handled separately
_PROFILE_FIELDS = ("name", "email", "farm_name", "location", "profile_image")


class UserService(EntityService[User]):
    """CRUD and login for one user role. Lookups never cross roles."""

    model = User
    role: ClassVar[str]
    create_schema: ClassVar[Type[Schema]]
    update_schema: ClassVar[Type[Schema]]

    def __init__(self, db: Session, credentials: CredentialService):
        super().__init__(db)
        self.credentials = credentials

    def scope(self) -> list:
        return [User.role == self.role]

    def _email_taken(self, email: str, *, exclude_id: Optional[str] = None) -> bool:
        # uniqueness is global across roles among active users
        stmt = select(User.id).where(User.email == email, User.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.db.scalars(stmt).first() is not None

    def _profile_values(self, data: Schema) -> dict:
        values = {}
        for field in _PROFILE_FIELDS:
            if field in type(data).model_fields:
                values[field] = getattr(data, field)
        return values

    def create(self, data: Union[Schema, Mapping[str, Any]]) -> User:
        payload = validate_input(self.create_schema, data)
        email = str(payload.email).lower()
        if self._email_taken(email):
            log.warning("Rejected %s signup, email already in use: %s", self.role, email)
            raise DuplicateEmail()

        values = self._profile_values(payload)
        values["email"] = email
        user = User(
            **values,
            role=self.role,
            hashed_password=self.credentials.get_password_hash(payload.password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # a concurrent signup won the partial unique index
            self.db.rollback()
            raise DuplicateEmail() from exc
        self.db.refresh(user)
        log.info("%s created: %s", self.label, user.id)
        return user

    def update(self, user_id: str, data: Union[Schema, Mapping[str, Any]]) -> User:
        payload = validate_input(self.update_schema, data)
        values = self._profile_values(payload)
        values["email"] = str(payload.email).lower()
        if values.get("profile_image") is None:
            # an omitted image keeps the stored one
            values.pop("profile_image", None)
        if payload.password:
            values["hashed_password"] = self.credentials.get_password_hash(payload.password)

        if self._email_taken(values["email"], exclude_id=user_id):
            raise DuplicateEmail()
        try:
            user = self._conditional_update(user_id, values)
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateEmail() from exc
        log.info("%s updated: %s", self.label, user.id)
        return user

    def authenticate(self, data: Union[Schema, Mapping[str, Any]]) -> User:
        payload = validate_input(LoginRequest, data)
        stmt = select(User).where(User.email == str(payload.email).lower(), *self._active())
        user = self.db.scalars(stmt).first()
        if user is None or not self.credentials.verify_password(payload.password, user.hashed_password):
            log.warning("Failed %s login for %s", self.role, payload.email)
            raise InvalidCredentials()
        return user

    def login(self, data: Union[Schema, Mapping[str, Any]]) -> UserWithToken:
        user = self.authenticate(data)
        token = self.credentials.create_access_token({"sub": user.id, "id": user.id, "role": user.role})
        log.info("%s logged in: %s", self.label, user.id)
        return UserWithToken(access_token=token, user=UserSchema.model_validate(user))


class AdminService(UserService):
    role = "admin"
    label = "Admin"
    create_schema = AdminCreate
    update_schema = AdminUpdate


class RetailerService(UserService):
    role = "retailer"
    label = "Retailer"
    create_schema = RetailerCreate
    update_schema = RetailerUpdate
