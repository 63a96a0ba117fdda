from sqlalchemy import Column, Enum, Index, String, text

from freshmarket.models.base import BaseModel

USER_ROLES = ("admin", "retailer")


class User(BaseModel):
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(*USER_ROLES, name="user_roles"), nullable=False, index=True)
    profile_image = Column(String(255))
    farm_name = Column(String(150))
    location = Column(String(255))

    __table_args__ = (
        # email is unique among users that have not been soft deleted
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )
