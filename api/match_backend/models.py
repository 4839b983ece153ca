from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from .database import Base


class Community(Base):
    __tablename__ = "community"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class UserAccount(Base):
    __tablename__ = "user_account"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    bio = Column(Text, nullable=True)
    # Derived from bio on write; NULL while the user has no bio.
    trait_profile = Column(JSON, nullable=True)
    community_id = Column(Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_user_account_community_id", "community_id"),)


class UserLike(Base):
    __tablename__ = "user_like"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_user_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("from_user_id", "to_user_id", name="uq_user_like_pair"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_user_like_not_self"),
        Index("idx_user_like_to_user_id", "to_user_id"),
    )


class UserMatch(Base):
    __tablename__ = "user_match"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_a_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    user_b_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_a_id", "user_b_id", name="uq_user_match_pair"),
        CheckConstraint("user_a_id < user_b_id", name="ck_user_match_canonical"),
        Index("idx_user_match_user_b_id", "user_b_id"),
    )


class Message(Base):
    __tablename__ = "message"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(Integer, ForeignKey("user_match.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_message_match_id", "match_id"),
        Index("idx_message_receiver_read", "receiver_id", "read"),
    )
