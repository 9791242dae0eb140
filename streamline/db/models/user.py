from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from streamline.core.timeutils import utcnow
from streamline.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    # Reset links embed this stamp; changing the password invalidates them
    password_changed_at = Column(DateTime, nullable=True)
    image = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete")
    memberships = relationship("Member", back_populates="user", cascade="all, delete")
