from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.sql import func
from ..database import Base
from .enums import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    supabase_id = Column(String, unique=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String)
    bio = Column(Text)
    role = Column(String, nullable=False, default=UserRole.VOLUNTEER.value)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.STAFF.value, UserRole.ADMIN.value)

    @classmethod
    def create_from_supabase(cls, supabase_user, db) -> "User":
        """Create a local volunteer account for a newly seen Supabase user"""
        metadata = getattr(supabase_user, "user_metadata", None) or {}

        user = cls(
            supabase_id=supabase_user.id,
            email=supabase_user.email,
            first_name=metadata.get("first_name", ""),
            last_name=metadata.get("last_name", ""),
            phone=getattr(supabase_user, "phone", None),
            role=UserRole.VOLUNTEER.value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
