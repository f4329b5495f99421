from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from ..core.database import Base
from ..core.security import UserRole

class User(Base):
    """Provisioned patient or doctor.

    Only the columns the booking listings need are mapped here; credentials
    live with whichever service issues the tokens.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String(30), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles]), nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"
