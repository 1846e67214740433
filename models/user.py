from models.base_model import Base, BaseModel
from models.enums import UserRole, UserStatus
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    phone = Column(String(15), nullable=False, unique=True, index=True)
    country_code = Column(String(5), nullable=True)
    phone_verified = Column(Boolean, nullable=False, default=False)
    email = Column(String(255), nullable=True, unique=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    status = Column(String(20), nullable=False, default=UserStatus.INACTIVE.value)

    admin_profile = relationship(
        "AdminProfile",
        back_populates="user",
        uselist=False,
        passive_deletes=True
    )
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        passive_deletes=True
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
