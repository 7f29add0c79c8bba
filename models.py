import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship

from database import Base


class TaskStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(100), nullable=False)

    tasks = relationship("Task", back_populates="owner")

    def __repr__(self) -> str:
        return f"<User {self.username}>"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(
        Enum(TaskStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=TaskStatus.OPEN,
    )
    # Fixed at creation, never reassigned
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    owner = relationship("User", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<Task {self.id} {self.status.value if self.status else None}>"
