from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from study_store.database import Base


class ItemEntry(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    subject = Column(String(100), nullable=True)
    filename = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class SubjectEntry(Base):
    __tablename__ = "subjects"

    key = Column(String(100), primary_key=True)
    display_name = Column(String(255), nullable=False)
