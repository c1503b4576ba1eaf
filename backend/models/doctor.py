"""Doctor model definitions."""

from sqlalchemy import Column, Integer, String, Text

from backend.database import Base


class Doctor(Base):
    """A doctor profile listed by the booking frontend."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True)
    doctor_name = Column(String, nullable=False, index=True)
    specialty = Column(String)
    doctor_email = Column(String)
    doctor_password = Column(String)  # bcrypt hash
    education = Column(String)
    experience = Column(String)
    fee = Column(String)
    about_me = Column(Text)
    city = Column(String)
    image_url = Column(String)
