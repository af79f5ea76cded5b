# app/models/employees.py

from sqlalchemy import Column, String

from app.database import Base


class Employee(Base):
    __tablename__ = "employee"

    empno = Column(String(15), primary_key=True, index=True)
    firstname = Column(String(50), nullable=True)
    lastname = Column(String(50), nullable=True)
