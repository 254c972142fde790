from sqlalchemy import Column, Integer, TIMESTAMP
from sqlalchemy.sql import func
from agroshop.db.session import Base

class BaseModel(Base):
    """Surrogate key plus audit timestamps shared by every shop table."""
    __abstract__ = True
    
    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id}>"
