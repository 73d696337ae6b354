from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship

from recordstore.services.database import Base


class Musician(Base):
    __tablename__ = "musicians"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    role = Column(String(255), nullable=True)  # drummer, guitarist, conductor, ...

    ensemble_id = Column(Integer, ForeignKey("ensembles.id", ondelete="SET NULL"), nullable=True, index=True)
    ensemble = relationship("Ensemble", back_populates="musicians")
