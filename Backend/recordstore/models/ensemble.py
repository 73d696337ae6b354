from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from recordstore.services.database import Base


class Ensemble(Base):
    __tablename__ = "ensembles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    type = Column(String(255), nullable=True)  # quintet, orchestra, ...

    # Members survive the ensemble (ensemble_id is set to NULL by the database)
    musicians = relationship("Musician", back_populates="ensemble", passive_deletes=True)
