from sqlalchemy import Column, Integer, String, Float

from recordstore.services.database import Base


class Record(Base):
    __tablename__ = "records"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, nullable=False)
    label = Column(String, nullable=True)
    wholesale_address = Column(String, nullable=True)
    wholesale_price = Column(Float, nullable=False, default=0)
    retail_price = Column(Float, nullable=False, default=0)
    release_date = Column(String, nullable=True)  # YYYY-MM-DD
    sold_last_year = Column(Integer, nullable=False, default=0)
    sold_current_year = Column(Integer, nullable=False, default=0, index=True)
    stock = Column(Integer, nullable=False, default=0)

    # Tracks are resolved through record_tracks by the catalog service,
    # not loaded through a relationship.
