from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint

from recordstore.services.database import Base


class Track(Base):
    __tablename__ = "tracks"
    __table_args__ = (
        # A track belongs to a musician or to an ensemble, never both, never neither
        CheckConstraint(
            "(musician_id IS NULL AND ensemble_id IS NOT NULL) OR "
            "(musician_id IS NOT NULL AND ensemble_id IS NULL)",
            name="ck_tracks_single_owner",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # seconds

    # Deleting the owner deletes its tracks
    musician_id = Column(Integer, ForeignKey("musicians.id", ondelete="CASCADE"), nullable=True, index=True)
    ensemble_id = Column(Integer, ForeignKey("ensembles.id", ondelete="CASCADE"), nullable=True, index=True)
