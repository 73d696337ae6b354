from sqlalchemy import Table, Column, Integer, ForeignKey

from recordstore.services.database import Base

# This is NOT a model class, it's a direct Table definition.
# Removing a record or a track removes the link, never the other side.
record_tracks = Table(
    'record_tracks',
    Base.metadata,
    Column('record_id', Integer, ForeignKey('records.id', ondelete='CASCADE'), primary_key=True),
    Column('track_id', Integer, ForeignKey('tracks.id', ondelete='CASCADE'), primary_key=True, index=True),
    Column('position', Integer, nullable=False, default=0),
)
