from .base import CamelModel


class EnsembleTrackCount(CamelModel):
    ensemble_id: int
    track_count: int
