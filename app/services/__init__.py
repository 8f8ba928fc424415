"""Services package."""
from app.services.synthetic_curve import SyntheticCurveGenerator
from app.services.live_data_service import LiveDataService
from app.services.popular_times_service import PopularTimesService
from app.services.snapshot_seeder import SnapshotSeeder

__all__ = [
    "SyntheticCurveGenerator",
    "LiveDataService",
    "PopularTimesService",
    "SnapshotSeeder",
]
