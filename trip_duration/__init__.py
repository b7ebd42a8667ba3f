from trip_duration.config import Config
from trip_duration.frequency import LocationFrequencyTable
from trip_duration.geo import distance_km
from trip_duration.pipeline import FeaturePipeline, PipelineResult
from trip_duration.splitter import TimeSplitter
from trip_duration.trainer import ModelTrainer

__all__ = [
    "Config",
    "FeaturePipeline",
    "LocationFrequencyTable",
    "ModelTrainer",
    "PipelineResult",
    "TimeSplitter",
    "distance_km",
]
