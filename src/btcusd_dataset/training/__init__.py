"""Training Module - Datenaufbereitung fuer Training

Ablauf: SequenceBuilder -> Labeler -> FeatureStatsComputer
-> DatasetBalancer -> CurriculumFilter (orchestriert durch DatasetPipeline)
"""

from .labeler import Label, Labeler, label
from .dataset import Sample, Dataset
from .sequence import (
    SequenceBuilder,
    SequenceDataset,
    compute_class_weights,
)
from .balancer import DatasetBalancer
from .curriculum import CurriculumFilter, difficulty
from .normalizer import FeatureStatsComputer, NormalizationStats
from .pipeline import DatasetPipeline, PipelineResult

__all__ = [
    # Labels
    'Label',
    'Labeler',
    'label',
    # Dataset
    'Sample',
    'Dataset',
    # Sequenzen
    'SequenceBuilder',
    'SequenceDataset',
    'compute_class_weights',
    # Balancierung und Curriculum
    'DatasetBalancer',
    'CurriculumFilter',
    'difficulty',
    # Normalisierung
    'FeatureStatsComputer',
    'NormalizationStats',
    # Pipeline
    'DatasetPipeline',
    'PipelineResult',
]
