"""
Pipeline Modul - Vom Preisverlauf zum balancierten Trainings-Dataset

Ablauf:
1. Sequenzen fuer alle Endtage bauen, verworfene Tage ueberspringen
2. Labels vergeben
3. Normalisierungs-Statistiken ueber die Roh-Sequenzen
4. Balancierung
5. Curriculum-Filter
"""

import time
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

import pandas as pd

from ..core.config import PipelineConfig
from ..core.exceptions import DataValidationError
from ..core.logger import get_logger
from ..data import (
    FEATURE_REGISTRY,
    FeatureRegistry,
    FeatureVectorAssembler,
    MarketSeries,
    detect_feature_count,
)
from ..utils.helpers import format_duration
from .balancer import DatasetBalancer
from .curriculum import CurriculumFilter
from .dataset import Dataset
from .labeler import Labeler
from .normalizer import FeatureStatsComputer, NormalizationStats
from .sequence import SequenceBuilder


@dataclass(frozen=True)
class PipelineResult:
    """
    Ergebnis eines Pipeline-Laufs.

    Attributes:
        dataset: Balanciertes und gefiltertes Dataset
        stats: Normalisierungs-Statistiken der Roh-Sequenzen
        raw_dataset: Dataset vor Balancierung und Curriculum
        skipped_indices: Endtage, deren Sequenz verworfen wurde
        config: Verwendete Konfiguration (mit feature_count)
    """
    dataset: Dataset
    stats: NormalizationStats
    raw_dataset: Dataset
    skipped_indices: Tuple[int, ...] = ()
    config: PipelineConfig = field(default_factory=PipelineConfig)


class DatasetPipeline:
    """
    Baut Trainings-Datasets aus einer Markt-Zeitreihe.

    Die Feature-Anzahl wird beim Erzeugen aus der Registry ermittelt und
    gegen die Konfiguration geprueft; eine Abweichung ist ein fataler Fehler.

    Example:
        >>> pipeline = DatasetPipeline(PipelineConfig(timesteps=35))
        >>> result = pipeline.build(series)
        >>> result.dataset.sequences.shape
        (N, 35, 66)
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 registry: Optional[FeatureRegistry] = None):
        """
        Initialisiert die Pipeline.

        Args:
            config: Pipeline-Konfiguration (default: PipelineConfig())
            registry: Feature-Registry (default: FEATURE_REGISTRY)

        Raises:
            ConfigError: Bei ungueltiger Konfiguration
            FeatureCountMismatchError: Wenn feature_count nicht zur Registry passt
        """
        self.registry = registry or FEATURE_REGISTRY
        base = (config or PipelineConfig()).validate()
        self.config = base.with_feature_count(detect_feature_count(self.registry))
        self.logger = get_logger()

        self.assembler = FeatureVectorAssembler(self.registry)
        self.builder = SequenceBuilder(self.assembler, self.config.timesteps)
        self.labeler = Labeler(self.config.label_threshold, self.config.label_horizon)
        self.stats_computer = FeatureStatsComputer(
            method=self.config.stats_method,
            registry=self.registry,
            correlation_threshold=self.config.correlation_threshold,
            min_selected_features=self.config.min_selected_features,
        )
        self.balancer = DatasetBalancer(
            seed=self.config.seed,
            undersample_ratio=self.config.undersample_ratio,
            smote_neighbors=self.config.smote_neighbors,
        )
        self.curriculum = CurriculumFilter()

    @property
    def first_end_index(self) -> int:
        """Erster Endtag einer Sequenz (warmup + T - 1)."""
        return self.config.warmup + self.config.timesteps - 1

    def end_indices(self, series_length: int) -> range:
        """
        Alle Endtage, fuer die Sequenz und Label gebildet werden.

        Die letzten `label_horizon` Tage fehlen, da fuer sie kein Vergleichspreis existiert.
        """
        return range(self.first_end_index, series_length - self.config.label_horizon,
                     self.config.step)

    def build_raw(self, series: MarketSeries) -> Tuple[Dataset, Tuple[int, ...]]:
        """
        Baut das unbalancierte Dataset.

        Returns:
            Tuple aus (Dataset, verworfene Endtage)

        Raises:
            DataValidationError: Wenn die Zeitreihe fuer kein Sample reicht
                oder jede Sequenz verworfen wird
        """
        candidates = self.end_indices(len(series))
        if len(candidates) == 0:
            minimum = self.first_end_index + self.config.label_horizon + 1
            raise DataValidationError(
                f"Zeitreihe zu kurz: {len(series)} Tage, benoetigt mindestens {minimum}",
                invalid_fields=['prices'])

        sequences, built = self.builder.build_batch(
            series, candidates.start, candidates.stop, candidates.step)
        skipped = tuple(sorted(set(candidates) - set(built.tolist())))
        if skipped:
            self.logger.debug(f"[Pipeline] {len(skipped)} Sequenzen verworfen "
                              f"(erster Tag {skipped[0]})")

        if len(built) == 0:
            raise DataValidationError(
                f"Keine gueltige Sequenz: alle {len(candidates)} Endtage verworfen "
                f"(z.B. Volumen durchgehend 0 oder nicht-endliche Features)",
                invalid_fields=['prices', 'volumes'])

        labels = self.labeler.label_many(series.prices, built)
        return Dataset(sequences, labels, end_indices=built), skipped

    def build(self, data: Union[MarketSeries, pd.DataFrame]) -> PipelineResult:
        """
        Fuehrt die komplette Pipeline aus.

        Args:
            data: MarketSeries oder DataFrame mit Close/Volume-Spalten

        Returns:
            PipelineResult

        Raises:
            DataValidationError: Bei ungueltiger oder zu kurzer Zeitreihe
                oder wenn keine gueltige Sequenz entsteht
        """
        series = data if isinstance(data, MarketSeries) else MarketSeries.from_dataframe(data)
        start = time.perf_counter()

        raw, skipped = self.build_raw(series)
        self.logger.info(f"[Pipeline] {len(raw)} Sequenzen ({raw.class_distribution()})")

        stats = self.stats_computer.compute(raw, select_features=self.config.feature_selection)
        balanced = self.balancer.balance(raw, self.config.balancing_strategy)
        dataset = self.curriculum.filter(balanced, self.config.curriculum_level)

        elapsed = time.perf_counter() - start
        self.logger.timing('Pipeline', elapsed * 1000)
        self.logger.success(f"[Pipeline] Dataset fertig: {len(dataset)} Samples, "
                            f"{len(stats.retained_indices)}/{stats.feature_count} Features "
                            f"in {format_duration(elapsed)}")

        return PipelineResult(
            dataset=dataset,
            stats=stats,
            raw_dataset=raw,
            skipped_indices=skipped,
            config=self.config,
        )
