"""
H2O AutoML track.

Starts a local H2O cluster, converts pandas frames to H2OFrames and runs a
time-boxed AutoML search. The leader model scores the holdout and the
future frame.

Usage:
    with H2OAutoMLModel(config) as automl:
        automl.fit(train, test)
        preds = automl.predict(test)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .config import TemperatureConfig

logger = logging.getLogger(__name__)


class H2OAutoMLModel:
    """Time-boxed H2O AutoML regression on calendar features"""

    def __init__(self, config: TemperatureConfig):
        self.config = config
        self.aml = None
        self.features: List[str] = []
        self.target: Optional[str] = None
        self._started = False

    def __enter__(self) -> "H2OAutoMLModel":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def start(self) -> None:
        """Start (or attach to) the local H2O cluster"""
        import h2o

        if self._started:
            return

        init_kwargs = {"nthreads": self.config.h2o_nthreads}
        if self.config.h2o_max_mem_size:
            init_kwargs["max_mem_size"] = self.config.h2o_max_mem_size

        logger.info(f"[automl] starting H2O cluster ({init_kwargs})")
        h2o.init(**init_kwargs)
        self._started = True

    def shutdown(self) -> None:
        """Shut down the cluster started by start()"""
        import h2o

        if not self._started:
            return

        logger.info("[automl] shutting down H2O cluster")
        h2o.cluster().shutdown()
        self._started = False

    def to_frame(self, df: pd.DataFrame):
        """pandas -> H2OFrame, categorical columns typed as enum"""
        import h2o

        column_types = {}
        for col in df.columns:
            if isinstance(df[col].dtype, pd.CategoricalDtype):
                column_types[col] = "enum"

        frame = df.copy()
        for col in column_types:
            frame[col] = frame[col].astype(str)

        if column_types:
            return h2o.H2OFrame(frame, column_types=column_types)
        return h2o.H2OFrame(frame)

    def fit(
        self,
        train: pd.DataFrame,
        test: pd.DataFrame,
        target: Optional[str] = None,
    ) -> "H2OAutoMLModel":
        """
        Run AutoML with the holdout as validation and leaderboard frame.

        Args:
            train: Feature frame for training years
            test: Feature frame for the holdout
            target: Response column (defaults to config.value_col)

        Returns:
            self, with aml populated
        """
        from h2o.automl import H2OAutoML

        cfg = self.config
        target = target or cfg.value_col
        if target not in train.columns:
            raise ValueError(f"Missing target column: {target}")

        self.start()

        self.target = target
        self.features = [c for c in train.columns if c != target]

        train_h2o = self.to_frame(train)
        test_h2o = self.to_frame(test)

        logger.info(
            f"[automl] training: {len(train)} rows, {len(self.features)} features, "
            f"budget={cfg.automl_max_runtime_secs}s, nfolds={cfg.automl_nfolds}"
        )

        self.aml = H2OAutoML(
            stopping_metric=cfg.automl_stopping_metric,
            seed=cfg.automl_seed,
            nfolds=cfg.automl_nfolds,
            max_runtime_secs=cfg.automl_max_runtime_secs,
        )
        self.aml.train(
            x=self.features,
            y=target,
            training_frame=train_h2o,
            validation_frame=test_h2o,
            leaderboard_frame=test_h2o,
        )

        logger.info(f"[automl] leader: {self.leader.model_id}")
        return self

    def _require_fit(self) -> None:
        if self.aml is None:
            raise RuntimeError("AutoML has not been trained. Call fit() first.")

    @property
    def leader(self):
        self._require_fit()
        return self.aml.leader

    def leaderboard(self) -> pd.DataFrame:
        """Leaderboard as a pandas DataFrame"""
        self._require_fit()
        return self.aml.leaderboard.as_data_frame()

    def rmse_summary(self) -> Dict[str, Optional[float]]:
        """Leader RMSE on train, validation and cross-validation"""
        scores = self.leader.rmse(train=True, valid=True, xval=True)
        return {k: (None if v is None else float(v)) for k, v in scores.items()}

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """Leader predictions for a feature frame"""
        self._require_fit()
        preds = self.leader.predict(self.to_frame(df))
        return preds.as_data_frame()["predict"].to_numpy(dtype=float)
