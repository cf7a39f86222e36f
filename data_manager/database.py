import logging
from pathlib import Path
from typing import Optional, Union
import json
import duckdb
import pandas as pd
from sarima.models import SelectionResult

logger = logging.getLogger(__name__)

FORECAST_COLUMNS = ['model', 'step', 'date', 'mean', 'lower_80', 'upper_80',
                    'lower_95', 'upper_95', 'actual']
ACCURACY_COLUMNS = ['model', 'ME', 'RMSE', 'MAE', 'MPE', 'MAPE',
                    'coverage_80', 'coverage_95', 'n']

class ForecastDatabase:
    def __init__(self, db_path: Union[str, Path] = ':memory:'):
        """Initialize database connection"""
        self.logger = logging.getLogger(__name__)
        self.db_path = str(db_path)

        # Create database directory if it doesn't exist
        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = duckdb.connect(self.db_path)
        self._initialize_tables()
        self.logger.info(f"Initialized database at {self.db_path}")

    def _initialize_tables(self):
        """Initialize database tables"""
        self.conn.execute("""
            CREATE SEQUENCE IF NOT EXISTS run_id_seq;

            CREATE TABLE IF NOT EXISTS comparison_runs (
                run_id INTEGER PRIMARY KEY DEFAULT nextval('run_id_seq'),
                scenario VARCHAR NOT NULL,
                cutoff DATE,
                n_observations INTEGER,
                n_missing INTEGER,
                selected_order VARCHAR,
                selected_aicc DOUBLE,
                coefficients JSON,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS forecasts (
                run_id INTEGER,
                model VARCHAR NOT NULL,
                step INTEGER NOT NULL,
                date TIMESTAMP,
                mean DOUBLE,
                lower_80 DOUBLE,
                upper_80 DOUBLE,
                lower_95 DOUBLE,
                upper_95 DOUBLE,
                actual DOUBLE,
                FOREIGN KEY (run_id) REFERENCES comparison_runs (run_id)
            );

            CREATE TABLE IF NOT EXISTS accuracy (
                run_id INTEGER,
                model VARCHAR NOT NULL,
                me DOUBLE,
                rmse DOUBLE,
                mae DOUBLE,
                mpe DOUBLE,
                mape DOUBLE,
                coverage_80 DOUBLE,
                coverage_95 DOUBLE,
                n INTEGER,
                FOREIGN KEY (run_id) REFERENCES comparison_runs (run_id)
            );

            CREATE TABLE IF NOT EXISTS arima_candidates (
                run_id INTEGER,
                candidate_index INTEGER,
                arima_order VARCHAR,
                aicc DOUBLE,
                loglik DOUBLE,
                converged BOOLEAN,
                error VARCHAR,
                FOREIGN KEY (run_id) REFERENCES comparison_runs (run_id)
            );
        """)

    @staticmethod
    def _nullable(value) -> Optional[float]:
        if value is None or pd.isna(value):
            return None
        return float(value)

    def store_comparison(self, scenario: str,
                         forecasts: pd.DataFrame,
                         accuracy: pd.DataFrame,
                         selection: Optional[SelectionResult] = None,
                         cutoff: Optional[pd.Timestamp] = None,
                         n_observations: Optional[int] = None,
                         n_missing: Optional[int] = None) -> int:
        """Store one scenario of the comparison and return its run id

        Args:
            scenario: Scenario label, e.g. 'complete' or 'blanked'
            forecasts: Long-form forecasts (one row per model and step)
            accuracy: Accuracy table (one row per model)
            selection: Seasonal ARIMA selection to record candidates for
        """
        try:
            self.conn.execute("BEGIN TRANSACTION")
            best = selection.best if selection is not None else None
            run_id = self.conn.execute("""
                INSERT INTO comparison_runs (
                    scenario, cutoff, n_observations, n_missing,
                    selected_order, selected_aicc, coefficients
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                RETURNING run_id
            """, (
                scenario,
                pd.Timestamp(cutoff).date() if cutoff is not None else None,
                n_observations,
                n_missing,
                str(best.order) if best is not None else None,
                best.aicc if best is not None else None,
                json.dumps(best.coefficients) if best is not None else None,
            )).fetchone()[0]

            for row in forecasts.itertuples(index=False):
                self.conn.execute("""
                    INSERT INTO forecasts (
                        run_id, model, step, date, mean,
                        lower_80, upper_80, lower_95, upper_95, actual
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    run_id,
                    row.model,
                    int(row.step),
                    pd.Timestamp(row.date).to_pydatetime() if isinstance(row.date, pd.Timestamp) else None,
                    float(row.mean),
                    float(row.lower_80), float(row.upper_80),
                    float(row.lower_95), float(row.upper_95),
                    self._nullable(getattr(row, 'actual', None)),
                ))

            for row in accuracy.itertuples(index=False):
                self.conn.execute("""
                    INSERT INTO accuracy (
                        run_id, model, me, rmse, mae, mpe, mape,
                        coverage_80, coverage_95, n
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    run_id, row.model,
                    self._nullable(row.ME), self._nullable(row.RMSE),
                    self._nullable(row.MAE), self._nullable(row.MPE),
                    self._nullable(row.MAPE),
                    self._nullable(row.coverage_80), self._nullable(row.coverage_95),
                    int(row.n),
                ))

            if selection is not None:
                for candidate in selection.candidates:
                    self.conn.execute("""
                        INSERT INTO arima_candidates (
                            run_id, candidate_index, arima_order, aicc,
                            loglik, converged, error
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """, (
                        run_id,
                        candidate.index,
                        str(candidate.order),
                        candidate.model.aicc if candidate.converged else None,
                        candidate.model.loglik if candidate.converged else None,
                        candidate.converged,
                        candidate.error,
                    ))

            self.conn.execute("COMMIT")
            self.logger.info(f"Stored scenario '{scenario}' as run {run_id}")
            return run_id

        except Exception as e:
            self.logger.error(f"Error storing scenario '{scenario}': {str(e)}")
            self.conn.execute("ROLLBACK")
            raise

    def _latest_run(self, scenario: str) -> int:
        result = self.conn.execute("""
            SELECT MAX(run_id) FROM comparison_runs WHERE scenario = ?
        """, [scenario]).fetchone()
        if result is None or result[0] is None:
            raise KeyError(f"No stored run for scenario '{scenario}'")
        return result[0]

    def get_forecasts(self, scenario: str) -> pd.DataFrame:
        """Forecasts of the latest run for a scenario"""
        run_id = self._latest_run(scenario)
        results = self.conn.execute("""
            SELECT model, step, date, mean, lower_80, upper_80,
                   lower_95, upper_95, actual
            FROM forecasts
            WHERE run_id = ?
            ORDER BY model, step
        """, [run_id]).fetchall()
        return pd.DataFrame(results, columns=FORECAST_COLUMNS)

    def get_accuracy(self, scenario: str) -> pd.DataFrame:
        """Accuracy table of the latest run for a scenario"""
        run_id = self._latest_run(scenario)
        results = self.conn.execute("""
            SELECT model, me, rmse, mae, mpe, mape, coverage_80, coverage_95, n
            FROM accuracy
            WHERE run_id = ?
            ORDER BY model
        """, [run_id]).fetchall()
        return pd.DataFrame(results, columns=ACCURACY_COLUMNS)

    def get_candidates(self, scenario: str) -> pd.DataFrame:
        """ARIMA candidates of the latest run for a scenario"""
        run_id = self._latest_run(scenario)
        results = self.conn.execute("""
            SELECT candidate_index, arima_order, aicc, loglik, converged, error
            FROM arima_candidates
            WHERE run_id = ?
            ORDER BY candidate_index
        """, [run_id]).fetchall()
        return pd.DataFrame(
            results,
            columns=['candidate_index', 'order', 'aicc', 'loglik', 'converged', 'error']
        )

    def close(self):
        """Close database connection"""
        if hasattr(self, 'conn'):
            self.conn.close()
