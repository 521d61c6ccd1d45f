"""
In-memory storage of analysis results.

Results live only for the lifetime of the store instance. Ids are
generated by an injectable factory so callers and tests control them.
"""

import random
import typing as tp

from loguru import logger

from src.trace.processor import Analysis


class AnalysisNotFoundError(KeyError):
    """No analysis is stored under the requested id."""


def random_analysis_id() -> str:
    """Six-digit numeric id in the range 100000-999999."""
    return str(random.randint(100000, 999999))


class AnalysisStore:
    """
    Keeps finished analyses keyed by a generated id.

    Args:
        id_factory: Callable returning candidate ids. Candidates that are
            already taken are discarded and a new one is drawn.
        max_attempts: Number of candidates to try before giving up
    """

    def __init__(
        self,
        id_factory: tp.Optional[tp.Callable[[], str]] = None,
        max_attempts: int = 100,
    ):
        self._id_factory = id_factory or random_analysis_id
        self._max_attempts = max_attempts
        self._analyses: tp.Dict[str, Analysis] = {}

    def create(self, analysis: Analysis) -> str:
        """Store an analysis and return its new id."""
        for _ in range(self._max_attempts):
            analysis_id = self._id_factory()
            if analysis_id not in self._analyses:
                self._analyses[analysis_id] = analysis
                logger.debug(f"Stored analysis {analysis_id}")
                return analysis_id
        raise RuntimeError(
            f"Could not generate an unused analysis id after {self._max_attempts} attempts"
        )

    def get(self, analysis_id: str) -> Analysis:
        try:
            return self._analyses[analysis_id]
        except KeyError:
            raise AnalysisNotFoundError(analysis_id) from None

    def __contains__(self, analysis_id: object) -> bool:
        return analysis_id in self._analyses

    def __len__(self) -> int:
        return len(self._analyses)
