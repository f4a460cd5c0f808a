class TierEngineError(Exception):
    """Base class for errors raised by the tier engine."""


class ClusteringError(TierEngineError):
    """Raised when a clustering strategy cannot produce tiers for its input."""


class InsufficientSamplesError(ClusteringError):
    def __init__(self, n_samples: int, n_components: int) -> None:
        self.n_samples = n_samples
        self.n_components = n_components
        super().__init__(f"Cannot fit {n_components} components to {n_samples} samples")


class NotFittedError(ClusteringError):
    """Raised when predict() is called before fit()."""


class AllStrategiesFailedError(TierEngineError):
    def __init__(self, failures: list[tuple[str, Exception]]) -> None:
        self.failures = failures
        summary = "; ".join(f"{name}: {error}" for name, error in failures)
        super().__init__(f"Every tier strategy failed ({summary})")


class ConfigError(TierEngineError):
    """Raised when tier configuration values are invalid."""


class EntityRecordError(TierEngineError):
    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid entity record at index {index}: {reason}")
