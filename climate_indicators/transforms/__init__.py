"""
Climate Indicators Transforms - Data Transformation Utilities

Value-producing transforms shared by the source parsers and the merge stage.
No transform modifies its input in place; each returns a new object.

Transformations:
    - Wide-to-long reshaping (year rows x month columns -> monthly values)
    - Baseline anomaly computation against a fixed reference window
    - Monthly axis construction and outer merge of sources
    - Centred running mean (3-month ONI smoothing)
"""

from typing import Any

__all__ = [
    "BaseTransform",
    "WideToLongReshaper",
    "wide_to_long",
    "BaselineWindow",
    "BASELINE_WINDOW",
    "BaselineAnomaly",
    "compute_baseline",
    "apply_baseline",
    "monthly_axis",
    "merge_datasets",
    "RunningMean",
    "running_mean",
]


class BaseTransform:
    """
    Base class for data transforms.

    Subclasses implement transform() and set _transform_name.
    """

    def __init__(self):
        """Initialize the transform."""
        self._transform_name = "base"

    @property
    def transform_name(self) -> str:
        """Get the transform name."""
        return self._transform_name

    def transform(self, data, **kwargs) -> Any:
        """
        Apply the transformation to data.

        Args:
            data: Input data

        Raises:
            NotImplementedError: In the base class.
        """
        raise NotImplementedError(
            f"Transform '{self._transform_name}' does not implement transform()"
        )

    def __call__(self, data, **kwargs) -> Any:
        return self.transform(data, **kwargs)


from .reshape import WideToLongReshaper, wide_to_long  # noqa: E402
from .baseline import (  # noqa: E402
    BaselineWindow,
    BASELINE_WINDOW,
    BaselineAnomaly,
    compute_baseline,
    apply_baseline,
)
from .merge import monthly_axis, merge_datasets  # noqa: E402
from .smoothing import RunningMean, running_mean  # noqa: E402
