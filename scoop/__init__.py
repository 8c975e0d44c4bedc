"""
A Python package for statistical analysis of newsroom datasets.

Finds outliers, clusters records and tests hypotheses on tabular data held
as lists of dicts or pandas DataFrames.

Modules:
    - stats: Matrix, distance, clustering, hypothesis-test and sample-size engines.
    - records: Validates and extracts numeric fields from records.
    - output: Saves enriched records and test results to CSV files.
    - plotting: Creates diagnostic figures for clusters and distances.
"""

__version__ = "1.0.0"

from .errors import (
    DimensionMismatchError,
    InsufficientSampleError,
    InvalidDataError,
    InvalidParameterError,
    SingularMatrixError,
    StatisticsError,
)
from .output import save_records_to_csv, save_test_result_to_csv
from .schema import DEFAULT_FIELDS, RecordFields
from .stats import (
    add_clusters,
    add_mahalanobis_distance,
    add_z_score,
    chi_squared_goodness_of_fit_test,
    chi_squared_independence_test,
    covariance_matrix,
    dbscan,
    euclidean_distance,
    invert_matrix,
    mahalanobis_distance,
    one_sample_t_test,
    paired_t_test,
    paired_z_test,
    sample_size_mean,
    sample_size_proportion,
    two_sample_t_test,
    z_test,
)

__all__ = [
    # Errors
    "StatisticsError",
    "SingularMatrixError",
    "DimensionMismatchError",
    "InvalidDataError",
    "InsufficientSampleError",
    "InvalidParameterError",
    # Records
    "RecordFields",
    "DEFAULT_FIELDS",
    # Matrix and distance
    "invert_matrix",
    "covariance_matrix",
    "euclidean_distance",
    "mahalanobis_distance",
    "add_mahalanobis_distance",
    "add_z_score",
    # Clustering
    "dbscan",
    "add_clusters",
    # Hypothesis tests
    "paired_t_test",
    "two_sample_t_test",
    "one_sample_t_test",
    "z_test",
    "paired_z_test",
    "chi_squared_independence_test",
    "chi_squared_goodness_of_fit_test",
    # Sample size
    "sample_size_mean",
    "sample_size_proportion",
    # Output
    "save_records_to_csv",
    "save_test_result_to_csv",
]
