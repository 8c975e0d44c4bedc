"""
Statistical engines for newsroom datasets.

This subpackage provides the numerical core: matrix routines, distance
metrics, density clustering, hypothesis tests and sample-size calculators.
Functions take lists of record dicts (or DataFrames) and primitive types.

Modules:
    matrix:
        Gauss-Jordan inversion and population covariance matrices.

    distance:
        Euclidean and Mahalanobis distance, plus record annotation with
        distance, similarity and z-scores.

    clustering:
        DBSCAN with a caller-supplied metric, pure or writing labels back
        onto records.

    distributions:
        Normal, Student's t and chi-squared tail probabilities.

    hypothesis:
        Paired, two-sample and one-sample t-tests and z-tests.

    chi_squared:
        Chi-squared independence and goodness-of-fit tests.

    sample_size:
        Required sample sizes for estimating a mean or a proportion.

Design Principle:
    This subpackage has no dependencies on plotting or file output.
"""

from .chi_squared import (
    ChiSquaredGoodnessOfFitResult,
    ChiSquaredIndependenceResult,
    chi_squared_goodness_of_fit_test,
    chi_squared_independence_test,
)
from .clustering import ClusterLabel, add_clusters, dbscan
from .distance import (
    add_mahalanobis_distance,
    add_z_score,
    euclidean_distance,
    mahalanobis_distance,
)
from .distributions import TAILS, normal_cdf, t_cdf
from .hypothesis import (
    OneSampleTTestResult,
    PairedTTestResult,
    PairedZTestResult,
    TwoSampleTTestResult,
    ZTestResult,
    one_sample_t_test,
    paired_t_test,
    paired_z_test,
    two_sample_t_test,
    z_test,
)
from .matrix import covariance_matrix, invert_matrix
from .sample_size import Z_SCORES, sample_size_mean, sample_size_proportion

__all__ = [
    "invert_matrix",
    "covariance_matrix",
    "euclidean_distance",
    "mahalanobis_distance",
    "add_mahalanobis_distance",
    "add_z_score",
    "ClusterLabel",
    "dbscan",
    "add_clusters",
    "TAILS",
    "normal_cdf",
    "t_cdf",
    "PairedTTestResult",
    "TwoSampleTTestResult",
    "OneSampleTTestResult",
    "ZTestResult",
    "PairedZTestResult",
    "paired_t_test",
    "two_sample_t_test",
    "one_sample_t_test",
    "z_test",
    "paired_z_test",
    "ChiSquaredIndependenceResult",
    "ChiSquaredGoodnessOfFitResult",
    "chi_squared_independence_test",
    "chi_squared_goodness_of_fit_test",
    "Z_SCORES",
    "sample_size_mean",
    "sample_size_proportion",
]
