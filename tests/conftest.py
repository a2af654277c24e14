"""Test configuration for the NCI60 toolbox."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

FIVE_TYPES = ["BREAST", "RENAL", "MELANOMA", "NSCLC", "COLON"]
N_DESCRIPTORS = 60


def _synthetic_labels() -> list[str]:
    # 8 rows per kept class interleaved with classes that must be filtered out
    kept = [FIVE_TYPES[(i * 3) % 5] for i in range(40)]
    labels: list[str] = []
    for i, lab in enumerate(kept):
        labels.append(lab)
        if i % 8 == 3:
            labels.append("LEUKEMIA")
        if i % 10 == 6:
            labels.append("CNS")
    return labels


@pytest.fixture(scope="session")
def synthetic_labels() -> list[str]:
    """Cancer types of the synthetic cell lines, including types to be filtered."""
    return _synthetic_labels()


@pytest.fixture(scope="session")
def synthetic_frame(synthetic_labels) -> pd.DataFrame:
    """NCI60-shaped expression matrix with class-dependent means."""
    rng = np.random.default_rng(0)
    n = len(synthetic_labels)
    class_idx = np.array([FIVE_TYPES.index(lab) if lab in FIVE_TYPES else 5 for lab in synthetic_labels])
    centers = rng.normal(0, 2.0, size=(6, N_DESCRIPTORS))
    values = centers[class_idx] + rng.normal(0, 1.0, size=(n, N_DESCRIPTORS))
    frame = pd.DataFrame(
        values,
        index=[f"cell_{i:02d}" for i in range(n)],
        columns=[str(i + 1) for i in range(N_DESCRIPTORS)],
    )
    frame["57"] = 1.5
    frame["58"] = np.where(np.arange(n) == 0, 50.0, 0.0)
    return frame


@pytest.fixture(scope="session")
def nci60_dataset(synthetic_frame, synthetic_labels):
    """Synthetic dataset filtered to the five default cancer types (40 samples)."""
    from nci60_tlbx.data import NCI60Dataset

    return NCI60Dataset.from_frame(synthetic_frame, synthetic_labels)


@pytest.fixture
def fresh_dataset(synthetic_frame, synthetic_labels):
    """Function-scoped dataset for tests that mutate cached state."""
    from nci60_tlbx.data import NCI60Dataset

    return NCI60Dataset.from_frame(synthetic_frame, synthetic_labels)


@pytest.fixture(scope="session")
def fast_reduction_config():
    """Reduction config with small iteration budgets and seeded ICA/NMF."""
    from nci60_tlbx.analysis import ReductionConfig

    return ReductionConfig(ica_max_iter=400, nmf_max_iter=400, umap_n_neighbors=10).with_seed(7)
