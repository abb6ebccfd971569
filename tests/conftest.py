import json

import pytest

from mixscore.references import profile_from_dict

TEST_PROFILE_DATA = {
    "version": "test-1",
    "metrics": {
        "lufs_integrated": {"target": -14.0, "tolerance": 1.0},
        "true_peak_dbtp": {"target": -1.0, "tolerance": 1.0},
        "dynamic_range": {"target": 8.0, "tolerance": 2.0},
    },
    "bands": {
        "sub": {"target_db": -6.0, "tol_db": 1.5},
        "mid": {"target_db": -2.0, "tol_db": 1.5, "severity": "hard"},
    },
    "category_weights": {"loudness": 0.4, "dynamics": 0.2, "peak": 0.2, "tonal": 0.2},
}


@pytest.fixture
def profile():
    return profile_from_dict("test_genre", TEST_PROFILE_DATA, fill_defaults=False)


@pytest.fixture
def ideal_track():
    return {
        "lufsIntegrated": -14.0,
        "truePeakDbtp": -1.0,
        "dynamicRange": 8.0,
        "bands": {"sub": {"level_db": -6.0}, "mid": {"level_db": -2.0}},
    }


@pytest.fixture
def reference_file(tmp_path):
    path = tmp_path / "refs.json"
    path.write_text(json.dumps({"test_genre": TEST_PROFILE_DATA}))
    return path
