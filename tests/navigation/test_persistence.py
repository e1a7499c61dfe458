"""
Unit tests for brodkrumen/navigation/persistence.py (persisted state record).

Tests cover:
    - Wire key names
    - Save/restore round trip
    - Independent defaulting of malformed fields with a RuntimeWarning
    - Legacy "pathPoints" key

Run with: pytest tests/navigation/test_persistence.py -v
"""

import json
import unittest
import warnings

import numpy as np
import pytest

from brodkrumen.navigation.persistence import PersistedState
from brodkrumen.navigation.return_vector import ReturnVector


def _record() -> dict:
    return {
        "path": [{"x": 0.0, "y": 0.0}, {"x": 0.0, "y": 0.0}, {"x": 0.0, "y": -0.75}],
        "originSet": True,
        "currentPosition": {"x": 0.0, "y": -0.75},
        "totalDistance": 0.75,
        "stepCount": 1,
        "backToStart": {"distance": 0.75, "bearingDeg": 0.0},
        "altitudeMeters": 1.0,
    }


class TestPersistedState(unittest.TestCase):
    """Test suite for PersistedState."""

    def test_wire_keys(self) -> None:
        data = PersistedState().to_dict()

        assert set(data) == {
            "path", "originSet", "currentPosition", "totalDistance",
            "stepCount", "backToStart", "altitudeMeters",
        }
        assert data["currentPosition"] == {"x": 0.0, "y": 0.0}
        assert data["backToStart"] == {"distance": 0.0, "bearingDeg": 0.0}

    def test_round_trip_without_warnings(self) -> None:
        state = PersistedState(
            path=[np.zeros(2), np.zeros(2), np.array([1.5, -2.0])],
            origin_set=True,
            current_position=np.array([1.5, -2.0]),
            total_distance=2.5,
            step_count=3,
            back_to_start=ReturnVector(distance=2.5, bearing_deg=323.13),
            altitude_m=1.3,
        )

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            restored = PersistedState.from_json(state.to_json())

        assert restored.origin_set
        np.testing.assert_array_equal(restored.current_position, [1.5, -2.0])
        assert len(restored.path) == 3
        np.testing.assert_array_equal(restored.path[2], [1.5, -2.0])
        assert restored.total_distance == 2.5
        assert restored.step_count == 3
        assert restored.back_to_start == ReturnVector(distance=2.5, bearing_deg=323.13)
        assert restored.altitude_m == 1.3

    def test_malformed_field_defaults_independently(self) -> None:
        data = _record()
        data["stepCount"] = "many"

        with pytest.warns(RuntimeWarning, match="stepCount"):
            state = PersistedState.from_dict(data)

        assert state.step_count == 0
        assert state.total_distance == 0.75
        assert state.origin_set
        assert len(state.path) == 3

    def test_negative_distance_defaults(self) -> None:
        data = _record()
        data["totalDistance"] = -4.0

        with pytest.warns(RuntimeWarning, match="totalDistance"):
            state = PersistedState.from_dict(data)

        assert state.total_distance == 0.0

    def test_bad_path_point_defaults_path(self) -> None:
        data = _record()
        data["path"][1] = {"x": "a"}

        with pytest.warns(RuntimeWarning, match="path"):
            state = PersistedState.from_dict(data)

        assert state.path == []
        np.testing.assert_array_equal(state.current_position, [0.0, -0.75])

    def test_legacy_path_points_key(self) -> None:
        data = _record()
        data["pathPoints"] = data.pop("path")

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            state = PersistedState.from_dict(data)

        assert len(state.path) == 3

    def test_missing_fields(self) -> None:
        with pytest.warns(RuntimeWarning):
            state = PersistedState.from_dict({"originSet": True})

        assert state.origin_set
        assert state.path == []
        assert state.step_count == 0
        assert state.altitude_m == 0.0

    def test_not_an_object(self) -> None:
        with pytest.warns(RuntimeWarning, match="not an object"):
            state = PersistedState.from_dict([1, 2, 3])

        assert not state.origin_set

    def test_invalid_json(self) -> None:
        with pytest.warns(RuntimeWarning, match="not valid JSON"):
            state = PersistedState.from_json("{oops")

        assert state.step_count == 0

    def test_json_is_plain(self) -> None:
        text = PersistedState(origin_set=True).to_json()
        assert json.loads(text)["originSet"] is True
