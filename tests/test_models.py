import json

from minesweeper_hints.models import (
    TIMEOUT,
    Constraint,
    Coordinate,
    Diagnostic,
    HintAnalysis,
    MoveRecommendation,
)


def test_coordinate_is_a_value_type():
    assert Coordinate(1, 2) == Coordinate(1, 2)
    assert Coordinate(1, 2) == (1, 2)
    assert {(1, 2): "a"}[Coordinate(1, 2)] == "a"
    assert len({Coordinate(0, 0), Coordinate(0, 0), (0, 0)}) == 1
    assert Coordinate(3, 4).x == 3 and Coordinate(3, 4).y == 4


def test_constraint_validity():
    cells = (Coordinate(0, 0), Coordinate(1, 0))
    assert Constraint(Coordinate(0, 1), 0, cells).is_valid
    assert Constraint(Coordinate(0, 1), 2, cells).is_valid
    assert not Constraint(Coordinate(0, 1), -1, cells).is_valid
    assert not Constraint(Coordinate(0, 1), 3, cells).is_valid


def test_analysis_serialization_preserves_every_field():
    analysis = HintAnalysis(
        guaranteed_safe=[Coordinate(0, 1)],
        guaranteed_mines=[Coordinate(2, 2)],
        probabilities={
            Coordinate(0, 1): 0.0,
            Coordinate(2, 2): 1.0,
            Coordinate(1, 3): 0.375,
        },
        recommended_move=Coordinate(0, 1),
        confidence=0.9,
        diagnostics=[Diagnostic(TIMEOUT, "slow", (Coordinate(1, 3),))],
        duration=0.25,
    )

    payload = json.loads(json.dumps(analysis.to_dict()))
    assert payload["recommended_move"] == [0, 1]
    assert payload["degraded"] is True

    restored = HintAnalysis.from_dict(payload)
    assert restored == analysis
    assert all(isinstance(c, Coordinate) for c in restored.probabilities)


def test_analysis_without_move_serializes_null():
    analysis = HintAnalysis([], [], {}, None, 0.1)
    payload = analysis.to_dict()
    assert payload["recommended_move"] is None
    assert payload["degraded"] is False
    assert HintAnalysis.from_dict(payload).recommended_move is None


def test_move_recommendation_to_dict():
    move = MoveRecommendation(Coordinate(4, 5), 0.25, 60.0, "Low risk (25% mine probability)")
    assert move.to_dict() == {
        "coordinate": [4, 5],
        "probability": 0.25,
        "priority": 60.0,
        "reasoning": "Low risk (25% mine probability)",
    }
