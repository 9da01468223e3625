"""
MotionCare Physio Service - Pose Metrics

Turns a recorded landmark history into the summary metrics sent to the
form-feedback model: joint angle ranges, cumulative joint movement,
landmark visibility and two aggregate movement figures.

All arithmetic happens in normalized image coordinates (0-1), so movement
totals are relative values, not physical distances.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np


UNKNOWN_EXERCISE = "Unknown exercise"


# ═══════════════════════════════════════════════════════════════════════════════
# LANDMARK TOPOLOGY
# ═══════════════════════════════════════════════════════════════════════════════

class JointType(Enum):
    """33-point body pose landmark indices."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


NUM_LANDMARKS = len(JointType)

# (proximal, vertex, distal) per tracked joint angle, left side
ANGLE_JOINTS: Dict[str, Tuple[JointType, JointType, JointType]] = {
    "knee": (JointType.LEFT_HIP, JointType.LEFT_KNEE, JointType.LEFT_ANKLE),
    "elbow": (JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST),
    "hip": (JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE),
    "wrist": (JointType.LEFT_ELBOW, JointType.LEFT_WRIST, JointType.LEFT_INDEX),
    "ankle": (JointType.LEFT_KNEE, JointType.LEFT_ANKLE, JointType.LEFT_FOOT_INDEX),
}

# Bilateral landmark pair and the axes whose displacement is accumulated
MOVEMENT_JOINTS: Dict[str, Tuple[Tuple[JointType, JointType], Tuple[str, ...]]] = {
    "shoulder": ((JointType.LEFT_SHOULDER, JointType.RIGHT_SHOULDER), ("y",)),
    "elbow": ((JointType.LEFT_ELBOW, JointType.RIGHT_ELBOW), ("y",)),
    "knee": ((JointType.LEFT_KNEE, JointType.RIGHT_KNEE), ("y",)),
    "wrist": ((JointType.LEFT_WRIST, JointType.RIGHT_WRIST), ("x", "y")),
    "ankle": ((JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE), ("y",)),
    "hip": ((JointType.LEFT_HIP, JointType.RIGHT_HIP), ("x",)),
}

# Joints whose movement feeds the overall movement score (hip feeds stability)
SCORED_MOVEMENTS = ("shoulder", "elbow", "knee", "wrist", "ankle")


class EmptyHistoryError(ValueError):
    """Raised when metrics are requested for a history with no frames."""


# ═══════════════════════════════════════════════════════════════════════════════
# DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Landmark:
    """A single pose landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Landmark":
        visibility = data.get("visibility")
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            z=float(data.get("z") or 0.0),
            visibility=float(visibility) if visibility is not None else None,
        )


@dataclass
class PoseFrame:
    """Landmarks captured at one instant; missing landmarks are None."""
    timestamp: float
    landmarks: Optional[List[Optional[Landmark]]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoseFrame":
        raw = data.get("landmarks")
        landmarks = None
        if raw is not None:
            landmarks = [Landmark.from_dict(lm) if lm else None for lm in raw]
        return cls(timestamp=float(data.get("timestamp", 0.0)), landmarks=landmarks)

    def get(self, joint: JointType) -> Optional[Landmark]:
        """Landmark for a joint, or None if it was not detected."""
        if not self.landmarks or joint.value >= len(self.landmarks):
            return None
        return self.landmarks[joint.value]


def as_text_list(value: Any) -> List[str]:
    """A single string counts as one item, not a sequence of characters."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


@dataclass
class ExerciseDescriptor:
    """The exercise the patient was asked to perform."""
    name: str = UNKNOWN_EXERCISE
    focus_points: List[str] = field(default_factory=list)
    safety_tips: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ExerciseDescriptor":
        if not data:
            return cls()
        return cls(
            name=data.get("name") or UNKNOWN_EXERCISE,
            focus_points=as_text_list(data.get("focusPoints")),
            safety_tips=as_text_list(data.get("safetyTips")),
        )


@dataclass
class AngleRange:
    """Min/max/average of a joint angle in degrees."""
    min: float
    max: float
    avg: float

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> "AngleRange":
        values = np.asarray(samples, dtype=float)
        return cls(
            min=float(values.min()),
            max=float(values.max()),
            avg=float(values.mean()),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"min": self.min, "max": self.max, "avg": self.avg}


@dataclass
class MetricsRecord:
    """Summary of one recorded exercise attempt."""
    frames: int
    duration: float
    avg_visibility: float
    shoulder_movement: float
    elbow_movement: float
    knee_movement: float
    wrist_movement: float
    ankle_movement: float
    hip_movement: float
    body_stability: float
    movement_score: float
    knee_range: Optional[AngleRange] = None
    elbow_range: Optional[AngleRange] = None
    hip_range: Optional[AngleRange] = None
    wrist_range: Optional[AngleRange] = None
    ankle_range: Optional[AngleRange] = None
    exercise_name: str = UNKNOWN_EXERCISE
    exercise_focus_points: List[str] = field(default_factory=list)
    exercise_safety_tips: List[str] = field(default_factory=list)

    def ranges(self) -> Dict[str, AngleRange]:
        """Angle ranges that were trackable, keyed by joint name."""
        candidates = {
            "knee": self.knee_range,
            "elbow": self.elbow_range,
            "hip": self.hip_range,
            "wrist": self.wrist_range,
            "ankle": self.ankle_range,
        }
        return {name: rng for name, rng in candidates.items() if rng is not None}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON payload; untracked ranges are left out."""
        payload: Dict[str, Any] = {
            "frames": self.frames,
            "duration": self.duration,
            "avgVisibility": self.avg_visibility,
            "shoulderMovement": self.shoulder_movement,
            "elbowMovement": self.elbow_movement,
            "kneeMovement": self.knee_movement,
            "wristMovement": self.wrist_movement,
            "ankleMovement": self.ankle_movement,
            "hipMovement": self.hip_movement,
            "bodyStability": self.body_stability,
            "movementScore": self.movement_score,
        }
        for name, rng in self.ranges().items():
            payload[f"{name}Range"] = rng.to_dict()
        payload["exerciseName"] = self.exercise_name
        payload["exerciseFocusPoints"] = list(self.exercise_focus_points)
        payload["exerciseSafetyTips"] = list(self.exercise_safety_tips)
        return payload


# ═══════════════════════════════════════════════════════════════════════════════
# ANGLE AND MOVEMENT CALCULATIONS
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_angle(a: Landmark, b: Landmark, c: Landmark) -> float:
    """
    Planar angle at point b formed by points a-b-c.

    Uses the difference of the two ray headings, so the result is the
    angle actually subtended regardless of winding direction.

    Returns:
        Angle in degrees (0-180)
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def _joint_angle(frame: PoseFrame, joints: Tuple[JointType, JointType, JointType]) -> Optional[float]:
    a, b, c = (frame.get(j) for j in joints)
    if a is None or b is None or c is None:
        return None
    return calculate_angle(a, b, c)


def _pair_displacement(
    current: PoseFrame,
    previous: PoseFrame,
    pair: Tuple[JointType, JointType],
    axes: Tuple[str, ...],
) -> Optional[float]:
    points = [(current.get(j), previous.get(j)) for j in pair]
    if any(now is None or before is None for now, before in points):
        return None
    return sum(
        abs(getattr(now, axis) - getattr(before, axis))
        for now, before in points
        for axis in axes
    )


def _average_visibility(history: Sequence[PoseFrame]) -> float:
    total = 0.0
    count = 0
    for frame in history:
        for lm in frame.landmarks or ():
            if lm is not None and lm.visibility is not None:
                total += lm.visibility
                count += 1
    return (total / count) * 100.0 if count else 0.0


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════════

def compute_metrics(
    history: Sequence[PoseFrame],
    exercise: Optional[ExerciseDescriptor] = None,
) -> MetricsRecord:
    """
    Compute summary metrics for a recorded exercise attempt.

    Args:
        history: Frames in ascending timestamp order
        exercise: Exercise being performed (echoed into the record)

    Returns:
        MetricsRecord for the whole history

    Raises:
        EmptyHistoryError: if history has no frames
    """
    if not history:
        raise EmptyHistoryError("Pose history must contain at least one frame")

    exercise = exercise or ExerciseDescriptor()
    frame_count = len(history)
    duration = (history[-1].timestamp - history[0].timestamp) / 1000.0

    angles: Dict[str, List[float]] = {name: [] for name in ANGLE_JOINTS}
    movement: Dict[str, float] = {name: 0.0 for name in MOVEMENT_JOINTS}

    for i, frame in enumerate(history):
        if not frame.landmarks:
            continue

        for name, joints in ANGLE_JOINTS.items():
            angle = _joint_angle(frame, joints)
            if angle is not None:
                angles[name].append(angle)

        if i == 0:
            continue
        previous = history[i - 1]
        for name, (pair, axes) in MOVEMENT_JOINTS.items():
            delta = _pair_displacement(frame, previous, pair, axes)
            if delta is not None:
                movement[name] += delta

    ranges = {
        name: AngleRange.from_samples(samples) if samples else None
        for name, samples in angles.items()
    }

    return MetricsRecord(
        frames=frame_count,
        duration=duration,
        avg_visibility=_average_visibility(history),
        shoulder_movement=movement["shoulder"],
        elbow_movement=movement["elbow"],
        knee_movement=movement["knee"],
        wrist_movement=movement["wrist"],
        ankle_movement=movement["ankle"],
        hip_movement=movement["hip"],
        body_stability=movement["hip"] / frame_count,
        movement_score=sum(movement[name] for name in SCORED_MOVEMENTS) / frame_count,
        knee_range=ranges["knee"],
        elbow_range=ranges["elbow"],
        hip_range=ranges["hip"],
        wrist_range=ranges["wrist"],
        ankle_range=ranges["ankle"],
        exercise_name=exercise.name,
        exercise_focus_points=list(exercise.focus_points),
        exercise_safety_tips=list(exercise.safety_tips),
    )


def parse_history(raw_frames: Optional[Sequence[Dict[str, Any]]]) -> List[PoseFrame]:
    """
    Decode a JSON pose history into frames.

    Raises:
        ValueError: if a frame or landmark is malformed
    """
    frames = []
    for index, raw in enumerate(raw_frames or ()):
        try:
            frames.append(PoseFrame.from_dict(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValueError(f"Malformed pose frame at index {index}: {e!r}") from e
    return frames
