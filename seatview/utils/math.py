# seatview/utils/math.py

"""
Quaternion and angle helpers.

Quaternions are numpy arrays [x, y, z, w]. Euler angles are in degrees and
follow the venue scene convention: a rotation of z about Z, then x about X,
then y about Y (q = qy * qx * qz), with Y up and +Z forward.
"""

import numpy as np

IDENTITY = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)

UP = np.array([0.0, 1.0, 0.0], dtype=np.float32)
FORWARD = np.array([0.0, 0.0, 1.0], dtype=np.float32)


def quaternion_identity() -> np.ndarray:
    return IDENTITY.copy()


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Multiply two quaternions (q1 applied after q2)."""
    x1, y1, z1, w1 = q1[0], q1[1], q1[2], q1[3]
    x2, y2, z2, w2 = q2[0], q2[1], q2[2], q2[3]

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    return np.array([x, y, z, w], dtype=np.float32)


def quaternion_chain(*quats: np.ndarray) -> np.ndarray:
    """Multiply quaternions left to right."""
    result = quaternion_identity()
    for q in quats:
        result = quaternion_multiply(result, q)
    return result


def quaternion_inverse(q: np.ndarray) -> np.ndarray:
    """Inverse of a quaternion (conjugate over squared norm)."""
    norm_sq = float(np.dot(q, q))
    if norm_sq <= 1e-12 or not np.isfinite(norm_sq):
        raise ValueError(f"Cannot invert degenerate quaternion {q}")
    return np.array([-q[0], -q[1], -q[2], q[3]], dtype=np.float32) / np.float32(norm_sq)


def quaternion_normalize(q: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(q))
    if norm <= 1e-12 or not np.isfinite(norm):
        raise ValueError(f"Cannot normalize degenerate quaternion {q}")
    return (np.asarray(q, dtype=np.float32) / np.float32(norm)).astype(np.float32)


def quaternion_angle(q1: np.ndarray, q2: np.ndarray) -> float:
    """Angle in degrees between two rotations."""
    dot = abs(float(np.dot(q1, q2)))
    dot = min(dot, 1.0)
    return float(np.degrees(2.0 * np.arccos(dot)))


def quaternion_from_axis_angle(axis: np.ndarray, degrees: float) -> np.ndarray:
    half = np.radians(degrees) * 0.5
    s = np.sin(half)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(half)], dtype=np.float32)


def quaternion_from_euler(euler) -> np.ndarray:
    """
    Convert Euler angles (degrees) to quaternion.
    Order: Z, then X, then Y.
    """
    x, y, z = float(euler[0]), float(euler[1]), float(euler[2])

    qx = quaternion_from_axis_angle(np.array([1.0, 0.0, 0.0]), x)
    qy = quaternion_from_axis_angle(np.array([0.0, 1.0, 0.0]), y)
    qz = quaternion_from_axis_angle(np.array([0.0, 0.0, 1.0]), z)

    return quaternion_chain(qy, qx, qz)


def quaternion_to_euler(quat: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to Euler angles (degrees), each in [0, 360).
    Inverse of quaternion_from_euler.
    """
    m = quaternion_to_matrix(quaternion_normalize(quat))

    sin_x = np.clip(-m[1, 2], -1.0, 1.0)
    x = np.arcsin(sin_x)

    if abs(sin_x) < 0.9999:
        y = np.arctan2(m[0, 2], m[2, 2])
        z = np.arctan2(m[1, 0], m[1, 1])
    else:
        # Gimbal lock: fold roll into yaw
        y = np.arctan2(-m[2, 0], m[0, 0])
        z = 0.0

    euler = np.degrees(np.array([x, y, z], dtype=np.float64)) % 360.0
    # -0.0 % 360 can round to exactly 360.0
    euler[euler >= 360.0 - 1e-9] = 0.0
    return euler.astype(np.float32)


def quaternion_to_matrix(quat: np.ndarray) -> np.ndarray:
    """Convert quaternion to 4x4 rotation matrix."""
    x, y, z, w = quat[0], quat[1], quat[2], quat[3]

    mat = np.eye(4, dtype=np.float32)

    mat[0, 0] = 1.0 - 2.0 * (y * y + z * z)
    mat[0, 1] = 2.0 * (x * y - w * z)
    mat[0, 2] = 2.0 * (x * z + w * y)

    mat[1, 0] = 2.0 * (x * y + w * z)
    mat[1, 1] = 1.0 - 2.0 * (x * x + z * z)
    mat[1, 2] = 2.0 * (y * z - w * x)

    mat[2, 0] = 2.0 * (x * z - w * y)
    mat[2, 1] = 2.0 * (y * z + w * x)
    mat[2, 2] = 1.0 - 2.0 * (x * x + y * y)

    return mat


def matrix_to_quaternion(m: np.ndarray) -> np.ndarray:
    """Convert 3x3 rotation matrix to quaternion [x, y, z, w]."""
    tr = m[0, 0] + m[1, 1] + m[2, 2]
    if tr > 0:
        s = np.sqrt(tr + 1.0) * 2
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif (m[0, 0] > m[1, 1]) and (m[0, 0] > m[2, 2]):
        s = np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    return np.array([x, y, z, w], dtype=np.float32)


def quaternion_slerp(q1: np.ndarray, q2: np.ndarray, t: float) -> np.ndarray:
    """
    Spherical linear interpolation between two quaternions.
    t is clamped to [0, 1].
    """
    t = clamp(float(t), 0.0, 1.0)
    dot = np.dot(q1, q2)

    # If dot product is negative, negate one quaternion
    if dot < 0.0:
        q2 = -q2
        dot = -dot

    # Clamp dot product
    dot = np.clip(dot, -1.0, 1.0)

    # If quaternions are very close, use linear interpolation
    if dot > 0.9995:
        result = q1 + t * (q2 - q1)
        return (result / np.linalg.norm(result)).astype(np.float32)

    # Calculate angle between quaternions
    theta = np.arccos(dot)
    sin_theta = np.sin(theta)

    # Calculate weights
    w1 = np.sin((1.0 - t) * theta) / sin_theta
    w2 = np.sin(t * theta) / sin_theta

    return (w1 * q1 + w2 * q2).astype(np.float32)


def rotate_vector(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate a 3D vector by a quaternion."""
    return quaternion_to_matrix(q)[:3, :3] @ np.asarray(v, dtype=np.float32)


def look_rotation(forward: np.ndarray, up: np.ndarray = UP) -> np.ndarray:
    """
    Rotation whose +Z axis points along forward and whose +Y axis is as close
    to up as possible. Returns identity for a zero-length forward.
    """
    forward = np.asarray(forward, dtype=np.float32)
    length = np.linalg.norm(forward)
    if length < 1e-6:
        return quaternion_identity()
    f = forward / length

    right = np.cross(up, f)
    right_length = np.linalg.norm(right)
    if right_length < 1e-6:
        # Looking straight up or down: any right axis perpendicular to forward
        right = np.cross(np.array([0.0, 0.0, 1.0], dtype=np.float32), f)
        right_length = np.linalg.norm(right)
    right = right / right_length

    true_up = np.cross(f, right)

    m = np.column_stack([right, true_up, f])
    return quaternion_normalize(matrix_to_quaternion(m))


def normalize_angle(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    angle = float(angle) % 360.0
    if angle > 180.0:
        angle -= 360.0
    return angle


def quaternion_approx_equal(q1: np.ndarray, q2: np.ndarray, tolerance: float = 1e-5) -> bool:
    """Compare rotations (q and -q are the same rotation)."""
    return abs(abs(float(np.dot(q1, q2))) - 1.0) < tolerance


def lerp(a, b, t: float):
    """Linear interpolation."""
    return a + t * (b - a)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))

