from __future__ import annotations

import numpy as np


Vec3 = tuple[float, float, float]
QuatXYZW = tuple[float, float, float, float]

IDENTITY_QUAT: QuatXYZW = (0.0, 0.0, 0.0, 1.0)
WORLD_UP: Vec3 = (0.0, 1.0, 0.0)


def as_vec3(v: np.ndarray | tuple[float, float, float] | list[float]) -> Vec3:
    a = np.asarray(v, dtype=np.float64).reshape(3)
    return float(a[0]), float(a[1]), float(a[2])


def normalized_vec3(v: np.ndarray | tuple[float, float, float] | list[float], fallback: Vec3) -> np.ndarray:
    out = np.asarray(v, dtype=np.float64).reshape(3)
    n = float(np.linalg.norm(out))
    if n < 1e-12:
        out = np.asarray(fallback, dtype=np.float64).reshape(3)
        n = float(np.linalg.norm(out))
        if n < 1e-12:
            return np.array([0.0, 1.0, 0.0], dtype=np.float64)
    return out / n


def normalized_quat(q_xyzw: np.ndarray | tuple[float, float, float, float] | list[float]) -> QuatXYZW:
    q = np.asarray(q_xyzw, dtype=np.float64).reshape(4)
    n = float(np.linalg.norm(q))
    if not np.isfinite(n) or n < 1e-12:
        raise ValueError("Quaternion norm is too close to zero")
    q = q / n
    return float(q[0]), float(q[1]), float(q[2]), float(q[3])


def quat_xyzw_to_matrix(
    q_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray,
) -> np.ndarray:
    x, y, z, w = normalized_quat(q_xyzw)
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )


def quat_xyzw_from_matrix(m: np.ndarray) -> QuatXYZW:
    tr = float(m[0, 0] + m[1, 1] + m[2, 2])
    if tr > 0.0:
        s = float(np.sqrt(tr + 1.0) * 2.0)
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = float(np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2.0)
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = float(np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2.0)
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = float(np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2.0)
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    return normalized_quat((x, y, z, w))


def forward_vector(q_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray) -> Vec3:
    """Unit view direction of a camera rotation (local -Z in world space)."""
    m = quat_xyzw_to_matrix(q_xyzw)
    return as_vec3(-m[:, 2])


def up_vector(q_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray) -> Vec3:
    """Unit up direction of a camera rotation (local +Y in world space)."""
    m = quat_xyzw_to_matrix(q_xyzw)
    return as_vec3(m[:, 1])


def look_rotation(
    forward: np.ndarray | tuple[float, float, float] | list[float],
    up: np.ndarray | tuple[float, float, float] | list[float] = WORLD_UP,
) -> QuatXYZW:
    """Rotation whose view direction is `forward` and whose roll follows `up`.

    When `forward` is parallel to `up` the roll is arbitrary but the result is
    still a valid unit quaternion.
    """
    fwd = np.asarray(forward, dtype=np.float64).reshape(3)
    norm_f = float(np.linalg.norm(fwd))
    if not np.isfinite(norm_f) or norm_f < 1e-12:
        raise ValueError("look direction cannot be near zero")
    fwd = fwd / norm_f

    up_v = normalized_vec3(up, WORLD_UP)
    right = np.cross(fwd, up_v)
    if float(np.linalg.norm(right)) < 1e-8:
        fallback_up = np.array([0.0, 1.0, 0.0], dtype=np.float64)
        if abs(float(np.dot(fwd, fallback_up))) > 0.95:
            fallback_up = np.array([1.0, 0.0, 0.0], dtype=np.float64)
        right = np.cross(fwd, fallback_up)
    right = normalized_vec3(right, (1.0, 0.0, 0.0))
    cam_up = normalized_vec3(np.cross(right, fwd), (0.0, 1.0, 0.0))

    rot = np.stack([right, cam_up, -fwd], axis=1).astype(np.float64)
    return quat_xyzw_from_matrix(rot)


def look_at_quaternion(
    position: np.ndarray | tuple[float, float, float] | list[float],
    target: np.ndarray | tuple[float, float, float] | list[float],
    up: np.ndarray | tuple[float, float, float] | list[float] = WORLD_UP,
) -> QuatXYZW:
    pos = np.asarray(position, dtype=np.float64).reshape(3)
    tar = np.asarray(target, dtype=np.float64).reshape(3)
    forward = tar - pos
    if float(np.linalg.norm(forward)) < 1e-12:
        raise ValueError("look_at target is too close to the camera position")
    return look_rotation(forward, up)


def lerp(a: float, b: float, t: float) -> float:
    return float(a) + (float(b) - float(a)) * float(t)


def lerp_vec3(
    a: np.ndarray | tuple[float, float, float] | list[float],
    b: np.ndarray | tuple[float, float, float] | list[float],
    t: float,
) -> Vec3:
    pa = np.asarray(a, dtype=np.float64).reshape(3)
    pb = np.asarray(b, dtype=np.float64).reshape(3)
    return as_vec3(pa + (pb - pa) * float(t))


def slerp(
    q0_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray,
    q1_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray,
    t: float,
) -> QuatXYZW:
    """Spherical linear interpolation along the shortest arc."""
    q0 = np.asarray(normalized_quat(q0_xyzw), dtype=np.float64)
    q1 = np.asarray(normalized_quat(q1_xyzw), dtype=np.float64)
    t = float(t)

    dot = float(np.dot(q0, q1))
    # q and -q are the same orientation; flip to take the short way round.
    if dot < 0.0:
        q1 = -q1
        dot = -dot

    if dot > 0.9995:
        return normalized_quat(q0 + (q1 - q0) * t)

    theta_0 = float(np.arccos(min(dot, 1.0)))
    sin_theta_0 = float(np.sin(theta_0))
    theta = theta_0 * t
    s0 = float(np.sin(theta_0 - theta)) / sin_theta_0
    s1 = float(np.sin(theta)) / sin_theta_0
    return normalized_quat(q0 * s0 + q1 * s1)


def quat_angle(
    q0_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray,
    q1_xyzw: tuple[float, float, float, float] | list[float] | np.ndarray,
) -> float:
    """Angle in radians between two orientations."""
    q0 = np.asarray(normalized_quat(q0_xyzw), dtype=np.float64)
    q1 = np.asarray(normalized_quat(q1_xyzw), dtype=np.float64)
    dot = min(1.0, abs(float(np.dot(q0, q1))))
    return 2.0 * float(np.arccos(dot))
