"""
Array kernels shared by the GPU backends.

Every kernel takes the array module (numpy or cupy) as its first argument so
the same code runs on the host and on a CUDA device.
"""
from typing import Callable, Union

import numpy as np

from ..core.errors import AcceleratorError, BufferLayoutError

PROB_EPSILON = 1e-6

Buffer = Union[bytes, bytearray, memoryview]


def delta_encode(xp, data):
    """Byte-wise delta filter: out[0] = in[0], out[i] = in[i] - in[i-1] (mod 256)."""
    out = data.copy()
    out[1:] = data[1:] - data[:-1]
    return out


def delta_decode(xp, data):
    return xp.cumsum(data, dtype=xp.uint8)


def stretch(xp, probs):
    probs = xp.clip(probs, PROB_EPSILON, 1.0 - PROB_EPSILON)
    return xp.log(probs / (1.0 - probs))


def squash(xp, values):
    return 1.0 / (1.0 + xp.exp(-values))


def logistic_mix(xp, probs, weights):
    """
    PAQ-style mixing of [num_models][num_bits] arrays into num_bits probabilities:
    squash(sum over models of weight * stretch(p)).
    """
    return squash(xp, (weights * stretch(xp, probs)).sum(axis=0))


BYTE_KERNELS: dict[str, Callable] = {
    "delta_encode": delta_encode,
    "delta_decode": delta_decode,
}


def parse_model_buffers(model_probs: Buffer, weights: Buffer, num_bits: int) -> tuple[np.ndarray, np.ndarray]:
    """Validate float32 buffers in [num_models][num_bits] layout and reshape them."""
    if num_bits <= 0:
        raise BufferLayoutError("num_bits must be positive")

    try:
        probs = np.frombuffer(model_probs, dtype=np.float32)
        mix_weights = np.frombuffer(weights, dtype=np.float32)
    except ValueError as exc:
        raise BufferLayoutError(f"buffers must hold whole float32 values: {exc}") from exc
    if probs.size != mix_weights.size:
        raise BufferLayoutError("model_probs and weights must have the same [num_models][num_bits] layout")
    if probs.size == 0 or probs.size % num_bits:
        raise BufferLayoutError(f"buffer of {probs.size} floats is not a [num_models][{num_bits}] layout")

    num_models = probs.size // num_bits
    return probs.reshape(num_models, num_bits), mix_weights.reshape(num_models, num_bits)


def byte_view(data: Union[bytearray, memoryview]) -> np.ndarray:
    if isinstance(data, bytes) or (isinstance(data, memoryview) and data.readonly):
        raise TypeError("kernel data must be a mutable buffer")
    return np.frombuffer(data, dtype=np.uint8)


def apply_byte_kernel(kernel_id: str, data: Union[bytearray, memoryview], xp=np, to_host=np.asarray) -> None:
    """Run a byte kernel and write the result back into data."""
    kernel = BYTE_KERNELS.get(kernel_id)
    if kernel is None:
        raise AcceleratorError(f"Unknown kernel: {kernel_id}")

    view = byte_view(data)
    if view.size == 0:
        return
    result = kernel(xp, xp.asarray(view))
    view[:] = to_host(result)
