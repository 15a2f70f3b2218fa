import logging
import threading
from string import Template
from typing import Union

import numpy as np

from ..core.errors import AcceleratorError, AcceleratorUnavailableError
from .kernels import PROB_EPSILON, Buffer, byte_view, parse_model_buffers

logger = logging.getLogger(__name__)

WORKGROUP_SIZE = 64

# Bytes are widened to u32 because WGSL storage buffers have no u8 type.
DELTA_ENCODE_SHADER = """
@group(0) @binding(0) var<storage, read> src: array<u32>;
@group(0) @binding(1) var<storage, read_write> dst: array<u32>;

@compute @workgroup_size(64)
fn main(@builtin(global_invocation_id) gid: vec3<u32>) {
    let i = gid.x;
    if (i >= arrayLength(&src)) {
        return;
    }
    if (i == 0u) {
        dst[i] = src[i];
    } else {
        dst[i] = (src[i] - src[i - 1u]) & 255u;
    }
}
"""

# Prefix sum; runs as a single invocation.
DELTA_DECODE_SHADER = """
@group(0) @binding(0) var<storage, read> src: array<u32>;
@group(0) @binding(1) var<storage, read_write> dst: array<u32>;

@compute @workgroup_size(1)
fn main() {
    var acc: u32 = 0u;
    for (var i: u32 = 0u; i < arrayLength(&src); i = i + 1u) {
        acc = (acc + src[i]) & 255u;
        dst[i] = acc;
    }
}
"""

MIX_SHADER = Template("""
const NUM_MODELS: u32 = ${num_models}u;
const NUM_BITS: u32 = ${num_bits}u;
const EPS: f32 = ${epsilon};

@group(0) @binding(0) var<storage, read> probs: array<f32>;
@group(0) @binding(1) var<storage, read> weights: array<f32>;
@group(0) @binding(2) var<storage, read_write> mixed: array<f32>;

@compute @workgroup_size(64)
fn main(@builtin(global_invocation_id) gid: vec3<u32>) {
    let bit = gid.x;
    if (bit >= NUM_BITS) {
        return;
    }
    var total: f32 = 0.0;
    for (var m: u32 = 0u; m < NUM_MODELS; m = m + 1u) {
        let p = clamp(probs[m * NUM_BITS + bit], EPS, 1.0 - EPS);
        total = total + weights[m * NUM_BITS + bit] * log(p / (1.0 - p));
    }
    mixed[bit] = 1.0 / (1.0 + exp(-total));
}
""")


def _workgroups(count: int) -> int:
    return (count + WORKGROUP_SIZE - 1) // WORKGROUP_SIZE


class VulkanAccelerator:
    """Vulkan/Metal/DX12 backend running WGSL compute shaders through wgpu."""

    name = "Vulkan"

    def __init__(self):
        try:
            import wgpu
            import wgpu.utils
        except ImportError as exc:
            raise AcceleratorUnavailableError("wgpu is not installed") from exc

        try:
            self._device = wgpu.utils.get_default_device()
        # Adapter negotiation fails with backend-specific errors when no GPU
        # driver is present.
        except Exception as exc:
            raise AcceleratorUnavailableError(f"No GPU adapter available: {exc}") from exc

        self._wgpu = wgpu
        self._lock = threading.Lock()
        logger.debug("Initialised wgpu device")

    def _compute(self, inputs: dict, outputs: dict, shader: str, n: int) -> dict:
        try:
            with self._lock:
                return self._wgpu.utils.compute_with_buffers(inputs, outputs, shader, n=n)
        except (self._wgpu.GPUError, RuntimeError, ValueError) as exc:
            raise AcceleratorError(f"wgpu compute dispatch failed: {exc}") from exc

    def run_kernel(self, kernel_id: str, data: Union[bytearray, memoryview]) -> None:
        if kernel_id == "delta_encode":
            shader, make_n = DELTA_ENCODE_SHADER, _workgroups
        elif kernel_id == "delta_decode":
            shader, make_n = DELTA_DECODE_SHADER, lambda _count: 1
        else:
            raise AcceleratorError(f"Unknown kernel: {kernel_id}")

        view = byte_view(data)
        if view.size == 0:
            return
        widened = view.astype(np.uint32)
        out = self._compute({0: widened}, {1: (view.size, "I")}, shader, make_n(view.size))
        view[:] = np.frombuffer(out[1], dtype=np.uint32).astype(np.uint8)

    def mix_probabilities(self, model_probs: Buffer, weights: Buffer, num_bits: int) -> list[float]:
        probs, mix_weights = parse_model_buffers(model_probs, weights, num_bits)
        shader = MIX_SHADER.substitute(
            num_models=probs.shape[0],
            num_bits=num_bits,
            epsilon=f"{PROB_EPSILON:e}",
        )
        out = self._compute(
            {0: np.ascontiguousarray(probs), 1: np.ascontiguousarray(mix_weights)},
            {2: (num_bits, "f")},
            shader,
            _workgroups(num_bits),
        )
        return np.frombuffer(out[2], dtype=np.float32).tolist()
