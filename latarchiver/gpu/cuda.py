import logging
import threading
from typing import Union

import numpy as np

from ..core.errors import AcceleratorError, AcceleratorUnavailableError
from .kernels import Buffer, apply_byte_kernel, logistic_mix, parse_model_buffers

logger = logging.getLogger(__name__)


class CudaAccelerator:
    """CUDA backend running the shared array kernels through CuPy."""

    name = "CUDA"

    def __init__(self, device_id: int = 0):
        try:
            import cupy
        except ImportError as exc:
            raise AcceleratorUnavailableError("CuPy is not installed") from exc

        try:
            device_count = cupy.cuda.runtime.getDeviceCount()
        except cupy.cuda.runtime.CUDARuntimeError as exc:
            raise AcceleratorUnavailableError(f"CUDA runtime unavailable: {exc}") from exc
        if device_id >= device_count:
            raise AcceleratorUnavailableError(f"CUDA device {device_id} not found ({device_count} present)")

        self._cupy = cupy
        self._device = cupy.cuda.Device(device_id)
        self._lock = threading.Lock()
        logger.debug("Initialised CUDA device %d", device_id)

    def run_kernel(self, kernel_id: str, data: Union[bytearray, memoryview]) -> None:
        cupy = self._cupy
        try:
            with self._lock, self._device:
                apply_byte_kernel(kernel_id, data, xp=cupy, to_host=cupy.asnumpy)
        except cupy.cuda.runtime.CUDARuntimeError as exc:
            raise AcceleratorError(f"CUDA kernel {kernel_id} failed: {exc}") from exc

    def mix_probabilities(self, model_probs: Buffer, weights: Buffer, num_bits: int) -> list[float]:
        probs, mix_weights = parse_model_buffers(model_probs, weights, num_bits)
        cupy = self._cupy
        try:
            with self._lock, self._device:
                mixed = logistic_mix(cupy, cupy.asarray(probs), cupy.asarray(mix_weights))
                host = cupy.asnumpy(mixed)
        except cupy.cuda.runtime.CUDARuntimeError as exc:
            raise AcceleratorError(f"CUDA probability mixing failed: {exc}") from exc
        return np.asarray(host, dtype=np.float32).tolist()
