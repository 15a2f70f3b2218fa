from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional, Protocol

from .archive import GpuBackend
from .errors import AcceleratorUnavailableError

logger = logging.getLogger(__name__)


class GpuAccelerator(Protocol):
    name: str

    def run_kernel(self, kernel_id: str, data: bytearray) -> None: ...

    def mix_probabilities(
        self,
        model_probs: bytes,
        weights: bytes,
        num_bits: int,
    ) -> list[float]:
        """
        Mix per-model bit probabilities.

        Both buffers hold float32 values in a transposed [num_models][num_bits]
        layout; callers must transpose before calling.
        """
        ...


AcceleratorFactory = Callable[[], GpuAccelerator]


def _load_cuda() -> GpuAccelerator:
    from ..gpu.cuda import CudaAccelerator
    return CudaAccelerator()


def _load_vulkan() -> GpuAccelerator:
    from ..gpu.vulkan import VulkanAccelerator
    return VulkanAccelerator()


BACKEND_FACTORIES: dict[str, AcceleratorFactory] = {
    GpuBackend.CUDA.value: _load_cuda,
    GpuBackend.VULKAN.value: _load_vulkan,
}
DEFAULT_ORDER = (GpuBackend.CUDA.value, GpuBackend.VULKAN.value)

_DISCOVERY: dict[str, object] = {
    "done": False,
    "accelerator": None,
}
_DISCOVERY_LOCK = threading.Lock()


def probe_backends(
    order: Iterable[str] = DEFAULT_ORDER,
    factories: Optional[dict[str, AcceleratorFactory]] = None,
) -> Optional[GpuAccelerator]:
    """Try each backend in order and return the first one that initialises."""
    factories = BACKEND_FACTORIES if factories is None else factories
    for backend in order:
        factory = factories.get(backend)
        if factory is None:
            logger.warning("Unknown accelerator backend %r in probe order", backend)
            continue
        try:
            accelerator = factory()
        except AcceleratorUnavailableError as exc:
            logger.debug("Accelerator backend %s unavailable: %s", backend, exc)
            continue
        logger.info("Using %s accelerator", accelerator.name)
        return accelerator

    logger.info("No GPU accelerator available; accelerated formats are disabled")
    return None


def discover_accelerator(
    order: Iterable[str] = DEFAULT_ORDER,
    factories: Optional[dict[str, AcceleratorFactory]] = None,
) -> Optional[GpuAccelerator]:
    """
    Return the process-wide accelerator, probing on the first call only.

    Later calls return the cached result whatever order they pass.
    """
    with _DISCOVERY_LOCK:
        if not _DISCOVERY["done"]:
            _DISCOVERY["accelerator"] = probe_backends(order, factories)
            _DISCOVERY["done"] = True
        return _DISCOVERY["accelerator"]  # type: ignore[return-value]


def reset_accelerator_cache() -> None:
    with _DISCOVERY_LOCK:
        _DISCOVERY["done"] = False
        _DISCOVERY["accelerator"] = None


def select_accelerator(
    backend: GpuBackend,
    order: Iterable[str] = DEFAULT_ORDER,
) -> Optional[GpuAccelerator]:
    if backend == GpuBackend.NONE:
        return None
    if backend == GpuBackend.AUTO:
        return discover_accelerator(order)

    accelerator = discover_accelerator((backend.value,))
    if accelerator is not None and accelerator.name.lower() != backend.value:
        logger.warning(
            "Requested %s accelerator but %s was already selected for this process",
            backend.value,
            accelerator.name,
        )
        return None
    return accelerator
