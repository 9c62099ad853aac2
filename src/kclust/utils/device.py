"""
Device selection utilities.

Worker threads split the work on the host; tensors stay on CPU unless a
caller asks for an accelerator by name.
"""

from typing import Optional, Union
import torch
import warnings


def get_default_device() -> torch.device:
    """Device used when none is requested (always CPU)."""
    return torch.device('cpu')


def _accelerator_available(kind: str) -> bool:
    if kind == 'cuda':
        return torch.cuda.is_available()
    if kind == 'mps':
        return hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()
    return False


def parse_device(device: Optional[Union[str, torch.device]] = None) -> torch.device:
    """Turn a device name or object into a ``torch.device``.

    Args:
        device: One of
            - None: CPU
            - 'auto': CUDA, then MPS, then CPU, whichever is found first
            - 'cpu', 'cuda', 'cuda:N', 'mps'
            - a ``torch.device``, returned unchanged

    Returns:
        Parsed device; an unavailable accelerator falls back to CPU with a
        warning
    """
    if device is None:
        return get_default_device()
    if isinstance(device, torch.device):
        return device
    if not isinstance(device, str):
        raise TypeError(f"Device must be str or torch.device, got {type(device)}")

    if device == 'auto':
        for kind in ('cuda', 'mps'):
            if _accelerator_available(kind):
                return torch.device(kind)
        return get_default_device()

    kind = device.split(':', 1)[0]
    if kind == 'cpu':
        return torch.device('cpu')
    if kind in ('cuda', 'mps'):
        if not _accelerator_available(kind):
            warnings.warn(f"{kind.upper()} not available, falling back to CPU")
            return get_default_device()
        return torch.device(device)
    raise ValueError(f"Unknown device: {device}")
