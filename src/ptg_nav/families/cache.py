from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import numpy as np

from ptg_nav.families.samples import SampledPaths

logger = logging.getLogger(__name__)


def save_cached_paths(path: str | Path, signature: bytes, paths: SampledPaths) -> bool:
    """
    Store path samples as a single .npz file.

    Ragged paths are stored concatenated with a per-path length array.
    The file is written next to the target and moved into place, so readers
    never see a partial cache. Failures are logged and reported as False;
    the geometry stays usable.
    """
    p = Path(path)
    lengths = np.array([d.shape[0] for d in paths.d], dtype=np.int64)
    tmp_name = None
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=p.name + ".", suffix=".tmp", dir=p.parent)
        with os.fdopen(fd, "wb") as f:
            np.savez(
                f,
                signature=np.frombuffer(signature, dtype=np.uint8),
                lengths=lengths,
                x=np.concatenate(paths.x),
                y=np.concatenate(paths.y),
                phi=np.concatenate(paths.phi),
                d=np.concatenate(paths.d),
            )
        os.replace(tmp_name, p)
        tmp_name = None
    except OSError as e:
        logger.warning("Could not write path cache %s: %s", p, e)
        return False
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
    return True


def load_cached_paths(path: str | Path, signature: bytes) -> Optional[SampledPaths]:
    """
    Load path samples written by save_cached_paths().

    Returns None when the file is missing, unreadable, or was built for a
    different signature (parameters or family options changed).
    """
    p = Path(path)
    if not p.exists():
        return None

    try:
        with np.load(p, allow_pickle=False) as data:
            stored = data["signature"].tobytes()
            if stored != signature:
                logger.warning("Path cache %s was built with other parameters; rebuilding.", p)
                return None
            lengths = data["lengths"]
            if int(lengths.sum()) != data["d"].shape[0]:
                raise ValueError("sample count does not match stored path lengths")
            split_at = np.cumsum(lengths)[:-1]
            fields = {
                name: [np.array(a) for a in np.split(data[name], split_at)]
                for name in ("x", "y", "phi", "d")
            }
    except (OSError, EOFError, zipfile.BadZipFile, KeyError, ValueError) as e:
        logger.warning("Ignoring unreadable path cache %s: %s", p, e)
        return None

    return SampledPaths(**fields)
