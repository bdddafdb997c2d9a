from __future__ import annotations

import struct

from ptg_nav.core.errors import CodecError, UnsupportedVersionError
from ptg_nav.core.params import GeneratorParameters

CURRENT_VERSION = 0

# version 0: uint64 path_count, float64 ref_distance, float64 score_priority
_V0 = struct.Struct("<Qdd")


def serialize_params(params: GeneratorParameters) -> bytes:
    """Encode parameters as one version byte followed by the version-0 body."""
    return bytes([CURRENT_VERSION]) + _V0.pack(
        params.path_count, params.ref_distance, params.score_priority
    )


def deserialize_params(data: bytes) -> GeneratorParameters:
    """
    Decode a buffer produced by serialize_params().

    The version byte is checked before anything else is read.
    """
    buf = bytes(data)
    if not buf:
        raise CodecError("Empty buffer: missing version byte")

    version = buf[0]
    if version == 0:
        body = buf[1:]
        if len(body) != _V0.size:
            raise CodecError(f"Version 0 body must be {_V0.size} bytes, got {len(body)}")
        path_count, ref_distance, score_priority = _V0.unpack(body)
        return GeneratorParameters(
            path_count=path_count,
            ref_distance=ref_distance,
            score_priority=score_priority,
        )

    raise UnsupportedVersionError(version)
